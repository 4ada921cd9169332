"""
Module de persistance SQLite pour MediaBridge.

Ce module fournit l'infrastructure de stockage utilisant SQLModel (SQLAlchemy).
Il contient :

- database.py : Configuration de l'engine SQLite, session factory, initialisation
- models.py : Modeles SQLModel des tables servers, active_sessions, viewing_progress

Les modeles ici sont des adapters de persistance, distincts des entites de domaine
(dataclass dans core/entities/). La conversion entre les deux se fait dans les
repositories.

Usage:
    from src.infrastructure.persistence import init_db, get_session

    init_db()  # Cree les tables si necessaire
    session = next(get_session())
"""

from src.infrastructure.persistence.database import (
    create_db_engine,
    get_engine,
    get_session,
    init_db,
    set_engine,
)
from src.infrastructure.persistence.models import (
    ActiveSessionModel,
    ConnectionModel,
    PlaybackProgressModel,
)

__all__ = [
    "create_db_engine",
    "get_engine",
    "get_session",
    "init_db",
    "set_engine",
    "ConnectionModel",
    "ActiveSessionModel",
    "PlaybackProgressModel",
]
