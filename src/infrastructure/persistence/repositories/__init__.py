"""
Implementations SQLModel des repositories.

Ce module contient les implementations concretes des interfaces repository
definies dans src/core/ports/repositories.py, utilisant SQLModel pour
la persistance SQLite.

Chaque repository :
- Herite de l'interface ABC correspondante du domaine
- Recoit une session SQLModel via injection de dependances
- Convertit entre entites de domaine (dataclass) et modeles DB (SQLModel)
"""

from src.infrastructure.persistence.repositories.connection_repository import (
    SQLModelConnectionRepository,
)
from src.infrastructure.persistence.repositories.progress_repository import (
    SQLModelPlaybackProgressRepository,
)
from src.infrastructure.persistence.repositories.session_repository import (
    SQLModelActiveSessionRepository,
)

__all__ = [
    "SQLModelConnectionRepository",
    "SQLModelActiveSessionRepository",
    "SQLModelPlaybackProgressRepository",
]
