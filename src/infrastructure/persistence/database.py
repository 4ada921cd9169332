"""
Configuration de la base de donnees SQLite pour MediaBridge.

Ce module fournit :
- Engine SQLite avec configuration optimisee pour multi-thread
- Session factory avec context manager
- Fonction d'initialisation des tables et migrations legeres

La base de donnees est configuree via MEDIABRIDGE_DATABASE_URL (defaut: sqlite:///mediabridge.db).
"""

from collections.abc import Generator
from pathlib import Path
from typing import Optional

from sqlalchemy import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Engine global - initialise lors du premier appel a get_engine()
_engine: Optional[Engine] = None


def get_engine() -> Engine:
    """
    Retourne l'engine SQLite, en le creant si necessaire.

    Utilise la configuration de l'application pour le chemin de la BDD.
    """
    global _engine
    if _engine is None:
        from src.config import Settings
        settings = Settings()
        _engine = create_db_engine(settings.database_url)
    return _engine


def create_db_engine(db_url: str) -> Engine:
    """
    Cree un engine pour l'URL donnee.

    Une base en memoire partage une connexion unique (StaticPool) pour que
    toutes les sessions voient les memes tables.
    """
    if db_url.startswith("sqlite:///") and not db_url.startswith("sqlite:///:memory:"):
        db_path = Path(db_url.replace("sqlite:///", ""))
        db_path.parent.mkdir(exist_ok=True, parents=True)

    kwargs = {"echo": False, "connect_args": {"check_same_thread": False}}
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return create_engine(db_url, **kwargs)


def set_engine(engine: Optional[Engine]) -> None:
    """Remplace l'engine global (tests, base en memoire)."""
    global _engine
    _engine = engine


def get_session() -> Generator[Session, None, None]:
    """
    Generateur de session SQLModel.

    Utilisation avec next() ou dans une boucle for :
        session = next(get_session())
        try:
            # operations
        finally:
            session.close()

    Yields:
        Session SQLModel connectee a l'engine SQLite
    """
    with Session(get_engine()) as session:
        yield session


def init_db() -> None:
    """
    Initialise la base de donnees en creant toutes les tables.

    Doit etre appelee une fois au demarrage de l'application.
    """
    # Import des modeles pour enregistrer leurs metadonnees
    from src.infrastructure.persistence import models  # noqa: F401

    SQLModel.metadata.create_all(get_engine())
    _run_migrations()


def _run_migrations() -> None:
    """
    Execute les migrations de schema necessaires.

    SQLModel.metadata.create_all() ne modifie pas les tables existantes :
    les colonnes ajoutees apres la premiere version sont creees ici.
    """
    from sqlalchemy import text

    engine = get_engine()

    with engine.connect() as conn:
        # Migration 1: server_type sur servers (bases creees avant Jellyfin)
        result = conn.execute(text("PRAGMA table_info(servers)"))
        columns = [row[1] for row in result.fetchall()]
        if "server_type" not in columns:
            conn.execute(
                text("ALTER TABLE servers ADD COLUMN server_type VARCHAR DEFAULT 'emby'")
            )
            conn.commit()

        # Migration 2: device_info sur active_sessions
        result = conn.execute(text("PRAGMA table_info(active_sessions)"))
        columns = [row[1] for row in result.fetchall()]
        if "device_info" not in columns:
            conn.execute(text("ALTER TABLE active_sessions ADD COLUMN device_info VARCHAR"))
            conn.commit()
