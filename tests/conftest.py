"""
Fixtures pytest partagees pour les tests MediaBridge.

Ce module contient les fixtures communes utilisees dans les tests:
- Settings de test avec chemins temporaires
- Base SQLite en memoire et repositories
- Mock de IMediaServerAdapter
"""

from pathlib import Path
from typing import Iterator
from unittest.mock import AsyncMock

import pytest
from sqlmodel import Session, SQLModel

from src.config import Settings
from src.core.entities.connection import BackendKind, Connection
from src.core.ports.media_server import IMediaServerAdapter
from src.infrastructure.persistence import models  # noqa: F401
from src.infrastructure.persistence.database import create_db_engine
from src.infrastructure.persistence.repositories import (
    SQLModelActiveSessionRepository,
    SQLModelConnectionRepository,
    SQLModelPlaybackProgressRepository,
)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings de test avec chemins temporaires.

    Utilise tmp_path de pytest pour isoler base, cache d'images et logs.
    """
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        image_cache_dir=tmp_path / "images",
        log_file=tmp_path / "logs" / "test.log",
    )


@pytest.fixture
def engine():
    """Engine SQLite en memoire avec toutes les tables creees."""
    engine = create_db_engine("sqlite://")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine) -> Iterator[Session]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def connection_repository(db_session):
    """
    Fabrique de repository, appelable comme le provider du container.

    Toutes les fabriques partagent la session du test : la base en memoire
    n'a qu'une connexion.
    """
    return lambda: SQLModelConnectionRepository(db_session)


@pytest.fixture
def session_repository(db_session):
    return lambda: SQLModelActiveSessionRepository(db_session)


@pytest.fixture
def progress_repository(db_session):
    return lambda: SQLModelPlaybackProgressRepository(db_session)


@pytest.fixture
def emby_connection() -> Connection:
    return Connection(
        display_name="Salon",
        base_url="emby.local",
        port=8096,
        backend_kind=BackendKind.EMBY,
        credential_key="emby-key",
    )


@pytest.fixture
def jellyfin_connection() -> Connection:
    return Connection(
        display_name="NAS",
        base_url="jellyfin.local",
        port=8096,
        backend_kind=BackendKind.JELLYFIN,
        credential_key="jf-key",
    )


@pytest.fixture
def mock_adapter() -> AsyncMock:
    """
    Mock de IMediaServerAdapter pour les tests.

    Les methodes async sont des AsyncMock, build_*_url des MagicMock.
    Les valeurs de retour doivent etre configurees dans chaque test.
    """
    adapter = AsyncMock(spec=IMediaServerAdapter)
    adapter.kind = BackendKind.EMBY
    adapter.positional_audio_fallback = None
    adapter.get_audio_tracks.return_value = []
    adapter.build_stream_url.side_effect = (
        lambda item_id, user_id, options: (
            f"https://emby.local:8096/Videos/{item_id}/{options.variant.value}"
            f"?AudioStreamIndex={options.audio_index}&api_key=k"
        )
    )
    adapter.build_live_stream_url.side_effect = (
        lambda channel_id: f"https://emby.local:8096/LiveTv/LiveStreamFiles/{channel_id}/stream.m3u8"
    )
    return adapter
