"""
Suivi de lecture : rapports au backend et position persistee.

Les positions arrivent en secondes depuis le client et sont converties en
ticks pour le backend. L'arret de lecture enregistre aussi la position
localement (une ligne par utilisateur et element, dernier ecrit gagne).
"""

from collections.abc import Callable
from datetime import datetime
from typing import Optional

from loguru import logger

from src.core.entities.connection import PlaybackProgress
from src.core.ports.media_server import IMediaServerAdapter, seconds_to_ticks
from src.core.ports.repositories import IPlaybackProgressRepository
from src.utils.constants import PLAYBACK_COMPLETED_PERCENT


def played_percent(position_seconds: float, runtime_seconds: Optional[int]) -> float:
    """Pourcentage lu, borne a [0, 100]; 0 si la duree est inconnue."""
    if not runtime_seconds or runtime_seconds <= 0:
        return 0.0
    return round(max(0.0, min(100.0, position_seconds * 100.0 / runtime_seconds)), 2)


class PlaybackTracker:
    """
    Service de rapports de lecture.

    Example:
        tracker = PlaybackTracker(progress_repository_factory)
        await tracker.start(adapter, user_id, item_id)
        await tracker.stop(adapter, user_id, item_id, position_seconds=3600)
    """

    def __init__(
        self,
        progress_repository: Callable[[], IPlaybackProgressRepository],
        completed_percent: float = PLAYBACK_COMPLETED_PERCENT,
    ) -> None:
        self._progress_repository = progress_repository
        self._completed_percent = completed_percent

    async def start(
        self,
        adapter: IMediaServerAdapter,
        user_id: str,
        item_id: str,
        position_seconds: float = 0,
    ) -> bool:
        return await adapter.report_playback_start(
            user_id, item_id, seconds_to_ticks(position_seconds)
        )

    async def progress(
        self,
        adapter: IMediaServerAdapter,
        user_id: str,
        item_id: str,
        position_seconds: float,
    ) -> bool:
        return await adapter.report_playback_progress(
            user_id, item_id, seconds_to_ticks(position_seconds)
        )

    async def stop(
        self,
        adapter: IMediaServerAdapter,
        user_id: str,
        item_id: str,
        position_seconds: float,
        runtime_seconds: Optional[int] = None,
    ) -> PlaybackProgress:
        """
        Rapporte l'arret et enregistre la position.

        Idempotent : deux arrets identiques laissent une seule ligne.
        La duree, si elle n'est pas fournie, est lue sur l'element.
        """
        reported = await adapter.report_playback_stop(
            user_id, item_id, seconds_to_ticks(position_seconds)
        )
        if not reported:
            logger.debug(f"Rapport d'arret non accepte pour {item_id}, position gardee localement")

        if runtime_seconds is None:
            item = await adapter.get_item_details(user_id, item_id)
            runtime_seconds = item.runtime_seconds if item else None

        percent = played_percent(position_seconds, runtime_seconds)
        progress = PlaybackProgress(
            user_id=user_id,
            item_id=item_id,
            position_seconds=int(max(0, position_seconds)),
            runtime_seconds=runtime_seconds,
            played_percent=percent,
            is_completed=percent >= self._completed_percent,
            last_reported_at=datetime.utcnow(),
        )
        return self._progress_repository().upsert(progress)

    def get_progress(self, user_id: str, item_id: str) -> Optional[PlaybackProgress]:
        return self._progress_repository().get(user_id, item_id)

    def history(self, user_id: str, limit: int = 50) -> list[PlaybackProgress]:
        """Toutes les positions connues, la plus recente en premier."""
        return self._progress_repository().list_by_user(user_id, limit)

    def continue_watching(self, user_id: str, limit: int = 20) -> list[PlaybackProgress]:
        return self._progress_repository().list_in_progress(user_id, limit)

    def mark_completed(self, user_id: str, item_id: str) -> PlaybackProgress:
        """
        Marque l'element comme vu, meme sans position enregistree.

        La position est portee en fin d'element quand la duree est connue.
        """
        repo = self._progress_repository()
        progress = repo.get(user_id, item_id) or PlaybackProgress(user_id=user_id, item_id=item_id)
        if progress.runtime_seconds:
            progress.position_seconds = progress.runtime_seconds
        progress.played_percent = 100.0
        progress.is_completed = True
        progress.last_reported_at = datetime.utcnow()
        return repo.upsert(progress)

    def forget(self, user_id: str, item_id: str) -> bool:
        """Retire l'element de la reprise de lecture."""
        removed = self._progress_repository().delete(user_id, item_id)
        if removed:
            logger.debug(f"Position oubliee pour {item_id}")
        return removed
