"""
Implementation SQLModel du repository des positions de lecture.

La contrainte d'unicite (user_id, item_id) rend upsert() idempotent :
un rapport d'arret rejoue ne cree jamais de doublon.
"""

from typing import Optional

from sqlmodel import Session, select

from src.core.entities.connection import PlaybackProgress
from src.core.ports.repositories import IPlaybackProgressRepository
from src.infrastructure.persistence.models import PlaybackProgressModel


class SQLModelPlaybackProgressRepository(IPlaybackProgressRepository):
    """Repository SQLModel pour la table viewing_progress."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _to_entity(self, model: PlaybackProgressModel) -> PlaybackProgress:
        return PlaybackProgress(
            id=str(model.id) if model.id else None,
            user_id=model.user_id,
            item_id=model.item_id,
            position_seconds=model.position_seconds,
            runtime_seconds=model.runtime_seconds,
            played_percent=model.played_percent,
            is_completed=model.is_completed,
            last_reported_at=model.last_reported_at,
        )

    def _get_model(self, user_id: str, item_id: str) -> Optional[PlaybackProgressModel]:
        statement = select(PlaybackProgressModel).where(
            PlaybackProgressModel.user_id == user_id,
            PlaybackProgressModel.item_id == item_id,
        )
        return self._session.exec(statement).first()

    def get(self, user_id: str, item_id: str) -> Optional[PlaybackProgress]:
        model = self._get_model(user_id, item_id)
        if model:
            return self._to_entity(model)
        return None

    def upsert(self, progress: PlaybackProgress) -> PlaybackProgress:
        model = self._get_model(progress.user_id, progress.item_id)
        if model is None:
            model = PlaybackProgressModel(
                user_id=progress.user_id, item_id=progress.item_id
            )
        model.position_seconds = progress.position_seconds
        model.runtime_seconds = progress.runtime_seconds
        model.played_percent = progress.played_percent
        model.is_completed = progress.is_completed
        model.last_reported_at = progress.last_reported_at

        self._session.add(model)
        self._session.commit()
        self._session.refresh(model)
        return self._to_entity(model)

    def list_by_user(self, user_id: str, limit: int = 20) -> list[PlaybackProgress]:
        statement = (
            select(PlaybackProgressModel)
            .where(PlaybackProgressModel.user_id == user_id)
            .order_by(PlaybackProgressModel.last_reported_at.desc())
            .limit(limit)
        )
        return [self._to_entity(m) for m in self._session.exec(statement).all()]

    def list_in_progress(self, user_id: str, limit: int = 20) -> list[PlaybackProgress]:
        statement = (
            select(PlaybackProgressModel)
            .where(
                PlaybackProgressModel.user_id == user_id,
                PlaybackProgressModel.is_completed == False,  # noqa: E712
                PlaybackProgressModel.position_seconds > 0,
            )
            .order_by(PlaybackProgressModel.last_reported_at.desc())
            .limit(limit)
        )
        return [self._to_entity(m) for m in self._session.exec(statement).all()]

    def delete(self, user_id: str, item_id: str) -> bool:
        model = self._get_model(user_id, item_id)
        if model is None:
            return False
        self._session.delete(model)
        self._session.commit()
        return True
