"""
Implementation SQLModel du repository des sessions clientes.

Une ligne par appareil connecte, identifiee par session_id. Les lignes
inactives au-dela du TTL sont purgees par delete_inactive_since().
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete as sa_delete
from sqlalchemy import func
from sqlmodel import Session, select

from src.core.entities.connection import ActiveSessionRecord
from src.core.ports.repositories import IActiveSessionRepository
from src.infrastructure.persistence.models import ActiveSessionModel


class SQLModelActiveSessionRepository(IActiveSessionRepository):
    """Repository SQLModel pour les sessions clientes actives."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _to_entity(self, model: ActiveSessionModel) -> ActiveSessionRecord:
        return ActiveSessionRecord(
            id=str(model.id) if model.id else None,
            session_id=model.session_id,
            user_id=model.user_id,
            username=model.username,
            connection_label=model.server_name,
            device_descriptor=model.device_info,
            origin_address=model.ip_address,
            last_activity_at=model.last_activity,
            created_at=model.created_at,
        )

    def _to_model(self, entity: ActiveSessionRecord) -> ActiveSessionModel:
        return ActiveSessionModel(
            session_id=entity.session_id,
            user_id=entity.user_id,
            username=entity.username,
            server_name=entity.connection_label,
            device_info=entity.device_descriptor,
            ip_address=entity.origin_address,
            last_activity=entity.last_activity_at,
        )

    def _get_model(self, session_id: str) -> Optional[ActiveSessionModel]:
        statement = select(ActiveSessionModel).where(
            ActiveSessionModel.session_id == session_id
        )
        return self._session.exec(statement).first()

    def get_by_session_id(self, session_id: str) -> Optional[ActiveSessionRecord]:
        model = self._get_model(session_id)
        if model:
            return self._to_entity(model)
        return None

    def save(self, record: ActiveSessionRecord) -> ActiveSessionRecord:
        """
        Sauvegarde une session (insertion ou mise a jour par session_id).

        Une session rejouee garde sa date de creation d'origine.
        """
        existing = self._get_model(record.session_id)
        if existing:
            existing.user_id = record.user_id
            existing.username = record.username
            existing.server_name = record.connection_label
            existing.device_info = record.device_descriptor
            existing.ip_address = record.origin_address
            existing.last_activity = max(existing.last_activity, record.last_activity_at)
            model = existing
        else:
            model = self._to_model(record)

        self._session.add(model)
        self._session.commit()
        self._session.refresh(model)
        return self._to_entity(model)

    def touch(self, session_id: str, at: datetime) -> bool:
        model = self._get_model(session_id)
        if model is None:
            return False
        if at > model.last_activity:
            model.last_activity = at
            self._session.add(model)
            self._session.commit()
        return True

    def delete(self, session_id: str) -> bool:
        model = self._get_model(session_id)
        if model is None:
            return False
        self._session.delete(model)
        self._session.commit()
        return True

    def list_by_user(self, user_id: str) -> list[ActiveSessionRecord]:
        statement = (
            select(ActiveSessionModel)
            .where(ActiveSessionModel.user_id == user_id)
            .order_by(ActiveSessionModel.last_activity.desc())
        )
        return [self._to_entity(m) for m in self._session.exec(statement).all()]

    def count_by_user(self, user_id: str) -> int:
        statement = select(func.count()).select_from(ActiveSessionModel).where(
            ActiveSessionModel.user_id == user_id
        )
        return int(self._session.exec(statement).one())

    def list_all(self) -> list[ActiveSessionRecord]:
        statement = select(ActiveSessionModel).order_by(
            ActiveSessionModel.last_activity.desc()
        )
        return [self._to_entity(m) for m in self._session.exec(statement).all()]

    def delete_inactive_since(self, cutoff: datetime) -> int:
        statement = sa_delete(ActiveSessionModel).where(
            ActiveSessionModel.last_activity < cutoff
        )
        result = self._session.exec(statement)
        self._session.commit()
        return result.rowcount or 0
