"""
Implementation SQLModel du repository Connection.

Implemente l'interface IConnectionRepository pour la persistance des
serveurs multimedia enregistres dans la table servers.
"""

from typing import Optional

from sqlmodel import Session, select

from src.core.entities.connection import BackendKind, Connection
from src.core.ports.repositories import IConnectionRepository
from src.infrastructure.persistence.models import ConnectionModel


class SQLModelConnectionRepository(IConnectionRepository):
    """
    Repository SQLModel pour les serveurs enregistres.

    Garantit qu'au plus une ligne porte is_active=True.
    """

    def __init__(self, session: Session) -> None:
        """
        Initialise le repository avec une session SQLModel.

        Args :
            session : Session SQLModel active pour les operations DB
        """
        self._session = session

    def _to_entity(self, model: ConnectionModel) -> Connection:
        """Convertit un modele DB en entite domaine."""
        return Connection(
            id=str(model.id) if model.id else None,
            display_name=model.name,
            base_url=model.url,
            port=model.port,
            backend_kind=BackendKind(model.server_type or BackendKind.EMBY.value),
            credential_key=model.api_key or "",
            is_active=model.is_active,
            created_at=model.created_at,
        )

    def _to_model(self, entity: Connection) -> ConnectionModel:
        """Convertit une entite domaine en modele DB."""
        model = ConnectionModel(
            name=entity.display_name,
            url=entity.base_url,
            port=entity.port,
            api_key=entity.credential_key,
            server_type=entity.backend_kind.value,
            is_active=entity.is_active,
        )
        if entity.id:
            model.id = int(entity.id)
        return model

    def get_by_id(self, connection_id: str) -> Optional[Connection]:
        model = self._session.get(ConnectionModel, int(connection_id))
        if model:
            return self._to_entity(model)
        return None

    def get_active(self) -> Optional[Connection]:
        statement = select(ConnectionModel).where(ConnectionModel.is_active == True)  # noqa: E712
        model = self._session.exec(statement).first()
        if model:
            return self._to_entity(model)
        return None

    def get_by_address(self, base_url: str, port: int) -> Optional[Connection]:
        statement = select(ConnectionModel).where(
            ConnectionModel.url == base_url, ConnectionModel.port == port
        )
        model = self._session.exec(statement).first()
        if model:
            return self._to_entity(model)
        return None

    def list_all(self) -> list[Connection]:
        statement = select(ConnectionModel).order_by(ConnectionModel.id.desc())
        return [self._to_entity(m) for m in self._session.exec(statement).all()]

    def save(self, connection: Connection) -> Connection:
        """
        Sauvegarde une connexion (insertion ou mise a jour).

        Si la connexion porte un ID existant, met a jour la ligne.
        Une connexion sauvegardee active desactive les autres.
        """
        existing = None
        if connection.id:
            existing = self._session.get(ConnectionModel, int(connection.id))

        if existing:
            existing.name = connection.display_name
            existing.url = connection.base_url
            existing.port = connection.port
            existing.api_key = connection.credential_key
            existing.server_type = connection.backend_kind.value
            existing.is_active = connection.is_active
            model = existing
        else:
            model = self._to_model(connection)

        if model.is_active:
            self._deactivate_others(model.id)
        self._session.add(model)
        self._session.commit()
        self._session.refresh(model)
        return self._to_entity(model)

    def set_active(self, connection_id: str) -> Optional[Connection]:
        model = self._session.get(ConnectionModel, int(connection_id))
        if model is None:
            return None
        self._deactivate_others(model.id)
        model.is_active = True
        self._session.add(model)
        self._session.commit()
        self._session.refresh(model)
        return self._to_entity(model)

    def delete(self, connection_id: str) -> bool:
        model = self._session.get(ConnectionModel, int(connection_id))
        if model is None:
            return False
        self._session.delete(model)
        self._session.commit()
        return True

    def _deactivate_others(self, keep_id: Optional[int]) -> None:
        statement = select(ConnectionModel).where(ConnectionModel.is_active == True)  # noqa: E712
        for other in self._session.exec(statement).all():
            if other.id != keep_id:
                other.is_active = False
                self._session.add(other)
