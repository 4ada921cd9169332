"""
Modeles SQLModel pour la base de donnees MediaBridge.

Ces modeles representent les tables de la base de donnees SQLite.
Ils sont distincts des entites de domaine (dataclass dans core/entities/)
selon l'architecture hexagonale.

Tables:
- servers: Serveurs multimedia enregistres (au plus un actif)
- active_sessions: Sessions clientes par appareil, purgees apres inactivite
- viewing_progress: Derniere position de lecture par (utilisateur, element)
"""

from __future__ import annotations

from datetime import datetime

from sqlmodel import Field, Index, SQLModel, UniqueConstraint


class ConnectionModel(SQLModel, table=True):
    """
    Modele representant un serveur multimedia enregistre.

    api_key contient soit la cle API statique, soit le jeton obtenu au login.
    """

    __tablename__ = "servers"
    __table_args__ = (Index("ix_servers_url_port", "url", "port"),)

    id: int | None = Field(default=None, primary_key=True)
    name: str
    url: str
    port: int = Field(default=8096)
    api_key: str = Field(default="")
    server_type: str = Field(default="emby")  # "emby" | "jellyfin"
    is_active: bool = Field(default=False, index=True)
    created_at: datetime | None = Field(default_factory=datetime.utcnow)


class ActiveSessionModel(SQLModel, table=True):
    """
    Modele representant une session cliente (un appareil connecte).

    Informatif uniquement : la table ne conditionne jamais l'acces.
    """

    __tablename__ = "active_sessions"

    id: int | None = Field(default=None, primary_key=True)
    session_id: str = Field(unique=True, index=True)
    user_id: str = Field(index=True)
    username: str
    server_name: str = Field(default="")
    device_info: str | None = None
    ip_address: str | None = None
    last_activity: datetime = Field(default_factory=datetime.utcnow, index=True)
    created_at: datetime | None = Field(default_factory=datetime.utcnow)


class PlaybackProgressModel(SQLModel, table=True):
    """
    Modele representant la position de lecture d'un element.

    Une seule ligne par (user_id, item_id) : les rapports successifs
    ecrasent la precedente (dernier ecrit gagne).
    """

    __tablename__ = "viewing_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "item_id", name="uq_viewing_progress_user_item"),
    )

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    item_id: str = Field(index=True)
    position_seconds: int = Field(default=0)
    runtime_seconds: int | None = None
    played_percent: float = Field(default=0.0)
    is_completed: bool = Field(default=False)
    last_reported_at: datetime = Field(default_factory=datetime.utcnow, index=True)
