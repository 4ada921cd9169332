"""
Entités de connexion et de session.

Représentent le serveur multimedia configuré (Connection), la session
d'authentification en mémoire (AuthSession) et les sessions clientes
persistées pour la visibilité multi-appareils (ActiveSessionRecord).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class BackendKind(str, Enum):
    """Saveur de serveur multimedia supportée."""

    EMBY = "emby"
    JELLYFIN = "jellyfin"

    @property
    def display_name(self) -> str:
        return f"{self.value.capitalize()} Server"


@dataclass
class Connection:
    """
    Serveur multimedia enregistré.

    Attributs :
        id : ID interne en base
        display_name : Libellé affiché
        base_url : Hôte ou URL du serveur (avec ou sans schéma)
        port : Port du serveur
        credential_key : Clé API statique ou jeton obtenu au login
        backend_kind : Saveur du serveur (emby ou jellyfin)
        is_active : True pour l'unique connexion active du processus
    """

    display_name: str
    base_url: str
    port: int
    backend_kind: BackendKind
    credential_key: str = ""
    is_active: bool = False
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def label(self) -> str:
        return f"{self.display_name} ({self.base_url}:{self.port})"


@dataclass(frozen=True)
class AuthResult:
    """Résultat d'une authentification réussie auprès du backend."""

    user_id: str
    username: str
    access_token: str


@dataclass(frozen=True)
class AuthSession:
    """
    Session d'authentification en mémoire.

    N'existe qu'après une négociation réussie; détruite au logout ou
    au changement de connexion active.
    """

    user_id: str
    username: str
    bearer_token: str
    authenticated_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class ActiveSessionRecord:
    """
    Session cliente persistée (une par appareil connecté).

    Informative uniquement : ne conditionne jamais l'accès.
    """

    session_id: str
    user_id: str
    username: str
    connection_label: str = ""
    device_descriptor: Optional[str] = None
    origin_address: Optional[str] = None
    last_activity_at: datetime = field(default_factory=datetime.utcnow)
    created_at: Optional[datetime] = None
    id: Optional[str] = None


@dataclass
class PlaybackProgress:
    """Dernière position de lecture connue pour un couple (utilisateur, élément)."""

    user_id: str
    item_id: str
    position_seconds: int = 0
    runtime_seconds: Optional[int] = None
    played_percent: float = 0.0
    is_completed: bool = False
    last_reported_at: datetime = field(default_factory=datetime.utcnow)
    id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "itemId": self.item_id,
            "positionSeconds": self.position_seconds,
            "runtimeSeconds": self.runtime_seconds,
            "playedPercentage": self.played_percent,
            "isCompleted": self.is_completed,
            "lastReportedAt": self.last_reported_at.isoformat(),
        }
