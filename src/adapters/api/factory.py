"""
Fabrique d'adaptateurs backend.

Selectionne l'implementation concrete de IMediaServerAdapter a partir du
BackendKind enregistre sur la connexion. Une implementation par saveur,
pas de chaine d'heritage.
"""

from typing import Callable, Optional

from src.adapters.api.auth_negotiator import ClientIdentity
from src.adapters.api.emby_client import EmbyAdapter
from src.adapters.api.jellyfin_client import JellyfinAdapter
from src.core.entities.connection import BackendKind, Connection
from src.core.ports.media_server import IMediaServerAdapter

DEFAULT_PORT = 8096

AdapterBuilder = Callable[..., IMediaServerAdapter]

_BUILDERS: dict[BackendKind, AdapterBuilder] = {
    BackendKind.EMBY: EmbyAdapter,
    BackendKind.JELLYFIN: JellyfinAdapter,
}


class AdapterFactory:
    """
    Construit l'adaptateur d'une connexion.

    Example:
        factory = AdapterFactory(ClientIdentity(client="MediaBridge"))
        adapter = factory.create(connection)
    """

    def __init__(
        self,
        identity: Optional[ClientIdentity] = None,
        image_params: Optional[dict[str, int]] = None,
    ) -> None:
        self._identity = identity or ClientIdentity()
        self._image_params = image_params

    @classmethod
    def from_settings(cls, settings) -> "AdapterFactory":
        """Construit la fabrique depuis Settings (identite client, dimensions d'images)."""
        return cls(
            identity=ClientIdentity(
                client=settings.client_name,
                device=settings.device_name,
                device_id=settings.device_id,
                version=settings.client_version,
            ),
            image_params={
                "maxHeight": settings.image_max_height,
                "maxWidth": settings.image_max_width,
                "quality": settings.image_quality,
            },
        )

    def create(self, connection: Connection) -> IMediaServerAdapter:
        """Nouvel adaptateur pour la connexion (client HTTP cree paresseusement)."""
        builder = _BUILDERS[connection.backend_kind]
        return builder(
            connection, identity=self._identity, image_params=self._image_params
        )

    @staticmethod
    def supported_kinds() -> list[dict]:
        """Saveurs supportees, pour les formulaires d'enregistrement."""
        return [
            {
                "type": kind.value,
                "displayName": kind.display_name,
                "defaultPort": DEFAULT_PORT,
            }
            for kind in _BUILDERS
        ]


def parse_backend_kind(value: Optional[str]) -> BackendKind:
    """
    Convertit une saisie utilisateur en BackendKind.

    Raises:
        ValueError: Saveur inconnue
    """
    if not value:
        raise ValueError("Backend kind is required")
    return BackendKind(value.strip().lower())
