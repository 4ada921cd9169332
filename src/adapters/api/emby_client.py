"""
Adaptateur Emby (variante A).

Implemente IMediaServerAdapter pour les serveurs Emby. Particularites :
- jeton transmis dans l'en-tete X-MediaBrowser-Token, cle statique en api_key
- test de connexion sur /System/Info (authentifie)
- quatre formes de corps d'authentification essayees dans l'ordre
- pagination avec EnableTotalRecordCount
- timeout fixe de 15 secondes par appel

Reference API: https://dev.emby.media/reference/RestAPI.html
"""

from typing import Any, Optional

import httpx
from loguru import logger

from src.adapters.api import catalog
from src.adapters.api.auth_negotiator import (
    EMBY_SHAPES,
    AuthenticationNegotiator,
    ClientIdentity,
)
from src.adapters.api.stream_params import (
    direct_params,
    segmented_params,
    transcoded_params,
)
from src.adapters.api.transport import BackendTransport, degrade_to
from src.core.entities.connection import AuthResult, BackendKind, Connection
from src.core.entities.media import AudioTrack, Library, LiveProgram, MediaItem
from src.core.ports.media_server import IMediaServerAdapter
from src.core.value_objects.stream_plan import StreamOptions, StreamVariant
from src.utils.constants import ANALYZE_DURATION_MS, ANALYZE_SIZE_BYTES

DEFAULT_IMAGE_PARAMS = {"maxHeight": 600, "maxWidth": 400, "quality": 90}


def build_emby_base_url(host: str, port: int) -> str:
    """
    URL de base Emby.

    Un hote avec schema garde son schema et recoit le port; un hote nu
    est servi en https.
    """
    host = host.strip().rstrip("/")
    if "://" in host:
        url = httpx.URL(host).copy_with(port=port)
        return str(url).rstrip("/")
    return f"https://{host}:{port}"


class EmbyAdapter(IMediaServerAdapter):
    """
    Client Emby.

    Attributes:
        DEFAULT_TIMEOUT: Timeout fixe par appel (secondes)
        TOKEN_HEADER: En-tete portant le jeton utilisateur

    Example:
        adapter = EmbyAdapter(connection, ClientIdentity())
        auth = await adapter.authenticate_with_credentials("alice", "secret")
        items, total = await adapter.list_library_items(auth.user_id, "lib1", 50, 0)
        await adapter.close()
    """

    DEFAULT_TIMEOUT = 15.0
    TOKEN_HEADER = "X-MediaBrowser-Token"
    # Ancienne heuristique : la deuxieme piste est souvent le doublage
    POSITIONAL_AUDIO_FALLBACK = 1

    def __init__(
        self,
        connection: Connection,
        identity: Optional[ClientIdentity] = None,
        timeout: float = DEFAULT_TIMEOUT,
        image_params: Optional[dict[str, int]] = None,
    ) -> None:
        """
        Initialise l'adaptateur.

        Args:
            connection: Serveur enregistre (hote, port, cle)
            identity: Identite client pour X-Emby-Authorization
            timeout: Timeout fixe par appel
            image_params: maxHeight/maxWidth/quality demandes pour les images
        """
        self._identity = identity or ClientIdentity()
        self._image_params = image_params or DEFAULT_IMAGE_PARAMS
        self._transport = BackendTransport(
            build_emby_base_url(connection.base_url, connection.port),
            token_header=self.TOKEN_HEADER,
            timeout=timeout,
            api_key=connection.credential_key,
        )

    @property
    def kind(self) -> BackendKind:
        return BackendKind.EMBY

    @property
    def positional_audio_fallback(self) -> Optional[int]:
        return self.POSITIONAL_AUDIO_FALLBACK

    @property
    def transport(self) -> BackendTransport:
        return self._transport

    def use_access_token(self, token: Optional[str]) -> None:
        self._transport.set_access_token(token)

    @degrade_to(lambda: False)
    async def test_connection(self) -> bool:
        await self._transport.request(
            "GET", "/System/Info", params={"api_key": self._transport.credential}
        )
        return True

    async def authenticate_with_credentials(
        self, username: str, password: str
    ) -> Optional[AuthResult]:
        negotiator = AuthenticationNegotiator(
            self._transport, EMBY_SHAPES, self._identity.authorization_header()
        )
        outcome = await negotiator.negotiate(username, password)
        if outcome.result is not None:
            self._transport.set_access_token(outcome.result.access_token)
        return outcome.result

    @degrade_to(lambda: None)
    async def authenticate_with_key(self) -> Optional[AuthResult]:
        users = await self._transport.get_json("/Users")
        if not users:
            logger.warning("Emby : aucun utilisateur visible avec la cle API")
            return None
        first = users[0]
        return AuthResult(
            user_id=str(first["Id"]),
            username=first.get("Name", ""),
            access_token=self._transport.credential,
        )

    @degrade_to(list)
    async def list_libraries(self, user_id: str) -> list[Library]:
        return await catalog.fetch_libraries(self._transport, user_id)

    @degrade_to(lambda: ([], 0))
    async def list_library_items(
        self, user_id: str, library_id: str, limit: int, offset: int
    ) -> tuple[list[MediaItem], int]:
        return await catalog.fetch_items_page(
            self._transport, user_id, library_id, limit, offset, request_total=True
        )

    @degrade_to(list)
    async def search(self, user_id: str, term: str, limit: int = 20) -> list[MediaItem]:
        return await catalog.fetch_search(self._transport, user_id, term, limit)

    @degrade_to(lambda: None)
    async def get_item_details(self, user_id: str, item_id: str) -> Optional[MediaItem]:
        return await catalog.fetch_item(self._transport, user_id, item_id)

    @degrade_to(list)
    async def get_series_seasons(self, user_id: str, series_id: str) -> list[MediaItem]:
        return await catalog.fetch_seasons(self._transport, user_id, series_id)

    @degrade_to(list)
    async def get_season_episodes(
        self, user_id: str, season_id: str, series_id: Optional[str] = None
    ) -> list[MediaItem]:
        return await catalog.fetch_episodes(self._transport, user_id, season_id, series_id)

    @degrade_to(list)
    async def get_audio_tracks(self, user_id: str, item_id: str) -> list[AudioTrack]:
        return await catalog.fetch_audio_tracks(self._transport, user_id, item_id)

    @degrade_to(list)
    async def list_image_candidates(
        self, user_id: str, parent_id: str, limit: int = 50
    ) -> list[dict]:
        return await catalog.fetch_image_candidates(
            self._transport, user_id, parent_id, limit
        )

    @degrade_to(lambda: False)
    async def report_playback_start(
        self, user_id: str, item_id: str, position_ticks: int = 0
    ) -> bool:
        body = catalog.report_body(user_id, item_id, position_ticks, "DirectStream")
        return await catalog.post_report(self._transport, "/Sessions/Playing", body)

    @degrade_to(lambda: False)
    async def report_playback_progress(
        self, user_id: str, item_id: str, position_ticks: int
    ) -> bool:
        body = catalog.report_body(user_id, item_id, position_ticks, "DirectStream")
        body["EventName"] = "timeupdate"
        return await catalog.post_report(
            self._transport, "/Sessions/Playing/Progress", body
        )

    @degrade_to(lambda: False)
    async def report_playback_stop(
        self, user_id: str, item_id: str, position_ticks: int
    ) -> bool:
        body = catalog.report_body(user_id, item_id, position_ticks, "DirectStream")
        return await catalog.post_report(
            self._transport, "/Sessions/Playing/Stopped", body
        )

    def build_stream_url(
        self, item_id: str, user_id: str, options: StreamOptions
    ) -> str:
        if options.variant is StreamVariant.SEGMENTED:
            path = f"/Videos/{item_id}/master.m3u8"
            params = segmented_params()
        elif options.variant is StreamVariant.TRANSCODED:
            path = f"/Videos/{item_id}/stream"
            params = transcoded_params()
        else:
            path = f"/Videos/{item_id}/stream"
            params = direct_params()
            # Emby sonde le conteneur avant de servir un flux statique
            params["AnalyzeDurationMs"] = ANALYZE_DURATION_MS
            params["ProbeSizeBytes"] = ANALYZE_SIZE_BYTES

        params["MediaSourceId"] = options.media_source_id or item_id
        params["DeviceId"] = self._identity.device_id
        if options.audio_index is not None:
            params["AudioStreamIndex"] = options.audio_index
        params["api_key"] = self._transport.credential
        return self._transport.url(path, params)

    def build_live_stream_url(self, channel_id: str) -> str:
        return self._transport.url(
            f"/LiveTv/LiveStreamFiles/{channel_id}/stream.m3u8",
            {"api_key": self._transport.credential},
        )

    def build_image_url(self, item_id: str, kind: str, tag: Optional[str] = None) -> str:
        params: dict[str, Any] = dict(self._image_params)
        if tag:
            params["tag"] = tag
        return self._transport.url(f"/Items/{item_id}/Images/{kind}", params)

    @degrade_to(lambda: None)
    async def fetch_image(
        self, item_id: str, kind: str, tag: Optional[str] = None
    ) -> Optional[tuple[bytes, str]]:
        return await catalog.fetch_image(
            self._transport, self.TOKEN_HEADER, item_id, kind, self._image_params, tag
        )

    @degrade_to(list)
    async def list_live_channels(self, user_id: str) -> list[MediaItem]:
        return await catalog.fetch_live_channels(self._transport, user_id)

    @degrade_to(list)
    async def list_live_programs(
        self, user_id: str, channel_ids: Optional[list[str]] = None
    ) -> list[LiveProgram]:
        return await catalog.fetch_live_programs(self._transport, user_id, channel_ids)

    async def close(self) -> None:
        await self._transport.close()
