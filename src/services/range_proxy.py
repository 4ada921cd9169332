"""
Relais d'octets avec support des requetes Range.

Transmet l'en-tete Range du client tel quel vers l'URL backend resolue
et relaie la reponse morceau par morceau, sans jamais la charger en
memoire. Chaque invocation ouvre sa propre connexion amont : changer de
serveur actif n'interrompt pas les relais en cours.
"""

from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from typing import Optional

import httpx
from loguru import logger

from src.core.exceptions import ProxyStreamError

DEFAULT_CONTENT_TYPE = "video/mp4"
DEFAULT_CHUNK_SIZE = 64 * 1024
USER_AGENT = "MediaBridge/1.0"

# En-tetes amont recopies tels quels
_FORWARDED_HEADERS = ("Content-Length", "Content-Range", "Accept-Ranges")

_NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Range",
    "Access-Control-Expose-Headers": "Content-Length, Content-Range, Accept-Ranges",
}


@dataclass
class ProxiedStream:
    """
    Reponse relayee, prete pour un StreamingResponse.

    Attributes:
        status_code: 200 ou 206, recopie de l'amont
        headers: En-tetes a renvoyer au client
        media_type: Content-Type amont (video/mp4 par defaut)
        body: Generateur asynchrone des octets amont
    """

    status_code: int
    media_type: str
    body: AsyncIterator[bytes]
    headers: dict[str, str] = field(default_factory=dict)


class RangeProxy:
    """
    Relais HTTP Range vers le backend.

    Example:
        proxy = RangeProxy(connect_timeout=15.0)
        stream = await proxy.open(plan.backend_url, request.headers.get("range"))
        return StreamingResponse(stream.body, status_code=stream.status_code,
                                 headers=stream.headers, media_type=stream.media_type)
    """

    def __init__(
        self,
        connect_timeout: float = 15.0,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
    ) -> None:
        self._connect_timeout = connect_timeout
        self._chunk_size = chunk_size
        self._client_factory = client_factory or self._default_client

    def _default_client(self) -> httpx.AsyncClient:
        # Pas de plafond de lecture : un film peut durer des heures
        return httpx.AsyncClient(
            timeout=httpx.Timeout(None, connect=self._connect_timeout),
            follow_redirects=True,
        )

    @staticmethod
    def upstream_headers(range_header: Optional[str]) -> dict[str, str]:
        headers = {
            "User-Agent": USER_AGENT,
            "Accept": "*/*",
            "Accept-Encoding": "identity",
        }
        if range_header:
            headers["Range"] = range_header
        return headers

    async def open(self, url: str, range_header: Optional[str] = None) -> ProxiedStream:
        """
        Ouvre le flux amont et prepare la reponse client.

        Raises:
            ProxyStreamError: Amont injoignable (status_code None) ou en erreur
                avant l'envoi des en-tetes (status_code recopie)
        """
        client = self._client_factory()
        request = client.build_request("GET", url, headers=self.upstream_headers(range_header))
        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            raise ProxyStreamError(f"Upstream unreachable: {type(e).__name__}") from e

        if response.status_code >= 400:
            status = response.status_code
            await response.aclose()
            await client.aclose()
            raise ProxyStreamError(f"Upstream returned {status}", status_code=status)

        return ProxiedStream(
            status_code=206 if response.status_code == 206 else 200,
            media_type=response.headers.get("Content-Type", DEFAULT_CONTENT_TYPE),
            headers=self._client_headers(response),
            body=self._relay(client, response),
        )

    @staticmethod
    def _client_headers(response: httpx.Response) -> dict[str, str]:
        headers: dict[str, str] = {}
        for name in _FORWARDED_HEADERS:
            value = response.headers.get(name)
            if value is not None:
                headers[name] = value
        headers.setdefault("Accept-Ranges", "bytes")
        headers["Content-Type"] = response.headers.get("Content-Type", DEFAULT_CONTENT_TYPE)
        headers.update(_NO_CACHE_HEADERS)
        headers.update(_CORS_HEADERS)
        return headers

    async def _relay(
        self, client: httpx.AsyncClient, response: httpx.Response
    ) -> AsyncIterator[bytes]:
        """
        Pipe les octets amont vers le client.

        Une erreur amont en cours de flux leve ProxyStreamError, sans nouvel
        essai : le serveur ASGI coupe alors la connexion et le client voit
        une reponse incomplete plutot qu'une fin de fichier.
        Une deconnexion client ferme la poignee amont (bloc finally).

        Raises:
            ProxyStreamError: Echec amont apres l'envoi des en-tetes
        """
        relayed = 0
        try:
            async for chunk in response.aiter_raw(self._chunk_size):
                relayed += len(chunk)
                yield chunk
        except httpx.HTTPError as e:
            error = ProxyStreamError(f"Upstream failed after {relayed} bytes: {type(e).__name__}")
            logger.warning(f"Relais interrompu : {error}")
            raise error from e
        finally:
            await response.aclose()
            await client.aclose()
            logger.debug(f"Relais termine ({relayed} octets)")
