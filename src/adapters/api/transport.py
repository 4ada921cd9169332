"""
Transport HTTP partage par les adaptateurs Emby et Jellyfin.

Encapsule le client httpx (pool de connexions, timeout fixe), l'injection
des identifiants (en-tete de jeton ou parametre api_key) et la traduction
de toute erreur de transport ou de statut en ConnectivityError. Chaque
adaptateur compose un BackendTransport plutot que d'en heriter.
"""

import functools
from typing import Any, Callable, Optional

import httpx
from loguru import logger

from src.adapters.api.retry import TransientBackendError, request_with_retry
from src.core.exceptions import ConnectivityError

USER_AGENT = "MediaBridge/1.0"


class BackendTransport:
    """
    Client HTTP d'un serveur multimedia.

    Attributes:
        base_url: URL de base normalisee (schema + hote + port)
        timeout: Timeout fixe par appel, en secondes

    Example:
        transport = BackendTransport(
            "http://nas:8096", token_header="X-Emby-Token", timeout=30.0, api_key="k"
        )
        info = await transport.get_json("/System/Info/Public", retry=False)
        await transport.close()
    """

    def __init__(
        self,
        base_url: str,
        token_header: str,
        timeout: float,
        api_key: str = "",
        user_agent: str = USER_AGENT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._token_header = token_header
        self._api_key = api_key
        self._user_agent = user_agent
        self._access_token: Optional[str] = None
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def access_token(self) -> Optional[str]:
        return self._access_token

    @property
    def credential(self) -> str:
        """Jeton utilisateur s'il existe, sinon la cle API statique."""
        return self._access_token or self._api_key

    def set_access_token(self, token: Optional[str]) -> None:
        self._access_token = token

    async def _get_client(self) -> httpx.AsyncClient:
        """
        Retourne le client HTTP, cree s'il n'existe pas.

        Utilise un client unique pour beneficier du connection pooling.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout, connect=min(10.0, self.timeout)),
                headers={"User-Agent": self._user_agent, "Accept": "application/json"},
            )
        return self._client

    def auth_headers(self) -> dict[str, str]:
        """En-tete de jeton quand un jeton utilisateur est disponible."""
        if self._access_token:
            return {self._token_header: self._access_token}
        return {}

    def auth_params(self) -> dict[str, str]:
        """Parametre api_key quand seule la cle statique est disponible."""
        if not self._access_token and self._api_key:
            return {"api_key": self._api_key}
        return {}

    def url(self, path: str, params: Optional[dict[str, Any]] = None) -> str:
        """Construit une URL absolue avec sa query string."""
        return str(httpx.URL(f"{self.base_url}{path}", params=params or {}))

    async def get_json(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
        retry: bool = True,
    ) -> Any:
        """
        GET authentifie retournant le corps JSON decode.

        Raises:
            ConnectivityError: Backend injoignable, statut non 2xx ou JSON invalide
        """
        response = await self.request("GET", path, params=params, retry=retry)
        try:
            return response.json()
        except ValueError as e:
            raise ConnectivityError(f"Invalid JSON from {path}") from e

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        retry: bool = False,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """
        Requete authentifiee, statut 2xx exige.

        Raises:
            ConnectivityError: Backend injoignable ou statut non 2xx
        """
        client = await self._get_client()
        merged_params = {**self.auth_params(), **(params or {})}
        merged_headers = {**self.auth_headers(), **(headers or {})}
        kwargs: dict[str, Any] = {"params": merged_params, "headers": merged_headers}
        if json is not None:
            kwargs["json"] = json
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            if retry:
                return await request_with_retry(client, method, path, **kwargs)
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
            return response
        except TransientBackendError as e:
            raise ConnectivityError(
                f"{method} {path} failed after retries", e.status_code
            ) from e
        except httpx.HTTPStatusError as e:
            raise ConnectivityError(
                f"{method} {path} returned {e.response.status_code}",
                e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise ConnectivityError(f"{method} {path} unreachable: {e}") from e

    async def post_raw(
        self,
        path: str,
        json: dict[str, Any],
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        """
        POST sans identifiants ni verification de statut (negociation d'auth).

        Raises:
            ConnectivityError: Backend injoignable
        """
        client = await self._get_client()
        try:
            return await client.post(path, json=json, headers=headers or {})
        except httpx.HTTPError as e:
            raise ConnectivityError(f"POST {path} unreachable: {e}") from e

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def degrade_to(fallback: Callable[[], Any]):
    """
    Decorateur de frontiere d'adaptateur.

    Toute ConnectivityError (ou charge utile malformee) est journalisee et
    remplacee par fallback(); aucune exception ne franchit la frontiere.

    Example:
        @degrade_to(list)
        async def list_libraries(self, user_id): ...
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            try:
                return await func(self, *args, **kwargs)
            except ConnectivityError as e:
                logger.warning(f"{self.kind.value}.{func.__name__} degrade: {e}")
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"{self.kind.value}.{func.__name__} payload malformee: {e!r}")
            return fallback()

        return wrapper

    return decorator
