"""
Mecanisme de retry avec backoff exponentiel pour les appels backend.

Les serveurs multimedia repondent parfois 429 ou 502/503/504 pendant un
scan de bibliotheque ou un redemarrage. Les requetes idempotentes (GET)
sont relancees avec un delai croissant et du jitter aleatoire; les autres
erreurs HTTP sont propagees immediatement.

Usage:
    # Avec le decorateur
    @with_retry(max_attempts=3, max_wait=5)
    async def my_backend_call():
        ...

    # Avec la fonction helper
    response = await request_with_retry(client, "GET", "/System/Info")
"""

from typing import Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

# Statuts consideres comme transitoires
RETRYABLE_STATUSES = frozenset({429, 502, 503, 504})


class TransientBackendError(Exception):
    """
    Exception levee quand le backend retourne un statut transitoire.

    Attributes:
        status_code: Statut HTTP recu (429, 502, 503 ou 504)
        retry_after: Nombre de secondes a attendre (depuis le header Retry-After),
                     ou None si non specifie.
    """

    def __init__(self, status_code: int, retry_after: Optional[int] = None) -> None:
        self.status_code = status_code
        self.retry_after = retry_after
        super().__init__(f"Backend returned {status_code}. Retry after: {retry_after}s")


def with_retry(max_attempts: int = 3, max_wait: int = 5):
    """
    Decorateur pour relancer sur TransientBackendError avec backoff exponentiel.

    Args:
        max_attempts: Nombre maximum de tentatives (defaut: 3)
        max_wait: Delai maximum entre les tentatives en secondes (defaut: 5)

    Returns:
        Decorateur a appliquer sur une fonction async
    """
    return retry(
        retry=retry_if_exception_type(TransientBackendError),
        wait=wait_random_exponential(multiplier=0.5, max=max_wait),
        stop=stop_after_attempt(max_attempts),
        reraise=True,
    )


def _parse_retry_after(value: Optional[str]) -> Optional[int]:
    if value and value.isdigit():
        return int(value)
    return None


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    max_attempts: int = 3,
    **kwargs,
) -> httpx.Response:
    """
    Execute une requete HTTP avec retry automatique sur statut transitoire.

    Args:
        client: Client httpx async a utiliser
        method: Methode HTTP (GET, POST, etc.)
        url: URL a appeler
        max_attempts: Nombre maximum de tentatives (defaut: 3)
        **kwargs: Arguments supplementaires passes a client.request()

    Returns:
        httpx.Response en cas de succes

    Raises:
        TransientBackendError: Si le statut reste transitoire apres epuisement des tentatives
        httpx.HTTPStatusError: Pour les autres erreurs HTTP
        httpx.TransportError: Si le backend est injoignable
    """

    @with_retry(max_attempts=max_attempts)
    async def _do_request() -> httpx.Response:
        response = await client.request(method, url, **kwargs)
        if response.status_code in RETRYABLE_STATUSES:
            raise TransientBackendError(
                response.status_code,
                _parse_retry_after(response.headers.get("Retry-After")),
            )
        response.raise_for_status()
        return response

    return await _do_request()
