"""
Negociation d'authentification par identifiants.

Les serveurs de la famille Emby/Jellyfin n'acceptent pas tous la meme
forme de corps pour /Users/AuthenticateByName. Le negociateur essaie une
liste ordonnee de formes (fonctions pures username, password -> corps),
une seule fois chacune, et s'arrete au premier HTTP 200 portant un
AccessToken. Au plus MAX_ATTEMPTS allers-retours.

    INIT -> forme 1 -> ... -> forme N -> SUCCESS(jeton, utilisateur) | FAILURE(dernier statut)
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from loguru import logger

from src.adapters.api.transport import BackendTransport
from src.core.entities.connection import AuthResult
from src.core.exceptions import AuthenticationError, ConnectivityError

AUTHENTICATE_PATH = "/Users/AuthenticateByName"
MAX_ATTEMPTS = 4

CredentialShape = Callable[[str, str], dict[str, str]]


def username_pw(username: str, password: str) -> dict[str, str]:
    return {"Username": username, "Pw": password}


def username_password(username: str, password: str) -> dict[str, str]:
    return {"Username": username, "Password": password}


def lowercase_fields(username: str, password: str) -> dict[str, str]:
    return {"username": username, "password": password}


def name_password(username: str, password: str) -> dict[str, str]:
    return {"Name": username, "Password": password}


# Emby historique accepte selon la version l'une ou l'autre forme
EMBY_SHAPES: tuple[CredentialShape, ...] = (
    username_pw,
    username_password,
    lowercase_fields,
    name_password,
)
JELLYFIN_SHAPES: tuple[CredentialShape, ...] = (username_pw,)


def build_authorization_header(
    client: str,
    device: str,
    device_id: str,
    version: str,
    token: Optional[str] = None,
) -> str:
    """Valeur de l'en-tete X-Emby-Authorization."""
    header = (
        f'MediaBrowser Client="{client}", Device="{device}", '
        f'DeviceId="{device_id}", Version="{version}"'
    )
    if token:
        header += f', Token="{token}"'
    return header


@dataclass(frozen=True)
class ClientIdentity:
    """Identite client annoncee au backend."""

    client: str = "MediaBridge"
    device: str = "MediaBridge Web"
    device_id: str = "mediabridge-web"
    version: str = "1.0.0"

    def authorization_header(self, token: Optional[str] = None) -> str:
        return build_authorization_header(
            self.client, self.device, self.device_id, self.version, token
        )


@dataclass(frozen=True)
class NegotiationOutcome:
    """
    Issue d'une negociation.

    Attributs :
        result : Resultat d'authentification, None en cas d'echec
        attempts : Nombre d'allers-retours effectues
        last_status : Dernier statut HTTP observe (None si backend injoignable)
    """

    result: Optional[AuthResult]
    attempts: int
    last_status: Optional[int]

    @property
    def succeeded(self) -> bool:
        return self.result is not None

    def raise_for_failure(self) -> AuthResult:
        """Retourne le resultat ou leve AuthenticationError."""
        if self.result is None:
            raise AuthenticationError(self.last_status)
        return self.result


class AuthenticationNegotiator:
    """
    Essai ordonne des formes d'identifiants avec arret au premier succes.

    Example:
        negotiator = AuthenticationNegotiator(transport, EMBY_SHAPES, header)
        outcome = await negotiator.negotiate("alice", "secret")
        if outcome.succeeded:
            token = outcome.result.access_token
    """

    def __init__(
        self,
        transport: BackendTransport,
        shapes: Sequence[CredentialShape],
        authorization_header: str,
    ) -> None:
        if not shapes:
            raise ValueError("At least one credential shape is required")
        self._transport = transport
        self._shapes = tuple(shapes)[:MAX_ATTEMPTS]
        self._authorization_header = authorization_header

    async def negotiate(self, username: str, password: str) -> NegotiationOutcome:
        """Essaie chaque forme une fois, dans l'ordre, jusqu'au premier jeton."""
        last_status: Optional[int] = None
        attempts = 0

        for shape in self._shapes:
            attempts += 1
            result, last_status = await self._attempt(shape, username, password)
            if result is not None:
                logger.info(
                    f"Authentification reussie pour {result.username} "
                    f"(forme {shape.__name__}, essai {attempts})"
                )
                return NegotiationOutcome(result, attempts, last_status)

        logger.warning(
            f"Authentification refusee apres {attempts} essai(s), dernier statut {last_status}"
        )
        return NegotiationOutcome(None, attempts, last_status)

    async def _attempt(
        self, shape: CredentialShape, username: str, password: str
    ) -> tuple[Optional[AuthResult], Optional[int]]:
        try:
            response = await self._transport.post_raw(
                AUTHENTICATE_PATH,
                json=shape(username, password),
                headers={
                    "X-Emby-Authorization": self._authorization_header,
                    "Content-Type": "application/json",
                },
            )
        except ConnectivityError as e:
            logger.debug(f"Forme {shape.__name__} : backend injoignable ({e})")
            return None, None

        if response.status_code != 200:
            logger.debug(f"Forme {shape.__name__} : statut {response.status_code}")
            return None, response.status_code

        try:
            body = response.json()
        except ValueError:
            return None, response.status_code

        token = body.get("AccessToken") if isinstance(body, dict) else None
        if not token:
            return None, response.status_code

        user = body.get("User") or {}
        return (
            AuthResult(
                user_id=str(user.get("Id", "")),
                username=user.get("Name", username),
                access_token=token,
            ),
            response.status_code,
        )
