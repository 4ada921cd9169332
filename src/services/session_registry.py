"""
Registre de la connexion active et des sessions clientes.

Deux mecanismes decouples :
1. Le pointeur courant (connexion, adaptateur, session d'authentification)
   qui determine le backend de tous les appels. Les routes ne le lisent
   jamais directement : elles recoivent un RequestContext immuable.
2. La table active_sessions, purement informative, qui liste les
   appareils connectes et est purgee apres inactivite.
"""

import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from loguru import logger

from src.core.entities.connection import (
    ActiveSessionRecord,
    AuthResult,
    AuthSession,
    BackendKind,
    Connection,
)
from src.core.exceptions import AuthenticationError, ConnectivityError
from src.core.ports.media_server import IMediaServerAdapter
from src.core.ports.repositories import IActiveSessionRepository, IConnectionRepository

SESSION_COOKIE_NAME = "mediabridge_session"


@dataclass(frozen=True)
class RequestContext:
    """
    Etat resolu une fois par requete et transmis aux appels.

    Attributes:
        connection: Connexion active au moment de la requete
        adapter: Adaptateur de cette connexion
        auth: Session d'authentification, None si non connecte
        session_id: Cookie de session client, s'il est present
    """

    connection: Connection
    adapter: IMediaServerAdapter
    auth: Optional[AuthSession] = None
    session_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.auth is not None

    @property
    def user_id(self) -> str:
        if self.auth is None:
            raise AuthenticationError()
        return self.auth.user_id


@dataclass(frozen=True)
class LoginResult:
    """Resultat d'un login : session d'authentification et cookie a poser."""

    auth: AuthSession
    connection: Connection
    session_id: str


class SessionRegistry:
    """
    Gestion de la connexion active et des sessions clientes.

    Les repositories sont obtenus via des fabriques : chaque operation
    travaille avec une session SQL fraiche.

    Example:
        registry = SessionRegistry(factory, connection_repo, session_repo)
        result = await registry.login(BackendKind.EMBY, "emby.local", 8096, "alice", "pw")
        ctx = registry.context(session_id=result.session_id)
    """

    def __init__(
        self,
        adapter_factory,
        connection_repository: Callable[[], IConnectionRepository],
        session_repository: Callable[[], IActiveSessionRepository],
        session_ttl_minutes: int = 30,
    ) -> None:
        self._adapter_factory = adapter_factory
        self._connection_repository = connection_repository
        self._session_repository = session_repository
        self._ttl = timedelta(minutes=session_ttl_minutes)

        self._connection: Optional[Connection] = None
        self._adapter: Optional[IMediaServerAdapter] = None
        self._auth: Optional[AuthSession] = None

    # ------------------------------------------------------------------
    # Pointeur courant
    # ------------------------------------------------------------------

    @property
    def connection(self) -> Optional[Connection]:
        return self._connection

    @property
    def auth(self) -> Optional[AuthSession]:
        return self._auth

    def load_active(self) -> Optional[Connection]:
        """Restaure le pointeur depuis la connexion marquee active en base."""
        connection = self._connection_repository().get_active()
        if connection is not None:
            self._set_pointer(connection)
            logger.info(f"Connexion active restauree : {connection.label}")
        return connection

    async def activate(self, connection: Connection) -> Connection:
        """
        Fait de connection la connexion courante.

        Ferme le client de l'ancien adaptateur et invalide la session
        d'authentification precedente.
        """
        repo = self._connection_repository()
        if connection.id is None:
            connection = repo.save(connection)
        activated = repo.set_active(connection.id) or connection
        await self._close_adapter()
        self._auth = None
        self._set_pointer(activated)
        logger.info(f"Connexion active : {activated.label}")
        return activated

    async def deactivate(self) -> None:
        """Vide le pointeur courant (suppression de la connexion active)."""
        await self._close_adapter()
        self._connection = None
        self._auth = None

    def context(self, session_id: Optional[str] = None) -> Optional[RequestContext]:
        """Instantane immuable du pointeur, None si aucune connexion active."""
        if self._connection is None or self._adapter is None:
            return None
        return RequestContext(
            connection=self._connection,
            adapter=self._adapter,
            auth=self._auth,
            session_id=session_id,
        )

    def _set_pointer(self, connection: Connection) -> None:
        self._connection = connection
        self._adapter = self._adapter_factory.create(connection)

    async def _close_adapter(self) -> None:
        if self._adapter is not None:
            await self._adapter.close()
            self._adapter = None

    async def close(self) -> None:
        await self._close_adapter()

    # ------------------------------------------------------------------
    # Authentification
    # ------------------------------------------------------------------

    async def login(
        self,
        backend_kind: BackendKind,
        base_url: str,
        port: int,
        username: str,
        password: str,
        device_descriptor: Optional[str] = None,
        origin_address: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> LoginResult:
        """
        Authentifie l'utilisateur et active la connexion correspondante.

        Etapes :
        1. Negociation des identifiants sur un adaptateur temporaire
        2. Upsert de la connexion (url, port), jeton stocke comme credential_key
        3. Activation de la connexion, jeton injecte dans le nouvel adaptateur
        4. Insertion d'une ligne active_sessions pour cet appareil

        Raises:
            AuthenticationError: Toutes les formes d'identifiants rejetees
        """
        candidate = Connection(
            display_name=display_name or backend_kind.display_name,
            base_url=base_url,
            port=port,
            backend_kind=backend_kind,
        )
        adapter = self._adapter_factory.create(candidate)
        try:
            result = await adapter.authenticate_with_credentials(username, password)
        finally:
            await adapter.close()

        if result is None:
            logger.warning(f"Echec d'authentification pour {username} sur {candidate.label}")
            raise AuthenticationError()

        candidate.credential_key = result.access_token
        connection = self._upsert(candidate, rename=display_name is not None)
        return await self._open_session(
            connection,
            result,
            fallback_username=username,
            bearer=True,
            device_descriptor=device_descriptor,
            origin_address=origin_address,
        )

    async def connect_with_key(
        self,
        connection: Connection,
        device_descriptor: Optional[str] = None,
        origin_address: Optional[str] = None,
    ) -> LoginResult:
        """
        Active un serveur configure avec une cle API statique.

        Sonde le serveur, s'authentifie avec la cle (premier utilisateur
        visible) puis ouvre la session comme un login. La cle reste passee
        en parametre api_key.

        Raises:
            ConnectivityError: Serveur injoignable
            AuthenticationError: Cle refusee ou aucun utilisateur visible
        """
        adapter = self._adapter_factory.create(connection)
        try:
            if not await adapter.test_connection():
                raise ConnectivityError(f"Server unreachable: {connection.label}")
            result = await adapter.authenticate_with_key()
        finally:
            await adapter.close()

        if result is None:
            logger.warning(f"Cle API refusee par {connection.label}")
            raise AuthenticationError()

        saved = self._upsert(connection, rename=True)
        return await self._open_session(
            saved,
            result,
            fallback_username=result.username,
            bearer=False,
            device_descriptor=device_descriptor,
            origin_address=origin_address,
        )

    def _upsert(self, connection: Connection, rename: bool) -> Connection:
        """Sauvegarde la connexion, en reutilisant la ligne de meme (url, port)."""
        repo = self._connection_repository()
        existing = repo.get_by_address(connection.base_url, connection.port)
        if existing is None:
            return repo.save(connection)
        existing.backend_kind = connection.backend_kind
        existing.credential_key = connection.credential_key
        if rename and connection.display_name:
            existing.display_name = connection.display_name
        return repo.save(existing)

    async def _open_session(
        self,
        connection: Connection,
        result: AuthResult,
        fallback_username: str,
        bearer: bool,
        device_descriptor: Optional[str],
        origin_address: Optional[str],
    ) -> LoginResult:
        connection = await self.activate(connection)
        if bearer:
            self._adapter.use_access_token(result.access_token)
        self._auth = AuthSession(
            user_id=result.user_id,
            username=result.username or fallback_username,
            bearer_token=result.access_token,
        )

        record = ActiveSessionRecord(
            session_id=secrets.token_urlsafe(32),
            user_id=result.user_id,
            username=self._auth.username,
            connection_label=connection.display_name,
            device_descriptor=device_descriptor,
            origin_address=origin_address,
        )
        self._session_repository().save(record)
        self.sweep()
        logger.info(f"Utilisateur {self._auth.username} connecte a {connection.label}")
        return LoginResult(auth=self._auth, connection=connection, session_id=record.session_id)

    async def logout(self, session_id: Optional[str] = None) -> None:
        """Supprime la ligne de l'appelant et vide la session d'authentification."""
        if session_id:
            self._session_repository().delete(session_id)
        if self._auth is not None:
            logger.info(f"Deconnexion de {self._auth.username}")
        self._auth = None
        await self._close_adapter()
        self._connection = None

    # ------------------------------------------------------------------
    # Sessions clientes
    # ------------------------------------------------------------------

    def touch(self, session_id: Optional[str]) -> bool:
        """Met a jour l'activite de la session (jamais en arriere)."""
        if not session_id:
            return False
        return self._session_repository().touch(session_id, datetime.utcnow())

    def list_sessions(self, user_id: str) -> list[ActiveSessionRecord]:
        """Sessions non expirees de l'utilisateur, plus recente en premier."""
        self.sweep()
        return self._session_repository().list_by_user(user_id)

    def count_sessions(self, user_id: str) -> int:
        self.sweep()
        return self._session_repository().count_by_user(user_id)

    def list_all_sessions(self) -> list[ActiveSessionRecord]:
        return self._session_repository().list_all()

    def sweep(self, now: Optional[datetime] = None) -> int:
        """Supprime les sessions inactives depuis plus que le TTL."""
        cutoff = (now or datetime.utcnow()) - self._ttl
        removed = self._session_repository().delete_inactive_since(cutoff)
        if removed:
            logger.info(f"{removed} session(s) expiree(s) supprimee(s)")
        return removed
