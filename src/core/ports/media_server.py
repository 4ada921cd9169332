"""
Port du contrat backend multimedia.

Interface abstraite unique implementee par chaque saveur de serveur
(Emby, Jellyfin). Chaque adaptateur traduit ses propres conventions REST
vers ce vocabulaire; les appelants ne voient qu'un seul idiome d'echec :
liste vide, None ou False, jamais d'exception au-dela de la frontiere.
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.core.entities.connection import AuthResult, BackendKind
from src.core.entities.media import AudioTrack, Library, LiveProgram, MediaItem
from src.core.value_objects.stream_plan import StreamOptions

# Un tick backend vaut 100 ns
TICKS_PER_SECOND = 10_000_000


def seconds_to_ticks(seconds: float) -> int:
    """Convertit une position en secondes vers des ticks backend."""
    return int(round(seconds * TICKS_PER_SECOND))


def ticks_to_seconds(ticks: Optional[int]) -> Optional[int]:
    """Convertit des ticks backend en secondes entieres (None conserve)."""
    if ticks is None:
        return None
    return int(ticks // TICKS_PER_SECOND)


class IMediaServerAdapter(ABC):
    """
    Contrat commun des backends multimedia.

    Les methodes de liste retournent une liste vide en cas d'echec,
    les recherches unitaires retournent None, les rapports de lecture
    et le test de connexion retournent False.
    """

    @property
    @abstractmethod
    def kind(self) -> BackendKind:
        """Saveur du backend."""
        ...

    @property
    def positional_audio_fallback(self) -> Optional[int]:
        """
        Index audio a utiliser quand le backend ne decrit aucune piste.

        Dernier recours uniquement; None laisse le backend choisir.
        """
        return None

    @abstractmethod
    async def test_connection(self) -> bool:
        """Verifie que le serveur repond. Ne leve jamais."""
        ...

    @abstractmethod
    async def authenticate_with_credentials(
        self, username: str, password: str
    ) -> Optional[AuthResult]:
        """Negocie un jeton a partir d'identifiants utilisateur."""
        ...

    @abstractmethod
    async def authenticate_with_key(self) -> Optional[AuthResult]:
        """Authentifie avec la cle API statique (premier utilisateur du serveur)."""
        ...

    @abstractmethod
    def use_access_token(self, token: Optional[str]) -> None:
        """
        Injecte un jeton utilisateur deja negocie.

        Les appels suivants portent le jeton dans l'en-tete propre a la
        saveur au lieu du parametre api_key.
        """
        ...

    @abstractmethod
    async def list_libraries(self, user_id: str) -> list[Library]:
        """Liste les bibliotheques (vues) de l'utilisateur."""
        ...

    @abstractmethod
    async def list_library_items(
        self, user_id: str, library_id: str, limit: int, offset: int
    ) -> tuple[list[MediaItem], int]:
        """
        Liste une page d'elements d'une bibliotheque.

        Retourne :
            (elements dedoublonnes, nombre total cote backend)
        """
        ...

    @abstractmethod
    async def search(self, user_id: str, term: str, limit: int = 20) -> list[MediaItem]:
        """Recherche plein texte dans le catalogue."""
        ...

    @abstractmethod
    async def get_item_details(self, user_id: str, item_id: str) -> Optional[MediaItem]:
        """Recupere un element par son ID."""
        ...

    @abstractmethod
    async def get_series_seasons(self, user_id: str, series_id: str) -> list[MediaItem]:
        ...

    @abstractmethod
    async def get_season_episodes(
        self, user_id: str, season_id: str, series_id: Optional[str] = None
    ) -> list[MediaItem]:
        ...

    @abstractmethod
    async def get_audio_tracks(self, user_id: str, item_id: str) -> list[AudioTrack]:
        """Liste les flux audio de l'element, dans l'ordre du backend."""
        ...

    @abstractmethod
    async def list_image_candidates(
        self, user_id: str, parent_id: str, limit: int = 50
    ) -> list[dict]:
        """
        Echantillon aleatoire d'elements bruts d'une bibliotheque.

        Sert au balayage des voisins pour trouver une image utilisable.
        """
        ...

    @abstractmethod
    async def report_playback_start(
        self, user_id: str, item_id: str, position_ticks: int = 0
    ) -> bool:
        ...

    @abstractmethod
    async def report_playback_progress(
        self, user_id: str, item_id: str, position_ticks: int
    ) -> bool:
        ...

    @abstractmethod
    async def report_playback_stop(
        self, user_id: str, item_id: str, position_ticks: int
    ) -> bool:
        ...

    @abstractmethod
    def build_stream_url(
        self, item_id: str, user_id: str, options: StreamOptions
    ) -> str:
        """Construit l'URL backend du flux (identifiants inclus)."""
        ...

    @abstractmethod
    def build_live_stream_url(self, channel_id: str) -> str:
        """Construit l'URL backend du flux d'une chaine en direct."""
        ...

    @abstractmethod
    def build_image_url(
        self, item_id: str, kind: str, tag: Optional[str] = None
    ) -> str:
        """Construit l'URL backend d'une image, sans identifiants."""
        ...

    @abstractmethod
    async def fetch_image(
        self, item_id: str, kind: str, tag: Optional[str] = None
    ) -> Optional[tuple[bytes, str]]:
        """
        Telecharge une image en injectant les identifiants.

        Retourne :
            (contenu, content-type) ou None si indisponible
        """
        ...

    @abstractmethod
    async def list_live_channels(self, user_id: str) -> list[MediaItem]:
        ...

    @abstractmethod
    async def list_live_programs(
        self, user_id: str, channel_ids: Optional[list[str]] = None
    ) -> list[LiveProgram]:
        ...

    @abstractmethod
    async def close(self) -> None:
        """Ferme le client HTTP sous-jacent."""
        ...
