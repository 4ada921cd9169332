"""
Service de planification des flux de lecture.

Choisit la piste audio a epingler et la variante de flux a demander au
backend pour un couple (element, utilisateur).

Negociation de la langue :
1. Pistes audio lues une seule fois par requete (AudioTrackCache)
2. Premiere piste dont la langue ou le titre correspond aux preferences
   -> index epingle, transcodage force
3. Sinon piste par defaut du backend, sans transcodage
4. Sans aucune metadonnee, repli positionnel declare par l'adaptateur
"""

from typing import Optional, Sequence

from loguru import logger

from src.core.entities.media import AudioTrack
from src.core.exceptions import PlaybackNegotiationError
from src.core.ports.media_server import IMediaServerAdapter
from src.core.value_objects.stream_plan import (
    FALLBACK_ORDER,
    StreamOptions,
    StreamPlan,
    StreamVariant,
    next_variant,
)
from src.utils.constants import (
    DIRECT_PLAY_CONTAINERS,
    HLS_SEGMENT_CONTAINER,
    TRANSCODE_CONTAINER,
)
from src.utils.helpers import contains_any

_CONTAINER_HINTS: dict[StreamVariant, tuple[str, ...]] = {
    StreamVariant.TRANSCODED: (TRANSCODE_CONTAINER,),
    StreamVariant.SEGMENTED: ("m3u8", HLS_SEGMENT_CONTAINER),
    StreamVariant.DEFAULT: DIRECT_PLAY_CONTAINERS,
}


class AudioTrackCache:
    """
    Cache des pistes audio, limite a une requete.

    Une instance est creee par requete HTTP : deux appels pour le meme
    element ne declenchent qu'un aller-retour backend.
    """

    def __init__(self, adapter: IMediaServerAdapter, user_id: str) -> None:
        self._adapter = adapter
        self._user_id = user_id
        self._tracks: dict[str, list[AudioTrack]] = {}

    async def get(self, item_id: str) -> list[AudioTrack]:
        if item_id not in self._tracks:
            self._tracks[item_id] = await self._adapter.get_audio_tracks(
                self._user_id, item_id
            )
        return self._tracks[item_id]


def parse_variant(value: Optional[str]) -> Optional[StreamVariant]:
    """
    Convertit le parametre ?variant= en StreamVariant.

    Raises:
        PlaybackNegotiationError: Variante inconnue
    """
    if not value:
        return None
    try:
        return StreamVariant(value.strip().lower())
    except ValueError:
        raise PlaybackNegotiationError(
            f"Unknown stream variant: {value}",
            next_variant=FALLBACK_ORDER[0].value,
        )


class StreamPlanner:
    """
    Produit un StreamPlan par demande de lecture.

    Example:
        planner = StreamPlanner(["spa", "es"], ["español"])
        plan = await planner.plan(adapter, user_id, item_id)
        # plan.backend_url -> URL a relayer via RangeProxy
    """

    def __init__(
        self,
        preferred_languages: Sequence[str] = (),
        preferred_keywords: Sequence[str] = (),
    ) -> None:
        self._languages = {lang.strip().lower() for lang in preferred_languages if lang}
        self._keywords = tuple(preferred_keywords)

    def is_preferred(self, track: AudioTrack) -> bool:
        if track.language and track.language.lower() in self._languages:
            return True
        return contains_any(track.title, self._keywords)

    def mark_preferred(self, tracks: list[AudioTrack]) -> list[AudioTrack]:
        """Renseigne is_preferred_language sur chaque piste."""
        for track in tracks:
            track.is_preferred_language = self.is_preferred(track)
        return tracks

    def recommended_track(self, tracks: list[AudioTrack]) -> Optional[int]:
        """Index recommande : preference, sinon defaut backend, sinon premiere piste."""
        for track in tracks:
            if self.is_preferred(track):
                return track.index
        return self._default_index(tracks)

    @staticmethod
    def _default_index(tracks: list[AudioTrack]) -> Optional[int]:
        for track in tracks:
            if track.is_default:
                return track.index
        return tracks[0].index if tracks else None

    async def choose_audio(
        self,
        adapter: IMediaServerAdapter,
        item_id: str,
        cache: AudioTrackCache,
        audio_track: Optional[int] = None,
    ) -> tuple[Optional[int], bool]:
        """
        Choisit la piste audio.

        Returns:
            (index epingle ou None, transcodage necessaire)

        Raises:
            PlaybackNegotiationError: Index explicite absent des pistes de l'element
        """
        tracks = self.mark_preferred(await cache.get(item_id))

        if audio_track is not None:
            if tracks and audio_track not in {t.index for t in tracks}:
                raise PlaybackNegotiationError(
                    f"Audio track {audio_track} not found", item_id=item_id
                )
            return audio_track, audio_track != self._default_index(tracks)

        for track in tracks:
            if track.is_preferred_language:
                logger.debug(
                    f"Piste preferee {track.index} ({track.language}) pour {item_id}"
                )
                return track.index, True

        if tracks:
            return self._default_index(tracks), False

        positional = adapter.positional_audio_fallback
        if positional is not None:
            logger.debug(f"Aucune metadonnee audio pour {item_id}, piste {positional} supposee")
            return positional, True
        return None, False

    async def plan(
        self,
        adapter: IMediaServerAdapter,
        user_id: str,
        item_id: str,
        audio_track: Optional[int] = None,
        variant: Optional[StreamVariant] = None,
        cache: Optional[AudioTrackCache] = None,
    ) -> StreamPlan:
        """
        Calcule le plan de lecture.

        Sans variante explicite : TRANSCODED si la piste choisie impose un
        remultiplexage, DEFAULT sinon.
        """
        cache = cache or AudioTrackCache(adapter, user_id)
        index, needs_transcode = await self.choose_audio(
            adapter, item_id, cache, audio_track
        )
        if variant is None:
            variant = StreamVariant.TRANSCODED if needs_transcode else StreamVariant.DEFAULT
        return self._build(adapter, user_id, item_id, index, variant)

    async def fallback_plans(
        self,
        adapter: IMediaServerAdapter,
        user_id: str,
        item_id: str,
        audio_track: Optional[int] = None,
        cache: Optional[AudioTrackCache] = None,
    ) -> list[StreamPlan]:
        """Les trois plans ordonnes pour (element, piste), deterministes."""
        cache = cache or AudioTrackCache(adapter, user_id)
        index, _ = await self.choose_audio(adapter, item_id, cache, audio_track)
        return [
            self._build(adapter, user_id, item_id, index, variant)
            for variant in FALLBACK_ORDER
        ]

    @staticmethod
    def next_after(variant: StreamVariant, item_id: Optional[str] = None) -> StreamVariant:
        """
        Variante suivante dans l'ordre de repli.

        Raises:
            PlaybackNegotiationError: Aucune variante apres DEFAULT
        """
        following = next_variant(variant)
        if following is None:
            raise PlaybackNegotiationError(
                "No playable stream variant left", item_id=item_id
            )
        return following

    @staticmethod
    def _build(
        adapter: IMediaServerAdapter,
        user_id: str,
        item_id: str,
        audio_index: Optional[int],
        variant: StreamVariant,
    ) -> StreamPlan:
        options = StreamOptions(variant=variant, audio_index=audio_index)
        return StreamPlan(
            backend_url=adapter.build_stream_url(item_id, user_id, options),
            container_hints=_CONTAINER_HINTS[variant],
            audio_track_index=audio_index,
            transcode_forced=variant is not StreamVariant.DEFAULT,
            variant=variant,
        )
