"""
Objets valeur pour la planification de flux.

Un StreamPlan est calculé à chaque demande de lecture; il n'est jamais
persisté. Les variantes de repli sont ordonnées et déterministes pour
qu'un nouvel essai côté client soit idempotent.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class StreamVariant(str, Enum):
    """
    Variante de flux demandée au backend.

    - TRANSCODED : transcodage forcé, flux direct (mp4/h264/aac)
    - SEGMENTED : transcodage forcé, flux segmenté HLS
    - DEFAULT : flux par défaut, non modifié
    """

    TRANSCODED = "transcoded"
    SEGMENTED = "hls"
    DEFAULT = "default"


# Ordre de repli quand la lecture échoue côté client
FALLBACK_ORDER: tuple[StreamVariant, ...] = (
    StreamVariant.TRANSCODED,
    StreamVariant.SEGMENTED,
    StreamVariant.DEFAULT,
)


def next_variant(variant: StreamVariant) -> Optional[StreamVariant]:
    """Retourne la variante suivante dans l'ordre de repli, None si épuisé."""
    position = FALLBACK_ORDER.index(variant)
    if position + 1 < len(FALLBACK_ORDER):
        return FALLBACK_ORDER[position + 1]
    return None


@dataclass(frozen=True)
class StreamOptions:
    """
    Options passées à IMediaServerAdapter.build_stream_url.

    Attributs :
        variant : Variante de flux
        audio_index : Index de piste audio à épingler (None = défaut backend)
        media_source_id : Source média (par défaut l'ID de l'élément)
    """

    variant: StreamVariant = StreamVariant.DEFAULT
    audio_index: Optional[int] = None
    media_source_id: Optional[str] = None


@dataclass(frozen=True)
class StreamPlan:
    """
    Plan de lecture pour une requête.

    Attributs :
        backend_url : URL backend complète (contient les identifiants, jamais renvoyée au client)
        container_hints : Conteneurs acceptés par le plan
        audio_track_index : Piste audio épinglée, None si défaut backend
        transcode_forced : True si le backend doit remultiplexer
        variant : Variante de repli correspondante
    """

    backend_url: str
    container_hints: tuple[str, ...]
    audio_track_index: Optional[int]
    transcode_forced: bool
    variant: StreamVariant = StreamVariant.DEFAULT
