"""
Normalisation des reponses backend vers les entites du domaine.

Emby et Jellyfin partagent le meme vocabulaire d'elements (Id, Name, Type,
RunTimeTicks, UserData...) : la conversion est donc commune aux deux
adaptateurs. Les references d'images sont construites par src.utils.image_refs.
"""

from typing import Iterable, Optional

from src.core.entities.media import (
    AudioTrack,
    Library,
    LiveProgram,
    MediaItem,
    MediaKind,
)
from src.core.ports.media_server import ticks_to_seconds
from src.utils.helpers import name_key
from src.utils.image_refs import resolve_backdrop, resolve_poster

# Tolerance sur la position de reprise au-dela de la duree (secondes)
RESUME_TOLERANCE_SECONDS = 5

ITEM_FIELDS = (
    "Overview,Genres,CommunityRating,ProductionYear,RunTimeTicks,UserData,"
    "ImageTags,BackdropImageTags,ParentBackdropImageTags,SeriesPrimaryImageTag"
)


def clamp_resume_position(position: int, runtime: Optional[int]) -> int:
    """Borne la position de reprise a la duree (plus la tolerance)."""
    position = max(position, 0)
    if runtime is not None and position > runtime + RESUME_TOLERANCE_SECONDS:
        return runtime
    return position


def normalize_item(raw: dict) -> MediaItem:
    """Convertit un element brut en MediaItem."""
    user_data = raw.get("UserData") or {}
    runtime = ticks_to_seconds(raw.get("RunTimeTicks"))
    resume = ticks_to_seconds(user_data.get("PlaybackPositionTicks")) or 0
    is_episode = raw.get("Type") == "Episode"

    return MediaItem(
        backend_id=str(raw["Id"]),
        name=raw.get("Name") or "",
        kind=MediaKind.from_backend(raw.get("Type")),
        overview=raw.get("Overview"),
        year=raw.get("ProductionYear"),
        runtime_seconds=runtime,
        genres=tuple(raw.get("Genres") or ()),
        rating=raw.get("CommunityRating"),
        image_url=resolve_poster(raw),
        backdrop_url=resolve_backdrop(raw),
        play_count=user_data.get("PlayCount") or 0,
        resume_position_seconds=clamp_resume_position(resume, runtime),
        played_percent=user_data.get("PlayedPercentage"),
        parent_id=raw.get("ParentId") or raw.get("SeasonId"),
        series_id=raw.get("SeriesId"),
        series_name=raw.get("SeriesName"),
        season_number=raw.get("ParentIndexNumber") if is_episode else raw.get("IndexNumber"),
        episode_number=raw.get("IndexNumber") if is_episode else None,
        channel_number=raw.get("ChannelNumber") or raw.get("Number"),
    )


def normalize_items(raws: Iterable[dict]) -> list[MediaItem]:
    return [normalize_item(raw) for raw in raws if raw.get("Id")]


def dedupe_items(items: Iterable[MediaItem]) -> list[MediaItem]:
    """
    Dedoublonne par ID puis par nom normalise.

    La premiere occurrence dans l'ordre du backend (SortName croissant) est
    conservee : un meme titre indexe deux fois sous des IDs differents
    n'apparait qu'une fois.
    """
    seen_ids: set[str] = set()
    seen_names: set[str] = set()
    unique: list[MediaItem] = []
    for item in items:
        if item.backend_id in seen_ids:
            continue
        seen_ids.add(item.backend_id)
        key = name_key(item.name)
        if key and key in seen_names:
            continue
        if key:
            seen_names.add(key)
        unique.append(item)
    return unique


def playable_only(items: Iterable[MediaItem]) -> list[MediaItem]:
    return [item for item in items if item.kind.is_playable]


def normalize_library(raw: dict) -> Library:
    return Library(
        backend_id=str(raw["Id"]),
        name=raw.get("Name") or "",
        collection_type=raw.get("CollectionType"),
        image_url=resolve_backdrop(raw),
    )


def extract_media_streams(raw: dict) -> list[dict]:
    """Flux de l'element, depuis MediaStreams ou la premiere MediaSource."""
    streams = raw.get("MediaStreams")
    if not streams:
        sources = raw.get("MediaSources") or []
        if sources:
            streams = sources[0].get("MediaStreams")
    return list(streams or [])


def normalize_audio_tracks(raw: dict) -> list[AudioTrack]:
    """Pistes audio de l'element, dans l'ordre du backend."""
    tracks = []
    for stream in extract_media_streams(raw):
        if stream.get("Type") != "Audio" or stream.get("Index") is None:
            continue
        tracks.append(
            AudioTrack(
                index=int(stream["Index"]),
                language=stream.get("Language") or "und",
                title=stream.get("DisplayTitle") or stream.get("Title") or "",
                codec=stream.get("Codec"),
                is_default=bool(stream.get("IsDefault")),
            )
        )
    return tracks


def normalize_program(raw: dict) -> LiveProgram:
    return LiveProgram(
        backend_id=str(raw["Id"]),
        name=raw.get("Name") or "",
        channel_id=str(raw.get("ChannelId") or ""),
        start_date=raw.get("StartDate"),
        end_date=raw.get("EndDate"),
        overview=raw.get("Overview"),
        genres=tuple(raw.get("Genres") or ()),
    )
