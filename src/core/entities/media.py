"""
Media catalog entities.

Entities representing the normalized view of items served by a media
server backend (Emby or Jellyfin), independent of the backend's own field
vocabulary.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class MediaKind(str, Enum):
    """Kind of a catalog item, as named by both backend flavors."""

    MOVIE = "Movie"
    SERIES = "Series"
    SEASON = "Season"
    EPISODE = "Episode"
    CHANNEL = "TvChannel"
    PROGRAM = "Program"
    AUDIO = "Audio"
    MUSIC_VIDEO = "MusicVideo"
    VIDEO = "Video"
    FOLDER = "Folder"
    COLLECTION = "CollectionFolder"
    UNKNOWN = "Unknown"

    @classmethod
    def from_backend(cls, value: Optional[str]) -> "MediaKind":
        """Map a backend ``Type`` value, falling back to UNKNOWN."""
        if not value:
            return cls.UNKNOWN
        for kind in cls:
            if kind.value.lower() == value.lower():
                return kind
        if value.lower() == "channel":
            return cls.CHANNEL
        return cls.UNKNOWN

    @property
    def is_playable(self) -> bool:
        return self in PLAYABLE_KINDS


PLAYABLE_KINDS = frozenset({
    MediaKind.MOVIE,
    MediaKind.SERIES,
    MediaKind.EPISODE,
    MediaKind.CHANNEL,
    MediaKind.AUDIO,
    MediaKind.MUSIC_VIDEO,
    MediaKind.VIDEO,
})


@dataclass
class MediaItem:
    """
    Normalized catalog item.

    Attributes:
        backend_id: Item identifier on the backend
        name: Display name
        kind: Normalized item kind
        overview: Plot summary
        year: Production year
        runtime_seconds: Runtime in seconds (from RunTimeTicks)
        genres: Tuple of genre names
        rating: Community rating (0-10)
        image_url: Relative image proxy reference, or None
        backdrop_url: Relative backdrop proxy reference, or None
        play_count: Number of plays for the current user
        resume_position_seconds: Resume point for the current user
        played_percent: Played percentage for the current user
    """

    backend_id: str
    name: str
    kind: MediaKind = MediaKind.UNKNOWN
    overview: Optional[str] = None
    year: Optional[int] = None
    runtime_seconds: Optional[int] = None
    genres: tuple[str, ...] = ()
    rating: Optional[float] = None
    image_url: Optional[str] = None
    backdrop_url: Optional[str] = None
    play_count: int = 0
    resume_position_seconds: int = 0
    played_percent: Optional[float] = None
    parent_id: Optional[str] = None
    series_id: Optional[str] = None
    series_name: Optional[str] = None
    season_number: Optional[int] = None
    episode_number: Optional[int] = None
    channel_number: Optional[str] = None

    def to_dict(self) -> dict:
        """Serialize with the camelCase keys the web client expects."""
        return {
            "id": self.backend_id,
            "name": self.name,
            "type": self.kind.value,
            "overview": self.overview,
            "year": self.year,
            "runtimeSeconds": self.runtime_seconds,
            "genres": list(self.genres),
            "rating": self.rating,
            "imageUrl": self.image_url,
            "backdropUrl": self.backdrop_url,
            "playCount": self.play_count,
            "resumePositionSeconds": self.resume_position_seconds,
            "playedPercentage": self.played_percent,
            "parentId": self.parent_id,
            "seriesId": self.series_id,
            "seriesName": self.series_name,
            "seasonNumber": self.season_number,
            "episodeNumber": self.episode_number,
            "channelNumber": self.channel_number,
        }


@dataclass
class Library:
    """
    Top-level library (user view) exposed by a backend.

    Attributes:
        backend_id: View identifier
        name: Display name
        collection_type: Backend collection type (movies, tvshows, livetv...)
        image_url: Relative image proxy reference, or None
    """

    backend_id: str
    name: str
    collection_type: Optional[str] = None
    image_url: Optional[str] = None

    @property
    def is_live_tv(self) -> bool:
        return (self.collection_type or "").lower() == "livetv"

    def to_dict(self) -> dict:
        return {
            "id": self.backend_id,
            "name": self.name,
            "collectionType": self.collection_type,
            "imageUrl": self.image_url,
        }


@dataclass
class AudioTrack:
    """
    Audio stream of a playable item.

    Attributes:
        index: Backend stream index (the value sent as AudioStreamIndex)
        language: ISO language tag, "und" when unknown
        title: Free-text title (DisplayTitle or Title)
        codec: Audio codec name
        is_default: Backend default flag
        is_preferred_language: Matches the configured preferred language set
    """

    index: int
    language: str = "und"
    title: str = ""
    codec: Optional[str] = None
    is_default: bool = False
    is_preferred_language: bool = False

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "language": self.language,
            "title": self.title,
            "codec": self.codec,
            "isDefault": self.is_default,
            "isPreferredLanguage": self.is_preferred_language,
        }


@dataclass
class LiveProgram:
    """Program currently airing on a live TV channel."""

    backend_id: str
    name: str
    channel_id: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    overview: Optional[str] = None
    genres: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "id": self.backend_id,
            "name": self.name,
            "channelId": self.channel_id,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "overview": self.overview,
            "genres": list(self.genres),
        }
