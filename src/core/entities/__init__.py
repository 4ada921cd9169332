"""
Business entities representing core domain concepts.

Exports:
- Connection, BackendKind: Registered media server and its flavor
- AuthResult, AuthSession: Outcome of credential negotiation
- ActiveSessionRecord: Persisted client session (one per device)
- PlaybackProgress: Last known playback position
- MediaItem, MediaKind, Library, AudioTrack, LiveProgram: Normalized catalog
"""

from src.core.entities.connection import (
    ActiveSessionRecord,
    AuthResult,
    AuthSession,
    BackendKind,
    Connection,
    PlaybackProgress,
)
from src.core.entities.media import (
    AudioTrack,
    Library,
    LiveProgram,
    MediaItem,
    MediaKind,
)

__all__ = [
    "ActiveSessionRecord",
    "AuthResult",
    "AuthSession",
    "BackendKind",
    "Connection",
    "PlaybackProgress",
    "AudioTrack",
    "Library",
    "LiveProgram",
    "MediaItem",
    "MediaKind",
]
