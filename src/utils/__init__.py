"""
Utilitaires et constantes pour MediaBridge.

Ce module contient les constantes et fonctions utilitaires partagees.
"""

from src.utils.constants import (
    DIRECT_PLAY_AUDIO_CODECS,
    DIRECT_PLAY_CONTAINERS,
    DIRECT_PLAY_VIDEO_CODECS,
    PLAYBACK_COMPLETED_PERCENT,
)

__all__ = [
    "DIRECT_PLAY_AUDIO_CODECS",
    "DIRECT_PLAY_CONTAINERS",
    "DIRECT_PLAY_VIDEO_CODECS",
    "PLAYBACK_COMPLETED_PERCENT",
]
