"""
Parametres de flux communs a la famille Emby/Jellyfin.

Chaque adaptateur part de ces dictionnaires et y ajoute son propre
vocabulaire (sondage Emby, index audio par defaut Jellyfin...).
"""

from typing import Any

from src.utils.constants import (
    DIRECT_PLAY_AUDIO_CODECS,
    DIRECT_PLAY_CONTAINERS,
    DIRECT_PLAY_VIDEO_CODECS,
    HLS_SEGMENT_CONTAINER,
    MAX_AUDIO_BITRATE,
    MAX_STREAMING_BITRATE,
    MAX_VIDEO_BITRATE,
    TRANSCODE_AUDIO_CODEC,
    TRANSCODE_CONTAINER,
    TRANSCODE_STREAMING_BITRATE,
    TRANSCODE_VIDEO_CODEC,
)

# Pas d'incrustation de sous-titres : source connue d'echecs de decodage
NO_SUBTITLES = {"SubtitleStreamIndex": -1, "EnableSubtitlesInManifest": "false"}


def direct_params() -> dict[str, Any]:
    """Flux statique, conteneurs/codecs compatibles lecture directe."""
    return {
        "Static": "true",
        "Container": ",".join(DIRECT_PLAY_CONTAINERS),
        "VideoCodec": ",".join(DIRECT_PLAY_VIDEO_CODECS),
        "AudioCodec": ",".join(DIRECT_PLAY_AUDIO_CODECS),
        "MaxStreamingBitrate": MAX_STREAMING_BITRATE,
        "MaxVideoBitRate": MAX_VIDEO_BITRATE,
        "MaxAudioBitRate": MAX_AUDIO_BITRATE,
        **NO_SUBTITLES,
    }


def transcoded_params() -> dict[str, Any]:
    """Transcodage force : copie de flux interdite pour remultiplexer la piste epinglee."""
    return {
        "Static": "false",
        "Container": TRANSCODE_CONTAINER,
        "VideoCodec": TRANSCODE_VIDEO_CODEC,
        "AudioCodec": TRANSCODE_AUDIO_CODEC,
        "EnableAutoStreamCopy": "false",
        "AllowVideoStreamCopy": "false",
        "AllowAudioStreamCopy": "false",
        "MaxStreamingBitrate": TRANSCODE_STREAMING_BITRATE,
        "MaxAudioBitRate": MAX_AUDIO_BITRATE,
        "BreakOnNonKeyFrames": "true",
        **NO_SUBTITLES,
    }


def segmented_params() -> dict[str, Any]:
    """Transcodage force en HLS (segments mp4)."""
    return {
        "VideoCodec": TRANSCODE_VIDEO_CODEC,
        "AudioCodec": TRANSCODE_AUDIO_CODEC,
        "SegmentContainer": HLS_SEGMENT_CONTAINER,
        "MinSegments": 1,
        "MaxStreamingBitrate": TRANSCODE_STREAMING_BITRATE,
        "BreakOnNonKeyFrames": "true",
        **NO_SUBTITLES,
    }
