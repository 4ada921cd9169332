"""
Tests pour les entites du catalogue (MediaKind, MediaItem, Library).
"""

import pytest

from src.core.entities.media import AudioTrack, Library, LiveProgram, MediaItem, MediaKind


class TestMediaKind:
    """Tests pour MediaKind.from_backend."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Movie", MediaKind.MOVIE),
            ("episode", MediaKind.EPISODE),
            ("TvChannel", MediaKind.CHANNEL),
            ("Channel", MediaKind.CHANNEL),
            ("BoxSet", MediaKind.UNKNOWN),
            (None, MediaKind.UNKNOWN),
            ("", MediaKind.UNKNOWN),
        ],
    )
    def test_from_backend(self, value, expected):
        assert MediaKind.from_backend(value) is expected

    def test_playable_kinds(self):
        assert MediaKind.MOVIE.is_playable
        assert MediaKind.CHANNEL.is_playable
        assert not MediaKind.SEASON.is_playable
        assert not MediaKind.FOLDER.is_playable


class TestMediaItem:
    def test_to_dict_uses_camel_case(self):
        item = MediaItem(
            backend_id="e1",
            name="Pilot",
            kind=MediaKind.EPISODE,
            genres=("Drama",),
            series_id="s1",
            season_number=1,
            episode_number=1,
            resume_position_seconds=120,
        )

        data = item.to_dict()

        assert data["id"] == "e1"
        assert data["type"] == "Episode"
        assert data["genres"] == ["Drama"]
        assert data["seriesId"] == "s1"
        assert data["seasonNumber"] == 1
        assert data["resumePositionSeconds"] == 120
        assert data["imageUrl"] is None

    def test_defaults(self):
        item = MediaItem(backend_id="x", name="X")

        assert item.kind is MediaKind.UNKNOWN
        assert item.play_count == 0
        assert item.genres == ()


class TestLibrary:
    @pytest.mark.parametrize(
        "collection_type,expected",
        [("livetv", True), ("LiveTv", True), ("movies", False), (None, False)],
    )
    def test_is_live_tv(self, collection_type, expected):
        library = Library(backend_id="l1", name="L", collection_type=collection_type)
        assert library.is_live_tv is expected

    def test_to_dict(self):
        library = Library(backend_id="l1", name="Films", collection_type="movies")

        assert library.to_dict() == {
            "id": "l1",
            "name": "Films",
            "collectionType": "movies",
            "imageUrl": None,
        }


class TestAudioTrackAndProgram:
    def test_audio_track_defaults(self):
        track = AudioTrack(index=3)

        data = track.to_dict()

        assert data["language"] == "und"
        assert data["isDefault"] is False
        assert data["isPreferredLanguage"] is False

    def test_program_to_dict(self):
        program = LiveProgram(
            backend_id="p1", name="Journal", channel_id="c1", genres=("News",)
        )

        data = program.to_dict()

        assert data["channelId"] == "c1"
        assert data["genres"] == ["News"]
