"""
Tests pour la normalisation des reponses backend.

Verifie:
- Conversion ticks -> secondes et bornage de la position de reprise
- Numerotation saison/episode
- Dedoublonnage par ID puis par nom normalise
- Pistes audio depuis MediaStreams ou MediaSources
"""

from src.adapters.api.normalizer import (
    clamp_resume_position,
    dedupe_items,
    extract_media_streams,
    normalize_audio_tracks,
    normalize_item,
    normalize_library,
    normalize_program,
    playable_only,
)
from src.core.entities.media import MediaItem, MediaKind
from tests.fixtures.emby_responses import EMBY_ITEM_STREAMS_RESPONSE
from tests.fixtures.jellyfin_responses import JELLYFIN_ITEM_SOURCES_RESPONSE


class TestClampResumePosition:
    """Tests pour clamp_resume_position()."""

    def test_position_within_runtime_is_kept(self):
        assert clamp_resume_position(1200, 7320) == 1200

    def test_small_overshoot_is_tolerated(self):
        assert clamp_resume_position(7323, 7320) == 7323

    def test_large_overshoot_is_clamped(self):
        assert clamp_resume_position(9000, 7320) == 7320

    def test_negative_is_zero(self):
        assert clamp_resume_position(-5, None) == 0


class TestNormalizeItem:
    """Tests pour normalize_item()."""

    def test_movie(self):
        raw = {
            "Id": "m1",
            "Name": "Amelie",
            "Type": "Movie",
            "ProductionYear": 2001,
            "RunTimeTicks": 73_200_000_000,
            "Genres": ["Comedy"],
            "UserData": {"PlaybackPositionTicks": 12_000_000_000, "PlayCount": 2},
            "ImageTags": {"Primary": "t1"},
        }

        item = normalize_item(raw)

        assert item.kind is MediaKind.MOVIE
        assert item.runtime_seconds == 7320
        assert item.resume_position_seconds == 1200
        assert item.play_count == 2
        assert item.genres == ("Comedy",)
        assert item.image_url == "/api/image-proxy/m1/Primary?tag=t1"

    def test_episode_numbers(self):
        raw = {
            "Id": "e1",
            "Name": "Pilot",
            "Type": "Episode",
            "ParentIndexNumber": 2,
            "IndexNumber": 5,
            "SeasonId": "season2",
        }

        item = normalize_item(raw)

        assert item.season_number == 2
        assert item.episode_number == 5
        assert item.parent_id == "season2"

    def test_season_number_from_index(self):
        item = normalize_item({"Id": "s2", "Name": "Season 2", "Type": "Season", "IndexNumber": 2})

        assert item.season_number == 2
        assert item.episode_number is None

    def test_unknown_type(self):
        assert normalize_item({"Id": "x", "Type": "Photo"}).kind is MediaKind.UNKNOWN


class TestDedupeItems:
    """Tests pour dedupe_items()."""

    def test_first_occurrence_wins(self):
        items = [
            MediaItem(backend_id="a", name="Amelie"),
            MediaItem(backend_id="b", name="  AMELIE\u200e "),
            MediaItem(backend_id="a", name="Other"),
            MediaItem(backend_id="c", name="Cleo"),
        ]

        result = dedupe_items(items)

        assert [item.backend_id for item in result] == ["a", "c"]

    def test_empty_names_are_not_merged(self):
        items = [MediaItem(backend_id="a", name=""), MediaItem(backend_id="b", name="")]

        assert len(dedupe_items(items)) == 2

    def test_playable_only_drops_folders(self):
        items = [
            MediaItem(backend_id="a", name="A", kind=MediaKind.MOVIE),
            MediaItem(backend_id="f", name="F", kind=MediaKind.FOLDER),
        ]

        assert [item.backend_id for item in playable_only(items)] == ["a"]


class TestAudioTracks:
    """Tests pour normalize_audio_tracks()."""

    def test_from_media_streams(self):
        tracks = normalize_audio_tracks(EMBY_ITEM_STREAMS_RESPONSE)

        assert [t.index for t in tracks] == [1, 2]
        assert tracks[0].is_default is True
        assert tracks[1].language == "spa"

    def test_from_media_sources(self):
        assert len(extract_media_streams(JELLYFIN_ITEM_SOURCES_RESPONSE)) == 3
        tracks = normalize_audio_tracks(JELLYFIN_ITEM_SOURCES_RESPONSE)

        assert [t.language for t in tracks] == ["eng", "und"]

    def test_no_streams(self):
        assert normalize_audio_tracks({"Id": "x"}) == []


class TestLibraryAndProgram:
    def test_library_live_tv(self):
        library = normalize_library({"Id": "l", "Name": "TV", "CollectionType": "livetv"})
        assert library.is_live_tv
        assert library.image_url is None

    def test_program(self):
        program = normalize_program(
            {"Id": "p1", "Name": "Telediario", "ChannelId": "ch3", "Genres": ["News"]}
        )
        assert program.channel_id == "ch3"
        assert program.genres == ("News",)


class TestImageReferences:
    """Les references d'images viennent de src.utils, pas de la couche services."""

    def test_helpers_are_shared_from_utils(self):
        from src.adapters.api import normalizer

        assert normalizer.resolve_poster.__module__ == "src.utils.image_refs"
        assert normalizer.resolve_backdrop.__module__ == "src.utils.image_refs"

    def test_normalizer_does_not_import_services(self):
        import inspect

        from src.adapters.api import normalizer

        assert "src.services" not in inspect.getsource(normalizer)
