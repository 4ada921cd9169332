"""
Tests pour StreamPlanner.

Verifie la negociation de la piste audio et l'ordre de repli :
- Piste preferee par langue ou par mot-cle -> index epingle, transcodage force
- Aucune correspondance -> piste par defaut, flux non modifie
- Index explicite invalide -> PlaybackNegotiationError
- Sans metadonnees -> repli positionnel de l'adaptateur
- Pistes lues une seule fois par requete
"""

import pytest

from src.core.entities.media import AudioTrack
from src.core.exceptions import PlaybackNegotiationError
from src.core.value_objects.stream_plan import FALLBACK_ORDER, StreamVariant
from src.services.stream_planner import AudioTrackCache, StreamPlanner, parse_variant


@pytest.fixture
def planner() -> StreamPlanner:
    return StreamPlanner(["spa", "es"], ["español", "castellano"])


def _tracks(*specs) -> list[AudioTrack]:
    return [
        AudioTrack(index=index, language=language, title=title, is_default=default)
        for index, language, title, default in specs
    ]


class TestChooseAudio:
    """Tests pour la selection de la piste audio."""

    @pytest.mark.asyncio
    async def test_preferred_language_forces_transcode(self, planner, mock_adapter):
        # Setup mock
        mock_adapter.get_audio_tracks.return_value = _tracks(
            (1, "fre", "Francais", True),
            (2, "spa", "Spanish AAC", False),
        )

        # Execute
        plan = await planner.plan(mock_adapter, "u1", "m1")

        # Verify
        assert plan.audio_track_index == 2
        assert plan.transcode_forced is True
        assert plan.variant is StreamVariant.TRANSCODED
        assert "AudioStreamIndex=2" in plan.backend_url
        assert plan.container_hints == ("mp4",)

    @pytest.mark.asyncio
    async def test_keyword_match_in_title(self, planner, mock_adapter):
        mock_adapter.get_audio_tracks.return_value = _tracks(
            (1, "und", "English 5.1", True),
            (3, "und", "Castellano AC3", False),
        )

        index, needs_transcode = await planner.choose_audio(
            mock_adapter, "m1", AudioTrackCache(mock_adapter, "u1")
        )

        assert (index, needs_transcode) == (3, True)

    @pytest.mark.asyncio
    async def test_keyword_match_ignores_accents(self, mock_adapter):
        planner = StreamPlanner([], ["espanol"])
        mock_adapter.get_audio_tracks.return_value = _tracks(
            (1, "und", "Español Estéreo", False),
        )

        plan = await planner.plan(mock_adapter, "u1", "m1")

        assert plan.audio_track_index == 1

    @pytest.mark.asyncio
    async def test_no_match_keeps_default_stream(self, planner, mock_adapter):
        mock_adapter.get_audio_tracks.return_value = _tracks(
            (1, "eng", "English", False),
            (2, "fre", "Francais", True),
        )

        plan = await planner.plan(mock_adapter, "u1", "m1")

        assert plan.audio_track_index == 2
        assert plan.transcode_forced is False
        assert plan.variant is StreamVariant.DEFAULT

    @pytest.mark.asyncio
    async def test_explicit_track_not_found(self, planner, mock_adapter):
        mock_adapter.get_audio_tracks.return_value = _tracks((1, "eng", "", True))

        with pytest.raises(PlaybackNegotiationError) as exc_info:
            await planner.plan(mock_adapter, "u1", "m1", audio_track=7)

        assert exc_info.value.item_id == "m1"

    @pytest.mark.asyncio
    async def test_explicit_default_track_does_not_transcode(self, planner, mock_adapter):
        mock_adapter.get_audio_tracks.return_value = _tracks(
            (1, "eng", "", True),
            (2, "spa", "", False),
        )

        plan = await planner.plan(mock_adapter, "u1", "m1", audio_track=1)

        assert plan.audio_track_index == 1
        assert plan.variant is StreamVariant.DEFAULT

    @pytest.mark.asyncio
    async def test_positional_fallback_without_metadata(self, planner, mock_adapter):
        mock_adapter.get_audio_tracks.return_value = []
        mock_adapter.positional_audio_fallback = 1

        plan = await planner.plan(mock_adapter, "u1", "m1")

        assert plan.audio_track_index == 1
        assert plan.transcode_forced is True

    @pytest.mark.asyncio
    async def test_no_metadata_and_no_fallback(self, planner, mock_adapter):
        mock_adapter.get_audio_tracks.return_value = []

        plan = await planner.plan(mock_adapter, "u1", "m1")

        assert plan.audio_track_index is None
        assert plan.variant is StreamVariant.DEFAULT


class TestAudioTrackCache:
    """Tests du cache par requete."""

    @pytest.mark.asyncio
    async def test_tracks_fetched_once_per_request(self, planner, mock_adapter):
        mock_adapter.get_audio_tracks.return_value = _tracks((2, "spa", "", False))
        cache = AudioTrackCache(mock_adapter, "u1")

        await planner.plan(mock_adapter, "u1", "m1", cache=cache)
        await planner.fallback_plans(mock_adapter, "u1", "m1", cache=cache)

        mock_adapter.get_audio_tracks.assert_awaited_once_with("u1", "m1")


class TestFallbackOrder:
    """Tests de l'ordre de repli."""

    @pytest.mark.asyncio
    async def test_three_plans_in_order(self, planner, mock_adapter):
        mock_adapter.get_audio_tracks.return_value = _tracks((2, "spa", "", False))

        plans = await planner.fallback_plans(mock_adapter, "u1", "m1")

        assert [p.variant for p in plans] == list(FALLBACK_ORDER)
        assert all(p.audio_track_index == 2 for p in plans)
        assert [p.transcode_forced for p in plans] == [True, True, False]

    @pytest.mark.asyncio
    async def test_plans_are_deterministic(self, planner, mock_adapter):
        mock_adapter.get_audio_tracks.return_value = _tracks((2, "spa", "", False))

        first = await planner.fallback_plans(mock_adapter, "u1", "m1")
        second = await planner.fallback_plans(mock_adapter, "u1", "m1")

        assert first == second

    def test_next_after(self):
        assert StreamPlanner.next_after(StreamVariant.TRANSCODED) is StreamVariant.SEGMENTED
        assert StreamPlanner.next_after(StreamVariant.SEGMENTED) is StreamVariant.DEFAULT

    def test_nothing_after_default(self):
        with pytest.raises(PlaybackNegotiationError):
            StreamPlanner.next_after(StreamVariant.DEFAULT, "m1")


class TestParseVariant:
    def test_known_values(self):
        assert parse_variant("HLS") is StreamVariant.SEGMENTED
        assert parse_variant(None) is None

    def test_unknown_value(self):
        with pytest.raises(PlaybackNegotiationError) as exc_info:
            parse_variant("webrtc")
        assert exc_info.value.next_variant == "transcoded"


class TestRecommendedTrack:
    def test_recommended_track(self, planner):
        tracks = _tracks((1, "eng", "", False), (2, "fre", "", True))
        assert planner.recommended_track(tracks) == 2
        assert planner.recommended_track([]) is None

    def test_mark_preferred(self, planner):
        tracks = planner.mark_preferred(_tracks((1, "ES", "", False), (2, "eng", "", True)))
        assert [t.is_preferred_language for t in tracks] == [True, False]
