"""
Tests pour la resolution des images.

Verifie l'ordre de repli : Backdrop, BackdropImageTags, Primary, puis
balayage borne des elements voisins.
"""

import pytest

from src.core.entities.media import Library
from src.services.image_resolver import SIBLING_SCAN_LIMIT, ImageResolver
from src.utils.image_refs import (
    first_usable_image,
    proxy_reference,
    resolve_backdrop,
    resolve_poster,
)


class TestProxyReference:
    def test_with_tag(self):
        assert proxy_reference("m1", "Primary", "t1") == "/api/image-proxy/m1/Primary?tag=t1"

    def test_id_is_quoted(self):
        assert proxy_reference("a/b", "Logo") == "/api/image-proxy/a%2Fb/Logo"


class TestResolveBackdrop:
    """Tests des etapes sans appel reseau."""

    def test_own_backdrop_tag_first(self):
        raw = {
            "Id": "m1",
            "ImageTags": {"Backdrop": "b0", "Primary": "p0"},
            "BackdropImageTags": ["b1"],
        }
        assert resolve_backdrop(raw) == "/api/image-proxy/m1/Backdrop?tag=b0"

    def test_backdrop_image_tags_fallback(self):
        raw = {"Id": "m1", "ImageTags": {"Primary": "p0"}, "BackdropImageTags": ["b1", "b2"]}
        assert resolve_backdrop(raw) == "/api/image-proxy/m1/Backdrop?tag=b1"

    def test_primary_fallback(self):
        raw = {"Id": "m1", "ImageTags": {"Primary": "p0"}}
        assert resolve_backdrop(raw) == "/api/image-proxy/m1/Primary?tag=p0"

    def test_nothing(self):
        assert resolve_backdrop({"Id": "m1"}) is None
        assert resolve_backdrop({}) is None


class TestResolvePoster:
    def test_episode_uses_series_poster(self):
        raw = {"Id": "e1", "SeriesId": "s1", "SeriesPrimaryImageTag": "sp", "ImageTags": {}}
        assert resolve_poster(raw) == "/api/image-proxy/s1/Primary?tag=sp"

    def test_thumb_before_backdrop(self):
        raw = {"Id": "m1", "ImageTags": {"Thumb": "th"}, "BackdropImageTags": ["b1"]}
        assert resolve_poster(raw) == "/api/image-proxy/m1/Thumb?tag=th"

    def test_logo_last(self):
        assert resolve_poster({"Id": "m1", "ImageTags": {"Logo": "lg"}}) == (
            "/api/image-proxy/m1/Logo?tag=lg"
        )


class TestImageResolver:
    """Tests du balayage des voisins."""

    @pytest.mark.asyncio
    async def test_scan_returns_first_usable_sibling(self, mock_adapter):
        # Setup mock
        mock_adapter.list_image_candidates.return_value = [
            {"Id": "x1", "ImageTags": {}},
            {"Id": "x2", "BackdropImageTags": ["bx2"]},
            {"Id": "x3", "ImageTags": {"Primary": "px3"}},
        ]

        # Execute
        reference = await ImageResolver().resolve(mock_adapter, "u1", {"Id": "lib1"})

        # Verify
        assert reference == "/api/image-proxy/x2/Backdrop?tag=bx2"
        mock_adapter.list_image_candidates.assert_awaited_once_with(
            "u1", "lib1", SIBLING_SCAN_LIMIT
        )

    @pytest.mark.asyncio
    async def test_no_scan_when_item_has_image(self, mock_adapter):
        raw = {"Id": "lib1", "ImageTags": {"Primary": "p"}}

        reference = await ImageResolver().resolve(mock_adapter, "u1", raw)

        assert reference == "/api/image-proxy/lib1/Primary?tag=p"
        mock_adapter.list_image_candidates.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_scan_is_bounded(self, mock_adapter):
        candidates = [{"Id": f"x{i}"} for i in range(80)]
        candidates.append({"Id": "late", "ImageTags": {"Primary": "p"}})
        mock_adapter.list_image_candidates.return_value = candidates

        resolver = ImageResolver(scan_limit=500)

        assert await resolver.scan_siblings(mock_adapter, "u1", "lib1") is None
        mock_adapter.list_image_candidates.assert_awaited_once_with(
            "u1", "lib1", SIBLING_SCAN_LIMIT
        )

    @pytest.mark.asyncio
    async def test_fill_library_images(self, mock_adapter):
        mock_adapter.list_image_candidates.return_value = [
            {"Id": "x1", "ImageTags": {"Logo": "l1"}}
        ]
        libraries = [
            Library(backend_id="a", name="Films", image_url="/api/image-proxy/a/Primary"),
            Library(backend_id="b", name="Series"),
        ]

        filled = await ImageResolver().fill_library_images(mock_adapter, "u1", libraries)

        assert filled[0].image_url == "/api/image-proxy/a/Primary"
        assert filled[1].image_url == "/api/image-proxy/x1/Logo?tag=l1"
        mock_adapter.list_image_candidates.assert_awaited_once()

    def test_first_usable_image_order(self):
        raw = {"Id": "x", "ImageTags": {"Logo": "l", "Primary": "p"}}
        assert first_usable_image(raw) == "/api/image-proxy/x/Primary?tag=p"
