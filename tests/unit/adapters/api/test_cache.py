"""
Tests unitaires pour le cache d'images persistant.

Ces tests verifient:
- get/set d'un couple (contenu, content-type)
- Cles distinctes par connexion
- Expiration TTL
- Persistance apres reouverture
"""

import time

import pytest

from src.adapters.api.cache import ImageCache


@pytest.fixture
def image_cache(tmp_path):
    cache = ImageCache(cache_dir=str(tmp_path / "images"))
    yield cache
    cache.close()


class TestImageCacheKeys:
    """Tests pour ImageCache.make_key()."""

    def test_key_includes_connection(self) -> None:
        key_a = ImageCache.make_key("1", "m1", "Primary", "t1")
        key_b = ImageCache.make_key("2", "m1", "Primary", "t1")
        assert key_a != key_b

    def test_missing_parts_are_placeholders(self) -> None:
        assert ImageCache.make_key(None, "m1", "Backdrop", None) == "image:-:m1:Backdrop:-"


class TestImageCache:
    """Tests pour ImageCache."""

    @pytest.mark.asyncio
    async def test_set_and_get(self, image_cache: ImageCache) -> None:
        key = ImageCache.make_key("1", "m1", "Primary", "t1")
        await image_cache.set(key, (b"\x89PNG", "image/png"))

        assert await image_cache.get(key) == (b"\x89PNG", "image/png")

    @pytest.mark.asyncio
    async def test_missing_key_returns_none(self, image_cache: ImageCache) -> None:
        assert await image_cache.get("image:1:nope:Primary:-") is None

    @pytest.mark.asyncio
    async def test_expired_entry_returns_none(self, image_cache: ImageCache) -> None:
        key = ImageCache.make_key("1", "m1", "Primary", None)
        await image_cache.set(key, (b"data", "image/jpeg"), ttl=1)

        time.sleep(1.1)

        assert await image_cache.get(key) is None

    @pytest.mark.asyncio
    async def test_clear(self, image_cache: ImageCache) -> None:
        key = ImageCache.make_key("1", "m1", "Primary", None)
        await image_cache.set(key, (b"data", "image/jpeg"))

        await image_cache.clear()

        assert await image_cache.get(key) is None

    @pytest.mark.asyncio
    async def test_persists_across_instances(self, tmp_path) -> None:
        cache_dir = str(tmp_path / "persist")
        key = ImageCache.make_key("1", "m1", "Primary", "t1")

        first = ImageCache(cache_dir=cache_dir)
        await first.set(key, (b"data", "image/jpeg"))
        first.close()

        second = ImageCache(cache_dir=cache_dir)
        try:
            assert await second.get(key) == (b"data", "image/jpeg")
        finally:
            second.close()
