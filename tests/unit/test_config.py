"""
Tests pour Settings (pydantic-settings).
"""

from pathlib import Path

from src.config import Settings


class TestSettings:
    """Tests du chargement de la configuration."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("MEDIABRIDGE_PORT", raising=False)
        settings = Settings(_env_file=None)

        assert settings.port == 5000
        assert settings.session_ttl_minutes == 30
        assert settings.preferred_audio_languages == ["spa", "es", "es-ES"]

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("MEDIABRIDGE_SESSION_TTL_MINUTES", "5")
        monkeypatch.setenv("MEDIABRIDGE_DEVICE_ID", "salon")

        settings = Settings(_env_file=None)

        assert settings.session_ttl_minutes == 5
        assert settings.device_id == "salon"

    def test_csv_lists_from_env(self, monkeypatch):
        monkeypatch.setenv("MEDIABRIDGE_PREFERRED_AUDIO_LANGUAGES", "fre, fr,")

        settings = Settings(_env_file=None)

        assert settings.preferred_audio_languages == ["fre", "fr"]

    def test_home_is_expanded(self):
        settings = Settings(_env_file=None, image_cache_dir="~/mb-images")

        assert settings.image_cache_dir == Path.home() / "mb-images"
