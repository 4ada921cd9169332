"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe MEDIABRIDGE_,
et peut optionnellement être fournie via un fichier .env.

Aucun serveur n'est configuré ici : les connexions sont enregistrées en base
au login ou via l'API /api/servers.
"""

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Trouver le fichier .env à la racine du projet (parent de src/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe MEDIABRIDGE_.
    Exemple : MEDIABRIDGE_PREFERRED_AUDIO_LANGUAGES=fre,fr

    Les listes acceptent une chaîne séparée par des virgules.
    """

    model_config = SettingsConfigDict(
        env_prefix="MEDIABRIDGE_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Serveur web
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000, ge=1, le=65535)

    # Base de données
    database_url: str = Field(default="sqlite:///mediabridge.db")

    # Identité client annoncée aux backends (en-tête X-Emby-Authorization)
    client_name: str = Field(default="MediaBridge")
    device_name: str = Field(default="MediaBridge Web")
    device_id: str = Field(default="mediabridge-web")
    client_version: str = Field(default="1.0.0")

    # Sessions clientes (TTL d'inactivité, balayage périodique)
    session_ttl_minutes: int = Field(default=30, ge=1)
    session_sweep_interval_seconds: int = Field(default=300, ge=10)

    # Négociation de la piste audio
    preferred_audio_languages: Annotated[list[str], NoDecode] = Field(
        default=["spa", "es", "es-ES"]
    )
    preferred_audio_keywords: Annotated[list[str], NoDecode] = Field(
        default=["español", "spanish", "castellano", "doblado"]
    )

    # Proxy d'images (cache disque + dimensions demandées au backend)
    image_cache_dir: Path = Field(default=Path(".cache/images"))
    image_cache_ttl: int = Field(default=3600, ge=0)
    image_max_height: int = Field(default=600, ge=1)
    image_max_width: int = Field(default=400, ge=1)
    image_quality: int = Field(default=90, ge=1, le=100)

    # Relais vidéo
    proxy_chunk_size: int = Field(default=64 * 1024, ge=1024)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("logs/mediabridge.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("image_cache_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Étend ~ vers le répertoire home dans les chemins."""
        return Path(v).expanduser()

    @field_validator("preferred_audio_languages", "preferred_audio_keywords", mode="before")
    @classmethod
    def split_csv(cls, v: str | list[str]) -> list[str]:
        """Accepte "spa,es" comme ["spa", "es"]."""
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v
