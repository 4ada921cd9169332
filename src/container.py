"""
Container d'injection de dependances via dependency-injector.

Fournit une gestion centralisee des dependances pour les interfaces CLI et Web :
repositories SQLModel, fabrique d'adaptateurs backend et services.
"""

from dependency_injector import containers, providers

from .adapters.api.cache import ImageCache
from .adapters.api.factory import AdapterFactory
from .config import Settings
from .infrastructure.persistence.database import get_session, init_db
from .infrastructure.persistence.repositories import (
    SQLModelActiveSessionRepository,
    SQLModelConnectionRepository,
    SQLModelPlaybackProgressRepository,
)
from .services.image_resolver import ImageResolver
from .services.live_tv import LiveTvService
from .services.playback_tracker import PlaybackTracker
from .services.range_proxy import RangeProxy
from .services.session_registry import SessionRegistry
from .services.stream_planner import StreamPlanner


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        container.database.init()  # Initialise la DB une fois
        registry = container.session_registry()
        registry.load_active()
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    # Database - Resource pour initialisation unique
    database = providers.Resource(init_db)

    # Session factory - nouvelle session a chaque appel
    session = providers.Factory(lambda: next(get_session()))

    # Repositories - Factory pour nouvelle instance avec session fraiche
    connection_repository = providers.Factory(
        SQLModelConnectionRepository,
        session=session,
    )
    active_session_repository = providers.Factory(
        SQLModelActiveSessionRepository,
        session=session,
    )
    progress_repository = providers.Factory(
        SQLModelPlaybackProgressRepository,
        session=session,
    )

    # Fabrique d'adaptateurs (identite client, dimensions d'images)
    adapter_factory = providers.Singleton(
        AdapterFactory.from_settings,
        settings=config,
    )

    # Pointeur de connexion active - Singleton partage par toutes les requetes
    session_registry = providers.Singleton(
        SessionRegistry,
        adapter_factory=adapter_factory,
        connection_repository=connection_repository.provider,
        session_repository=active_session_repository.provider,
        session_ttl_minutes=config.provided.session_ttl_minutes,
    )

    # Services sans etat - Singletons
    stream_planner = providers.Singleton(
        StreamPlanner,
        preferred_languages=config.provided.preferred_audio_languages,
        preferred_keywords=config.provided.preferred_audio_keywords,
    )
    range_proxy = providers.Singleton(
        RangeProxy,
        chunk_size=config.provided.proxy_chunk_size,
    )
    image_resolver = providers.Singleton(ImageResolver)
    live_tv_service = providers.Singleton(LiveTvService)
    playback_tracker = providers.Singleton(
        PlaybackTracker,
        progress_repository=progress_repository.provider,
    )

    # Cache d'images - Singleton pour partage entre requetes
    image_cache = providers.Singleton(
        ImageCache,
        cache_dir=config.provided.image_cache_dir,
        ttl=config.provided.image_cache_ttl,
    )
