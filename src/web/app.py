"""
Application FastAPI de MediaBridge.

Initialise l'application web avec le Container DI, restaure la connexion
active, lance le balayage periodique des sessions et monte les routes /api.
"""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from ..container import Container
from ..core.exceptions import (
    AuthenticationError,
    ConnectivityError,
    PlaybackNegotiationError,
    ProxyStreamError,
)
from .routes.auth import router as auth_router
from .routes.images import router as images_router
from .routes.library import router as library_router
from .routes.livetv import router as livetv_router
from .routes.playback import router as playback_router
from .routes.servers import router as servers_router
from .routes.sessions import router as sessions_router
from .routes.viewing import router as viewing_router


async def _sweep_sessions_periodically(container: Container, interval: int) -> None:
    """Purge les sessions expirees toutes les `interval` secondes."""
    registry = container.session_registry()
    while True:
        await asyncio.sleep(interval)
        try:
            registry.sweep()
        except Exception as e:
            logger.error(f"Balayage des sessions en echec : {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise le Container DI au démarrage et le ferme à l'arrêt."""
    container = getattr(app.state, "container", None) or Container()
    container.database.init()
    app.state.container = container

    registry = container.session_registry()
    registry.load_active()

    settings = container.config()
    sweeper = asyncio.create_task(
        _sweep_sessions_periodically(container, settings.session_sweep_interval_seconds)
    )
    try:
        yield
    finally:
        sweeper.cancel()
        await registry.close()
        container.image_cache().close()


def create_app(container: Container | None = None) -> FastAPI:
    """Construit l'application (un container prepare peut etre injecte pour les tests)."""
    application = FastAPI(title="MediaBridge", lifespan=lifespan)
    if container is not None:
        application.state.container = container

    @application.exception_handler(AuthenticationError)
    async def _authentication_error(request: Request, exc: AuthenticationError):
        return JSONResponse(status_code=401, content={"error": "Invalid credentials"})

    @application.exception_handler(ConnectivityError)
    async def _connectivity_error(request: Request, exc: ConnectivityError):
        logger.warning(f"Backend injoignable : {exc}")
        return JSONResponse(status_code=503, content={"error": "Failed to connect to server"})

    @application.exception_handler(PlaybackNegotiationError)
    async def _negotiation_error(request: Request, exc: PlaybackNegotiationError):
        return JSONResponse(
            status_code=409,
            content={"error": str(exc), "itemId": exc.item_id, "nextVariant": exc.next_variant},
        )

    @application.exception_handler(ProxyStreamError)
    async def _proxy_error(request: Request, exc: ProxyStreamError):
        status = exc.status_code if exc.status_code and exc.status_code >= 400 else 502
        return JSONResponse(status_code=status, content={"error": str(exc)})

    # Routes
    for router in (
        auth_router,
        servers_router,
        sessions_router,
        library_router,
        playback_router,
        viewing_router,
        images_router,
        livetv_router,
    ):
        application.include_router(router, prefix="/api")

    return application


app = create_app()
