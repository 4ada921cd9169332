"""
Dépendances partagées de l'application web.

Chaque requête résout une seule fois un RequestContext immuable depuis le
registre de sessions; les routes ne lisent jamais le pointeur global.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request

from ..services.session_registry import (
    SESSION_COOKIE_NAME,
    RequestContext,
    SessionRegistry,
)


def get_container(request: Request):
    return request.app.state.container


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.container.session_registry()


def get_session_id(request: Request) -> Optional[str]:
    return request.cookies.get(SESSION_COOKIE_NAME)


def client_address(request: Request) -> Optional[str]:
    """Adresse d'origine, en tenant compte d'un reverse proxy."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def get_connected_context(
    registry: SessionRegistry = Depends(get_registry),
    session_id: Optional[str] = Depends(get_session_id),
) -> RequestContext:
    """Contexte avec connexion active, authentifiée ou non (503 sinon)."""
    context = registry.context(session_id=session_id)
    if context is None:
        raise HTTPException(status_code=503, detail="No active server connection")
    return context


def get_request_context(
    context: RequestContext = Depends(get_connected_context),
) -> RequestContext:
    """Contexte authentifié (401 si aucun utilisateur connecté)."""
    if not context.is_authenticated:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return context
