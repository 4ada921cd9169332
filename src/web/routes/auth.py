"""
Routes d'authentification et d'etat de connexion.

Le login negocie les identifiants aupres du backend, active la connexion
et pose le cookie de session client. Les echecs restent generiques.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel, ConfigDict, Field

from ...adapters.api.factory import DEFAULT_PORT, parse_backend_kind
from ...services.session_registry import SESSION_COOKIE_NAME, SessionRegistry
from ..deps import client_address, get_registry, get_session_id

router = APIRouter()


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    backend_kind: str = Field(default="emby", alias="backendKind")
    url: str
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    username: str = Field(alias="user", min_length=1)
    password: str = Field(default="", alias="pass")
    server_name: Optional[str] = Field(default=None, alias="serverName")


@router.post("/auth/login")
async def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    registry: SessionRegistry = Depends(get_registry),
):
    """Authentifie l'utilisateur; 401 generique si toutes les formes echouent."""
    try:
        kind = parse_backend_kind(payload.backend_kind)
    except ValueError:
        raise HTTPException(status_code=400, detail="Unsupported backend kind")

    result = await registry.login(
        kind,
        payload.url,
        payload.port,
        payload.username,
        payload.password,
        device_descriptor=request.headers.get("user-agent"),
        origin_address=client_address(request),
        display_name=payload.server_name,
    )
    response.set_cookie(
        SESSION_COOKIE_NAME,
        result.session_id,
        httponly=True,
        samesite="lax",
    )
    return {
        "success": True,
        "user": {"id": result.auth.user_id, "name": result.auth.username},
        "server": {
            "id": result.connection.id,
            "name": result.connection.display_name,
            "type": result.connection.backend_kind.value,
        },
    }


@router.post("/auth/logout")
async def logout(
    response: Response,
    registry: SessionRegistry = Depends(get_registry),
    session_id: Optional[str] = Depends(get_session_id),
):
    await registry.logout(session_id)
    response.delete_cookie(SESSION_COOKIE_NAME)
    return {"success": True}


@router.get("/auth/status")
async def auth_status(
    registry: SessionRegistry = Depends(get_registry),
    session_id: Optional[str] = Depends(get_session_id),
):
    """Etat d'authentification; chaque appel rafraichit l'activite de la session."""
    auth = registry.auth
    if auth is None:
        return {"authenticated": False, "user": None}
    registry.touch(session_id)
    return {
        "authenticated": True,
        "user": {"id": auth.user_id, "name": auth.username},
    }


@router.get("/connection/status")
async def connection_status(registry: SessionRegistry = Depends(get_registry)):
    connection = registry.connection
    auth = registry.auth
    if connection is None:
        return {
            "connected": False,
            "serverName": None,
            "serverType": None,
            "serverUrl": None,
            "port": None,
            "username": None,
        }
    return {
        "connected": auth is not None,
        "serverName": connection.display_name,
        "serverType": connection.backend_kind.value,
        "serverUrl": connection.base_url,
        "port": connection.port,
        "username": auth.username if auth else None,
    }
