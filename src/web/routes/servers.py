"""
Routes de gestion des serveurs enregistres.

Creation, modification, suppression, activation et test de connexion.
La connexion par cle API ouvre une session comme un login.
La cle/jeton d'un serveur n'est jamais renvoye au client.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel, ConfigDict, Field

from ...adapters.api.factory import DEFAULT_PORT, parse_backend_kind
from ...core.entities.connection import BackendKind, Connection
from ...services.session_registry import SESSION_COOKIE_NAME, SessionRegistry
from ..deps import client_address, get_container, get_registry

router = APIRouter()


class ServerPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    url: str
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    api_key: str = Field(default="", alias="apiKey")
    server_type: str = Field(default="emby", alias="serverType")


def _serialize(connection: Connection) -> dict:
    return {
        "id": connection.id,
        "name": connection.display_name,
        "url": connection.base_url,
        "port": connection.port,
        "serverType": connection.backend_kind.value,
        "isActive": connection.is_active,
        "hasCredential": bool(connection.credential_key),
        "createdAt": connection.created_at.isoformat() if connection.created_at else None,
    }


def _parse_kind(value: str) -> BackendKind:
    try:
        return parse_backend_kind(value)
    except ValueError:
        raise HTTPException(status_code=400, detail="Unsupported backend kind")


@router.get("/servers")
async def list_servers(container=Depends(get_container)):
    repo = container.connection_repository()
    return {
        "servers": [_serialize(c) for c in repo.list_all()],
        "supportedTypes": container.adapter_factory().supported_kinds(),
    }


@router.post("/servers", status_code=201)
async def create_server(
    payload: ServerPayload,
    container=Depends(get_container),
    registry: SessionRegistry = Depends(get_registry),
):
    """Enregistre un serveur et en fait la connexion active."""
    kind = _parse_kind(payload.server_type)
    connection = Connection(
        display_name=payload.name or kind.display_name,
        base_url=payload.url,
        port=payload.port,
        backend_kind=kind,
        credential_key=payload.api_key,
    )
    saved = container.connection_repository().save(connection)
    activated = await registry.activate(saved)
    return {"success": True, "server": _serialize(activated)}


@router.put("/servers/{server_id}")
async def update_server(
    server_id: int,
    payload: ServerPayload,
    container=Depends(get_container),
    registry: SessionRegistry = Depends(get_registry),
):
    repo = container.connection_repository()
    connection = repo.get_by_id(str(server_id))
    if connection is None:
        raise HTTPException(status_code=404, detail="Server not found")

    connection.backend_kind = _parse_kind(payload.server_type)
    connection.base_url = payload.url
    connection.port = payload.port
    if payload.name:
        connection.display_name = payload.name
    if payload.api_key:
        connection.credential_key = payload.api_key
    saved = repo.save(connection)

    # L'adaptateur courant pointe encore sur l'ancienne adresse
    if saved.is_active:
        saved = await registry.activate(saved)
    return {"success": True, "server": _serialize(saved)}


@router.delete("/servers/{server_id}")
async def delete_server(
    server_id: int,
    container=Depends(get_container),
    registry: SessionRegistry = Depends(get_registry),
):
    repo = container.connection_repository()
    connection = repo.get_by_id(str(server_id))
    if connection is None:
        raise HTTPException(status_code=404, detail="Server not found")
    repo.delete(str(server_id))
    if registry.connection is not None and registry.connection.id == connection.id:
        await registry.deactivate()
    return {"success": True}


@router.post("/servers/{server_id}/activate")
async def activate_server(
    server_id: int,
    container=Depends(get_container),
    registry: SessionRegistry = Depends(get_registry),
):
    connection = container.connection_repository().get_by_id(str(server_id))
    if connection is None:
        raise HTTPException(status_code=404, detail="Server not found")
    activated = await registry.activate(connection)
    return {"success": True, "server": _serialize(activated)}


@router.post("/servers/test")
async def test_server(payload: ServerPayload, container=Depends(get_container)):
    """Sonde un serveur sans l'enregistrer."""
    kind = _parse_kind(payload.server_type)
    candidate = Connection(
        display_name=payload.name or kind.display_name,
        base_url=payload.url,
        port=payload.port,
        backend_kind=kind,
        credential_key=payload.api_key,
    )
    adapter = container.adapter_factory().create(candidate)
    try:
        reachable = await adapter.test_connection()
    finally:
        await adapter.close()
    return {"success": reachable, "serverType": kind.value}


@router.post("/servers/connect")
async def connect_server(
    payload: ServerPayload,
    request: Request,
    response: Response,
    registry: SessionRegistry = Depends(get_registry),
):
    """
    Enregistre un serveur et s'y authentifie avec sa cle API.

    503 si le serveur ne repond pas, 401 si la cle est refusee.
    """
    kind = _parse_kind(payload.server_type)
    if not payload.api_key:
        raise HTTPException(status_code=400, detail="API key is required")

    connection = Connection(
        display_name=payload.name or kind.display_name,
        base_url=payload.url,
        port=payload.port,
        backend_kind=kind,
        credential_key=payload.api_key,
    )
    result = await registry.connect_with_key(
        connection,
        device_descriptor=request.headers.get("user-agent"),
        origin_address=client_address(request),
    )
    response.set_cookie(
        SESSION_COOKIE_NAME,
        result.session_id,
        httponly=True,
        samesite="lax",
    )
    return {
        "success": True,
        "connected": True,
        "server": _serialize(result.connection),
        "user": {"id": result.auth.user_id, "name": result.auth.username},
    }
