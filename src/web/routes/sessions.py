"""
Routes de visibilite multi-appareils.

Liste les sessions actives de l'utilisateur connecte. Purement informatif :
aucune de ces donnees ne conditionne l'acces.
"""

from fastapi import APIRouter, Depends

from ...core.entities.connection import ActiveSessionRecord
from ...services.session_registry import RequestContext, SessionRegistry
from ...utils.helpers import mask_ip_address
from ..deps import get_registry, get_request_context

router = APIRouter()


def _serialize(record: ActiveSessionRecord, current_session_id: str | None) -> dict:
    return {
        "id": record.id,
        "username": record.username,
        "serverName": record.connection_label,
        "deviceInfo": record.device_descriptor,
        "ipAddress": mask_ip_address(record.origin_address),
        "lastActivity": record.last_activity_at.isoformat(),
        "createdAt": record.created_at.isoformat() if record.created_at else None,
        "isCurrentSession": record.session_id == current_session_id,
    }


@router.get("/sessions/active")
async def active_sessions(
    context: RequestContext = Depends(get_request_context),
    registry: SessionRegistry = Depends(get_registry),
):
    records = registry.list_sessions(context.user_id)
    return {
        "totalSessions": len(records),
        "sessions": [_serialize(r, context.session_id) for r in records],
    }


@router.get("/sessions/count")
async def sessions_count(
    context: RequestContext = Depends(get_request_context),
    registry: SessionRegistry = Depends(get_registry),
):
    return {"count": registry.count_sessions(context.user_id)}
