"""
Routes de suivi de visionnage : reprise de lecture et historique.

Lit les positions enregistrees localement a chaque arret de lecture,
pour l'utilisateur de la session courante.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from ...services.session_registry import RequestContext
from ..deps import get_container, get_request_context

router = APIRouter()


@router.get("/viewing/progress/{item_id}")
async def viewing_progress(
    item_id: str,
    context: RequestContext = Depends(get_request_context),
    container=Depends(get_container),
):
    progress = container.playback_tracker().get_progress(context.user_id, item_id)
    return {"itemId": item_id, "progress": progress.to_dict() if progress else None}


@router.get("/viewing/continue")
async def continue_watching(
    limit: int = Query(20, ge=1, le=100),
    context: RequestContext = Depends(get_request_context),
    container=Depends(get_container),
):
    """Elements entames et non termines, le plus recent en premier."""
    items = container.playback_tracker().continue_watching(context.user_id, limit)
    return {"items": [progress.to_dict() for progress in items]}


@router.get("/viewing/history")
async def viewing_history(
    limit: int = Query(50, ge=1, le=500),
    context: RequestContext = Depends(get_request_context),
    container=Depends(get_container),
):
    items = container.playback_tracker().history(context.user_id, limit)
    return {"items": [progress.to_dict() for progress in items]}


@router.post("/viewing/complete/{item_id}")
async def mark_completed(
    item_id: str,
    context: RequestContext = Depends(get_request_context),
    container=Depends(get_container),
):
    progress = container.playback_tracker().mark_completed(context.user_id, item_id)
    return {"success": True, "progress": progress.to_dict()}


@router.delete("/viewing/continue/{item_id}")
async def remove_from_continue(
    item_id: str,
    context: RequestContext = Depends(get_request_context),
    container=Depends(get_container),
):
    if not container.playback_tracker().forget(context.user_id, item_id):
        raise HTTPException(status_code=404, detail="No progress for this item")
    return {"success": True}
