"""
Routes du catalogue : bibliotheques, elements, recherche, series.

Toutes les reponses utilisent les entites normalisees (cles camelCase);
les images sont des references relatives vers /api/image-proxy.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ...services.session_registry import RequestContext
from ..deps import get_container, get_request_context

router = APIRouter()


def pagination(page: int, limit: int, start_index: int, total: int) -> dict:
    """Bloc pagination; page > 1 prime sur startIndex."""
    return {
        "page": page,
        "limit": limit,
        "startIndex": start_index,
        "totalItems": total,
        "hasNextPage": start_index + limit < total,
        "hasPreviousPage": start_index > 0,
    }


def resolve_page(limit: int, start_index: int, page: Optional[int]) -> tuple[int, int]:
    """Retourne (page, startIndex) effectifs."""
    if page is not None and page > 1:
        return page, (page - 1) * limit
    return start_index // limit + 1, start_index


@router.get("/libraries")
async def list_libraries(
    context: RequestContext = Depends(get_request_context),
    container=Depends(get_container),
):
    libraries = await context.adapter.list_libraries(context.user_id)
    libraries = await container.image_resolver().fill_library_images(
        context.adapter, context.user_id, libraries
    )
    return {"libraries": [library.to_dict() for library in libraries]}


@router.get("/libraries/{library_id}/items")
async def list_library_items(
    library_id: str,
    limit: int = Query(50, ge=1, le=500),
    start_index: int = Query(0, ge=0, alias="startIndex"),
    page: Optional[int] = Query(None, ge=1),
    context: RequestContext = Depends(get_request_context),
):
    """Page d'elements; une bibliotheque TV en direct liste ses chaines."""
    page, start_index = resolve_page(limit, start_index, page)
    adapter = context.adapter

    libraries = await adapter.list_libraries(context.user_id)
    library = next((lib for lib in libraries if lib.backend_id == library_id), None)
    if library is not None and library.is_live_tv:
        channels = await adapter.list_live_channels(context.user_id)
        items, total = channels[start_index:start_index + limit], len(channels)
    else:
        items, total = await adapter.list_library_items(
            context.user_id, library_id, limit, start_index
        )

    return {
        "items": [item.to_dict() for item in items],
        "pagination": pagination(page, limit, start_index, total),
    }


@router.get("/search")
async def search(
    q: str = Query("", max_length=200),
    limit: int = Query(20, ge=1, le=100),
    context: RequestContext = Depends(get_request_context),
):
    term = q.strip()
    if not term:
        return {"query": term, "items": []}
    items = await context.adapter.search(context.user_id, term, limit)
    return {"query": term, "items": [item.to_dict() for item in items]}


@router.get("/items/{item_id}")
async def item_details(
    item_id: str,
    context: RequestContext = Depends(get_request_context),
    container=Depends(get_container),
):
    item = await context.adapter.get_item_details(context.user_id, item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    data = item.to_dict()
    progress = container.playback_tracker().get_progress(context.user_id, item_id)
    data["localProgress"] = (
        {
            "positionSeconds": progress.position_seconds,
            "playedPercentage": progress.played_percent,
            "isCompleted": progress.is_completed,
        }
        if progress
        else None
    )
    return data


@router.get("/series/{series_id}/seasons")
async def series_seasons(
    series_id: str,
    context: RequestContext = Depends(get_request_context),
):
    seasons = await context.adapter.get_series_seasons(context.user_id, series_id)
    return {"seasons": [season.to_dict() for season in seasons]}


@router.get("/seasons/{season_id}/episodes")
async def season_episodes(
    season_id: str,
    series_id: Optional[str] = Query(None, alias="seriesId"),
    context: RequestContext = Depends(get_request_context),
):
    episodes = await context.adapter.get_season_episodes(
        context.user_id, season_id, series_id
    )
    return {"episodes": [episode.to_dict() for episode in episodes]}
