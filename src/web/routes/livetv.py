"""
Routes TV en direct : chaines, categories, programmes et flux.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse

from ...services.session_registry import RequestContext
from ..deps import get_container, get_request_context

router = APIRouter()


@router.get("/livetv/channels")
async def channels(
    context: RequestContext = Depends(get_request_context),
    container=Depends(get_container),
):
    items = await container.live_tv_service().channels(context.adapter, context.user_id)
    return {"channels": [item.to_dict() for item in items]}


@router.get("/livetv/channels/categories")
async def channel_categories(
    context: RequestContext = Depends(get_request_context),
    container=Depends(get_container),
):
    groups = await container.live_tv_service().categories(context.adapter, context.user_id)
    return {
        "categories": {
            name: [item.to_dict() for item in items] for name, items in groups.items()
        }
    }


@router.get("/livetv/programs")
async def programs(
    channel_ids: Optional[str] = Query(None, alias="channelIds"),
    context: RequestContext = Depends(get_request_context),
    container=Depends(get_container),
):
    ids = [part.strip() for part in (channel_ids or "").split(",") if part.strip()]
    items = await container.live_tv_service().programs(
        context.adapter, context.user_id, ids
    )
    return {"programs": [program.to_dict() for program in items]}


@router.get("/livetv/stream/{channel_id}")
async def live_stream(
    channel_id: str,
    context: RequestContext = Depends(get_request_context),
    container=Depends(get_container),
):
    url = container.live_tv_service().stream_url(context.adapter, channel_id)
    return RedirectResponse(url, status_code=302)
