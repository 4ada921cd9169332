"""
Routes de lecture : pistes audio, variantes de flux, relais video et
rapports de lecture.

Le client ne recoit jamais d'URL backend : il lit /api/video-proxy, qui
resout le plan et relaie les octets avec support Range.
"""

from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from ...core.value_objects.stream_plan import StreamPlan
from ...services.session_registry import RequestContext
from ...services.stream_planner import AudioTrackCache, parse_variant
from ..deps import get_container, get_request_context

router = APIRouter()


class PlaybackReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    item_id: str = Field(alias="itemId", min_length=1)
    position_seconds: float = Field(default=0, alias="positionSeconds", ge=0)
    runtime_seconds: Optional[int] = Field(default=None, alias="runtimeSeconds", ge=0)


def proxy_url(item_id: str, plan: StreamPlan) -> str:
    params = {"variant": plan.variant.value}
    if plan.audio_track_index is not None:
        params["audioTrack"] = plan.audio_track_index
    return f"/api/video-proxy/{item_id}?{urlencode(params)}"


@router.get("/media/{item_id}/audio-tracks")
async def audio_tracks(
    item_id: str,
    context: RequestContext = Depends(get_request_context),
    container=Depends(get_container),
):
    planner = container.stream_planner()
    cache = AudioTrackCache(context.adapter, context.user_id)
    tracks = planner.mark_preferred(await cache.get(item_id))
    return {
        "audioTracks": [track.to_dict() for track in tracks],
        "recommendedTrack": planner.recommended_track(tracks),
    }


@router.get("/media/{item_id}/stream-variants")
async def stream_variants(
    item_id: str,
    audio_track: Optional[int] = Query(None, alias="audioTrack"),
    context: RequestContext = Depends(get_request_context),
    container=Depends(get_container),
):
    """Plans de repli ordonnes, avec leurs URLs de proxy."""
    plans = await container.stream_planner().fallback_plans(
        context.adapter, context.user_id, item_id, audio_track
    )
    return {
        "itemId": item_id,
        "variants": [
            {
                "variant": plan.variant.value,
                "url": proxy_url(item_id, plan),
                "containerHints": list(plan.container_hints),
                "audioTrackIndex": plan.audio_track_index,
                "transcodeForced": plan.transcode_forced,
            }
            for plan in plans
        ],
    }


@router.get("/video-proxy/{item_id}")
async def video_proxy(
    item_id: str,
    request: Request,
    audio_track: Optional[int] = Query(None, alias="audioTrack"),
    variant: Optional[str] = Query(None),
    context: RequestContext = Depends(get_request_context),
    container=Depends(get_container),
):
    """Relaie le flux du plan resolu, en transmettant l'en-tete Range."""
    plan = await container.stream_planner().plan(
        context.adapter,
        context.user_id,
        item_id,
        audio_track=audio_track,
        variant=parse_variant(variant),
    )
    logger.info(
        f"Lecture {item_id} : variante={plan.variant.value} "
        f"piste={plan.audio_track_index} transcodage={plan.transcode_forced}"
    )
    stream = await container.range_proxy().open(
        plan.backend_url, request.headers.get("range")
    )
    return StreamingResponse(
        stream.body,
        status_code=stream.status_code,
        headers=stream.headers,
        media_type=stream.media_type,
    )


@router.post("/playback/start")
async def playback_start(
    report: PlaybackReport,
    context: RequestContext = Depends(get_request_context),
    container=Depends(get_container),
):
    reported = await container.playback_tracker().start(
        context.adapter, context.user_id, report.item_id, report.position_seconds
    )
    return {"success": True, "reported": reported}


@router.post("/playback/progress")
async def playback_progress(
    report: PlaybackReport,
    context: RequestContext = Depends(get_request_context),
    container=Depends(get_container),
):
    reported = await container.playback_tracker().progress(
        context.adapter, context.user_id, report.item_id, report.position_seconds
    )
    return {"success": True, "reported": reported}


@router.post("/playback/stop")
async def playback_stop(
    report: PlaybackReport,
    context: RequestContext = Depends(get_request_context),
    container=Depends(get_container),
):
    progress = await container.playback_tracker().stop(
        context.adapter,
        context.user_id,
        report.item_id,
        report.position_seconds,
        report.runtime_seconds,
    )
    return {
        "success": True,
        "positionSeconds": progress.position_seconds,
        "playedPercentage": progress.played_percent,
        "isCompleted": progress.is_completed,
    }
