"""
Proxy d'images : les identifiants backend ne quittent jamais le serveur.

Les images sont mises en cache disque par connexion et servies avec un
Cache-Control public d'une heure.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from ...adapters.api.cache import ImageCache
from ...services.session_registry import RequestContext
from ...utils.constants import IMAGE_TYPES
from ..deps import get_connected_context, get_container

router = APIRouter()

_ALLOWED_TYPES = {kind.lower(): kind for kind in IMAGE_TYPES.split(",")}


@router.get("/image-proxy/{item_id}/{image_type}")
async def image_proxy(
    item_id: str,
    image_type: str,
    tag: Optional[str] = Query(None),
    context: RequestContext = Depends(get_connected_context),
    container=Depends(get_container),
):
    kind = _ALLOWED_TYPES.get(image_type.lower())
    if kind is None:
        raise HTTPException(status_code=404, detail="Unknown image type")

    settings = container.config()
    cache = container.image_cache()
    key = ImageCache.make_key(context.connection.id, item_id, kind, tag)

    cached = await cache.get(key)
    if cached is None:
        cached = await context.adapter.fetch_image(item_id, kind, tag)
        if cached is None:
            raise HTTPException(status_code=404, detail="Image not found")
        await cache.set(key, cached)

    content, content_type = cached
    return Response(
        content=content,
        media_type=content_type,
        headers={"Cache-Control": f"public, max-age={settings.image_cache_ttl}"},
    )
