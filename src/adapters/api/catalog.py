"""
Requetes catalogue communes a Emby et Jellyfin.

Les deux saveurs exposent les memes routes de catalogue (/Users/{id}/Items,
/Shows/..., /LiveTv/..., /Sessions/Playing...). Ces fonctions prennent le
BackendTransport de l'adaptateur et retournent des entites normalisees;
elles laissent remonter ConnectivityError, que l'adaptateur degrade.
"""

from typing import Any, Optional

from loguru import logger

from src.adapters.api.normalizer import (
    ITEM_FIELDS,
    dedupe_items,
    normalize_audio_tracks,
    normalize_item,
    normalize_items,
    normalize_library,
    normalize_program,
    playable_only,
)
from src.adapters.api.transport import BackendTransport
from src.core.entities.media import AudioTrack, Library, LiveProgram, MediaItem
from src.core.exceptions import ConnectivityError
from src.utils.constants import IMAGE_TYPES, LIBRARY_ITEM_TYPES, SEARCH_ITEM_TYPES

IMAGE_FETCH_TIMEOUT = 10.0


async def fetch_libraries(transport: BackendTransport, user_id: str) -> list[Library]:
    data = await transport.get_json(f"/Users/{user_id}/Views", retry=True)
    return [normalize_library(raw) for raw in data.get("Items", [])]


async def fetch_items_page(
    transport: BackendTransport,
    user_id: str,
    library_id: str,
    limit: int,
    offset: int,
    request_total: bool,
) -> tuple[list[MediaItem], int]:
    """
    Page d'elements lisibles d'une bibliotheque, triee par SortName.

    Args:
        request_total: Demande EnableTotalRecordCount (Emby)

    Returns:
        (elements dedoublonnes, TotalRecordCount ou a defaut len(Items))
    """
    params: dict[str, Any] = {
        "ParentId": library_id,
        "Limit": limit,
        "StartIndex": offset,
        "Recursive": "true",
        "SortBy": "SortName",
        "SortOrder": "Ascending",
        "IncludeItemTypes": LIBRARY_ITEM_TYPES,
        "Fields": ITEM_FIELDS,
    }
    if request_total:
        params["EnableTotalRecordCount"] = "true"
    data = await transport.get_json(f"/Users/{user_id}/Items", params=params, retry=True)
    raw_items = data.get("Items", [])
    items = dedupe_items(playable_only(normalize_items(raw_items)))
    return items, int(data.get("TotalRecordCount", len(raw_items)))


async def fetch_search(
    transport: BackendTransport, user_id: str, term: str, limit: int
) -> list[MediaItem]:
    data = await transport.get_json(
        f"/Users/{user_id}/Items",
        params={
            "SearchTerm": term,
            "Limit": limit,
            "Recursive": "true",
            "IncludeItemTypes": SEARCH_ITEM_TYPES,
            "Fields": ITEM_FIELDS,
        },
        retry=True,
    )
    return dedupe_items(normalize_items(data.get("Items", [])))


async def fetch_item(transport: BackendTransport, user_id: str, item_id: str) -> MediaItem:
    raw = await transport.get_json(
        f"/Users/{user_id}/Items/{item_id}", params={"Fields": ITEM_FIELDS}, retry=True
    )
    return normalize_item(raw)


async def fetch_seasons(
    transport: BackendTransport, user_id: str, series_id: str
) -> list[MediaItem]:
    data = await transport.get_json(
        f"/Shows/{series_id}/Seasons",
        params={"UserId": user_id, "Fields": ITEM_FIELDS},
        retry=True,
    )
    return normalize_items(data.get("Items", []))


async def fetch_episodes(
    transport: BackendTransport,
    user_id: str,
    season_id: str,
    series_id: Optional[str] = None,
) -> list[MediaItem]:
    """Episodes d'une saison, avec repli sur /Shows/{id}/Episodes."""
    data = await transport.get_json(
        f"/Users/{user_id}/Items",
        params={
            "ParentId": season_id,
            "IncludeItemTypes": "Episode",
            "SortBy": "IndexNumber",
            "Fields": ITEM_FIELDS,
        },
        retry=True,
    )
    episodes = normalize_items(data.get("Items", []))
    if episodes:
        return episodes

    # Certaines versions ne rattachent pas les episodes a la saison
    logger.debug(f"Repli /Shows/Episodes pour la saison {season_id}")
    data = await transport.get_json(
        f"/Shows/{series_id or season_id}/Episodes",
        params={"UserId": user_id, "SeasonId": season_id, "Fields": ITEM_FIELDS},
        retry=True,
    )
    return normalize_items(data.get("Items", []))


async def fetch_audio_tracks(
    transport: BackendTransport, user_id: str, item_id: str
) -> list[AudioTrack]:
    raw = await transport.get_json(
        f"/Users/{user_id}/Items/{item_id}",
        params={"Fields": "MediaStreams,MediaSources"},
        retry=True,
    )
    return normalize_audio_tracks(raw)


async def fetch_image_candidates(
    transport: BackendTransport, user_id: str, parent_id: str, limit: int
) -> list[dict]:
    """Echantillon aleatoire borne d'elements bruts (balayage d'images)."""
    data = await transport.get_json(
        f"/Users/{user_id}/Items",
        params={
            "ParentId": parent_id,
            "Limit": limit,
            "Recursive": "true",
            "SortBy": "Random",
            "Fields": "ImageTags,BackdropImageTags",
            "EnableImageTypes": IMAGE_TYPES,
        },
    )
    return list(data.get("Items", []))[:limit]


async def fetch_image(
    transport: BackendTransport,
    token_header: str,
    item_id: str,
    kind: str,
    image_params: dict[str, int],
    tag: Optional[str] = None,
) -> tuple[bytes, str]:
    """Telecharge une image en injectant le jeton dans token_header."""
    params: dict[str, Any] = dict(image_params)
    if tag:
        params["tag"] = tag
    response = await transport.request(
        "GET",
        f"/Items/{item_id}/Images/{kind}",
        params=params,
        headers={token_header: transport.credential},
        timeout=IMAGE_FETCH_TIMEOUT,
    )
    return response.content, response.headers.get("content-type", "image/jpeg")


def report_body(
    user_id: str, item_id: str, position_ticks: int, play_method: str
) -> dict[str, Any]:
    return {
        "ItemId": item_id,
        "UserId": user_id,
        "PositionTicks": position_ticks,
        "PlayMethod": play_method,
        "PlaySessionId": f"web-{item_id}-{user_id}",
        "CanSeek": True,
        "IsPaused": False,
    }


async def post_report(
    transport: BackendTransport, path: str, body: dict[str, Any]
) -> bool:
    """
    Envoie un rapport de lecture.

    Un 400 (session de lecture inconnue du backend) est ignore : le rapport
    de position est de la telemetrie, pas un journal critique.
    """
    try:
        await transport.request("POST", path, json=body)
    except ConnectivityError as e:
        if e.status_code == 400:
            logger.debug(f"Rapport {path} ignore (400)")
            return True
        raise
    return True


async def fetch_live_channels(transport: BackendTransport, user_id: str) -> list[MediaItem]:
    data = await transport.get_json(
        "/LiveTv/Channels",
        params={
            "UserId": user_id,
            "EnableImages": "true",
            "EnableUserData": "true",
            "Fields": ITEM_FIELDS,
        },
        retry=True,
    )
    return normalize_items(data.get("Items", []))


async def fetch_live_programs(
    transport: BackendTransport, user_id: str, channel_ids: Optional[list[str]]
) -> list[LiveProgram]:
    params: dict[str, Any] = {
        "UserId": user_id,
        "IsAiring": "true",
        "Fields": "Overview,Genres",
    }
    if channel_ids:
        params["ChannelIds"] = ",".join(channel_ids)
    data = await transport.get_json("/LiveTv/Programs", params=params, retry=True)
    return [normalize_program(raw) for raw in data.get("Items", [])]
