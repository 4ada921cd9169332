"""
Service TV en direct : chaines, categories et programmes en cours.
"""

from typing import Optional

from src.core.entities.media import LiveProgram, MediaItem
from src.core.ports.media_server import IMediaServerAdapter
from src.utils.constants import CHANNEL_CATEGORY_PATTERNS, DEFAULT_CHANNEL_CATEGORY
from src.utils.helpers import contains_any


def categorize_channel(name: Optional[str]) -> str:
    """Premiere categorie dont un motif apparait dans le nom, sinon 'general'."""
    for category, patterns in CHANNEL_CATEGORY_PATTERNS:
        if contains_any(name, patterns):
            return category
    return DEFAULT_CHANNEL_CATEGORY


def categorize_channels(channels: list[MediaItem]) -> dict[str, list[MediaItem]]:
    """
    Regroupe les chaines par categorie.

    Toutes les categories connues sont presentes (eventuellement vides),
    dans l'ordre des motifs puis 'general'.
    """
    groups: dict[str, list[MediaItem]] = {
        category: [] for category, _ in CHANNEL_CATEGORY_PATTERNS
    }
    groups[DEFAULT_CHANNEL_CATEGORY] = []
    for channel in channels:
        groups[categorize_channel(channel.name)].append(channel)
    return groups


class LiveTvService:
    """Acces TV en direct via l'adaptateur de la requete."""

    async def channels(self, adapter: IMediaServerAdapter, user_id: str) -> list[MediaItem]:
        return await adapter.list_live_channels(user_id)

    async def categories(
        self, adapter: IMediaServerAdapter, user_id: str
    ) -> dict[str, list[MediaItem]]:
        return categorize_channels(await adapter.list_live_channels(user_id))

    async def programs(
        self,
        adapter: IMediaServerAdapter,
        user_id: str,
        channel_ids: Optional[list[str]] = None,
    ) -> list[LiveProgram]:
        return await adapter.list_live_programs(user_id, channel_ids or None)

    def stream_url(self, adapter: IMediaServerAdapter, channel_id: str) -> str:
        return adapter.build_live_stream_url(channel_id)
