"""
Resolution des images d'affichage.

Ordre de repli pour une image de fond :
1. tag Backdrop propre a l'element
2. premiere entree de BackdropImageTags
3. tag Primary
4. balayage borne (50 elements max, ordre aleatoire) des elements voisins
5. None : l'appelant affiche un placeholder

Toutes les resolutions retournent une reference relative vers le proxy
d'images; les identifiants backend ne sont injectes qu'au telechargement.
"""

import asyncio
from typing import Optional

from loguru import logger

from src.core.entities.media import Library
from src.core.ports.media_server import IMediaServerAdapter
from src.utils.image_refs import first_usable_image, resolve_backdrop

SIBLING_SCAN_LIMIT = 50


class ImageResolver:
    """
    Resolution complete, balayage des voisins compris.

    Example:
        resolver = ImageResolver()
        url = await resolver.resolve(adapter, user_id, raw_view, parent_id=view_id)
    """

    def __init__(self, scan_limit: int = SIBLING_SCAN_LIMIT) -> None:
        self._scan_limit = min(scan_limit, SIBLING_SCAN_LIMIT)

    async def resolve(
        self,
        adapter: IMediaServerAdapter,
        user_id: str,
        raw: dict,
        parent_id: Optional[str] = None,
    ) -> Optional[str]:
        """
        Applique l'ordre de repli complet.

        Args:
            adapter: Backend a interroger pour le balayage
            user_id: Utilisateur courant
            raw: Element brut du backend
            parent_id: Conteneur dont les elements sont balayes (defaut: raw["Id"])
        """
        reference = resolve_backdrop(raw)
        if reference:
            return reference
        return await self.scan_siblings(adapter, user_id, parent_id or raw.get("Id"))

    async def scan_siblings(
        self,
        adapter: IMediaServerAdapter,
        user_id: str,
        parent_id: Optional[str],
    ) -> Optional[str]:
        """Cherche une image chez au plus scan_limit elements du conteneur."""
        if not parent_id:
            return None
        candidates = await adapter.list_image_candidates(
            user_id, parent_id, self._scan_limit
        )
        for candidate in candidates[: self._scan_limit]:
            reference = first_usable_image(candidate)
            if reference:
                return reference
        logger.debug(f"Aucune image pour {parent_id} apres {len(candidates)} voisins")
        return None

    async def fill_library_images(
        self,
        adapter: IMediaServerAdapter,
        user_id: str,
        libraries: list[Library],
    ) -> list[Library]:
        """Complete l'image des bibliotheques qui n'en ont pas (balayage en parallele)."""
        missing = [library for library in libraries if not library.image_url]
        if not missing:
            return libraries
        references = await asyncio.gather(
            *(self.scan_siblings(adapter, user_id, lib.backend_id) for lib in missing)
        )
        for library, reference in zip(missing, references):
            library.image_url = reference
        return libraries
