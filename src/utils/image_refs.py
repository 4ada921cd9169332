"""
References d'images vers le proxy /api/image-proxy.

Fonctions pures, sans appel reseau, partagees par la normalisation des
reponses backend et par ImageResolver :
- proxy_reference : reference relative vers le proxy
- resolve_backdrop : image de fond (Backdrop, BackdropImageTags, Primary)
- resolve_poster : affiche d'une carte
- first_usable_image : n'importe quelle image d'un element voisin
"""

from typing import Optional
from urllib.parse import quote

IMAGE_PROXY_PREFIX = "/api/image-proxy"

# Ordre de recherche d'une image quelconque chez un voisin
_ANY_IMAGE_ORDER = ("Backdrop", "Primary", "Thumb", "Logo")


def proxy_reference(item_id: str, kind: str, tag: Optional[str] = None) -> str:
    """Reference relative vers /api/image-proxy/{id}/{kind}."""
    reference = f"{IMAGE_PROXY_PREFIX}/{quote(str(item_id), safe='')}/{kind}"
    if tag:
        reference += f"?tag={quote(str(tag), safe='')}"
    return reference


def resolve_backdrop(raw: dict) -> Optional[str]:
    """Etapes 1 a 3 du repli, sans appel reseau."""
    item_id = raw.get("Id")
    if not item_id:
        return None
    tags = raw.get("ImageTags") or {}

    if tags.get("Backdrop"):
        return proxy_reference(item_id, "Backdrop", tags["Backdrop"])
    backdrops = raw.get("BackdropImageTags") or []
    if backdrops:
        return proxy_reference(item_id, "Backdrop", backdrops[0])
    if tags.get("Primary"):
        return proxy_reference(item_id, "Primary", tags["Primary"])
    return None


def resolve_poster(raw: dict) -> Optional[str]:
    """
    Image principale d'une carte (affiche).

    Primary en priorite, puis l'affiche de la serie parente pour un
    episode, puis Thumb, puis le repli backdrop, puis Logo.
    """
    item_id = raw.get("Id")
    if not item_id:
        return None
    tags = raw.get("ImageTags") or {}

    if tags.get("Primary"):
        return proxy_reference(item_id, "Primary", tags["Primary"])
    if raw.get("SeriesId") and raw.get("SeriesPrimaryImageTag"):
        return proxy_reference(raw["SeriesId"], "Primary", raw["SeriesPrimaryImageTag"])
    if tags.get("Thumb"):
        return proxy_reference(item_id, "Thumb", tags["Thumb"])
    backdrop = resolve_backdrop(raw)
    if backdrop:
        return backdrop
    if tags.get("Logo"):
        return proxy_reference(item_id, "Logo", tags["Logo"])
    return None


def first_usable_image(raw: dict) -> Optional[str]:
    """N'importe quelle image exploitable d'un element voisin."""
    item_id = raw.get("Id")
    if not item_id:
        return None
    tags = raw.get("ImageTags") or {}
    for kind in _ANY_IMAGE_ORDER:
        if tags.get(kind):
            return proxy_reference(item_id, kind, tags[kind])
        if kind == "Backdrop" and raw.get("BackdropImageTags"):
            return proxy_reference(item_id, "Backdrop", raw["BackdropImageTags"][0])
    return None
