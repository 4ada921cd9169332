"""
Objets valeur immutables representant des concepts du domaine sans identite.

Exports :
- StreamPlan : Plan de lecture calcule par requete
- StreamOptions : Options de construction d'URL de flux
- StreamVariant : Variante de flux (transcode, segmente, defaut)
- FALLBACK_ORDER, next_variant : Ordre de repli deterministe
"""

from src.core.value_objects.stream_plan import (
    FALLBACK_ORDER,
    StreamOptions,
    StreamPlan,
    StreamVariant,
    next_variant,
)

__all__ = [
    "FALLBACK_ORDER",
    "StreamOptions",
    "StreamPlan",
    "StreamVariant",
    "next_variant",
]
