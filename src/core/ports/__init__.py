"""
Ports (interfaces abstraites) définissant les contrats pour les adaptateurs.

Les ports sont les frontières de l'architecture hexagonale. Ils définissent
ce dont le domaine a besoin du monde extérieur sans spécifier
comment ces besoins sont satisfaits.

Ports repository : Contrats de persistance des données
- IConnectionRepository : Serveurs enregistrés et connexion active
- IActiveSessionRepository : Sessions clientes multi-appareils
- IPlaybackProgressRepository : Positions de lecture

Port backend multimedia :
- IMediaServerAdapter : Contrat commun Emby / Jellyfin
"""

from src.core.ports.media_server import (
    TICKS_PER_SECOND,
    IMediaServerAdapter,
    seconds_to_ticks,
    ticks_to_seconds,
)
from src.core.ports.repositories import (
    IActiveSessionRepository,
    IConnectionRepository,
    IPlaybackProgressRepository,
)

__all__ = [
    # Repositories
    "IConnectionRepository",
    "IActiveSessionRepository",
    "IPlaybackProgressRepository",
    # Backend multimedia
    "IMediaServerAdapter",
    "TICKS_PER_SECOND",
    "seconds_to_ticks",
    "ticks_to_seconds",
]
