"""
Clients des serveurs multimedia.

Ce module fournit les adaptateurs pour communiquer avec les backends:
- EmbyAdapter: variante Emby (jeton X-MediaBrowser-Token)
- JellyfinAdapter: variante Jellyfin (jeton X-Emby-Token)

Infrastructure partagee:
- BackendTransport: client httpx, injection des identifiants, traduction des erreurs
- AuthenticationNegotiator: essai ordonne des formes d'identifiants
- AdapterFactory: selection de l'adaptateur selon BackendKind
- ImageCache: cache disque des images proxifiees
- TransientBackendError / with_retry: backoff exponentiel sur statuts transitoires

Les adaptateurs implementent IMediaServerAdapter defini dans core/ports/media_server.py.
"""

from src.adapters.api.cache import ImageCache
from src.adapters.api.emby_client import EmbyAdapter
from src.adapters.api.factory import AdapterFactory
from src.adapters.api.jellyfin_client import JellyfinAdapter

__all__ = [
    "AdapterFactory",
    "EmbyAdapter",
    "ImageCache",
    "JellyfinAdapter",
]
