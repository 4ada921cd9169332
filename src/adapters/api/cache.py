"""
Cache persistant des images proxifiees.

Le cache utilise diskcache pour la persistence sur disque : une image deja
servie n'est pas redemandee au backend pendant IMAGE_TTL secondes, y compris
apres un redemarrage. Les cles sont prefixees par l'ID de connexion pour
qu'un changement de serveur ne serve jamais l'image d'un autre backend.
"""

import asyncio
from functools import partial
from typing import Optional

from diskcache import Cache


class ImageCache:
    """
    Cache asynchrone (contenu, content-type) avec TTL.

    Utilise diskcache pour la persistence et run_in_executor pour
    les operations asynchrones non-bloquantes.

    Attributes:
        IMAGE_TTL: Duree de vie par defaut (1 heure, aligne sur Cache-Control)

    Example:
        cache = ImageCache(cache_dir=".cache/images")
        key = ImageCache.make_key("1", "abc", "Primary", "tag1")
        await cache.set(key, (b"...", "image/jpeg"))
        data = await cache.get(key)
    """

    IMAGE_TTL = 60 * 60  # 1 heure en secondes

    def __init__(self, cache_dir: str = ".cache/images", ttl: int = IMAGE_TTL) -> None:
        """
        Initialise le cache avec un repertoire de stockage.

        Args:
            cache_dir: Chemin vers le repertoire du cache (cree si inexistant)
            ttl: Duree de vie des entrees en secondes
        """
        self._cache = Cache(str(cache_dir))
        self._ttl = ttl

    @staticmethod
    def make_key(
        connection_id: Optional[str], item_id: str, kind: str, tag: Optional[str]
    ) -> str:
        """Cle unique d'une image pour une connexion donnee."""
        return f"image:{connection_id or '-'}:{item_id}:{kind}:{tag or '-'}"

    async def get(self, key: str) -> Optional[tuple[bytes, str]]:
        """
        Recupere une image du cache.

        Returns:
            (contenu, content-type) ou None si absente ou expiree
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._cache.get, key)

    async def set(
        self, key: str, value: tuple[bytes, str], ttl: Optional[int] = None
    ) -> None:
        """Stocke une image avec le TTL par defaut ou celui fourni."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None, partial(self._cache.set, key, value, expire=ttl or self._ttl)
        )

    async def clear(self) -> None:
        """Supprime toutes les entrees du cache."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._cache.clear)

    def close(self) -> None:
        """Ferme la connexion au cache (a appeler a la fin)."""
        self._cache.close()
