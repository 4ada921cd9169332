"""
Taxonomie des erreurs du domaine.

- ConnectivityError : backend injoignable ou en timeout
- AuthenticationError : toutes les formes d'identifiants rejetees
- PlaybackNegotiationError : aucune piste/conteneur compatible pour le plan demande
- ProxyStreamError : echec du flux amont pendant un relais
"""

from typing import Optional


class MediaBridgeError(Exception):
    """Classe de base des erreurs MediaBridge."""


class ConnectivityError(MediaBridgeError):
    """
    Backend injoignable, en timeout ou en erreur transitoire.

    Attributes:
        status_code: Code HTTP observe, ou None si aucune reponse
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class AuthenticationError(MediaBridgeError):
    """
    Toutes les formes d'identifiants ont ete rejetees.

    Le message expose au client reste generique : last_status ne sert
    qu'au logging.
    """

    def __init__(self, last_status: Optional[int] = None) -> None:
        self.last_status = last_status
        super().__init__("Invalid credentials")


class PlaybackNegotiationError(MediaBridgeError):
    """
    Aucun plan de lecture compatible pour la variante demandee.

    Attributes:
        item_id: Element concerne
        next_variant: Variante suivante a tenter, ou None si epuise
    """

    def __init__(
        self,
        message: str,
        item_id: Optional[str] = None,
        next_variant: Optional[str] = None,
    ) -> None:
        self.item_id = item_id
        self.next_variant = next_variant
        super().__init__(message)


class ProxyStreamError(MediaBridgeError):
    """
    Echec du flux amont pendant un relais d'octets.

    Attributes:
        status_code: Code HTTP amont si une reponse a ete recue
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)
