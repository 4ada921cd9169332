"""
Interfaces ports pour les repositories.

Interfaces abstraites (ports) définissant les contrats pour la persistance des données.
Les implémentations (adaptateurs) fournissent les mécanismes de stockage concrets
(SQLite via SQLModel).
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from src.core.entities.connection import (
    ActiveSessionRecord,
    Connection,
    PlaybackProgress,
)


class IConnectionRepository(ABC):
    """
    Interface de stockage des serveurs enregistrés.

    Au plus une connexion est active à la fois.
    """

    @abstractmethod
    def get_by_id(self, connection_id: str) -> Optional[Connection]:
        """Récupère une connexion par son ID."""
        ...

    @abstractmethod
    def get_active(self) -> Optional[Connection]:
        """Récupère la connexion active, s'il y en a une."""
        ...

    @abstractmethod
    def get_by_address(self, base_url: str, port: int) -> Optional[Connection]:
        """Récupère une connexion par son couple (url, port)."""
        ...

    @abstractmethod
    def list_all(self) -> list[Connection]:
        """Liste toutes les connexions, la plus récente en premier."""
        ...

    @abstractmethod
    def save(self, connection: Connection) -> Connection:
        """Sauvegarde une connexion (insertion ou mise à jour)."""
        ...

    @abstractmethod
    def set_active(self, connection_id: str) -> Optional[Connection]:
        """Active une connexion et désactive toutes les autres."""
        ...

    @abstractmethod
    def delete(self, connection_id: str) -> bool:
        """Supprime une connexion par ID. Retourne True si supprimée."""
        ...


class IActiveSessionRepository(ABC):
    """
    Interface de stockage des sessions clientes actives.

    Les lignes sont indexées par session_id et interrogeables par user_id.
    """

    @abstractmethod
    def get_by_session_id(self, session_id: str) -> Optional[ActiveSessionRecord]:
        ...

    @abstractmethod
    def save(self, record: ActiveSessionRecord) -> ActiveSessionRecord:
        """Sauvegarde une session (insertion ou mise à jour)."""
        ...

    @abstractmethod
    def touch(self, session_id: str, at: datetime) -> bool:
        """
        Met à jour last_activity_at sans jamais le faire reculer.

        Retourne False si la session n'existe pas.
        """
        ...

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        ...

    @abstractmethod
    def list_by_user(self, user_id: str) -> list[ActiveSessionRecord]:
        """Liste les sessions d'un utilisateur, activité la plus récente en premier."""
        ...

    @abstractmethod
    def count_by_user(self, user_id: str) -> int:
        ...

    @abstractmethod
    def list_all(self) -> list[ActiveSessionRecord]:
        ...

    @abstractmethod
    def delete_inactive_since(self, cutoff: datetime) -> int:
        """Supprime les sessions inactives depuis cutoff. Retourne le nombre supprimé."""
        ...


class IPlaybackProgressRepository(ABC):
    """Interface de stockage des positions de lecture (une ligne par utilisateur et élément)."""

    @abstractmethod
    def get(self, user_id: str, item_id: str) -> Optional[PlaybackProgress]:
        ...

    @abstractmethod
    def upsert(self, progress: PlaybackProgress) -> PlaybackProgress:
        """Insère ou met à jour la position pour (user_id, item_id)."""
        ...

    @abstractmethod
    def list_by_user(self, user_id: str, limit: int = 20) -> list[PlaybackProgress]:
        """Liste les positions d'un utilisateur, la plus récente en premier."""
        ...

    @abstractmethod
    def list_in_progress(self, user_id: str, limit: int = 20) -> list[PlaybackProgress]:
        """Positions entamées et non terminées, la plus récente en premier."""
        ...

    @abstractmethod
    def delete(self, user_id: str, item_id: str) -> bool:
        """Supprime la position; False si elle n'existait pas."""
        ...
