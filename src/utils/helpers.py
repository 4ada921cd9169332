"""
Fonctions utilitaires partagees dans le projet MediaBridge.

Ce module centralise les fonctions reutilisees a travers le codebase :
- normalize_accents : suppression des diacritiques pour comparaison
- name_key : cle de comparaison d'un nom (casse, accents, invisibles)
- contains_any : recherche de mots-cles insensible a la casse et aux accents
- mask_ip_address : masquage partiel d'une adresse IP
"""

import unicodedata
from typing import Iterable, Optional


def strip_invisible_chars(text: str) -> str:
    """
    Retire les caractères Unicode invisibles d'une chaîne.

    Supprime les caractères de contrôle et les marques directionnelles
    qui peuvent provenir des backends (LRM, RLM, BOM, etc.).
    """
    return "".join(
        char for char in text if unicodedata.category(char) not in ("Cf", "Cc")
    )


def normalize_accents(text: str) -> str:
    """
    Supprime les accents d'une chaine pour une comparaison insensible aux accents.

    Utilise la decomposition NFD puis filtre les caracteres diacritiques (Mn).
    Ex: "Español" -> "Espanol"
    """
    normalized = unicodedata.normalize("NFD", text)
    return "".join(char for char in normalized if unicodedata.category(char) != "Mn")


def name_key(name: Optional[str]) -> str:
    """Cle de comparaison d'un nom : sans invisibles, casefold, sans espaces de bord."""
    if not name:
        return ""
    return strip_invisible_chars(name).casefold().strip()


def contains_any(text: Optional[str], keywords: Iterable[str]) -> bool:
    """Vrai si un des mots-cles apparait dans text (casse et accents ignores)."""
    if not text:
        return False
    haystack = normalize_accents(text).casefold()
    return any(normalize_accents(k).casefold() in haystack for k in keywords if k)


def mask_ip_address(address: Optional[str]) -> str:
    """
    Masque partiellement une adresse IP.

    Ex: "192.168.1.42" -> "192.168.*.*", "2001:db8::1" -> "2001:db8:*"
    """
    if not address:
        return "unknown"
    if "." in address and ":" not in address:
        parts = address.split(".")
        return ".".join(parts[:2] + ["*"] * (len(parts) - 2))
    if ":" in address:
        parts = [part for part in address.split(":") if part]
        return ":".join(parts[:2] + ["*"])
    return "*"
