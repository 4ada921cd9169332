"""Sous-package CLI commands - re-exporte les commandes publiques."""

from src.adapters.cli.commands.server_commands import (
    check_server,
    servers,
)
from src.adapters.cli.commands.session_commands import (
    sessions,
    sweep_sessions,
)

__all__ = [
    # serveurs
    "check_server",
    "servers",
    # sessions
    "sessions",
    "sweep_sessions",
]
