"""
Commandes CLI des sessions clientes (sessions, sweep-sessions).
"""

from typing import Annotated, Optional

import typer
from rich.table import Table

from src.adapters.cli.helpers import console, format_datetime
from src.container import Container
from src.utils.helpers import mask_ip_address


def sessions(
    user_id: Annotated[
        Optional[str], typer.Option("--user", "-u", help="Filtrer par ID utilisateur")
    ] = None,
) -> None:
    """Affiche les sessions clientes enregistrees."""
    container = Container()
    container.database.init()
    repo = container.active_session_repository()
    records = repo.list_by_user(user_id) if user_id else repo.list_all()

    if not records:
        console.print("[yellow]Aucune session active.[/yellow]")
        return

    table = Table(title=f"Sessions actives ({len(records)})")
    table.add_column("Utilisateur", style="bold")
    table.add_column("Serveur")
    table.add_column("Appareil", overflow="fold")
    table.add_column("IP")
    table.add_column("Derniere activite")
    table.add_column("Creee le", style="dim")

    for record in records:
        table.add_row(
            record.username,
            record.connection_label,
            record.device_descriptor or "-",
            mask_ip_address(record.origin_address),
            format_datetime(record.last_activity_at),
            format_datetime(record.created_at),
        )
    console.print(table)


def sweep_sessions() -> None:
    """Supprime les sessions inactives depuis plus que le TTL configure."""
    container = Container()
    container.database.init()
    settings = container.config()
    removed = container.session_registry().sweep()
    console.print(
        f"{removed} session(s) supprimee(s) "
        f"(inactives depuis plus de {settings.session_ttl_minutes} min)"
    )
