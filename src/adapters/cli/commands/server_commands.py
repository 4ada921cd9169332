"""
Commandes CLI des serveurs multimedia (servers, check-server).
"""

from typing import Annotated

import typer
from rich.table import Table

from src.adapters.api.factory import DEFAULT_PORT, parse_backend_kind
from src.adapters.cli.helpers import async_command, console, suppress_loguru
from src.container import Container
from src.core.entities.connection import Connection


def servers() -> None:
    """Liste les serveurs enregistres."""
    container = Container()
    container.database.init()
    connections = container.connection_repository().list_all()

    if not connections:
        console.print("[yellow]Aucun serveur enregistre.[/yellow]")
        return

    table = Table(title="Serveurs enregistres")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Nom", style="bold")
    table.add_column("Type")
    table.add_column("Adresse")
    table.add_column("Actif", justify="center")
    table.add_column("Identifiant", justify="center")

    for connection in connections:
        table.add_row(
            connection.id or "-",
            connection.display_name,
            connection.backend_kind.display_name,
            f"{connection.base_url}:{connection.port}",
            "[green]oui[/green]" if connection.is_active else "",
            "oui" if connection.credential_key else "non",
        )
    console.print(table)


@async_command
async def check_server(
    url: Annotated[str, typer.Argument(help="Hote ou URL du serveur")],
    port: Annotated[int, typer.Option("--port", "-p", help="Port du serveur")] = DEFAULT_PORT,
    server_type: Annotated[
        str, typer.Option("--type", "-t", help="Type de serveur (emby, jellyfin)")
    ] = "emby",
    api_key: Annotated[
        str, typer.Option("--api-key", help="Cle API (Emby exige une cle pour /System/Info)")
    ] = "",
) -> None:
    """
    Teste la connexion a un serveur sans l'enregistrer.

    Exemples:
      mediabridge check-server emby.local --port 8096 --api-key XXXX
      mediabridge check-server http://jellyfin.local --type jellyfin
    """
    try:
        kind = parse_backend_kind(server_type)
    except ValueError:
        console.print(f"[red]Type de serveur inconnu : {server_type}[/red]")
        raise typer.Exit(1)

    container = Container()
    adapter = container.adapter_factory().create(
        Connection(
            display_name=kind.display_name,
            base_url=url,
            port=port,
            backend_kind=kind,
            credential_key=api_key,
        )
    )
    try:
        with suppress_loguru(), console.status("Connexion au serveur..."):
            reachable = await adapter.test_connection()
    finally:
        await adapter.close()

    if reachable:
        console.print(f"[green]{kind.display_name} joignable[/green] ({url}:{port})")
    else:
        console.print(f"[red]{kind.display_name} injoignable[/red] ({url}:{port})")
        raise typer.Exit(1)
