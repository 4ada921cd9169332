"""
Point d'entrée CLI de MediaBridge.

Initialise le container DI, configure le logging et fournit les commandes CLI.
"""

from typing import Annotated, Optional

import typer
from loguru import logger

from .adapters.cli.commands import check_server, servers, sessions, sweep_sessions
from .config import Settings
from .container import Container
from .logging_config import configure_logging

__version__ = "1.0.0"

app = typer.Typer(
    name="mediabridge",
    help="Passerelle web vers un serveur Emby ou Jellyfin",
)
container = Container()

# Monter les commandes
app.command()(servers)
app.command(name="check-server")(check_server)
app.command()(sessions)
app.command(name="sweep-sessions")(sweep_sessions)


def get_config() -> Settings:
    """Récupère les paramètres de l'application depuis le container DI."""
    return container.config()


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = get_config()
    logger.info("Configuration MediaBridge")
    typer.echo(f"Base de données : {config.database_url}")
    typer.echo(f"Client annoncé : {config.client_name} {config.client_version} ({config.device_name})")
    typer.echo(f"Langues audio préférées : {', '.join(config.preferred_audio_languages)}")
    typer.echo(f"TTL des sessions : {config.session_ttl_minutes} min")
    typer.echo(f"Cache d'images : {config.image_cache_dir} ({config.image_cache_ttl} s)")
    typer.echo(f"Niveau de log : {config.log_level}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"MediaBridge v{__version__}")


@app.command()
def serve(
    host: Annotated[Optional[str], typer.Option(help="Adresse d'écoute")] = None,
    port: Annotated[Optional[int], typer.Option(help="Port d'écoute")] = None,
    reload: Annotated[bool, typer.Option(help="Rechargement automatique")] = False,
) -> None:
    """Lance le serveur web MediaBridge."""
    import uvicorn

    config = get_config()
    host = host or config.host
    port = port or config.port
    typer.echo(f"Démarrage du serveur sur {host}:{port}")
    uvicorn.run("src.web.app:app", host=host, port=port, reload=reload)


def main() -> None:
    """Point d'entrée de l'application."""
    # Charge la configuration et configure le logging
    settings = container.config()
    configure_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
    )

    # Initialise la base de données (crée les tables si nécessaire)
    container.database.init()

    logger.info("Démarrage de MediaBridge", version=__version__)

    # Lance la CLI
    app()


if __name__ == "__main__":
    main()
