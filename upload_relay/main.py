"""
Main entry point for the Upload Relay service.

This module provides the command-line interface and server startup logic.
"""

import asyncio
import logging
import sys
from typing import Any, Dict, Optional

import aiohttp
import typer
import uvicorn

from .core.exceptions import ConfigError
from .infrastructure.config.loader import ConfigLoader
from .infrastructure.config.models import ApplicationConfig
from .infrastructure.logging.setup import setup_logging
from .presentation.api.app import create_app

cli = typer.Typer(
    name="upload-relay",
    help="Streaming multipart upload server with throttled progress notifications"
)

logger = logging.getLogger(__name__)


@cli.command()
def start(
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Configuration file path"
    ),
    host: Optional[str] = typer.Option(
        None, "--host", help="Server host address"
    ),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", help="Server port"
    ),
    storage_root: Optional[str] = typer.Option(
        None, "--storage-root", "-s", help="Directory uploads are stored in"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level"
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Enable debug mode"
    )
) -> None:
    """Start the upload server."""

    config = ConfigLoader().load_config(config_file)

    if host:
        config.server.host = host
    if port:
        config.server.port = port
    if storage_root:
        config.upload.storage_root = storage_root
    if log_level:
        config.logging.level = log_level.upper()
    if debug:
        config.debug = True
        config.logging.level = "DEBUG"

    setup_logging(config.logging)

    logger.info(f"Starting {config.name} v{config.version}")
    logger.info(f"Environment: {config.environment}")
    logger.info(f"Progress rate limit: {config.upload.rate_limit_interval_ms}ms")

    try:
        asyncio.run(run_application(config))
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
    except Exception as e:
        logger.error(f"Application failed to start: {e}")
        sys.exit(1)


@cli.command()
def init_config(
    output: str = typer.Option(
        "config.yaml", "--output", "-o", help="Where to write the YAML file"
    )
) -> None:
    """Write the default configuration as YAML."""
    try:
        ConfigLoader().write_defaults(output)
    except ConfigError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Wrote default configuration to {output}")


@cli.command()
def validate_config(
    config_file: str = typer.Argument(..., help="YAML or JSON configuration file")
) -> None:
    """Check that a configuration file loads, then print the upload settings."""
    try:
        config = ConfigLoader().load_config(config_file)
    except (ConfigError, FileNotFoundError) as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"{config_file}: OK")
    typer.echo(f"  listen        {config.server.host}:{config.server.port}")
    typer.echo(f"  storage root  {config.upload.storage_root}")
    typer.echo(f"  rate limit    {config.upload.rate_limit_interval_ms}ms")


async def _fetch_health(url: str, timeout: float) -> Dict[str, Any]:
    async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session:
        async with session.get(url) as response:
            response.raise_for_status()
            return await response.json()


@cli.command()
def health_check(
    host: str = typer.Option("localhost", "--host", help="Server host"),
    port: int = typer.Option(3000, "--port", help="Server port"),
    timeout: float = typer.Option(10.0, "--timeout", help="Request timeout in seconds")
) -> None:
    """Query /health on a running server; exit 1 unless it reports healthy."""
    url = f"http://{host}:{port}/health"
    try:
        report = asyncio.run(_fetch_health(url, timeout))
    except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
        typer.echo(f"Health check failed: {e}")
        raise typer.Exit(code=1)

    status = report.get("status", "unknown")
    connections = report.get("components", {}).get("connections", {}).get("details", {})
    typer.echo(f"{url}: {status} "
               f"({connections.get('active_connections', 0)} active connection(s))")
    if status != "healthy":
        raise typer.Exit(code=1)


async def run_application(config: ApplicationConfig) -> None:
    """
    Run the server with the given configuration.

    Args:
        config: Application configuration
    """
    app = create_app(config)

    server_config = uvicorn.Config(
        app=app,
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level.lower(),
        access_log=config.debug,
        timeout_keep_alive=7200
    )

    await uvicorn.Server(server_config).serve()


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
