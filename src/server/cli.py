"""Click CLI for running and exercising the LINE webhook server."""

from __future__ import annotations

import os
from pathlib import Path

import click
import uvicorn

from src.config import ConfigError, Settings, configure_logging
from src.webhook.line import SIGNATURE_HEADER, compute_signature


@click.group()
def cli() -> None:
    """LINE to Gemini webhook bridge."""


@cli.command()
@click.option("--host", default="0.0.0.0", help="Interface to bind.")
@click.option("--port", default=8080, type=int, help="Port to listen on.")
def serve(host: str, port: int) -> None:
    """Run the webhook server."""
    try:
        settings = Settings.from_env()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    configure_logging(settings.log_level)
    uvicorn.run(
        "src.server.app:create_app_from_env",
        factory=True,
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )


@cli.command()
@click.argument("body_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--secret", default=None, help="Channel secret (default: LINE_CHANNEL_SECRET).")
def sign(body_file: Path, secret: str | None) -> None:
    """Print the x-line-signature header for a request body file."""
    secret = secret or os.environ.get("LINE_CHANNEL_SECRET")
    if not secret:
        raise click.ClickException("No channel secret: pass --secret or set LINE_CHANNEL_SECRET")
    signature = compute_signature(secret, body_file.read_bytes())
    click.echo(f"{SIGNATURE_HEADER}: {signature}")
