"""CLI entry point for coursereg."""

from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

import click

from coursereg.config import ConfigError, Settings, load_settings
from coursereg.logging import get_logger, setup_logging

logger = get_logger("cli")


def _load(config_path: Path | None, db_path: str | None) -> Settings:
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    if db_path is not None:
        settings = replace(settings, db_path=db_path)
    return settings


@click.group()
@click.version_option()
def main() -> None:
    """coursereg - course enrollment and payment verification."""
    pass


@main.command()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a YAML settings file",
)
@click.option("--db", "db_path", default=None, help="SQLite database path (overrides config)")
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address")
@click.option("--port", default=8000, show_default=True, type=int, help="Bind port")
def serve(config_path: Path | None, db_path: str | None, host: str, port: int) -> None:
    """Serve the REST API with uvicorn."""
    import uvicorn  # noqa: PLC0415

    from coursereg.api import create_app  # noqa: PLC0415

    settings = _load(config_path, db_path)
    setup_logging(settings.log_dir, level=settings.log_level)
    logger.info("Serving on %s:%s (db=%s)", host, port, settings.db_path)
    uvicorn.run(create_app(settings), host=host, port=port)


@main.command("init-db")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a YAML settings file",
)
@click.option("--db", "db_path", default=None, help="SQLite database path (overrides config)")
def init_db(config_path: Path | None, db_path: str | None) -> None:
    """Create the database schema if it does not exist."""
    from coursereg.store import EntityStore  # noqa: PLC0415

    settings = _load(config_path, db_path)
    store = EntityStore(settings.db_path, busy_timeout=settings.busy_timeout)
    try:
        wal = store.database.is_wal_mode()
    finally:
        store.close()
    click.echo(f"Database ready: {settings.db_path} (WAL {'on' if wal else 'off'})")
