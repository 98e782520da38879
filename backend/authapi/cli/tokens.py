"""Flask CLI commands for token storage maintenance."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext
from sqlalchemy.exc import SQLAlchemyError

from authapi.core.container import revocation_service

LOGGER = logging.getLogger(__name__)


def _echo_summary(summary: dict[str, int]) -> None:
    """Pretty-print how many rows each table lost."""
    click.echo("Purge summary:")
    width = max(len(name) for name in summary)
    for table, removed in sorted(summary.items()):
        click.echo(f"  {table.ljust(width)}  removed={removed:>4}")


@click.group("tokens")
def tokens_cli() -> None:
    """Token storage maintenance commands."""


@tokens_cli.command("purge-expired")
@with_appcontext
def purge_expired_command() -> None:
    """Delete expired revocation tombstones and refresh sessions.

    Expired tokens fail verification on their own, so their rows no longer
    protect anything.
    """
    try:
        summary = revocation_service().purge_expired()
    except SQLAlchemyError as exc:
        raise click.ClickException(f"Purge failed: {exc}") from exc
    LOGGER.info("tokens.purged %s", summary)
    _echo_summary(summary)
