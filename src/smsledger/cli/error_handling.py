"""CLI error handling helpers."""

import logging

import click

from smsledger.domain.errors import DomainError, StoreError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Print a domain error and exit with status 1.

    Store failures are transient, so the message tells the user to retry.
    """
    logger.debug("Command failed", exc_info=error)
    if isinstance(error, StoreError):
        click.echo(f"Error: {error} (nothing was changed; try again)", err=True)
    else:
        click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
