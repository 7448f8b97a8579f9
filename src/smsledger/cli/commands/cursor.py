"""Sync cursor commands."""

import click
from smsledger.cli.error_handling import handle_domain_error
from smsledger.domain.errors import DomainError
from smsledger.utils.date_parser import from_millis


@click.group()
def cursor_group():
    """Inspect or reset the incremental sync cursor."""
    pass


@cursor_group.command("show")
@click.pass_context
def show_cursor(ctx):
    """Show where the next incremental sync starts."""
    db = ctx.obj["db"]
    try:
        timestamp = db.get_last_sync_timestamp()
        last_id = db.get_last_processed_id()
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if timestamp is None:
        click.echo("No sync yet; the next sync reads the full lookback window.")
        return

    when = from_millis(timestamp).strftime("%Y-%m-%d %H:%M:%S UTC")
    click.echo(f"Last sync timestamp: {when} ({timestamp})")
    if last_id is not None:
        click.echo(f"Last processed message: {last_id}")


@cursor_group.command("clear")
@click.pass_context
def clear_cursor(ctx):
    """Forget the cursor so the next sync reads the full window."""
    try:
        ctx.obj["db"].clear_sync_cursor()
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo("Sync cursor cleared")


def register_commands(cli: click.Group) -> None:
    """Register cursor commands with main CLI."""
    cli.add_command(cursor_group, name="cursor")
