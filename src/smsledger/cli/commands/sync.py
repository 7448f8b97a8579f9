"""Sync command."""

import click
from smsledger.cli.error_handling import handle_domain_error
from smsledger.domain.categorization import CategorizationEngine
from smsledger.domain.entities import SyncOutcome
from smsledger.domain.errors import SyncInProgressError
from smsledger.domain.sync import DEFAULT_LOOKBACK_DAYS, SyncCoordinator
from smsledger.sources.csv_source import CsvMessageSource


@click.command("sync")
@click.argument("source", type=click.Path(dir_okay=False))
@click.option(
    "--days",
    type=click.IntRange(min=1),
    default=DEFAULT_LOOKBACK_DAYS,
    show_default=True,
    envvar="SMSLEDGER_LOOKBACK_DAYS",
    help="Lookback window in days when there is no cursor (or with --full)",
)
@click.option("--full", is_flag=True, help="Ignore the cursor and re-read the whole window")
@click.pass_context
def sync_messages(ctx, source: str, days: int, full: bool):
    """Import transactions from an SMS inbox export.

    SOURCE is a CSV file with the columns id, address, body, date and read.
    Only messages newer than the last sync are read unless --full is given.

    Examples:
        smsledger sync inbox.csv
        smsledger sync inbox.csv --full --days 90
    """
    db = ctx.obj["db"]
    coordinator = SyncCoordinator(
        CsvMessageSource(source),
        db,
        CategorizationEngine(db),
        default_lookback_days=days,
    )

    try:
        summary = coordinator.sync(full=full)
    except SyncInProgressError as e:
        handle_domain_error(ctx, e)
        return

    if summary.outcome == SyncOutcome.SOURCE_UNAVAILABLE:
        click.echo(f"Error: Message source unavailable: {summary.error}", err=True)
        ctx.exit(1)
    if summary.outcome == SyncOutcome.PERSISTENCE_FAILED:
        click.echo(f"Error: Sync failed, nothing was lost; run it again. ({summary.error})", err=True)
        ctx.exit(1)

    mode = "incremental" if summary.incremental else "full window"
    click.echo(f"\nSync complete ({mode}):")
    click.echo(f"  Messages read: {summary.messages_read}")
    click.echo(f"  Transactional: {summary.transactional}")
    click.echo(f"  Saved: {summary.saved} new transactions")
    click.echo(f"  Duplicates: {summary.duplicates}")
    if summary.extraction_failures:
        click.echo(f"  Unparsed: {summary.extraction_failures}")
    if summary.skipped_records:
        click.echo(f"  Skipped records: {summary.skipped_records}")
    for category_id, count in sorted(summary.categories.items()):
        click.echo(f"    {category_id}: {count}")
    if summary.outcome == SyncOutcome.CANCELLED:
        click.echo("Sync was cancelled before the end of the inbox.")


def register_commands(cli):
    """Register sync command with main CLI."""
    cli.add_command(sync_messages)
