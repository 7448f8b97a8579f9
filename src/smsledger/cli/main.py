"""Main CLI entry point."""

import click
from smsledger.database.factories import create_sqlite_database
from smsledger.utils.logger import setup_logging

# Import and register all commands at module level
from smsledger.cli.commands import (
    categorize,
    cursor,
    info,
    mappings,
    sync,
    transaction,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides SMSLEDGER_DB_PATH environment variable)",
    envvar="SMSLEDGER_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="SMSLEDGER_LOG_LEVEL",
    help="Logging level (overrides SMSLEDGER_LOG_LEVEL environment variable)",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """smsledger - Bank SMS transaction tracker.

    Reads bank and wallet alerts from an SMS inbox export, keeps the ones
    that describe a transaction, and stores them categorized and without
    duplicates.
    """
    ctx.ensure_object(dict)
    setup_logging(log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
sync.register_commands(cli)
transaction.register_commands(cli)
categorize.register_commands(cli)
mappings.register_commands(cli)
cursor.register_commands(cli)
info.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
