"""Learned merchant mapping commands."""

import click
from smsledger.cli.error_handling import handle_domain_error
from smsledger.domain.categorization import CategorizationEngine
from smsledger.domain.errors import DomainError
from smsledger.utils.date_parser import from_millis


@click.group()
def mappings_group():
    """Inspect or reset learned merchant categories."""
    pass


@mappings_group.command("list")
@click.pass_context
def list_mappings(ctx):
    """List learned merchant categories."""
    engine = CategorizationEngine(ctx.obj["db"])
    try:
        mappings = engine.list_merchant_mappings()
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not mappings:
        click.echo("No merchant mappings learned yet.")
        return

    click.echo(f"{'Merchant':<32} {'Category':<14} {'Updated':<17}")
    click.echo("-" * 65)
    for mapping in mappings:
        updated = from_millis(mapping.updated_at).strftime("%Y-%m-%d %H:%M")
        click.echo(f"{mapping.merchant[:32]:<32} {mapping.category_id:<14} {updated:<17}")


@mappings_group.command("reset")
@click.pass_context
def reset_mappings(ctx):
    """Forget all learned merchant categories (overrides are kept)."""
    engine = CategorizationEngine(ctx.obj["db"])

    if not click.confirm("Are you sure you want to forget all learned merchant categories?"):
        click.echo("Reset cancelled.")
        return

    try:
        count = engine.reset_all_merchant_mappings()
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Removed {count} merchant mapping(s)")


def register_commands(cli: click.Group) -> None:
    """Register mapping commands with main CLI."""
    cli.add_command(mappings_group, name="mappings")
