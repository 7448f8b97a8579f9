"""Reference listings: categories and bank profiles."""

import click
from smsledger.domain.banks import BankRegistry
from smsledger.domain.categorization import DEFAULT_CATEGORIES


@click.command("categories")
def list_categories():
    """List categories and their matching keywords."""
    for category in DEFAULT_CATEGORIES:
        keywords = ", ".join(category.keywords) if category.keywords else "(default)"
        click.echo(f"{category.id:<14} {category.name:<20} {keywords}")


@click.command("banks")
@click.argument("sender", required=False)
@click.pass_context
def list_banks(ctx, sender: str | None):
    """List known banks, or show which bank a SENDER ID belongs to."""
    registry = BankRegistry()

    if sender is not None:
        profile = registry.resolve(sender)
        if profile is None:
            click.echo(f"Error: Unknown sender '{sender}'", err=True)
            ctx.exit(1)
        click.echo(f"{sender}: {profile.name}")
        return

    for profile in registry.profiles():
        click.echo(f"{profile.display_name:<18} {profile.name:<28} {len(profile.sender_ids)} sender IDs")


def register_commands(cli):
    """Register info commands with main CLI."""
    cli.add_command(list_categories)
    cli.add_command(list_banks)
