"""Category override commands."""

import click
from smsledger.cli.error_handling import handle_domain_error
from smsledger.domain.categorization import CategorizationEngine
from smsledger.domain.errors import DomainError


@click.command("categorize")
@click.argument("transaction_id", type=int)
@click.argument("category_id")
@click.option(
    "--learn/--no-learn",
    default=True,
    show_default=True,
    help="Also use this category for every transaction from the same merchant",
)
@click.pass_context
def categorize_transaction(ctx, transaction_id: int, category_id: str, learn: bool):
    """Assign a category to a transaction.

    Examples:
        smsledger categorize 1042 food
        smsledger categorize 1042 shopping --no-learn
    """
    db = ctx.obj["db"]
    engine = CategorizationEngine(db)

    try:
        txn = db.get_transaction(transaction_id)
        merchant = txn.merchant if (txn is not None and learn) else None
        engine.set_override(transaction_id, category_id, merchant=merchant)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Transaction {transaction_id} categorized as '{category_id}'")
    if merchant:
        click.echo(f"Future transactions from '{merchant}' will use '{category_id}'")


@click.command("uncategorize")
@click.argument("transaction_id", type=int)
@click.pass_context
def uncategorize_transaction(ctx, transaction_id: int):
    """Remove a transaction's category override."""
    db = ctx.obj["db"]
    engine = CategorizationEngine(db)

    try:
        removed = engine.remove_override(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if removed:
        click.echo(f"Removed override for transaction {transaction_id}")
    else:
        click.echo(f"Transaction {transaction_id} has no override")


def register_commands(cli):
    """Register categorize and uncategorize commands with main CLI."""
    cli.add_command(categorize_transaction)
    cli.add_command(uncategorize_transaction)
