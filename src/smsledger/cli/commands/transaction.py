"""Transaction listing and deletion commands."""

import click
from smsledger.cli.error_handling import handle_domain_error
from smsledger.domain.categorization import CategorizationEngine
from smsledger.domain.entities import Direction
from smsledger.domain.errors import DomainError, NotFoundError, transaction_not_found
from smsledger.utils.date_parser import date_to_millis, from_millis, parse_date


@click.command("list")
@click.option("--from", "start_date", help="Start date (YYYY-MM-DD, 'last month', ...)")
@click.option("--to", "end_date", help="End date (inclusive)")
@click.option(
    "--direction",
    type=click.Choice([Direction.DEBIT.value, Direction.CREDIT.value], case_sensitive=False),
    help="Only debits or only credits",
)
@click.option("--verbose", "-v", is_flag=True, help="Show account, reference, balance and bank")
@click.pass_context
def list_transactions(ctx, start_date: str | None, end_date: str | None, direction: str | None, verbose: bool):
    """List stored transactions with their current category."""
    db = ctx.obj["db"]
    engine = CategorizationEngine(db)

    start = None
    if start_date:
        try:
            start = date_to_millis(parse_date(start_date))
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    end = None
    if end_date:
        try:
            end = date_to_millis(parse_date(end_date), end_of_day=True)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    try:
        transactions = db.list_transactions(
            start=start,
            end=end,
            direction=Direction(direction.lower()) if direction else None,
        )
        categories = engine.categorize_all(transactions)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 100)
    click.echo(f"{'ID':<8} {'Date':<17} {'Amount':>12}  {'Dir':<6} {'Category':<14} {'Merchant':<30}")
    click.echo("-" * 100)

    for txn in transactions:
        when = from_millis(txn.date).strftime("%Y-%m-%d %H:%M")
        amount_str = f"₹{txn.amount:,.2f}"
        merchant = (txn.merchant or "")[:30]
        click.echo(
            f"{txn.source_id:<8} {when:<17} {amount_str:>12}  {txn.direction.value:<6} "
            f"{categories[txn.source_id]:<14} {merchant:<30}"
        )
        if verbose:
            details = [
                f"{label}: {value}"
                for label, value in (
                    ("Account", txn.account),
                    ("Ref", txn.reference),
                    ("Balance", txn.balance),
                    ("Bank", txn.bank_name),
                    ("Via", txn.payment_method),
                )
                if value is not None
            ]
            if details:
                click.echo(f"{'':<8} " + ", ".join(details))


@click.command("delete")
@click.argument("transaction_id", type=int)
@click.pass_context
def delete_transaction(ctx, transaction_id: int) -> None:
    """Delete a transaction and its category override.

    Examples:
        smsledger delete 1042
    """
    db = ctx.obj["db"]

    try:
        txn = db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        db.delete_transaction(transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(list_transactions)
    cli.add_command(delete_transaction)
