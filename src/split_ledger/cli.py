"""CLI for SplitLedger using Typer."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum

import typer
from rich.console import Console
from rich.table import Table

from .config import load_settings
from .db import Database
from .exceptions import InvalidRequestError, SplitLedgerError
from .models import (
    EqualSplit,
    ExactShare,
    ExactSplit,
    GroupBalances,
    PercentageShare,
    PercentageSplit,
    SplitPolicy,
)
from .money import from_cents, to_cents
from .service import LedgerService

app = typer.Typer(
    name="split-ledger",
    help="Track shared expenses and settle group debts",
)
user_app = typer.Typer(help="Manage users")
group_app = typer.Typer(help="Manage groups")
expense_app = typer.Typer(help="Record expenses")

app.add_typer(user_app, name="user")
app.add_typer(group_app, name="group")
app.add_typer(expense_app, name="expense")

console = Console()

# Populated by each command run; read by format_money
_currency = {"symbol": "$"}


class SplitType(str, Enum):
    equal = "equal"
    exact = "exact"
    percentage = "percentage"


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@contextmanager
def open_service(verbose: bool = False) -> Iterator[LedgerService]:
    """Open the configured database and yield a service, reporting errors."""
    setup_logging(verbose)

    db = None
    try:
        settings = load_settings()
        _currency["symbol"] = settings.currency_symbol
        db = Database(settings.database_path)
        yield LedgerService(db)
    except SplitLedgerError as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose:
            raise
        sys.exit(1)
    finally:
        if db is not None:
            db.close()


def format_money(cents: int, use_color: bool = True) -> str:
    """
    Format money in accounting style with alignment.

    Negative amounts use parentheses: ($85.02)
    Positive amounts have spaces:      $85.02
    """
    symbol = _currency["symbol"]
    abs_amount = abs(from_cents(cents))
    if cents < 0:
        if use_color:
            return f"({symbol}[red]{abs_amount:,.2f}[/red])"
        return f"({symbol}{abs_amount:,.2f})"
    if use_color:
        return f" [green]{symbol}{abs_amount:,.2f}[/green] "
    return f" {symbol}{abs_amount:,.2f} "


def parse_shares(raw_shares: list[str]) -> list[tuple[str, str]]:
    """Parse 'member=value' pairs, keeping their order."""
    pairs = []
    for raw in raw_shares:
        member_id, sep, value = raw.partition("=")
        if not sep or not member_id.strip() or not value.strip():
            raise InvalidRequestError(f"Invalid share '{raw}', expected MEMBER=VALUE")
        pairs.append((member_id.strip(), value.strip()))
    return pairs


def build_policy(split_type: SplitType, raw_shares: list[str]) -> SplitPolicy:
    """Build a split policy from CLI options."""
    pairs = parse_shares(raw_shares)

    # pydantic's ValidationError is a ValueError too
    try:
        if split_type is SplitType.exact:
            return ExactSplit(
                values=[
                    ExactShare(member_id=member_id, amount_cents=to_cents(value))
                    for member_id, value in pairs
                ]
            )

        if split_type is SplitType.percentage:
            return PercentageSplit(
                values=[
                    PercentageShare(member_id=member_id, percentage=float(value))
                    for member_id, value in pairs
                ]
            )
    except ValueError as e:
        raise InvalidRequestError(f"Invalid share: {e}") from e

    if pairs:
        raise InvalidRequestError(
            "--share is only used with exact or percentage splits"
        )
    return EqualSplit()


# ============================================================================
# Users
# ============================================================================


@user_app.command("add")
def user_add(
    name: str = typer.Argument(..., help="Display name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Create a user."""
    with open_service(verbose) as service:
        user = service.create_user(name)
        console.print(f"[green]Created user[/green] {user.name} [dim]({user.id})[/dim]")


@user_app.command("list")
def user_list(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """List all users."""
    with open_service(verbose) as service:
        users = service.list_users()
        if not users:
            console.print("[yellow]No users yet.[/yellow]")
            return

        table = Table(title="Users", show_header=True, header_style="bold magenta")
        table.add_column("ID", style="dim")
        table.add_column("Name", style="cyan")
        for user in users:
            table.add_row(user.id, user.name)
        console.print(table)


# ============================================================================
# Groups
# ============================================================================


@group_app.command("create")
def group_create(
    name: str = typer.Argument(..., help="Group name"),
    members: list[str] | None = typer.Option(
        None, "--member", "-m", help="Member user id (repeat for each member)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Create a group of at least two users."""
    with open_service(verbose) as service:
        group = service.create_group(name, members or [])
        console.print(
            f"[green]Created group[/green] {group.name} [dim]({group.id})[/dim] "
            f"with {len(group.members)} members"
        )


@group_app.command("show")
def group_show(
    group_id: str = typer.Argument(..., help="Group id"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show a group and its members."""
    with open_service(verbose) as service:
        group = service.get_group(group_id)
        console.print(f"\n[bold]{group.name}[/bold] [dim]({group.id})[/dim]")
        for member_id in group.members:
            user = service.get_user(member_id)
            console.print(f"  • {user.name} [dim]({user.id})[/dim]")


# ============================================================================
# Expenses
# ============================================================================


@expense_app.command("add")
def expense_add(
    group_id: str = typer.Argument(..., help="Group id"),
    paid_by: str = typer.Option(..., "--paid-by", "-p", help="Payer user id"),
    amount: str = typer.Option(..., "--amount", "-a", help="Total, e.g. 12.50"),
    participants: list[str] | None = typer.Option(
        None,
        "--participant",
        help="Participant user id (repeat; defaults to all members)",
    ),
    split_type: SplitType = typer.Option(
        SplitType.equal, "--split", "-s", help="How to divide the total"
    ),
    shares: list[str] | None = typer.Option(
        None,
        "--share",
        help="MEMBER=VALUE, an amount for exact or a percentage for percentage",
    ),
    description: str = typer.Option("", "--description", "-d", help="Description"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Record an expense and show how it was split."""
    with open_service(verbose) as service:
        policy = build_policy(split_type, shares or [])
        expense = service.add_expense(
            group_id=group_id,
            paid_by=paid_by,
            amount_cents=to_cents(amount),
            policy=policy,
            participants=participants,
            description=description,
        )

        console.print(
            f"\n[green]Recorded expense[/green] [dim]({expense.id})[/dim] "
            f"{expense.description}"
        )
        table = Table(title="Shares", show_header=True, header_style="bold magenta")
        table.add_column("Member", style="cyan")
        table.add_column("Share", justify="right", width=14)
        for member_id, share in expense.shares.items():
            table.add_row(member_id, format_money(share))
        console.print(table)
        console.print(f"  Total: {format_money(expense.amount_cents)}")


# ============================================================================
# Balances and settlements
# ============================================================================


def display_balances(balances: GroupBalances):
    """Display net balances and simplified transfers as tables."""
    console.print(
        f"\n[bold]Balances for {balances.group_name}[/bold] "
        f"[dim]({balances.group_id})[/dim]\n"
    )

    net_table = Table(title="Net", show_header=True, header_style="bold magenta")
    net_table.add_column("Member", style="cyan")
    net_table.add_column("Balance", justify="right", width=14)
    for member_id, cents in sorted(balances.net.items()):
        net_table.add_row(member_id, format_money(cents))
    console.print(net_table)

    if not balances.simplified:
        console.print("\n[green]All settled up.[/green]")
        return

    transfer_table = Table(
        title="Simplified Transfers", show_header=True, header_style="bold magenta"
    )
    transfer_table.add_column("From", style="cyan")
    transfer_table.add_column("To", style="cyan")
    transfer_table.add_column("Amount", justify="right", width=14)
    for transfer in balances.simplified:
        transfer_table.add_row(
            transfer.from_member,
            transfer.to_member,
            format_money(transfer.amount_cents),
        )
    console.print(transfer_table)


@app.command()
def balances(
    group_id: str = typer.Argument(..., help="Group id"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show net balances and who should pay whom."""
    with open_service(verbose) as service:
        display_balances(service.group_balances(group_id))


@app.command()
def summary(
    user_id: str = typer.Argument(..., help="User id"),
    group_id: str = typer.Option(..., "--group", "-g", help="Group id"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show what a user owes and is owed within a group."""
    with open_service(verbose) as service:
        result = service.user_summary(user_id, group_id)

        console.print(
            f"\n[bold]{result.user_name}[/bold] in [bold]{result.group_name}[/bold]"
        )
        for transfer in result.owes:
            console.print(
                f"  owes {transfer.to_member}: {format_money(-transfer.amount_cents)}"
            )
        for transfer in result.owed_by:
            console.print(
                f"  owed by {transfer.from_member}: "
                f"{format_money(transfer.amount_cents)}"
            )

        console.print()
        console.print("[bold]Totals:[/bold]")
        console.print(f"  Owes:    {format_money(-result.total_owes_cents)}")
        console.print(f"  Owed by: {format_money(result.total_owed_by_cents)}")


@app.command()
def settle(
    group_id: str = typer.Argument(..., help="Group id"),
    from_member: str = typer.Option(..., "--from", help="Paying (debtor) user id"),
    to_member: str = typer.Option(..., "--to", help="Receiving (creditor) user id"),
    amount: str = typer.Option(..., "--amount", "-a", help="Amount paid, e.g. 5.00"),
    note: str = typer.Option("", "--note", "-n", help="Optional note"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Record a payment that pays down a simplified debt."""
    with open_service(verbose) as service:
        settlement = service.settle(
            group_id=group_id,
            from_member=from_member,
            to_member=to_member,
            amount_cents=to_cents(amount),
            note=note,
        )
        console.print(
            f"\n[bold green]✓ Settlement recorded[/bold green] "
            f"[dim]({settlement.id})[/dim]: {settlement.from_member} → "
            f"{settlement.to_member} {format_money(settlement.amount_cents)}"
        )


@app.command()
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Delete every user, group, expense and settlement."""
    if not yes and not typer.confirm("Delete all ledger data?"):
        console.print("[yellow]Cancelled.[/yellow]")
        return

    with open_service(verbose) as service:
        service.reset()
        console.print("[green]Ledger reset.[/green]")


if __name__ == "__main__":
    app()
