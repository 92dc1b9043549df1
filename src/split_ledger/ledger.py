"""Fold a group's expense and settlement history into net balances."""

import logging
from collections.abc import Iterable

from .models import Expense, Settlement

logger = logging.getLogger(__name__)


def net_balances(
    group_members: Iterable[str],
    expenses: Iterable[Expense],
    settlements: Iterable[Settlement],
) -> dict[str, int]:
    """
    Compute the signed balance of every member, in cents.

    Positive means the group owes this member money, negative means the
    member owes the group. Members with no activity appear with 0, and ids
    referenced by records but missing from group_members are still included.

    The result is a pure sum, so record order does not matter and the
    balances always add up to 0.

    Args:
        group_members: Current member ids of the group
        expenses: Every expense recorded for the group
        settlements: Every accepted settlement for the group

    Returns:
        Mapping of member id to net balance in cents
    """
    net = {member: 0 for member in group_members}
    expense_count = 0
    settlement_count = 0

    # Expenses: payer is owed the total, each share holder owes their share
    for expense in expenses:
        net[expense.paid_by] = net.get(expense.paid_by, 0) + expense.amount_cents
        for member, share in expense.shares.items():
            net[member] = net.get(member, 0) - share
        expense_count += 1

    # Settlements: cash moves debtor -> creditor
    for settlement in settlements:
        net[settlement.from_member] = (
            net.get(settlement.from_member, 0) + settlement.amount_cents
        )
        net[settlement.to_member] = (
            net.get(settlement.to_member, 0) - settlement.amount_cents
        )
        settlement_count += 1

    logger.debug(
        f"Folded {expense_count} expenses and {settlement_count} settlements "
        f"into {len(net)} balances"
    )

    return net
