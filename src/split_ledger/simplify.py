"""Greedy debt simplification.

Reduces a net-balance vector to debtor -> creditor transfers that zero every
balance. Debtors and creditors are each walked in ascending member-id order,
so the result is reproducible. It is not guaranteed to be the minimum number
of transfers.
"""

import logging
from collections.abc import Mapping

from .models import SimplifiedTransfer

logger = logging.getLogger(__name__)


def simplify(net: Mapping[str, int]) -> list[SimplifiedTransfer]:
    """
    Turn net balances into an ordered list of settling transfers.

    Args:
        net: Member id -> balance in cents (must sum to 0)

    Returns:
        Transfers in sweep order; applying them drives every balance to 0
    """
    debtors = sorted(
        [member, -balance] for member, balance in net.items() if balance < 0
    )
    creditors = sorted(
        [member, balance] for member, balance in net.items() if balance > 0
    )

    transfers = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]

        amount = min(debtor[1], creditor[1])
        if amount > 0:
            transfers.append(
                SimplifiedTransfer(
                    from_member=debtor[0], to_member=creditor[0], amount_cents=amount
                )
            )
            debtor[1] -= amount
            creditor[1] -= amount

        if debtor[1] == 0:
            i += 1
        if creditor[1] == 0:
            j += 1

    logger.debug(
        f"Simplified {len(debtors)} debtors and {len(creditors)} creditors "
        f"into {len(transfers)} transfers"
    )

    return transfers
