"""Check proposed settlements against the current simplified debt graph."""

import logging
from collections.abc import Iterable

from .exceptions import NoOutstandingDebtError, SettlementExceedsOutstandingError
from .models import SettlementProposal, SimplifiedTransfer

logger = logging.getLogger(__name__)


def find_edge(
    transfers: Iterable[SimplifiedTransfer], from_member: str, to_member: str
) -> SimplifiedTransfer | None:
    """Find the transfer from from_member to to_member. Direction matters."""
    for transfer in transfers:
        if transfer.from_member == from_member and transfer.to_member == to_member:
            return transfer
    return None


def validate_settlement(
    proposal: SettlementProposal, transfers: Iterable[SimplifiedTransfer]
) -> int:
    """
    Accept or reject a settlement against freshly simplified transfers.

    The transfers must be recomputed from the group's full history right
    before calling this; a stale graph can let two settlements over-pay the
    same debt.

    Args:
        proposal: The settlement candidate
        transfers: Current output of simplify() for the group

    Returns:
        The accepted amount in cents

    Raises:
        NoOutstandingDebtError: If no edge runs from payer to payee
        SettlementExceedsOutstandingError: If the amount exceeds that edge
    """
    edge = find_edge(transfers, proposal.from_member, proposal.to_member)
    if edge is None:
        raise NoOutstandingDebtError(proposal.from_member, proposal.to_member)

    if proposal.amount_cents > edge.amount_cents:
        raise SettlementExceedsOutstandingError(
            amount=proposal.amount_cents, outstanding=edge.amount_cents
        )

    logger.debug(
        f"Settlement {proposal.from_member} -> {proposal.to_member} "
        f"of {proposal.amount_cents} accepted (outstanding {edge.amount_cents})"
    )

    return proposal.amount_cents
