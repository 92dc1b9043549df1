"""Split an expense total into exact per-participant shares.

Every function here returns shares whose sum equals the total, in cents.
Rounding residue is handed out one cent at a time in a deterministic order
rather than dropped or absorbed by floating point.
"""

import logging
from collections.abc import Sequence
from decimal import Decimal

from .exceptions import (
    EmptyParticipantSetError,
    InvalidAmountError,
    NotAParticipantError,
    PercentageSumInvalidError,
    SplitSumMismatchError,
)
from .models import (
    EqualSplit,
    ExactShare,
    ExactSplit,
    PercentageShare,
    PercentageSplit,
    SplitPolicy,
)

logger = logging.getLogger(__name__)

PERCENTAGE_TOLERANCE = 1e-6


def unique_in_order(members: Sequence[str]) -> list[str]:
    """Drop repeated member ids, keeping the first occurrence."""
    return list(dict.fromkeys(members))


def split(
    policy: SplitPolicy, total_cents: int, participants: Sequence[str]
) -> dict[str, int]:
    """
    Compute shares for an expense according to a split policy.

    Args:
        policy: Equal, exact or percentage split
        total_cents: Expense total in cents (>= 0)
        participants: Participant ids in caller order (used for tie-breaks)

    Returns:
        Mapping of member id to share in cents, summing to total_cents

    Raises:
        SplitError: If the policy cannot produce valid shares
    """
    if total_cents < 0:
        raise InvalidAmountError(f"Total must be non-negative, got {total_cents}")

    ordered = unique_in_order(participants)

    if isinstance(policy, EqualSplit):
        shares = split_equal(total_cents, ordered)
    elif isinstance(policy, ExactSplit):
        shares = split_exact(total_cents, ordered, policy.values)
    elif isinstance(policy, PercentageSplit):
        shares = split_percentage(total_cents, ordered, policy.values)
    else:
        raise TypeError(f"Unsupported split policy: {type(policy).__name__}")

    assert sum(shares.values()) == total_cents, "Split failed to conserve total"
    return shares


def split_equal(total_cents: int, participants: Sequence[str]) -> dict[str, int]:
    """
    Divide a total evenly, giving leftover cents to the first participants.

    Example:
        1000 over [A, B, C] -> {A: 334, B: 333, C: 333}
    """
    ordered = unique_in_order(participants)
    n = len(ordered)
    if n == 0:
        raise EmptyParticipantSetError()

    base, remainder = divmod(total_cents, n)
    shares = {member: base for member in ordered}
    for member in ordered[:remainder]:
        shares[member] += 1

    if remainder:
        logger.debug(f"Equal split of {total_cents} gave +1 cent to {remainder} of {n}")

    return shares


def split_exact(
    total_cents: int, participants: Sequence[str], values: Sequence[ExactShare]
) -> dict[str, int]:
    """Assign explicit amounts; they must add up to the total exactly."""
    allowed = set(participants)
    shares: dict[str, int] = {}

    for entry in values:
        if entry.member_id not in allowed:
            raise NotAParticipantError(entry.member_id)
        if entry.amount_cents < 0:
            raise InvalidAmountError(
                f"Share for {entry.member_id} must be non-negative, "
                f"got {entry.amount_cents}"
            )
        shares[entry.member_id] = shares.get(entry.member_id, 0) + entry.amount_cents

    actual = sum(shares.values())
    if actual != total_cents:
        raise SplitSumMismatchError(expected=total_cents, actual=actual)

    return shares


def split_percentage(
    total_cents: int,
    participants: Sequence[str],
    values: Sequence[PercentageShare],
) -> dict[str, int]:
    """
    Assign shares by percentage using the largest-remainder method.

    Steps:
    1. Floor each entry's exact share (total * pct / 100)
    2. Compute residual = total - sum(floors)
    3. Give one cent to each entry with the largest fractional part,
       ties broken by input order

    Percentages are read through str() into Decimal so 33.33 means exactly
    33.33; the 1e-6 tolerance applies only to the percentage sum check.
    """
    allowed = set(participants)
    for entry in values:
        if entry.member_id not in allowed:
            raise NotAParticipantError(entry.member_id)
        if entry.percentage < 0:
            raise PercentageSumInvalidError(
                entry.percentage,
                f"Percentage for {entry.member_id} must be non-negative",
            )

    pct_total = sum(entry.percentage for entry in values)
    if not abs(pct_total - 100) <= PERCENTAGE_TOLERANCE:  # also rejects NaN
        raise PercentageSumInvalidError(pct_total)

    shares: dict[str, int] = {}
    fractions: list[tuple[str, Decimal]] = []
    for entry in values:
        raw = Decimal(total_cents) * Decimal(str(entry.percentage)) / 100
        floored = int(raw)  # raw is non-negative, so int() floors
        shares[entry.member_id] = shares.get(entry.member_id, 0) + floored
        fractions.append((entry.member_id, raw - floored))

    residual = total_cents - sum(shares.values())
    if residual == 0 or not fractions:
        return shares

    # Stable sort keeps input order among equal fractions
    ranked = sorted(fractions, key=lambda item: item[1], reverse=True)

    # More residual than entries only happens inside the percentage tolerance
    # on very large totals; keep cycling so no cent is lost.
    idx = 0
    while residual > 0:
        shares[ranked[idx % len(ranked)][0]] += 1
        residual -= 1
        idx += 1

    # Percentages slightly above 100 can overshoot: take cents back from the
    # smallest fractional parts first
    takers = [member_id for member_id, _frac in reversed(ranked)]
    while residual < 0:
        progressed = False
        for member_id in takers:
            if residual == 0:
                break
            if shares[member_id] > 0:
                shares[member_id] -= 1
                residual += 1
                progressed = True
        if not progressed:
            raise PercentageSumInvalidError(pct_total)

    if idx:
        logger.debug(f"Percentage split distributed {idx} residual cents")

    return shares
