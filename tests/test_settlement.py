"""Tests for validating settlements against the simplified debt graph."""

import pytest

from split_ledger.exceptions import (
    NoOutstandingDebtError,
    SettlementExceedsOutstandingError,
)
from split_ledger.models import SettlementProposal, SimplifiedTransfer
from split_ledger.settlement import find_edge, validate_settlement


def propose(from_member: str, to_member: str, amount_cents: int) -> SettlementProposal:
    return SettlementProposal(
        group_id="g1",
        from_member=from_member,
        to_member=to_member,
        amount_cents=amount_cents,
    )


@pytest.fixture
def transfers():
    """A single simplified edge debtor -> creditor of 500 cents."""
    return [
        SimplifiedTransfer(from_member="debtor", to_member="creditor", amount_cents=500)
    ]


class TestValidateSettlement:
    """Tests for validate_settlement."""

    def test_full_amount_accepted(self, transfers):
        assert validate_settlement(propose("debtor", "creditor", 500), transfers) == 500

    def test_partial_amount_accepted(self, transfers):
        assert validate_settlement(propose("debtor", "creditor", 1), transfers) == 1

    def test_amount_over_outstanding_rejected(self, transfers):
        with pytest.raises(SettlementExceedsOutstandingError) as exc_info:
            validate_settlement(propose("debtor", "creditor", 501), transfers)

        assert exc_info.value.outstanding == 500
        assert exc_info.value.amount == 501

    def test_reverse_direction_rejected(self, transfers):
        """An edge in the other direction does not allow this settlement."""
        with pytest.raises(NoOutstandingDebtError) as exc_info:
            validate_settlement(propose("creditor", "debtor", 100), transfers)

        assert exc_info.value.from_member == "creditor"
        assert exc_info.value.to_member == "debtor"

    def test_unrelated_pair_rejected(self, transfers):
        with pytest.raises(NoOutstandingDebtError):
            validate_settlement(propose("debtor", "someone", 100), transfers)

    def test_empty_graph_rejected(self):
        with pytest.raises(NoOutstandingDebtError):
            validate_settlement(propose("debtor", "creditor", 100), [])


class TestFindEdge:
    """Tests for find_edge."""

    def test_direction_matters(self, transfers):
        assert find_edge(transfers, "debtor", "creditor") is transfers[0]
        assert find_edge(transfers, "creditor", "debtor") is None


class TestSettlementProposal:
    """Model-level checks on proposals."""

    def test_same_member_rejected(self):
        with pytest.raises(ValueError):
            propose("A", "A", 100)

    def test_non_positive_amount_rejected(self):
        with pytest.raises(ValueError):
            propose("A", "B", 0)
