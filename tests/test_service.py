"""Tests for LedgerService layer."""

import threading

import pytest

from split_ledger.db import Database
from split_ledger.exceptions import (
    GroupNotFoundError,
    InvalidAmountError,
    InvalidRequestError,
    MembershipError,
    NoOutstandingDebtError,
    NotAParticipantError,
    SettlementExceedsOutstandingError,
    SplitSumMismatchError,
    UserNotFoundError,
)
from split_ledger.models import (
    ExactShare,
    ExactSplit,
    PercentageShare,
    PercentageSplit,
)
from split_ledger.service import LedgerService


@pytest.fixture
def mock_db(tmp_path):
    """Create a temporary database."""
    db_path = tmp_path / "test.db"
    db = Database(db_path)
    yield db
    db.close()


@pytest.fixture
def service(mock_db):
    """Create a LedgerService instance."""
    return LedgerService(mock_db)


@pytest.fixture
def trio(service):
    """Three users in one group, returned as (group, alice, bob, carol)."""
    alice = service.create_user("Alice")
    bob = service.create_user("Bob")
    carol = service.create_user("Carol")
    group = service.create_group("Trip", [alice.id, bob.id, carol.id])
    return group, alice, bob, carol


class TestUsersAndGroups:
    """Tests for user and group creation."""

    def test_create_user_generates_prefixed_id(self, service):
        user = service.create_user("  Alice ")

        assert user.name == "Alice"
        assert user.id.startswith("usr_")
        assert len(user.id) == len("usr_") + 12

    def test_create_user_requires_name(self, service):
        with pytest.raises(InvalidRequestError):
            service.create_user("   ")

    def test_list_users_in_creation_order(self, service):
        names = ["Alice", "Bob", "Carol"]
        for name in names:
            service.create_user(name)

        assert [u.name for u in service.list_users()] == names

    def test_create_group_dedupes_members(self, service):
        alice = service.create_user("Alice")
        bob = service.create_user("Bob")

        group = service.create_group("Flat", [alice.id, bob.id, alice.id])

        assert group.members == [alice.id, bob.id]
        assert service.get_group(group.id) == group

    def test_create_group_needs_two_members(self, service):
        alice = service.create_user("Alice")

        with pytest.raises(InvalidRequestError):
            service.create_group("Solo", [alice.id, alice.id])

    def test_create_group_unknown_member(self, service):
        alice = service.create_user("Alice")

        with pytest.raises(UserNotFoundError) as exc_info:
            service.create_group("Flat", [alice.id, "usr_missing"])

        assert exc_info.value.user_id == "usr_missing"

    def test_get_group_missing(self, service):
        with pytest.raises(GroupNotFoundError):
            service.get_group("grp_missing")


class TestAddExpense:
    """Tests for add_expense."""

    def test_equal_split_defaults_to_all_members(self, service, trio):
        group, alice, bob, carol = trio

        expense = service.add_expense(group.id, alice.id, 1000, description="Dinner")

        assert expense.participants == [alice.id, bob.id, carol.id]
        assert expense.shares == {alice.id: 334, bob.id: 333, carol.id: 333}
        assert expense.description == "Dinner"

    def test_explicit_participants(self, service, trio):
        group, alice, bob, _carol = trio

        expense = service.add_expense(
            group.id, alice.id, 1001, participants=[bob.id, alice.id]
        )

        assert expense.shares == {bob.id: 501, alice.id: 500}

    def test_exact_split(self, service, trio):
        group, alice, bob, carol = trio
        policy = ExactSplit(
            values=[
                ExactShare(member_id=bob.id, amount_cents=600),
                ExactShare(member_id=carol.id, amount_cents=400),
            ]
        )

        expense = service.add_expense(group.id, alice.id, 1000, policy=policy)

        assert expense.shares == {bob.id: 600, carol.id: 400}

    def test_exact_split_mismatch(self, service, trio):
        group, alice, bob, _carol = trio
        policy = ExactSplit(values=[ExactShare(member_id=bob.id, amount_cents=999)])

        with pytest.raises(SplitSumMismatchError):
            service.add_expense(group.id, alice.id, 1000, policy=policy)

    def test_percentage_split(self, service, trio):
        group, alice, bob, _carol = trio
        policy = PercentageSplit(
            values=[
                PercentageShare(member_id=alice.id, percentage=33.33),
                PercentageShare(member_id=bob.id, percentage=66.67),
            ]
        )

        expense = service.add_expense(group.id, alice.id, 100, policy=policy)

        assert expense.shares == {alice.id: 33, bob.id: 67}

    def test_split_values_required(self, service, trio):
        group, alice, _bob, _carol = trio

        with pytest.raises(InvalidRequestError):
            service.add_expense(group.id, alice.id, 1000, policy=ExactSplit())

    def test_split_value_outside_participants(self, service, trio):
        group, alice, bob, carol = trio
        policy = ExactSplit(values=[ExactShare(member_id=carol.id, amount_cents=1000)])

        with pytest.raises(NotAParticipantError):
            service.add_expense(
                group.id, alice.id, 1000, policy=policy, participants=[alice.id, bob.id]
            )

    def test_payer_must_be_member(self, service, trio):
        group, _alice, _bob, _carol = trio
        outsider = service.create_user("Dave")

        with pytest.raises(MembershipError) as exc_info:
            service.add_expense(group.id, outsider.id, 1000)

        assert exc_info.value.member_id == outsider.id

    def test_participant_must_be_member(self, service, trio):
        group, alice, _bob, _carol = trio
        outsider = service.create_user("Dave")

        with pytest.raises(MembershipError):
            service.add_expense(
                group.id, alice.id, 1000, participants=[alice.id, outsider.id]
            )

    @pytest.mark.parametrize("amount", [0, -100])
    def test_amount_must_be_positive(self, service, trio, amount):
        group, alice, _bob, _carol = trio

        with pytest.raises(InvalidAmountError):
            service.add_expense(group.id, alice.id, amount)

    def test_unknown_group(self, service):
        with pytest.raises(GroupNotFoundError):
            service.add_expense("grp_missing", "usr_x", 1000)


class TestBalances:
    """Tests for group_balances and user_summary."""

    def test_three_way_scenario(self, service, trio):
        group, alice, bob, carol = trio
        service.add_expense(group.id, alice.id, 1000)

        balances = service.group_balances(group.id)

        assert balances.net == {alice.id: 666, bob.id: -333, carol.id: -333}
        assert sum(balances.net.values()) == 0
        debtors = sorted([bob.id, carol.id])
        simplified = [
            (t.from_member, t.to_member, t.amount_cents) for t in balances.simplified
        ]
        assert simplified == [
            (debtors[0], alice.id, 333),
            (debtors[1], alice.id, 333),
        ]

    def test_new_group_is_settled(self, service, trio):
        group, alice, bob, carol = trio

        balances = service.group_balances(group.id)

        assert balances.net == {alice.id: 0, bob.id: 0, carol.id: 0}
        assert balances.simplified == []

    def test_user_summary(self, service, trio):
        group, alice, bob, _carol = trio
        service.add_expense(group.id, alice.id, 1000)

        creditor = service.user_summary(alice.id, group.id)
        debtor = service.user_summary(bob.id, group.id)

        assert creditor.owes == []
        assert creditor.total_owed_by_cents == 666
        assert len(creditor.owed_by) == 2
        assert debtor.total_owes_cents == 333
        assert debtor.owes[0].to_member == alice.id
        assert debtor.owed_by == []

    def test_user_summary_requires_membership(self, service, trio):
        group, _alice, _bob, _carol = trio
        outsider = service.create_user("Dave")

        with pytest.raises(MembershipError):
            service.user_summary(outsider.id, group.id)


class TestSettle:
    """Tests for settle."""

    def test_settlement_reduces_debt(self, service, trio):
        group, alice, bob, carol = trio
        service.add_expense(group.id, alice.id, 1000)

        settlement = service.settle(group.id, bob.id, alice.id, 333, note=" cash ")

        assert settlement.id.startswith("set_")
        assert settlement.note == "cash"
        net = service.group_balances(group.id).net
        assert net == {alice.id: 333, bob.id: 0, carol.id: -333}

    def test_partial_then_rest(self, service, trio):
        group, alice, bob, _carol = trio
        service.add_expense(group.id, alice.id, 1000)

        service.settle(group.id, bob.id, alice.id, 100)
        service.settle(group.id, bob.id, alice.id, 233)

        with pytest.raises(NoOutstandingDebtError):
            service.settle(group.id, bob.id, alice.id, 1)

    def test_over_settlement_rejected(self, service, trio):
        group, alice, bob, _carol = trio
        service.add_expense(group.id, alice.id, 1000)

        with pytest.raises(SettlementExceedsOutstandingError) as exc_info:
            service.settle(group.id, bob.id, alice.id, 334)

        assert exc_info.value.outstanding == 333

    def test_reverse_direction_rejected(self, service, trio):
        group, alice, bob, _carol = trio
        service.add_expense(group.id, alice.id, 1000)

        with pytest.raises(NoOutstandingDebtError):
            service.settle(group.id, alice.id, bob.id, 100)

    def test_same_member_rejected(self, service, trio):
        group, alice, _bob, _carol = trio

        with pytest.raises(InvalidRequestError):
            service.settle(group.id, alice.id, alice.id, 100)

    def test_amount_must_be_positive(self, service, trio):
        group, alice, bob, _carol = trio
        service.add_expense(group.id, alice.id, 1000)

        with pytest.raises(InvalidAmountError):
            service.settle(group.id, bob.id, alice.id, 0)

    def test_concurrent_settlements_cannot_over_settle(self, service, trio):
        """Only as much as is owed can be accepted across threads."""
        group, alice, bob, _carol = trio
        service.add_expense(group.id, alice.id, 1000)
        accepted = []
        rejected = []

        def pay():
            try:
                accepted.append(service.settle(group.id, bob.id, alice.id, 200))
            except (NoOutstandingDebtError, SettlementExceedsOutstandingError) as e:
                rejected.append(e)

        threads = [threading.Thread(target=pay) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(accepted) == 1
        assert len(rejected) == 3
        assert service.group_balances(group.id).net[bob.id] == -133


class TestReset:
    """Tests for reset."""

    def test_reset_clears_everything(self, service, trio):
        group, alice, _bob, _carol = trio
        service.add_expense(group.id, alice.id, 1000)

        service.reset()

        assert service.list_users() == []
        with pytest.raises(GroupNotFoundError):
            service.get_group(group.id)
