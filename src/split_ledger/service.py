"""Service layer that composes storage and the ledger core.

The core modules (split, ledger, simplify, settlement) are pure functions.
This module validates requests against stored users and groups, feeds the
core with a group's full history, and persists what the core accepts.
"""

import logging
import threading
from collections.abc import Sequence

from .db import LedgerStore, new_id
from .exceptions import (
    GroupNotFoundError,
    InvalidAmountError,
    InvalidRequestError,
    MembershipError,
    UserNotFoundError,
)
from .ledger import net_balances
from .models import (
    EqualSplit,
    Expense,
    Group,
    GroupBalances,
    Settlement,
    SettlementProposal,
    SplitPolicy,
    User,
    UserSummary,
)
from .settlement import validate_settlement
from .simplify import simplify
from .split import split, unique_in_order

logger = logging.getLogger(__name__)


class LedgerService:
    """Service for recording shared expenses and settling group debts."""

    def __init__(self, store: LedgerStore):
        """Initialize the ledger service."""
        self.store = store
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _group_lock(self, group_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(group_id, threading.Lock())

    # ========================================================================
    # Users and groups
    # ========================================================================

    def create_user(self, name: str) -> User:
        """Create a user with a generated id."""
        name = name.strip()
        if not name:
            raise InvalidRequestError("name is required")

        user = User(id=new_id("usr"), name=name)
        self.store.add_user(user)

        logger.info(f"Created user {user.id} ({user.name})")
        return user

    def list_users(self) -> list[User]:
        """List all users."""
        return self.store.list_users()

    def get_user(self, user_id: str) -> User:
        """Get a user or raise UserNotFoundError."""
        user = self.store.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def create_group(self, name: str, members: Sequence[str]) -> Group:
        """
        Create a group of existing users.

        Args:
            name: Group name
            members: User ids; repeats are dropped

        Returns:
            The stored group
        """
        name = name.strip()
        if not name:
            raise InvalidRequestError("name is required")

        unique_members = unique_in_order(members)
        if len(unique_members) < 2:
            raise InvalidRequestError("members must have at least 2 user ids")

        for user_id in unique_members:
            self.get_user(user_id)

        group = Group(id=new_id("grp"), name=name, members=unique_members)
        self.store.add_group(group)

        logger.info(f"Created group {group.id} with {len(group.members)} members")
        return group

    def get_group(self, group_id: str) -> Group:
        """Get a group or raise GroupNotFoundError."""
        group = self.store.get_group(group_id)
        if group is None:
            raise GroupNotFoundError(group_id)
        return group

    def _require_member(self, group: Group, user_id: str) -> None:
        self.get_user(user_id)
        if not group.has_member(user_id):
            raise MembershipError(user_id, group.id)

    # ========================================================================
    # Expenses
    # ========================================================================

    def add_expense(
        self,
        group_id: str,
        paid_by: str,
        amount_cents: int,
        policy: SplitPolicy | None = None,
        participants: Sequence[str] | None = None,
        description: str = "",
    ) -> Expense:
        """
        Record an expense, computing each participant's share.

        Args:
            group_id: Group the expense belongs to
            paid_by: Member who paid
            amount_cents: Total in cents (> 0)
            policy: Split policy (defaults to equal)
            participants: Members sharing the cost (defaults to all members)
            description: Free text

        Returns:
            The stored expense
        """
        with self._group_lock(group_id):
            group = self.get_group(group_id)
            self._require_member(group, paid_by)

            if amount_cents <= 0:
                raise InvalidAmountError("amount must be a positive number")

            policy = policy or EqualSplit()

            ordered = unique_in_order(participants or group.members)
            for user_id in ordered:
                self._require_member(group, user_id)

            if policy.type != "equal" and not policy.values:
                raise InvalidRequestError(
                    f"split values required for {policy.type} split"
                )

            shares = split(policy, amount_cents, ordered)

            expense = Expense(
                id=new_id("exp"),
                group_id=group.id,
                paid_by=paid_by,
                amount_cents=amount_cents,
                description=description.strip(),
                participants=ordered,
                shares=shares,
            )
            self.store.add_expense(expense)

        logger.info(
            f"Recorded expense {expense.id} of {amount_cents} cents "
            f"in group {group.id} ({policy.type} split)"
        )
        return expense

    # ========================================================================
    # Balances
    # ========================================================================

    def compute_net_balances(self, group: Group) -> dict[str, int]:
        """Recompute net balances from the group's full history."""
        return net_balances(
            group.members,
            self.store.list_expenses(group.id),
            self.store.list_settlements(group.id),
        )

    def group_balances(self, group_id: str) -> GroupBalances:
        """Net balances plus the simplified transfers that would settle them."""
        group = self.get_group(group_id)
        net = self.compute_net_balances(group)

        return GroupBalances(
            group_id=group.id,
            group_name=group.name,
            net=net,
            simplified=simplify(net),
        )

    def user_summary(self, user_id: str, group_id: str) -> UserSummary:
        """
        Summarize what one member owes and is owed within a group.

        Both lists come from the simplified graph, not from raw pairwise debts.
        """
        user = self.get_user(user_id)
        group = self.get_group(group_id)
        if not group.has_member(user_id):
            raise MembershipError(user_id, group_id)

        transfers = simplify(self.compute_net_balances(group))
        owes = [t for t in transfers if t.from_member == user_id]
        owed_by = [t for t in transfers if t.to_member == user_id]

        return UserSummary(
            user_id=user.id,
            user_name=user.name,
            group_id=group.id,
            group_name=group.name,
            owes=owes,
            owed_by=owed_by,
            total_owes_cents=sum(t.amount_cents for t in owes),
            total_owed_by_cents=sum(t.amount_cents for t in owed_by),
        )

    # ========================================================================
    # Settlements
    # ========================================================================

    def settle(
        self,
        group_id: str,
        from_member: str,
        to_member: str,
        amount_cents: int,
        note: str = "",
    ) -> Settlement:
        """
        Record a payment from a debtor to a creditor.

        The simplified graph is recomputed, the proposal validated, and the
        settlement appended while holding the group's lock.

        Raises:
            NoOutstandingDebtError: If from_member owes nothing to to_member
            SettlementExceedsOutstandingError: If the amount is too large
        """
        with self._group_lock(group_id):
            group = self.get_group(group_id)
            self._require_member(group, from_member)
            self._require_member(group, to_member)

            if from_member == to_member:
                raise InvalidRequestError("from and to members cannot be the same")
            if amount_cents <= 0:
                raise InvalidAmountError("amount must be a positive number")

            proposal = SettlementProposal(
                group_id=group.id,
                from_member=from_member,
                to_member=to_member,
                amount_cents=amount_cents,
                note=note.strip(),
            )

            transfers = simplify(self.compute_net_balances(group))
            accepted = validate_settlement(proposal, transfers)

            settlement = Settlement(
                **proposal.model_dump(exclude={"amount_cents"}),
                amount_cents=accepted,
                id=new_id("set"),
            )
            self.store.add_settlement(settlement)

        logger.info(
            f"Recorded settlement {settlement.id}: {from_member} -> {to_member} "
            f"({accepted} cents)"
        )
        return settlement

    def reset(self) -> None:
        """Delete all users, groups, expenses and settlements."""
        self.store.reset()
        logger.warning("Ledger reset: all records deleted")
