"""Pydantic domain models for SplitLedger.

All monetary fields are integer cents.
"""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ============================================================================
# Entities
# ============================================================================


class User(BaseModel):
    """A person who can belong to groups."""

    id: str
    name: str
    created_at: datetime = Field(default_factory=datetime.now)


class Group(BaseModel):
    """A set of users sharing expenses."""

    id: str
    name: str
    members: list[str]
    created_at: datetime = Field(default_factory=datetime.now)

    def has_member(self, user_id: str) -> bool:
        """Check whether a user belongs to this group."""
        return user_id in self.members


class Expense(BaseModel):
    """A shared expense paid by one member and owed by its participants.

    Invariants:
    - sum(shares.values()) == amount_cents
    - every key of shares is a participant
    """

    model_config = ConfigDict(frozen=True)

    id: str
    group_id: str
    paid_by: str
    amount_cents: int = Field(gt=0)
    description: str = ""
    participants: list[str] = Field(min_length=1)
    shares: dict[str, Annotated[int, Field(ge=0)]]
    created_at: datetime = Field(default_factory=datetime.now)

    @model_validator(mode="after")
    def _check_shares(self) -> "Expense":
        unknown = set(self.shares) - set(self.participants)
        if unknown:
            raise ValueError(f"Shares reference non-participants: {sorted(unknown)}")
        if sum(self.shares.values()) != self.amount_cents:
            raise ValueError(
                f"Shares sum to {sum(self.shares.values())}, "
                f"expected {self.amount_cents}"
            )
        return self


class SettlementProposal(BaseModel):
    """A settlement candidate, not yet accepted."""

    group_id: str
    from_member: str
    to_member: str
    amount_cents: int = Field(gt=0)
    note: str = ""

    @model_validator(mode="after")
    def _check_distinct_members(self) -> "SettlementProposal":
        if self.from_member == self.to_member:
            raise ValueError("from_member and to_member cannot be the same")
        return self


class Settlement(SettlementProposal):
    """A cash transfer from a debtor to a creditor, accepted into the ledger."""

    model_config = ConfigDict(frozen=True)

    id: str
    created_at: datetime = Field(default_factory=datetime.now)


class SimplifiedTransfer(BaseModel):
    """One debtor -> creditor edge of the simplified debt graph."""

    model_config = ConfigDict(frozen=True)

    from_member: str
    to_member: str
    amount_cents: int = Field(gt=0)


# ============================================================================
# Split policies
# ============================================================================


class ExactShare(BaseModel):
    """A fixed amount owed by one member."""

    member_id: str
    amount_cents: int = Field(ge=0)


class PercentageShare(BaseModel):
    """A percentage of the total owed by one member."""

    member_id: str
    percentage: float = Field(ge=0)


class EqualSplit(BaseModel):
    """Divide the total evenly across all participants."""

    type: Literal["equal"] = "equal"


class ExactSplit(BaseModel):
    """Each listed member owes an explicit amount."""

    type: Literal["exact"] = "exact"
    values: list[ExactShare] = Field(default_factory=list)


class PercentageSplit(BaseModel):
    """Each listed member owes a percentage of the total."""

    type: Literal["percentage"] = "percentage"
    values: list[PercentageShare] = Field(default_factory=list)


SplitPolicy = Annotated[
    EqualSplit | ExactSplit | PercentageSplit, Field(discriminator="type")
]


# ============================================================================
# Views
# ============================================================================


class GroupBalances(BaseModel):
    """Net balances and the simplified transfers that would settle them."""

    group_id: str
    group_name: str
    net: dict[str, int]
    simplified: list[SimplifiedTransfer]


class UserSummary(BaseModel):
    """What one member owes and is owed within a group."""

    user_id: str
    user_name: str
    group_id: str
    group_name: str
    owes: list[SimplifiedTransfer]
    owed_by: list[SimplifiedTransfer]
    total_owes_cents: int
    total_owed_by_cents: int
