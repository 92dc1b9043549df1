"""Tests for SQLite storage."""

from datetime import datetime

import pytest

from split_ledger.db import Database, new_id
from split_ledger.models import Expense, Group, Settlement, User


@pytest.fixture
def db():
    """In-memory database."""
    database = Database(":memory:")
    yield database
    database.close()


def test_new_id_format():
    generated = new_id("exp")

    assert generated.startswith("exp_")
    assert len(generated) == 16
    assert all(c in "0123456789abcdef" for c in generated[4:])


def test_new_id_unique():
    assert len({new_id("usr") for _ in range(100)}) == 100


def test_user_round_trip(db):
    user = User(id="usr_1", name="Alice", created_at=datetime(2024, 1, 15, 10, 0))
    db.add_user(user)

    assert db.get_user("usr_1") == user
    assert db.get_user("usr_2") is None


def test_group_keeps_member_order(db):
    group = Group(id="grp_1", name="Trip", members=["usr_b", "usr_a", "usr_c"])
    db.add_group(group)

    assert db.get_group("grp_1").members == ["usr_b", "usr_a", "usr_c"]


def test_expenses_filtered_by_group_in_insertion_order(db):
    for i, group_id in enumerate(["grp_1", "grp_2", "grp_1"]):
        db.add_expense(
            Expense(
                id=f"exp_{i}",
                group_id=group_id,
                paid_by="usr_a",
                amount_cents=100 + i,
                participants=["usr_a", "usr_b"],
                shares={"usr_a": 50, "usr_b": 50 + i},
            )
        )

    expenses = db.list_expenses("grp_1")

    assert [e.id for e in expenses] == ["exp_0", "exp_2"]
    assert expenses[1].shares == {"usr_a": 50, "usr_b": 52}


def test_settlements_filtered_by_group(db):
    db.add_settlement(
        Settlement(
            id="set_1",
            group_id="grp_1",
            from_member="usr_b",
            to_member="usr_a",
            amount_cents=250,
            note="venmo",
        )
    )

    assert [s.amount_cents for s in db.list_settlements("grp_1")] == [250]
    assert db.list_settlements("grp_2") == []
