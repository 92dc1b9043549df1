"""SQLite storage for SplitLedger."""

import json
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Protocol

from .models import Expense, Group, Settlement, User


def new_id(prefix: str) -> str:
    """Generate a short prefixed identifier, e.g. 'usr_3f9a1c2b7d4e'."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class LedgerStore(Protocol):
    """Storage contract the service layer depends on."""

    def add_user(self, user: User) -> None: ...

    def get_user(self, user_id: str) -> User | None: ...

    def list_users(self) -> list[User]: ...

    def add_group(self, group: Group) -> None: ...

    def get_group(self, group_id: str) -> Group | None: ...

    def add_expense(self, expense: Expense) -> None: ...

    def list_expenses(self, group_id: str) -> list[Expense]: ...

    def add_settlement(self, settlement: Settlement) -> None: ...

    def list_settlements(self, group_id: str) -> list[Settlement]: ...

    def reset(self) -> None: ...

    def close(self) -> None: ...


class Database:
    """SQLite database manager."""

    def __init__(self, db_path: Path | str):
        """Initialize database connection."""
        self.db_path = db_path
        self.conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self):
        """Initialize database schema."""
        cursor = self.conn.cursor()

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                name TEXT NOT NULL,
                created_at TIMESTAMP NOT NULL
            )
        """
        )

        # Members stored as a JSON array, insertion order preserved
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS member_groups (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                name TEXT NOT NULL,
                members TEXT NOT NULL,
                created_at TIMESTAMP NOT NULL
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS expenses (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                group_id TEXT NOT NULL,
                paid_by TEXT NOT NULL,
                amount_cents INTEGER NOT NULL,
                description TEXT NOT NULL,
                participants TEXT NOT NULL,
                shares TEXT NOT NULL,
                created_at TIMESTAMP NOT NULL
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS settlements (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                group_id TEXT NOT NULL,
                from_member TEXT NOT NULL,
                to_member TEXT NOT NULL,
                amount_cents INTEGER NOT NULL,
                note TEXT NOT NULL,
                created_at TIMESTAMP NOT NULL
            )
        """
        )

        self.conn.commit()

    def close(self):
        """Close database connection."""
        self.conn.close()

    def reset(self):
        """Delete every stored record."""
        cursor = self.conn.cursor()
        for table in ("settlements", "expenses", "member_groups", "users"):
            cursor.execute(f"DELETE FROM {table}")
        self.conn.commit()

    # ========================================================================
    # User operations
    # ========================================================================

    def add_user(self, user: User):
        """Save a user."""
        self.conn.execute(
            "INSERT INTO users (id, name, created_at) VALUES (?, ?, ?)",
            (user.id, user.name, user.created_at.isoformat()),
        )
        self.conn.commit()

    def get_user(self, user_id: str) -> User | None:
        """Get a user by id."""
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT id, name, created_at FROM users WHERE id = ?", (user_id,)
        )
        row = cursor.fetchone()
        return _row_to_user(row) if row else None

    def list_users(self) -> list[User]:
        """Get all users in creation order."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT id, name, created_at FROM users ORDER BY seq")
        return [_row_to_user(row) for row in cursor.fetchall()]

    # ========================================================================
    # Group operations
    # ========================================================================

    def add_group(self, group: Group):
        """Save a group."""
        self.conn.execute(
            """
            INSERT INTO member_groups (id, name, members, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (
                group.id,
                group.name,
                json.dumps(group.members),
                group.created_at.isoformat(),
            ),
        )
        self.conn.commit()

    def get_group(self, group_id: str) -> Group | None:
        """Get a group by id."""
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT id, name, members, created_at FROM member_groups WHERE id = ?",
            (group_id,),
        )
        row = cursor.fetchone()
        if not row:
            return None

        return Group(
            id=row["id"],
            name=row["name"],
            members=json.loads(row["members"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    # ========================================================================
    # Expense operations
    # ========================================================================

    def add_expense(self, expense: Expense):
        """Save an expense."""
        self.conn.execute(
            """
            INSERT INTO expenses (
                id, group_id, paid_by, amount_cents, description,
                participants, shares, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                expense.id,
                expense.group_id,
                expense.paid_by,
                expense.amount_cents,
                expense.description,
                json.dumps(expense.participants),
                json.dumps(expense.shares),
                expense.created_at.isoformat(),
            ),
        )
        self.conn.commit()

    def list_expenses(self, group_id: str) -> list[Expense]:
        """Get all expenses of a group in creation order."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT id, group_id, paid_by, amount_cents, description,
                   participants, shares, created_at
            FROM expenses
            WHERE group_id = ?
            ORDER BY seq
            """,
            (group_id,),
        )
        return [
            Expense(
                id=row["id"],
                group_id=row["group_id"],
                paid_by=row["paid_by"],
                amount_cents=row["amount_cents"],
                description=row["description"],
                participants=json.loads(row["participants"]),
                shares=json.loads(row["shares"]),
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in cursor.fetchall()
        ]

    # ========================================================================
    # Settlement operations
    # ========================================================================

    def add_settlement(self, settlement: Settlement):
        """Save an accepted settlement."""
        self.conn.execute(
            """
            INSERT INTO settlements (
                id, group_id, from_member, to_member, amount_cents,
                note, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                settlement.id,
                settlement.group_id,
                settlement.from_member,
                settlement.to_member,
                settlement.amount_cents,
                settlement.note,
                settlement.created_at.isoformat(),
            ),
        )
        self.conn.commit()

    def list_settlements(self, group_id: str) -> list[Settlement]:
        """Get all settlements of a group in creation order."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT id, group_id, from_member, to_member, amount_cents,
                   note, created_at
            FROM settlements
            WHERE group_id = ?
            ORDER BY seq
            """,
            (group_id,),
        )
        return [
            Settlement(
                id=row["id"],
                group_id=row["group_id"],
                from_member=row["from_member"],
                to_member=row["to_member"],
                amount_cents=row["amount_cents"],
                note=row["note"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in cursor.fetchall()
        ]


def _row_to_user(row: sqlite3.Row) -> User:
    return User(
        id=row["id"],
        name=row["name"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )
