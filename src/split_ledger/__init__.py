"""SplitLedger - Track shared group expenses and settle debts in integer cents."""

__version__ = "0.1.0"

from .config import Settings, load_settings
from .db import Database, LedgerStore
from .ledger import net_balances
from .models import (
    EqualSplit,
    ExactShare,
    ExactSplit,
    Expense,
    Group,
    PercentageShare,
    PercentageSplit,
    Settlement,
    SettlementProposal,
    SimplifiedTransfer,
    User,
)
from .money import from_cents, to_cents
from .service import LedgerService
from .settlement import validate_settlement
from .simplify import simplify
from .split import split

__all__ = [
    "Settings",
    "load_settings",
    "Database",
    "LedgerStore",
    "net_balances",
    "EqualSplit",
    "ExactShare",
    "ExactSplit",
    "Expense",
    "Group",
    "PercentageShare",
    "PercentageSplit",
    "Settlement",
    "SettlementProposal",
    "SimplifiedTransfer",
    "User",
    "from_cents",
    "to_cents",
    "LedgerService",
    "validate_settlement",
    "simplify",
    "split",
]
