"""Custom exceptions for SplitLedger."""


class SplitLedgerError(Exception):
    """Base exception for all SplitLedger errors."""

    pass


class ConfigurationError(SplitLedgerError):
    """Raised when configuration is invalid or missing."""

    pass


class InvalidAmountError(SplitLedgerError):
    """Raised when a monetary amount cannot be used."""

    pass


class InvalidRequestError(SplitLedgerError):
    """Raised when a request is missing required data."""

    pass


class NotFoundError(SplitLedgerError):
    """Base class for lookups of entities that do not exist."""

    pass


class UserNotFoundError(NotFoundError):
    """Raised when a user id is unknown."""

    def __init__(self, user_id: str, message: str | None = None):
        self.user_id = user_id
        super().__init__(message or f"User {user_id} not found")


class GroupNotFoundError(NotFoundError):
    """Raised when a group id is unknown."""

    def __init__(self, group_id: str, message: str | None = None):
        self.group_id = group_id
        super().__init__(message or f"Group {group_id} not found")


class MembershipError(SplitLedgerError):
    """Raised when a user is referenced in a group they do not belong to."""

    def __init__(self, member_id: str, group_id: str, message: str | None = None):
        self.member_id = member_id
        self.group_id = group_id
        super().__init__(
            message or f"User {member_id} is not a member of group {group_id}"
        )


# ============================================================================
# Split errors
# ============================================================================


class SplitError(SplitLedgerError):
    """Base class for errors raised while dividing an expense."""

    pass


class EmptyParticipantSetError(SplitError):
    """Raised when an equal split is requested with no participants."""

    def __init__(self, message: str | None = None):
        super().__init__(message or "Equal split requires at least one participant")


class NotAParticipantError(SplitError):
    """Raised when a split entry names someone outside the participant set."""

    def __init__(self, member_id: str, message: str | None = None):
        self.member_id = member_id
        super().__init__(message or f"{member_id} is not a participant of this expense")


class SplitSumMismatchError(SplitError):
    """Raised when exact split amounts do not add up to the expense total."""

    def __init__(self, expected: int, actual: int, message: str | None = None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            message
            or f"Exact split amounts sum to {actual} cents, expected {expected} cents"
        )


class PercentageSumInvalidError(SplitError):
    """Raised when split percentages do not add up to 100."""

    def __init__(self, total: float, message: str | None = None):
        self.total = total
        super().__init__(message or f"Percentages sum to {total}, expected 100")


# ============================================================================
# Settlement errors
# ============================================================================


class SettlementError(SplitLedgerError):
    """Base class for rejected settlements."""

    pass


class NoOutstandingDebtError(SettlementError):
    """Raised when nothing is owed in the direction of a proposed settlement."""

    def __init__(self, from_member: str, to_member: str, message: str | None = None):
        self.from_member = from_member
        self.to_member = to_member
        super().__init__(
            message
            or f"No outstanding debt from {from_member} to {to_member} "
            f"in simplified balances (or already settled)"
        )


class SettlementExceedsOutstandingError(SettlementError):
    """Raised when a settlement is larger than the debt it pays down."""

    def __init__(self, amount: int, outstanding: int, message: str | None = None):
        self.amount = amount
        self.outstanding = outstanding
        super().__init__(
            message
            or f"Settlement of {amount} cents exceeds outstanding debt "
            f"of {outstanding} cents"
        )
