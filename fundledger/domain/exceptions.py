"""Exception hierarchy for the fund ledger.

    LedgerError
    |
    +-- InvalidActivityError (also ValueError)
    |   +-- InvalidScheduledActivityError
    +-- StoreError
    +-- InvariantViolationError
    +-- ScheduledActivityStateError
"""


class LedgerError(Exception):
    """Base class for every error raised by the ledger core."""


class InvalidActivityError(LedgerError, ValueError):
    """Raised when an activity payload is malformed."""


class InvalidScheduledActivityError(InvalidActivityError):
    """Raised when a scheduled record lacks its account or activity."""

    def __init__(self, scheduled_id: str, missing: list[str]) -> None:
        self.scheduled_id = scheduled_id
        self.missing = missing
        super().__init__(
            f"Scheduled activity {scheduled_id} missing {', '.join(missing)}"
        )


class StoreError(LedgerError):
    """Raised when the ledger store fails to read or write."""


class InvariantViolationError(LedgerError):
    """Raised when stored state breaks a ledger invariant."""


class ScheduledActivityStateError(LedgerError):
    """Raised when a scheduled record is no longer pending."""


__all__ = [
    "LedgerError",
    "InvalidActivityError",
    "InvalidScheduledActivityError",
    "StoreError",
    "InvariantViolationError",
    "ScheduledActivityStateError",
]
