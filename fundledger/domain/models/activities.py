"""Domain models for activities and derived balance points."""

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum

from fundledger.domain.exceptions import InvalidActivityError
from fundledger.utils.decimal_utils import coerce_decimal
from fundledger.utils.instants import to_utc


class ActivityType(str, Enum):
    """Kinds of monetary events recorded in an activity log."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    PROFIT = "profit"
    INCOME = "income"
    MANUAL_ENTRY = "manual-entry"

    @classmethod
    def parse(cls, value) -> "ActivityType":
        """Return the member matching a raw type value.

        Raises:
            InvalidActivityError: If the value names no known type.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise InvalidActivityError(
                f"Unknown activity type: {value!r}"
            ) from exc


@dataclass(frozen=True)
class Activity:
    """A single dated monetary event in an account's log.

    Attributes:
        time: Instant the event took effect (normalized to UTC).
        activity_type: Kind of event.
        amount: Non-negative amount; the sign comes from the type.
        recipient: Account identifier the money is attributed to.
        fund: Fund the event belongs to.
        is_dividend: Whether the event was flagged as a dividend.
        parent_collection: Namespace tag of the owning collection.
        id: Store identifier, None until persisted.
        created_at: Server time the entry was written by settlement.
    """

    time: datetime
    activity_type: ActivityType
    amount: Decimal
    recipient: str
    fund: str
    is_dividend: bool = False
    parent_collection: str | None = None
    id: str | None = None
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.time, datetime):
            raise InvalidActivityError(
                f"Activity time must be a datetime, got {self.time!r}"
            )
        try:
            amount = coerce_decimal(self.amount)
        except ValueError as exc:
            raise InvalidActivityError(str(exc)) from exc
        if amount < 0:
            raise InvalidActivityError(
                f"Activity amount must be non-negative, got {amount}"
            )
        try:
            object.__setattr__(self, "time", to_utc(self.time))
        except OverflowError as exc:
            raise InvalidActivityError(
                f"Activity time out of range: {self.time!r}"
            ) from exc
        object.__setattr__(
            self, "activity_type", ActivityType.parse(self.activity_type)
        )
        object.__setattr__(self, "amount", amount)
        if self.created_at is not None:
            object.__setattr__(self, "created_at", to_utc(self.created_at))

    @property
    def signed_amount(self) -> Decimal:
        """Return the amount with withdrawals negated."""
        if self.activity_type is ActivityType.WITHDRAWAL:
            return -self.amount
        return self.amount

    def settled(self, namespace: str, created_at: datetime) -> "Activity":
        """Return a copy stamped for insertion by settlement."""
        return replace(
            self,
            id=None,
            parent_collection=namespace,
            created_at=created_at,
        )


@dataclass(frozen=True)
class BalancePoint:
    """Running balance sample emitted for one eligible activity.

    Attributes:
        account: Recipient identifier, or the cumulative sentinel.
        amount: Running balance after the event.
        cashflow: Signed delta contributed by the event.
        time: Instant of the event.
        fund: Fund the event belongs to; None on namespace-wide cumulative
            points.
    """

    account: str
    amount: Decimal
    cashflow: Decimal
    time: datetime
    fund: str | None = None


__all__ = ["ActivityType", "Activity", "BalancePoint"]
