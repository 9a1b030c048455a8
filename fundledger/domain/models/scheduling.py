"""Domain models for deferred (scheduled) activities."""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from fundledger.domain.models.activities import Activity
from fundledger.domain.models.assets import AssetDeltas
from fundledger.utils.instants import to_utc


class ScheduledStatus(str, Enum):
    """Lifecycle states of a scheduled activity."""

    PENDING = "pending"
    COMPLETED = "completed"


@dataclass(frozen=True)
class ScheduledActivity:
    """An activity whose effect is deferred until ``scheduled_time``.

    ``account_id`` and ``activity`` are optional because records read back
    from the store may be incomplete; settlement validates them.
    """

    id: str
    account_id: str | None
    activity: Activity | None
    scheduled_time: datetime
    owner_namespace: str
    status: ScheduledStatus = ScheduledStatus.PENDING
    asset_deltas: AssetDeltas | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "scheduled_time", to_utc(self.scheduled_time))
        object.__setattr__(self, "status", ScheduledStatus(self.status))

    @property
    def is_pending(self) -> bool:
        return self.status is ScheduledStatus.PENDING

    def is_due(self, now: datetime) -> bool:
        """Return True when the record is pending and its time has come."""
        return self.is_pending and self.scheduled_time <= to_utc(now)

    def completed(self) -> "ScheduledActivity":
        """Return the record in its terminal state."""
        if not self.is_pending:
            return self
        return replace(self, status=ScheduledStatus.COMPLETED)


__all__ = ["ScheduledStatus", "ScheduledActivity"]
