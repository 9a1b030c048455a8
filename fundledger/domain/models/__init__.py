"""Domain models package."""

from .accounts import Account
from .activities import Activity, ActivityType, BalancePoint
from .assets import (
    AssetDeltas,
    AssetDetail,
    AssetDetailOverride,
    AssetSnapshot,
    FundSnapshot,
    GeneralSnapshot,
)
from .scheduling import ScheduledActivity, ScheduledStatus

__all__ = [
    "Account",
    "Activity",
    "ActivityType",
    "BalancePoint",
    "AssetDeltas",
    "AssetDetail",
    "AssetDetailOverride",
    "AssetSnapshot",
    "FundSnapshot",
    "GeneralSnapshot",
    "ScheduledActivity",
    "ScheduledStatus",
]
