"""Domain package for ledger rules and core models."""

from .constants import (
    CUMULATIVE_ACCOUNT,
    DEFAULT_IRA_PATTERN,
    DEFAULT_NAMESPACE,
    DEFAULT_YTD_FUND,
)
from .exceptions import (
    InvalidActivityError,
    InvalidScheduledActivityError,
    InvariantViolationError,
    LedgerError,
    ScheduledActivityStateError,
    StoreError,
)
from .models import (
    Account,
    Activity,
    ActivityType,
    AssetDeltas,
    AssetDetail,
    AssetDetailOverride,
    AssetSnapshot,
    BalancePoint,
    FundSnapshot,
    GeneralSnapshot,
    ScheduledActivity,
    ScheduledStatus,
)
from .policies import is_ira_recipient, is_ledger_eligible
from .services import (
    apply_fund_overrides,
    compute_balance_points,
    compute_general_total,
    iter_connected_accounts,
    validate_asset_snapshot,
)

__all__ = [
    "CUMULATIVE_ACCOUNT",
    "DEFAULT_IRA_PATTERN",
    "DEFAULT_NAMESPACE",
    "DEFAULT_YTD_FUND",
    "InvalidActivityError",
    "InvalidScheduledActivityError",
    "InvariantViolationError",
    "LedgerError",
    "ScheduledActivityStateError",
    "StoreError",
    "Account",
    "Activity",
    "ActivityType",
    "AssetDeltas",
    "AssetDetail",
    "AssetDetailOverride",
    "AssetSnapshot",
    "BalancePoint",
    "FundSnapshot",
    "GeneralSnapshot",
    "ScheduledActivity",
    "ScheduledStatus",
    "is_ira_recipient",
    "is_ledger_eligible",
    "apply_fund_overrides",
    "compute_balance_points",
    "compute_general_total",
    "iter_connected_accounts",
    "validate_asset_snapshot",
]
