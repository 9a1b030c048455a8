"""Domain services package."""

from .assets import (
    apply_fund_overrides,
    compute_general_total,
    normalize_first_deposit_date,
)
from .ledger import (
    compute_balance_points,
    compute_overall_balance_points,
    order_activities,
)
from .validation import validate_asset_snapshot, validate_fund_snapshot
from .ytd import YTD_ACTIVITY_TYPES, iter_connected_accounts, sum_amounts

__all__ = [
    "apply_fund_overrides",
    "compute_general_total",
    "normalize_first_deposit_date",
    "compute_balance_points",
    "compute_overall_balance_points",
    "order_activities",
    "validate_asset_snapshot",
    "validate_fund_snapshot",
    "YTD_ACTIVITY_TYPES",
    "iter_connected_accounts",
    "sum_amounts",
]
