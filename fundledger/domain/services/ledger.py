"""Balance point computation for activity logs."""

import re
from collections import defaultdict
from collections.abc import Iterable
from decimal import Decimal

from fundledger.domain.constants import (
    CUMULATIVE_ACCOUNT,
    DEFAULT_IRA_PATTERN,
    UNSPECIFIED_FUND,
)
from fundledger.domain.models import Activity, BalancePoint
from fundledger.domain.policies import is_ledger_eligible


def order_activities(activities: Iterable[Activity]) -> list[Activity]:
    """Sort activities by time; ties keep their insertion order."""
    return sorted(activities, key=lambda activity: activity.time)


def compute_balance_points(
    activities: Iterable[Activity],
    ira_pattern: str | re.Pattern = DEFAULT_IRA_PATTERN,
) -> list[BalancePoint]:
    """Rebuild the balance point series of one account from scratch.

    Every eligible activity emits a cumulative point followed by a point for
    its recipient. Both carry the activity's fund. Balances start at zero on
    each call.

    Args:
        activities: The account's activities in insertion order.
        ira_pattern: Pattern marking IRA recipients as eligible.

    Returns:
        list[BalancePoint]: Points in emission order.
    """
    cumulative = Decimal("0")
    per_account: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    points: list[BalancePoint] = []

    for activity in order_activities(activities):
        if not is_ledger_eligible(activity, ira_pattern):
            continue
        cashflow = activity.signed_amount
        cumulative += cashflow
        per_account[activity.recipient] += cashflow
        points.append(
            BalancePoint(
                account=CUMULATIVE_ACCOUNT,
                amount=cumulative,
                cashflow=cashflow,
                time=activity.time,
                fund=activity.fund,
            )
        )
        points.append(
            BalancePoint(
                account=activity.recipient,
                amount=per_account[activity.recipient],
                cashflow=cashflow,
                time=activity.time,
                fund=activity.fund,
            )
        )
    return points


def compute_overall_balance_points(
    activities: Iterable[Activity],
    ira_pattern: str | re.Pattern = DEFAULT_IRA_PATTERN,
) -> list[BalancePoint]:
    """Build the namespace-wide series from every account's activities.

    Each eligible activity emits a cumulative point over all funds, then a
    point on the running balance of its fund. Fund points use the fund name
    as their series key; activities without a fund count toward
    ``UNSPECIFIED_FUND``.

    Args:
        activities: Activities of every account, in insertion order.
        ira_pattern: Pattern marking IRA recipients as eligible.

    Returns:
        list[BalancePoint]: Points in emission order.
    """
    cumulative = Decimal("0")
    per_fund: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    points: list[BalancePoint] = []

    for activity in order_activities(activities):
        if not is_ledger_eligible(activity, ira_pattern):
            continue
        fund = activity.fund or UNSPECIFIED_FUND
        cashflow = activity.signed_amount
        cumulative += cashflow
        per_fund[fund] += cashflow
        points.append(
            BalancePoint(
                account=CUMULATIVE_ACCOUNT,
                amount=cumulative,
                cashflow=cashflow,
                time=activity.time,
            )
        )
        points.append(
            BalancePoint(
                account=fund,
                amount=per_fund[fund],
                cashflow=cashflow,
                time=activity.time,
                fund=fund,
            )
        )
    return points


__all__ = [
    "order_activities",
    "compute_balance_points",
    "compute_overall_balance_points",
]
