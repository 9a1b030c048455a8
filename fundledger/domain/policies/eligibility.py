"""Rules deciding which activities produce balance points."""

import re

from fundledger.domain.constants import DEFAULT_IRA_PATTERN
from fundledger.domain.models import Activity, ActivityType

_CASHFLOW_TYPES = frozenset({ActivityType.DEPOSIT, ActivityType.WITHDRAWAL})


def is_ira_recipient(
    recipient: str | None,
    pattern: str | re.Pattern = DEFAULT_IRA_PATTERN,
) -> bool:
    """Return True when the recipient names an IRA-designated account.

    Args:
        recipient: Recipient identifier of an activity.
        pattern: Regular expression searched in the recipient.

    Returns:
        bool: True when the pattern is found anywhere in the recipient.
    """
    if not recipient:
        return False
    return re.search(pattern, recipient) is not None


def is_ledger_eligible(
    activity: Activity,
    ira_pattern: str | re.Pattern = DEFAULT_IRA_PATTERN,
) -> bool:
    """Return True when the activity moves a running balance.

    Deposits and withdrawals always do; any other type only counts when it
    is paid to an IRA-designated recipient.
    """
    if activity.activity_type in _CASHFLOW_TYPES:
        return True
    return is_ira_recipient(activity.recipient, ira_pattern)


__all__ = ["is_ira_recipient", "is_ledger_eligible"]
