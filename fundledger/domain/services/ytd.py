"""Year-to-date helpers and connected-account traversal."""

from collections import deque
from collections.abc import Callable, Iterable, Iterator
from decimal import Decimal

from fundledger.domain.models import Activity, ActivityType

YTD_ACTIVITY_TYPES = frozenset({ActivityType.PROFIT, ActivityType.INCOME})


def sum_amounts(activities: Iterable[Activity]) -> Decimal:
    """Return the sum of the activity amounts."""
    return sum((activity.amount for activity in activities), Decimal("0"))


def iter_connected_accounts(
    start: str,
    neighbors: Callable[[str], Iterable[str]],
) -> Iterator[str]:
    """Yield every account reachable from ``start``, each exactly once.

    Breadth-first. Accounts are marked visited when dequeued, so duplicates
    and cycles in the connection lists are skipped rather than re-processed.
    ``neighbors`` is only called for accounts that are yielded.
    """
    visited: set[str] = set()
    queue = deque([start])
    while queue:
        account_id = queue.popleft()
        if not account_id or account_id in visited:
            continue
        visited.add(account_id)
        yield account_id
        queue.extend(neighbors(account_id))


__all__ = ["YTD_ACTIVITY_TYPES", "sum_amounts", "iter_connected_accounts"]
