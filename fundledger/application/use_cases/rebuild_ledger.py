"""Use cases rebuilding balance points from the activity log.

The rebuild always starts from zero balances: it reads the full log, orders
it by time, and swaps the stored balance points for the new series in a
single store transaction.
"""

from dataclasses import dataclass
import re

from fundledger.application.ports.ledger_store import LedgerStorePort
from fundledger.domain.constants import DEFAULT_IRA_PATTERN
from fundledger.domain.services.ledger import (
    compute_balance_points,
    compute_overall_balance_points,
)
from fundledger.infrastructure.logging.logger import get_app_logger


@dataclass(frozen=True)
class LedgerRebuildResult:
    """Result of a ledger rebuild.

    Attributes:
        account_id: Account whose balance points were rebuilt.
        activities_count: Number of activities read from the log.
        points_written: Number of balance points stored.
    """

    account_id: str
    activities_count: int
    points_written: int


class RebuildLedgerUseCase:
    """Recompute the balance point series of one account."""

    def __init__(
        self,
        store: LedgerStorePort,
        logger=None,
        ira_pattern: str | re.Pattern = DEFAULT_IRA_PATTERN,
    ) -> None:
        """Initialize the use case.

        Args:
            store: Port providing activities and balance point storage.
            logger: Optional logger compatible with logging.Logger-like API.
            ira_pattern: Pattern marking IRA recipients as eligible.
        """
        self._store = store
        self._logger = logger or get_app_logger()
        self._ira_pattern = re.compile(ira_pattern)

    def execute(self, account_id: str) -> LedgerRebuildResult:
        """Rebuild the account's balance points.

        Store errors propagate unchanged; when the read fails nothing is
        written, and a failed swap leaves the previous points in place.

        Args:
            account_id: Account to rebuild.

        Returns:
            LedgerRebuildResult: Summary of the rebuild.
        """
        activities = self._store.list_activities(account_id)
        points = compute_balance_points(activities, self._ira_pattern)
        written = self._store.replace_balance_points(account_id, points)
        self._logger.info(
            f"Rebuilt {written} balance points from {len(activities)} "
            f"activities for account {account_id}"
        )
        return LedgerRebuildResult(
            account_id=account_id,
            activities_count=len(activities),
            points_written=written,
        )


@dataclass(frozen=True)
class OverallLedgerRebuildResult:
    """Result of a namespace-wide ledger rebuild.

    Attributes:
        namespace: Namespace whose overall series was rebuilt.
        activities_count: Number of activities read across its accounts.
        points_written: Number of balance points stored.
    """

    namespace: str
    activities_count: int
    points_written: int


class RebuildOverallLedgerUseCase:
    """Recompute the namespace-wide series: a cumulative line and one
    line per fund, over the activities of every account."""

    def __init__(
        self,
        store: LedgerStorePort,
        logger=None,
        ira_pattern: str | re.Pattern = DEFAULT_IRA_PATTERN,
    ) -> None:
        self._store = store
        self._logger = logger or get_app_logger()
        self._ira_pattern = re.compile(ira_pattern)

    def execute(self, namespace: str) -> OverallLedgerRebuildResult:
        """Rebuild the overall series of ``namespace`` from zero.

        Store errors propagate unchanged and leave the previous series in
        place.
        """
        activities = self._store.list_namespace_activities(namespace)
        points = compute_overall_balance_points(activities, self._ira_pattern)
        written = self._store.replace_overall_balance_points(namespace, points)
        self._logger.info(
            f"Rebuilt {written} overall balance points from "
            f"{len(activities)} activities in namespace {namespace}"
        )
        return OverallLedgerRebuildResult(
            namespace=namespace,
            activities_count=len(activities),
            points_written=written,
        )


__all__ = [
    "RebuildLedgerUseCase",
    "LedgerRebuildResult",
    "RebuildOverallLedgerUseCase",
    "OverallLedgerRebuildResult",
]
