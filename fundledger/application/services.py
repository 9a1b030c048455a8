"""Facade exposing the ledger core to calling applications."""

from datetime import datetime
from decimal import Decimal

from fundledger.application.ports.ledger_store import LedgerStorePort
from fundledger.application.use_cases.batch_jobs import (
    BatchRunResult,
    RebuildAllLedgersUseCase,
    RefreshAllYearToDateUseCase,
    ResetYearToDateUseCase,
)
from fundledger.application.use_cases.rebuild_ledger import (
    LedgerRebuildResult,
    OverallLedgerRebuildResult,
    RebuildLedgerUseCase,
    RebuildOverallLedgerUseCase,
)
from fundledger.application.use_cases.schedule_activity import (
    ScheduleActivityUseCase,
)
from fundledger.application.use_cases.settlement_sweep import (
    SettlementSweepResult,
    SettlementSweepUseCase,
)
from fundledger.application.use_cases.year_to_date import (
    YearToDateFigures,
    YearToDateUseCase,
)
from fundledger.domain.constants import (
    DEFAULT_IRA_PATTERN,
    DEFAULT_NAMESPACE,
    DEFAULT_YTD_FUND,
)
from fundledger.domain.models import Activity, AssetDeltas, AssetSnapshot
from fundledger.domain.services.validation import validate_asset_snapshot
from fundledger.infrastructure.logging.logger import get_app_logger


class LedgerService:
    """Entry point wiring every ledger use case to one injected store."""

    def __init__(
        self,
        store: LedgerStorePort,
        logger=None,
        *,
        namespace: str = DEFAULT_NAMESPACE,
        ytd_fund: str = DEFAULT_YTD_FUND,
        ira_pattern: str = DEFAULT_IRA_PATTERN,
        sweep_budget_seconds: float = 300.0,
    ) -> None:
        """Initialize the facade.

        Args:
            store: Ledger store shared by every use case.
            logger: Optional logger compatible with logging.Logger-like API.
            namespace: Default owning namespace.
            ytd_fund: Fund counted by YTD totals.
            ira_pattern: Pattern marking IRA recipients as ledger-eligible.
            sweep_budget_seconds: Time budget of a settlement sweep.
        """
        self._store = store
        self._logger = logger or get_app_logger()
        self._namespace = namespace
        self._rebuild_ledger = RebuildLedgerUseCase(
            store,
            logger=self._logger,
            ira_pattern=ira_pattern,
        )
        self._rebuild_overall_ledger = RebuildOverallLedgerUseCase(
            store,
            logger=self._logger,
            ira_pattern=ira_pattern,
        )
        self._year_to_date = YearToDateUseCase(
            store,
            logger=self._logger,
            fund=ytd_fund,
        )
        self._schedule = ScheduleActivityUseCase(
            store,
            logger=self._logger,
            namespace=namespace,
        )
        self._settlement = SettlementSweepUseCase(
            store,
            logger=self._logger,
            budget_seconds=sweep_budget_seconds,
        )

    def rebuild_ledger(self, account_id: str) -> LedgerRebuildResult:
        return self._rebuild_ledger.execute(account_id)

    def rebuild_overall_ledger(
        self,
        namespace: str | None = None,
    ) -> OverallLedgerRebuildResult:
        return self._rebuild_overall_ledger.execute(namespace or self._namespace)

    def get_year_to_date(self, account_id: str, year: int) -> Decimal:
        return self._year_to_date.year_to_date(account_id, year)

    def get_network_year_to_date(self, account_id: str, year: int) -> Decimal:
        return self._year_to_date.network_year_to_date(account_id, year)

    def refresh_year_to_date(
        self,
        account_id: str,
        year: int,
    ) -> YearToDateFigures:
        return self._year_to_date.refresh(account_id, year)

    def schedule_activity(
        self,
        account_id: str,
        activity: Activity,
        asset_deltas: AssetDeltas | None = None,
        scheduled_time: datetime | None = None,
        namespace: str | None = None,
    ) -> str:
        return self._schedule.schedule(
            account_id,
            activity,
            asset_deltas=asset_deltas,
            scheduled_time=scheduled_time,
            namespace=namespace,
        )

    def cancel_scheduled_activity(self, scheduled_id: str) -> bool:
        return self._schedule.cancel(scheduled_id)

    def run_settlement_sweep(
        self,
        now: datetime | None = None,
    ) -> SettlementSweepResult:
        return self._settlement.run(now)

    def save_asset_snapshot(self, snapshot: AssetSnapshot) -> None:
        """Replace an account's snapshot after checking its totals.

        Raises:
            InvariantViolationError: If a total does not match its parts.
        """
        validate_asset_snapshot(snapshot)
        self._store.save_asset_snapshot(snapshot)

    def rebuild_all_ledgers(self, namespace: str | None = None) -> BatchRunResult:
        return RebuildAllLedgersUseCase(
            self._store,
            rebuild_ledger=self._rebuild_ledger,
            logger=self._logger,
        ).run(namespace or self._namespace)

    def refresh_all_year_to_date(
        self,
        year: int,
        namespace: str | None = None,
    ) -> BatchRunResult:
        return RefreshAllYearToDateUseCase(
            self._store,
            year_to_date=self._year_to_date,
            logger=self._logger,
        ).run(namespace or self._namespace, year)

    def reset_year_to_date(self, namespace: str | None = None) -> int:
        return ResetYearToDateUseCase(self._store, logger=self._logger).run(
            namespace or self._namespace
        )


__all__ = ["LedgerService"]
