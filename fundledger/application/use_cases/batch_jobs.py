"""Namespace-wide jobs: rebuild every ledger, refresh or reset YTD.

One account's failure is logged and recorded in the result; it never stops
the job for the remaining accounts.
"""

from dataclasses import dataclass, field

from fundledger.application.ports.ledger_store import LedgerStorePort
from fundledger.application.use_cases.rebuild_ledger import (
    RebuildLedgerUseCase,
)
from fundledger.application.use_cases.year_to_date import YearToDateUseCase
from fundledger.domain.exceptions import LedgerError
from fundledger.infrastructure.logging.logger import get_app_logger


@dataclass(frozen=True)
class BatchRunResult:
    """Result of a namespace-wide job.

    Attributes:
        succeeded: Accounts processed successfully, in processing order.
        failed: Error message per account that failed.
    """

    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


class RebuildAllLedgersUseCase:
    """Rebuild the balance points of every account in a namespace."""

    def __init__(
        self,
        store: LedgerStorePort,
        rebuild_ledger: RebuildLedgerUseCase | None = None,
        logger=None,
    ) -> None:
        self._store = store
        self._logger = logger or get_app_logger()
        self._rebuild_ledger = rebuild_ledger or RebuildLedgerUseCase(
            store,
            logger=self._logger,
        )

    def run(self, namespace: str) -> BatchRunResult:
        """Rebuild every account of ``namespace``."""
        accounts = self._store.list_accounts(namespace)
        self._logger.info(
            f"Rebuilding ledgers for {len(accounts)} accounts in '{namespace}'"
        )
        result = BatchRunResult()
        for account in accounts:
            try:
                self._rebuild_ledger.execute(account.account_id)
            except LedgerError as exc:
                self._logger.error(
                    f"Error rebuilding ledger for account "
                    f"{account.account_id}: {exc}"
                )
                result.failed[account.account_id] = str(exc)
                continue
            result.succeeded.append(account.account_id)
        return result


class RefreshAllYearToDateUseCase:
    """Store fresh YTD figures on every account of a namespace."""

    def __init__(
        self,
        store: LedgerStorePort,
        year_to_date: YearToDateUseCase | None = None,
        logger=None,
    ) -> None:
        self._store = store
        self._logger = logger or get_app_logger()
        self._year_to_date = year_to_date or YearToDateUseCase(
            store,
            logger=self._logger,
        )

    def run(self, namespace: str, year: int) -> BatchRunResult:
        """Refresh YTD figures for ``year`` across ``namespace``."""
        accounts = self._store.list_accounts(namespace)
        self._logger.info(
            f"Starting YTD update for {len(accounts)} accounts in '{namespace}'"
        )
        result = BatchRunResult()
        for account in accounts:
            try:
                self._year_to_date.refresh(account.account_id, year)
            except LedgerError as exc:
                self._logger.error(
                    f"Error updating YTD for account {account.account_id}: {exc}"
                )
                result.failed[account.account_id] = str(exc)
                continue
            result.succeeded.append(account.account_id)
        return result


class ResetYearToDateUseCase:
    """Zero the stored YTD figures of a namespace at year start."""

    def __init__(self, store: LedgerStorePort, logger=None) -> None:
        self._store = store
        self._logger = logger or get_app_logger()

    def run(self, namespace: str) -> int:
        """Reset ``ytd`` and ``total_ytd`` and return the accounts touched."""
        count = self._store.reset_year_to_date(namespace)
        self._logger.info(f"Reset YTD for {count} accounts in '{namespace}'")
        return count


__all__ = [
    "BatchRunResult",
    "RebuildAllLedgersUseCase",
    "RefreshAllYearToDateUseCase",
    "ResetYearToDateUseCase",
]
