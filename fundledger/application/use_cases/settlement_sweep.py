"""Use case settling scheduled activities whose time has come.

For each due ``pending`` record the sweep, inside one store transaction:

* appends the activity to the account's log, stamped with the server time
  and the owning namespace;
* applies the optional asset deltas with a locking read-modify-write and
  refreshes the fund and general totals;
* marks the record ``completed``.

A record that fails rolls back on its own and stays ``pending`` for the
next sweep; it never affects other records.
"""

from dataclasses import dataclass, replace
from datetime import datetime
import time
from typing import Callable

from fundledger.application.ports.ledger_store import (
    LedgerStorePort,
    LedgerTransactionPort,
)
from fundledger.domain.exceptions import (
    InvalidScheduledActivityError,
    LedgerError,
    ScheduledActivityStateError,
)
from fundledger.domain.models import (
    AssetDeltas,
    GeneralSnapshot,
    ScheduledActivity,
)
from fundledger.domain.services.assets import (
    apply_fund_overrides,
    compute_general_total,
)
from fundledger.domain.services.validation import validate_fund_snapshot
from fundledger.infrastructure.logging.logger import get_app_logger
from fundledger.utils.instants import to_utc, utc_now


@dataclass(frozen=True)
class SettlementSweepResult:
    """Result of one settlement sweep.

    Attributes:
        processed: Records settled and committed.
        failed: Records whose settlement raised and was rolled back.
        skipped: Records missing their account or activity.
        deferred: Due records left for the next sweep by the time budget.
    """

    processed: int = 0
    failed: int = 0
    skipped: int = 0
    deferred: int = 0


class SettlementSweepUseCase:
    """Promote due scheduled activities into the activity log."""

    def __init__(
        self,
        store: LedgerStorePort,
        logger=None,
        budget_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the use case.

        Args:
            store: Port providing scheduled records and transactions.
            logger: Optional logger compatible with logging.Logger-like API.
            budget_seconds: Time budget of one sweep.
            clock: Monotonic clock used to enforce the budget.
        """
        self._store = store
        self._logger = logger or get_app_logger()
        self._budget_seconds = budget_seconds
        self._clock = clock

    def run(self, now: datetime | None = None) -> SettlementSweepResult:
        """Settle every pending record scheduled at or before ``now``.

        Per-record failures are logged and counted, never raised. Errors
        while querying due records propagate to the caller.

        Args:
            now: Sweep instant; defaults to the current UTC time.

        Returns:
            SettlementSweepResult: Counts of processed, failed, skipped and
            deferred records.
        """
        now = to_utc(now) if now is not None else utc_now()
        due = self._store.query_due(now)
        if not due:
            self._logger.info("No scheduled activities to process at this time.")
            return SettlementSweepResult()

        self._logger.info(f"Found {len(due)} scheduled activities to process.")
        counts = {"processed": 0, "failed": 0, "skipped": 0, "deferred": 0}
        started = self._clock()
        for position, record in enumerate(due):
            if self._clock() - started >= self._budget_seconds:
                counts["deferred"] = len(due) - position
                self._logger.warning(
                    f"Sweep budget of {self._budget_seconds}s exhausted; "
                    f"deferring {counts['deferred']} scheduled activities"
                )
                break
            outcome = self._settle_quietly(record, now)
            if outcome is not None:
                counts[outcome] += 1

        result = SettlementSweepResult(**counts)
        self._logger.info(
            f"Settlement sweep finished: processed={result.processed}, "
            f"failed={result.failed}, skipped={result.skipped}, "
            f"deferred={result.deferred}"
        )
        return result

    def settle(self, record: ScheduledActivity, now: datetime) -> bool:
        """Settle one record atomically.

        Args:
            record: Scheduled record to settle.
            now: Server time stamped on the new activity.

        Returns:
            bool: True when the record was settled, False when it was
            already completed.

        Raises:
            InvalidScheduledActivityError: If the account or activity is
                missing.
            ScheduledActivityStateError: If another sweep completed the
                record first; nothing is committed.
            LedgerError: Any store or invariant failure; nothing is
                committed.
        """
        missing = []
        if not record.account_id:
            missing.append("account")
        if record.activity is None:
            missing.append("activity")
        if missing:
            raise InvalidScheduledActivityError(record.id, missing)
        if not record.is_pending:
            return False

        activity = record.activity.settled(
            namespace=record.owner_namespace,
            created_at=to_utc(now),
        )
        with self._store.transaction() as tx:
            tx.append_activity(record.account_id, activity)
            if record.asset_deltas:
                self._apply_asset_deltas(
                    tx,
                    record.account_id,
                    record.asset_deltas,
                )
            if not tx.complete_scheduled_activity(record.id):
                raise ScheduledActivityStateError(
                    f"Scheduled activity {record.id} is no longer pending"
                )
        return True

    def _settle_quietly(
        self,
        record: ScheduledActivity,
        now: datetime,
    ) -> str | None:
        """Settle a record and classify the outcome for the sweep summary.

        Returns:
            str | None: Name of the counter to increment, if any.
        """
        try:
            settled = self.settle(record, now)
        except InvalidScheduledActivityError as exc:
            self._logger.error(str(exc))
            return "skipped"
        except ScheduledActivityStateError as exc:
            self._logger.warning(str(exc))
            return None
        except LedgerError as exc:
            self._logger.error(
                f"Error processing scheduled activity {record.id}: {exc}"
            )
            return "failed"
        except Exception as exc:
            self._logger.exception(
                f"Unexpected error processing scheduled activity {record.id}: "
                f"{exc}"
            )
            return "failed"
        if not settled:
            return None
        self._logger.info(
            f"Processed scheduled activity {record.id} "
            f"for account {record.account_id}"
        )
        return "processed"

    def _apply_asset_deltas(
        self,
        tx: LedgerTransactionPort,
        account_id: str,
        asset_deltas: AssetDeltas,
    ) -> None:
        """Apply overrides fund by fund, then refresh the general total.

        Args:
            tx: Open store transaction.
            account_id: Account whose snapshot is updated.
            asset_deltas: Overrides keyed by fund, then asset type.
        """
        funds = tx.lock_fund_snapshots(account_id)
        for fund, overrides in asset_deltas.items():
            current = funds.get(fund)
            if current is not None:
                validate_fund_snapshot(account_id, current)
            updated = apply_fund_overrides(current, fund, overrides, self._logger)
            tx.put_fund_snapshot(account_id, updated)
            funds[fund] = updated

        general = tx.lock_general_snapshot(account_id) or GeneralSnapshot()
        tx.put_general_snapshot(
            account_id,
            replace(general, total=compute_general_total(funds.values())),
        )


__all__ = ["SettlementSweepUseCase", "SettlementSweepResult"]
