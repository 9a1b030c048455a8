"""Port for the document store holding activities, snapshots and schedules."""

from collections.abc import Iterable, Sequence
from contextlib import AbstractContextManager
from datetime import datetime
from decimal import Decimal
from typing import Protocol

from fundledger.domain.models import (
    Account,
    Activity,
    ActivityType,
    AssetSnapshot,
    BalancePoint,
    FundSnapshot,
    GeneralSnapshot,
    ScheduledActivity,
)


class LedgerTransactionPort(Protocol):
    """Writes and locking reads committed together as one atomic unit."""

    def append_activity(self, account_id: str, activity: Activity) -> str:
        """Append an activity to the account's log and return its id."""

    def lock_fund_snapshots(self, account_id: str) -> dict[str, FundSnapshot]:
        """Return every fund snapshot of the account, locked for update."""

    def put_fund_snapshot(self, account_id: str, snapshot: FundSnapshot) -> None:
        """Create or replace one fund snapshot."""

    def get_general_snapshot(self, account_id: str) -> GeneralSnapshot | None:
        """Return the account's general snapshot, if any."""

    def lock_general_snapshot(self, account_id: str) -> GeneralSnapshot | None:
        """Return the account's general snapshot, locked for update."""

    def put_general_snapshot(
        self,
        account_id: str,
        general: GeneralSnapshot,
    ) -> None:
        """Create or replace the account's general snapshot."""

    def complete_scheduled_activity(self, scheduled_id: str) -> bool:
        """Mark a pending record completed.

        Returns:
            bool: False when the record was no longer pending.
        """


class LedgerStorePort(Protocol):
    """Port exposing the ledger's persistent collections."""

    def transaction(self) -> AbstractContextManager[LedgerTransactionPort]:
        """Open an atomic unit of work; it commits when the block exits
        cleanly and rolls back when it raises."""

    def list_activities(self, account_id: str) -> list[Activity]:
        """Return the account's activities in insertion order."""

    def query_activities(
        self,
        account_id: str,
        *,
        fund: str | None = None,
        types: Iterable[ActivityType] | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Activity]:
        """Return activities matching the fund, types and inclusive range."""

    def list_namespace_activities(self, namespace: str) -> list[Activity]:
        """Return the activities of every account in a namespace, in
        insertion order."""

    def append_activity(self, account_id: str, activity: Activity) -> str:
        """Append one activity outside of settlement and return its id."""

    def replace_balance_points(
        self,
        account_id: str,
        points: Sequence[BalancePoint],
    ) -> int:
        """Atomically swap the account's balance points for ``points``."""

    def list_balance_points(self, account_id: str) -> list[BalancePoint]:
        """Return the account's balance points in emission order."""

    def replace_overall_balance_points(
        self,
        namespace: str,
        points: Sequence[BalancePoint],
    ) -> int:
        """Atomically swap the namespace-wide series for ``points``."""

    def list_overall_balance_points(self, namespace: str) -> list[BalancePoint]:
        """Return the namespace-wide series in emission order."""

    def get_asset_snapshot(self, account_id: str) -> AssetSnapshot | None:
        """Return the account's asset snapshot, if any."""

    def save_asset_snapshot(self, snapshot: AssetSnapshot) -> None:
        """Replace the account's asset snapshot wholesale."""

    def update_year_to_date(
        self,
        account_id: str,
        ytd: Decimal,
        total_ytd: Decimal,
    ) -> None:
        """Store YTD figures on the general snapshot, keeping its total."""

    def reset_year_to_date(self, namespace: str) -> int:
        """Zero the YTD figures of every account in a namespace."""

    def save_account(self, account: Account) -> None:
        """Create or replace an account and its connections."""

    def get_account(self, account_id: str) -> Account | None:
        """Return an account, if known."""

    def list_accounts(self, namespace: str) -> list[Account]:
        """Return the accounts of a namespace ordered by id."""

    def get_connected_accounts(self, account_id: str) -> list[str]:
        """Return the account's connection list (empty when unknown)."""

    def add_scheduled_activity(self, record: ScheduledActivity) -> str:
        """Persist a new scheduled record and return its id."""

    def get_scheduled_activity(
        self,
        scheduled_id: str,
    ) -> ScheduledActivity | None:
        """Return a scheduled record, if present."""

    def list_scheduled_activities(
        self,
        account_id: str | None = None,
    ) -> list[ScheduledActivity]:
        """Return scheduled records, optionally for one account."""

    def delete_scheduled_activity(self, scheduled_id: str) -> bool:
        """Delete a scheduled record in any state."""

    def query_due(self, now: datetime) -> list[ScheduledActivity]:
        """Return pending records scheduled at or before ``now``."""


__all__ = ["LedgerTransactionPort", "LedgerStorePort"]
