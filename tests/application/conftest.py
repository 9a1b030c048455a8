"""Shared fakes for application use case tests."""

from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import replace
from itertools import count

import pytest

from fundledger.domain.exceptions import StoreError
from fundledger.domain.models import (
    ActivityType,
    AssetSnapshot,
    GeneralSnapshot,
    ScheduledStatus,
)
from fundledger.utils.instants import to_utc


class _FakeTransaction:
    """Transaction view writing straight into the fake store state."""

    def __init__(self, store: "InMemoryLedgerStore") -> None:
        self._store = store

    def _check(self, operation: str) -> None:
        if operation in self._store.fail_on:
            raise StoreError(f"{operation} failed")

    def append_activity(self, account_id, activity):
        self._check("append_activity")
        activity_id = activity.id or f"act-{next(self._store.ids)}"
        self._store.activities.setdefault(account_id, []).append(
            replace(activity, id=activity_id)
        )
        return activity_id

    def lock_fund_snapshots(self, account_id):
        self._check("lock_fund_snapshots")
        self._store.locked.append(account_id)
        return dict(self._store.funds.get(account_id, {}))

    def put_fund_snapshot(self, account_id, snapshot):
        self._check("put_fund_snapshot")
        self._store.funds.setdefault(account_id, {})[snapshot.fund] = snapshot

    def get_general_snapshot(self, account_id):
        return self._store.general.get(account_id)

    def lock_general_snapshot(self, account_id):
        self._check("lock_general_snapshot")
        self._store.general_locked.append(account_id)
        return self._store.general.get(account_id)

    def put_general_snapshot(self, account_id, general):
        self._check("put_general_snapshot")
        self._store.general[account_id] = general

    def complete_scheduled_activity(self, scheduled_id):
        self._check("complete_scheduled_activity")
        record = self._store.scheduled.get(scheduled_id)
        if record is None or not record.is_pending:
            return False
        self._store.scheduled[scheduled_id] = record.completed()
        return True


class InMemoryLedgerStore:
    """Dictionary-backed ledger store with rollback on failure."""

    _STATE = ("activities", "points", "funds", "general", "scheduled")

    def __init__(self) -> None:
        self.activities = {}
        self.points = {}
        self.overall_points = {}
        self.funds = {}
        self.general = {}
        self.accounts = {}
        self.scheduled = {}
        self.fail_on: set[str] = set()
        self.locked: list[str] = []
        self.general_locked: list[str] = []
        self.ids = count(1)

    @contextmanager
    def transaction(self):
        saved = {name: copy.deepcopy(getattr(self, name)) for name in self._STATE}
        try:
            yield _FakeTransaction(self)
        except BaseException:
            for name, value in saved.items():
                setattr(self, name, value)
            raise

    def list_activities(self, account_id):
        if "list_activities" in self.fail_on:
            raise StoreError("list_activities failed")
        return list(self.activities.get(account_id, []))

    def query_activities(
        self,
        account_id,
        *,
        fund=None,
        types=None,
        start=None,
        end=None,
    ):
        allowed = {ActivityType.parse(t) for t in types} if types else None
        return [
            activity
            for activity in self.activities.get(account_id, [])
            if (fund is None or activity.fund == fund)
            and (allowed is None or activity.activity_type in allowed)
            and (start is None or activity.time >= to_utc(start))
            and (end is None or activity.time <= to_utc(end))
        ]

    def list_namespace_activities(self, namespace):
        if "list_namespace_activities" in self.fail_on:
            raise StoreError("list_namespace_activities failed")
        return [
            activity
            for account in self.list_accounts(namespace)
            for activity in self.activities.get(account.account_id, [])
        ]

    def append_activity(self, account_id, activity):
        with self.transaction() as tx:
            return tx.append_activity(account_id, activity)

    def replace_balance_points(self, account_id, points):
        if "replace_balance_points" in self.fail_on:
            raise StoreError("replace_balance_points failed")
        self.points[account_id] = list(points)
        return len(points)

    def list_balance_points(self, account_id):
        return list(self.points.get(account_id, []))

    def replace_overall_balance_points(self, namespace, points):
        if "replace_overall_balance_points" in self.fail_on:
            raise StoreError("replace_overall_balance_points failed")
        self.overall_points[namespace] = list(points)
        return len(points)

    def list_overall_balance_points(self, namespace):
        return list(self.overall_points.get(namespace, []))

    def get_asset_snapshot(self, account_id):
        funds = self.funds.get(account_id)
        general = self.general.get(account_id)
        if not funds and general is None:
            return None
        return AssetSnapshot(
            account_id, dict(funds or {}), general or GeneralSnapshot()
        )

    def save_asset_snapshot(self, snapshot):
        self.funds[snapshot.account_id] = dict(snapshot.funds)
        self.general[snapshot.account_id] = snapshot.general

    def update_year_to_date(self, account_id, ytd, total_ytd):
        general = self.general.get(account_id) or GeneralSnapshot()
        self.general[account_id] = replace(general, ytd=ytd, total_ytd=total_ytd)

    def reset_year_to_date(self, namespace):
        reset = 0
        for account in self.list_accounts(namespace):
            general = self.general.get(account.account_id)
            if general is not None:
                self.general[account.account_id] = replace(
                    general, ytd=0, total_ytd=0
                )
                reset += 1
        return reset

    def save_account(self, account):
        self.accounts[account.account_id] = account

    def get_account(self, account_id):
        return self.accounts.get(account_id)

    def list_accounts(self, namespace):
        return sorted(
            (a for a in self.accounts.values() if a.namespace == namespace),
            key=lambda account: account.account_id,
        )

    def get_connected_accounts(self, account_id):
        account = self.accounts.get(account_id)
        return list(account.connected_accounts) if account else []

    def add_scheduled_activity(self, record):
        self.scheduled[record.id] = record
        return record.id

    def get_scheduled_activity(self, scheduled_id):
        return self.scheduled.get(scheduled_id)

    def list_scheduled_activities(self, account_id=None):
        return [
            record
            for record in self.scheduled.values()
            if account_id is None or record.account_id == account_id
        ]

    def delete_scheduled_activity(self, scheduled_id):
        return self.scheduled.pop(scheduled_id, None) is not None

    def query_due(self, now):
        due = [
            record
            for record in self.scheduled.values()
            if record.status is ScheduledStatus.PENDING
            and record.scheduled_time <= to_utc(now)
        ]
        return sorted(due, key=lambda record: (record.scheduled_time, record.id))


@pytest.fixture
def store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()
