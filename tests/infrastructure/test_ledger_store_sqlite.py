"""Tests for the SQLAlchemy ledger store against a SQLite database."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy import update
from sqlalchemy.dialects import postgresql

from fundledger.application.use_cases.settlement_sweep import (
    SettlementSweepResult,
    SettlementSweepUseCase,
)
from fundledger.domain.exceptions import StoreError
from fundledger.domain.models import (
    Account,
    Activity,
    ActivityType,
    AssetDetail,
    AssetDetailOverride,
    AssetSnapshot,
    BalancePoint,
    FundSnapshot,
    GeneralSnapshot,
    ScheduledActivity,
    ScheduledStatus,
)
from fundledger.infrastructure import schema
from fundledger.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from fundledger.infrastructure.ledger_store import (
    SqlAlchemyLedgerStore,
    SqlAlchemyLedgerTransaction,
    _general_snapshot_query,
)

NOW = datetime(2024, 4, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def ledger_store(tmp_path) -> SqlAlchemyLedgerStore:
    adapter = SqlAlchemyDatabaseEngineAdapter(f"sqlite:///{tmp_path / 'ledger.db'}")
    store = SqlAlchemyLedgerStore(adapter, logger=MagicMock())
    store.create_schema()
    return store


def _activity(when=NOW, activity_type="deposit", amount="10", fund="AGQ"):
    return Activity(
        time=when,
        activity_type=activity_type,
        amount=amount,
        recipient="X",
        fund=fund,
    )


def test_activities_round_trip_in_insertion_order(ledger_store) -> None:
    """Activities should come back exactly and in insertion order."""
    later = _activity(NOW + timedelta(days=1), amount="0.10")
    earlier = _activity(NOW, "withdrawal", "3.333")

    first_id = ledger_store.append_activity("acct", later)
    ledger_store.append_activity("acct", earlier)

    stored = ledger_store.list_activities("acct")
    assert [a.amount for a in stored] == [Decimal("0.10"), Decimal("3.333")]
    assert stored[0].id == first_id
    assert stored[0].time == later.time
    assert stored[1].activity_type is ActivityType.WITHDRAWAL
    assert ledger_store.list_activities("other") == []


def test_query_activities_filters_fund_types_and_range(ledger_store) -> None:
    """Range bounds should be inclusive and filters combined."""
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    end = datetime(2024, 12, 31, 23, 59, 59, 999999, tzinfo=timezone.utc)
    ledger_store.append_activity("acct", _activity(start, "profit", "1"))
    ledger_store.append_activity("acct", _activity(end, "income", "2"))
    ledger_store.append_activity(
        "acct", _activity(end + timedelta(microseconds=1), "profit", "4")
    )
    ledger_store.append_activity("acct", _activity(NOW, "deposit", "8"))
    ledger_store.append_activity("acct", _activity(NOW, "profit", "16", "BND"))

    matches = ledger_store.query_activities(
        "acct",
        fund="AGQ",
        types=[ActivityType.PROFIT, ActivityType.INCOME],
        start=start,
        end=end,
    )

    assert [a.amount for a in matches] == [Decimal("1"), Decimal("2")]


def test_replace_balance_points_swaps_series(ledger_store) -> None:
    """Replacing should drop the old series and keep emission order."""
    old = [BalancePoint("cumulative", Decimal("1"), Decimal("1"), NOW)]
    new = [
        BalancePoint("cumulative", Decimal("5"), Decimal("5"), NOW),
        BalancePoint("X", Decimal("5"), Decimal("5"), NOW),
    ]

    ledger_store.replace_balance_points("acct", old)
    written = ledger_store.replace_balance_points("acct", new)

    assert written == 2
    assert ledger_store.list_balance_points("acct") == new
    assert ledger_store.replace_balance_points("acct", []) == 0
    assert ledger_store.list_balance_points("acct") == []


def test_asset_snapshot_round_trip_and_ytd_update(ledger_store) -> None:
    """Snapshots should be stored whole and YTD updates keep the total."""
    snapshot = AssetSnapshot(
        account_id="acct",
        funds={
            "AGQ": FundSnapshot(
                "AGQ",
                total="15",
                assets={
                    "cash": AssetDetail(
                        "15",
                        first_deposit_date=NOW,
                        display_title="Cash",
                        index=1,
                    )
                },
            )
        },
        general=GeneralSnapshot(total="15"),
    )

    assert ledger_store.get_asset_snapshot("acct") is None
    ledger_store.save_asset_snapshot(snapshot)
    ledger_store.update_year_to_date("acct", Decimal("2"), Decimal("7"))

    stored = ledger_store.get_asset_snapshot("acct")
    assert stored.funds == snapshot.funds
    assert stored.general == GeneralSnapshot(total="15", ytd="2", total_ytd="7")


def test_accounts_and_reset_year_to_date(ledger_store) -> None:
    """Connections keep their order; reset only touches the namespace."""
    ledger_store.save_account(
        Account("a", "users", "Alice", connected_accounts=("c", "b"))
    )
    ledger_store.save_account(Account("b", "users"))
    ledger_store.save_account(Account("z", "staff"))
    ledger_store.update_year_to_date("a", Decimal("1"), Decimal("2"))
    ledger_store.update_year_to_date("z", Decimal("3"), Decimal("4"))

    reset = ledger_store.reset_year_to_date("users")

    assert reset == 1
    assert ledger_store.get_connected_accounts("a") == ["c", "b"]
    assert ledger_store.get_account("a").display_name == "Alice"
    assert ledger_store.get_account("missing") is None
    assert [a.account_id for a in ledger_store.list_accounts("users")] == [
        "a",
        "b",
    ]
    assert ledger_store.get_asset_snapshot("a").general.ytd == Decimal("0")
    assert ledger_store.get_asset_snapshot("z").general.ytd == Decimal("3")


def test_scheduled_records_query_due_and_delete(ledger_store) -> None:
    """Only pending records at or before now should be due."""
    deltas = {"AGQ": {"cash": AssetDetailOverride("5", "2024-01-02")}}
    for record_id, offset in (("due", -1), ("now", 0), ("future", 1)):
        ledger_store.add_scheduled_activity(
            ScheduledActivity(
                id=record_id,
                account_id="acct",
                activity=_activity(),
                scheduled_time=NOW + timedelta(hours=offset),
                owner_namespace="users",
                asset_deltas=deltas,
            )
        )

    due = ledger_store.query_due(NOW)

    assert [r.id for r in due] == ["due", "now"]
    assert due[0].asset_deltas == deltas
    assert due[0].activity == _activity()
    assert ledger_store.delete_scheduled_activity("future") is True
    assert ledger_store.delete_scheduled_activity("future") is False
    assert len(ledger_store.list_scheduled_activities("acct")) == 2


def test_undecodable_payload_surfaces_without_activity(ledger_store) -> None:
    """A corrupt stored document should not break the due query."""
    engine = ledger_store._db_port.get_ledger_engine()
    ledger_store.add_scheduled_activity(
        ScheduledActivity("bad", "acct", _activity(), NOW, "users")
    )
    with engine.begin() as conn:
        conn.execute(
            update(schema.scheduled_activities).values(activity="{not json")
        )

    [record] = ledger_store.query_due(NOW)

    assert record.activity is None
    ledger_store._logger.warning.assert_called_once()


def test_settlement_commits_all_writes_together(ledger_store) -> None:
    """Settlement should append, update assets and complete at once."""
    ledger_store.save_asset_snapshot(
        AssetSnapshot(
            "acct",
            {"BND": FundSnapshot("BND", "4", {"bonds": AssetDetail("4")})},
            GeneralSnapshot(total="4", ytd="1"),
        )
    )
    ledger_store.add_scheduled_activity(
        ScheduledActivity(
            id="s1",
            account_id="acct",
            activity=_activity(),
            scheduled_time=NOW,
            owner_namespace="users",
            asset_deltas={"AGQ": {"cash": AssetDetailOverride("10")}},
        )
    )
    sweep = SettlementSweepUseCase(ledger_store, logger=MagicMock())

    first = sweep.run(NOW)
    second = sweep.run(NOW)

    assert first.processed == 1
    assert second.processed == 0
    [settled] = ledger_store.list_activities("acct")
    assert settled.parent_collection == "users"
    assert settled.created_at == NOW
    snapshot = ledger_store.get_asset_snapshot("acct")
    assert snapshot.funds["AGQ"].total == Decimal("10")
    assert snapshot.general == GeneralSnapshot(total="14", ytd="1")
    record = ledger_store.get_scheduled_activity("s1")
    assert record.status is ScheduledStatus.COMPLETED


def test_transaction_rolls_back_on_error(ledger_store) -> None:
    """Writes inside a failed transaction should not be visible."""
    with pytest.raises(RuntimeError):
        with ledger_store.transaction() as tx:
            tx.append_activity("acct", _activity())
            raise RuntimeError("abort")

    assert ledger_store.list_activities("acct") == []


def test_driver_errors_become_store_errors(ledger_store) -> None:
    """Constraint violations should surface as StoreError."""
    ledger_store.append_activity("acct", _activity().settled("users", NOW))
    [stored] = ledger_store.list_activities("acct")

    with pytest.raises(StoreError):
        ledger_store.append_activity("acct", stored)

    assert len(ledger_store.list_activities("acct")) == 1


def test_complete_scheduled_activity_is_conditional(ledger_store) -> None:
    """Completing twice should only succeed once."""
    ledger_store.add_scheduled_activity(
        ScheduledActivity("s1", "acct", _activity(), NOW, "users")
    )

    with ledger_store.transaction() as tx:
        assert tx.complete_scheduled_activity("s1") is True
    with ledger_store.transaction() as tx:
        assert tx.complete_scheduled_activity("s1") is False


_GOOD_ACTIVITY = (
    '{"amount": "5", "fund": "AGQ", "recipient": "X", '
    '"time": "2024-04-15T11:00:00+00:00", "type": "deposit"}'
)


@pytest.mark.parametrize(
    "values",
    [
        {"asset_deltas": '{"AGQ": ["cash"]}'},
        {"asset_deltas": '{"AGQ": {"cash": "5"}}'},
        {"asset_deltas": '["AGQ"]'},
        {"asset_deltas": '{"AGQ": {"cash": {"amount": "1", "index": "first"}}}'},
        {"asset_deltas": '{"AGQ": {"cash": {"amount": "Infinity"}}}'},
        {"activity": _GOOD_ACTIVITY.replace('"5"', '"NaN"')},
        {"activity": _GOOD_ACTIVITY.replace('"5"', "NaN")},
        {
            "activity": _GOOD_ACTIVITY.replace(
                "2024-04-15T11:00:00+00:00", "0001-01-01T00:00:00+05:00"
            )
        },
        {"activity": '"just text"'},
    ],
)
def test_corrupt_row_is_skipped_while_next_row_settles(ledger_store, values) -> None:
    """A malformed stored document should not stop the rest of the sweep."""
    engine = ledger_store._db_port.get_ledger_engine()
    ledger_store.add_scheduled_activity(
        ScheduledActivity(
            "bad", "acct", _activity(), NOW - timedelta(minutes=5), "users"
        )
    )
    ledger_store.add_scheduled_activity(
        ScheduledActivity("good", "acct", _activity(amount="7"), NOW, "users")
    )
    with engine.begin() as conn:
        conn.execute(
            update(schema.scheduled_activities)
            .where(schema.scheduled_activities.c.id == "bad")
            .values(**values)
        )

    result = SettlementSweepUseCase(ledger_store, logger=MagicMock()).run(NOW)

    assert result == SettlementSweepResult(processed=1, skipped=1)
    assert ledger_store.get_scheduled_activity("good").status is (
        ScheduledStatus.COMPLETED
    )
    assert ledger_store.get_scheduled_activity("bad").status is (
        ScheduledStatus.PENDING
    )
    assert [a.amount for a in ledger_store.list_activities("acct")] == [
        Decimal("7")
    ]


def test_out_of_range_first_deposit_date_keeps_settling(ledger_store) -> None:
    """An overflowing override date should be ignored, not fail the record."""
    engine = ledger_store._db_port.get_ledger_engine()
    ledger_store.add_scheduled_activity(
        ScheduledActivity("s1", "acct", _activity(), NOW, "users")
    )
    with engine.begin() as conn:
        conn.execute(
            update(schema.scheduled_activities).values(
                asset_deltas=(
                    '{"AGQ": {"cash": {"amount": "3", '
                    '"firstDepositDate": "0001-01-01T00:00:00+05:00"}}}'
                )
            )
        )

    result = SettlementSweepUseCase(ledger_store, logger=MagicMock()).run(NOW)

    assert result == SettlementSweepResult(processed=1)
    cash = ledger_store.get_asset_snapshot("acct").funds["AGQ"].assets["cash"]
    assert cash.amount == Decimal("3")
    assert cash.first_deposit_date is None


def test_general_snapshot_locking_query_uses_for_update() -> None:
    """The locking read should compile to SELECT ... FOR UPDATE."""
    dialect = postgresql.dialect()

    locked = _general_snapshot_query("acct", for_update=True).compile(
        dialect=dialect
    )
    plain = _general_snapshot_query("acct").compile(dialect=dialect)

    assert "FOR UPDATE" in str(locked)
    assert "FOR UPDATE" not in str(plain)


def test_update_year_to_date_reads_general_under_lock(
    ledger_store,
    monkeypatch,
) -> None:
    """YTD writes should read the general snapshot with a locking read."""
    locked = []
    original = SqlAlchemyLedgerTransaction.lock_general_snapshot

    def _spy(self, account_id):
        locked.append(account_id)
        return original(self, account_id)

    monkeypatch.setattr(SqlAlchemyLedgerTransaction, "lock_general_snapshot", _spy)
    ledger_store.save_asset_snapshot(
        AssetSnapshot("acct", {}, GeneralSnapshot(total="8"))
    )

    ledger_store.update_year_to_date("acct", Decimal("1"), Decimal("2"))

    assert locked == ["acct"]
    assert ledger_store.get_asset_snapshot("acct").general == GeneralSnapshot(
        total="8", ytd="1", total_ytd="2"
    )


def test_overall_balance_points_are_kept_per_namespace(ledger_store) -> None:
    """Namespace reads and overall series should not leak across namespaces."""
    ledger_store.save_account(Account("a", "users"))
    ledger_store.save_account(Account("b", "users"))
    ledger_store.save_account(Account("z", "clients"))
    ledger_store.append_activity("b", _activity(amount="2"))
    ledger_store.append_activity("a", _activity(NOW - timedelta(days=1), amount="1"))
    ledger_store.append_activity("z", _activity(amount="9"))

    activities = ledger_store.list_namespace_activities("users")

    assert [a.amount for a in activities] == [Decimal("2"), Decimal("1")]

    points = [
        BalancePoint("cumulative", Decimal("3"), Decimal("3"), NOW),
        BalancePoint("AGQ", Decimal("3"), Decimal("3"), NOW, fund="AGQ"),
    ]
    assert ledger_store.replace_overall_balance_points("users", points) == 2
    ledger_store.replace_overall_balance_points("clients", points[:1])
    ledger_store.replace_balance_points("a", points[1:])

    assert ledger_store.list_overall_balance_points("users") == points
    assert ledger_store.list_overall_balance_points("clients") == points[:1]
    assert ledger_store.list_balance_points("a")[0].fund == "AGQ"
