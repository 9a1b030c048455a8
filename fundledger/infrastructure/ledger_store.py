"""SQLAlchemy-backed implementation of the ledger store port."""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Iterator
import uuid

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from fundledger.application.ports.database import DatabaseEnginePort
from fundledger.application.ports.ledger_store import (
    LedgerStorePort,
    LedgerTransactionPort,
)
from fundledger.domain.exceptions import InvalidActivityError, StoreError
from fundledger.domain.models import (
    Account,
    Activity,
    ActivityType,
    AssetDetail,
    AssetSnapshot,
    BalancePoint,
    FundSnapshot,
    GeneralSnapshot,
    ScheduledActivity,
    ScheduledStatus,
)
from fundledger.infrastructure import schema
from fundledger.infrastructure.codecs import (
    activity_from_payload,
    activity_to_payload,
    asset_deltas_from_payload,
    asset_deltas_to_payload,
    dump_json,
    load_json,
)
from fundledger.infrastructure.logging.logger import get_app_logger
from fundledger.utils.decimal_utils import coerce_decimal, format_decimal
from fundledger.utils.instants import format_instant, parse_instant


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    """Translate driver errors into ``StoreError``."""
    try:
        yield
    except SQLAlchemyError as exc:
        raise StoreError(f"{operation} failed: {exc}") from exc


def _activity_from_row(row) -> Activity:
    return Activity(
        time=parse_instant(row.time),
        activity_type=row.activity_type,
        amount=coerce_decimal(row.amount),
        recipient=row.recipient,
        fund=row.fund,
        is_dividend=bool(row.is_dividend),
        parent_collection=row.parent_collection,
        id=row.id,
        created_at=parse_instant(row.created_at),
    )


def _build_fund_snapshots(fund_rows, detail_rows) -> dict[str, FundSnapshot]:
    details: dict[str, dict[str, AssetDetail]] = defaultdict(dict)
    for row in detail_rows:
        details[row.fund][row.asset_type] = AssetDetail(
            amount=coerce_decimal(row.amount),
            first_deposit_date=parse_instant(row.first_deposit_date),
            display_title=row.display_title,
            index=row.asset_index,
        )
    return {
        row.fund: FundSnapshot(
            fund=row.fund,
            total=coerce_decimal(row.total),
            assets=dict(details.get(row.fund, {})),
        )
        for row in fund_rows
    }


def _general_snapshot_query(account_id: str, for_update: bool = False):
    query = select(schema.general_snapshots).where(
        schema.general_snapshots.c.account_id == account_id
    )
    if for_update:
        query = query.with_for_update()
    return query


def _general_from_row(row) -> GeneralSnapshot:
    return GeneralSnapshot(
        total=coerce_decimal(row.total),
        ytd=coerce_decimal(row.ytd),
        total_ytd=coerce_decimal(row.total_ytd),
    )


class SqlAlchemyLedgerTransaction(LedgerTransactionPort):
    """Unit of work bound to one open connection and transaction."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    @property
    def connection(self) -> Connection:
        return self._conn

    def append_activity(self, account_id: str, activity: Activity) -> str:
        activity_id = activity.id or uuid.uuid4().hex
        self._conn.execute(
            insert(schema.activities).values(
                id=activity_id,
                account_id=account_id,
                time=format_instant(activity.time),
                activity_type=activity.activity_type.value,
                amount=format_decimal(activity.amount),
                recipient=activity.recipient,
                fund=activity.fund,
                is_dividend=activity.is_dividend,
                parent_collection=activity.parent_collection,
                created_at=(
                    format_instant(activity.created_at)
                    if activity.created_at is not None
                    else None
                ),
            )
        )
        return activity_id

    def read_fund_snapshots(
        self,
        account_id: str,
        for_update: bool = False,
    ) -> dict[str, FundSnapshot]:
        """Return the account's fund snapshots keyed by fund."""
        funds_query = (
            select(schema.fund_snapshots)
            .where(schema.fund_snapshots.c.account_id == account_id)
            .order_by(schema.fund_snapshots.c.fund)
        )
        details_query = (
            select(schema.asset_details)
            .where(schema.asset_details.c.account_id == account_id)
            .order_by(
                schema.asset_details.c.fund,
                schema.asset_details.c.asset_type,
            )
        )
        if for_update:
            funds_query = funds_query.with_for_update()
            details_query = details_query.with_for_update()
        fund_rows = self._conn.execute(funds_query).all()
        detail_rows = self._conn.execute(details_query).all()
        return _build_fund_snapshots(fund_rows, detail_rows)

    def lock_fund_snapshots(self, account_id: str) -> dict[str, FundSnapshot]:
        return self.read_fund_snapshots(account_id, for_update=True)

    def put_fund_snapshot(self, account_id: str, snapshot: FundSnapshot) -> None:
        self._conn.execute(
            delete(schema.asset_details).where(
                schema.asset_details.c.account_id == account_id,
                schema.asset_details.c.fund == snapshot.fund,
            )
        )
        self._conn.execute(
            delete(schema.fund_snapshots).where(
                schema.fund_snapshots.c.account_id == account_id,
                schema.fund_snapshots.c.fund == snapshot.fund,
            )
        )
        self._conn.execute(
            insert(schema.fund_snapshots).values(
                account_id=account_id,
                fund=snapshot.fund,
                total=format_decimal(snapshot.total),
            )
        )
        rows = [
            {
                "account_id": account_id,
                "fund": snapshot.fund,
                "asset_type": asset_type,
                "amount": format_decimal(detail.amount),
                "first_deposit_date": (
                    format_instant(detail.first_deposit_date)
                    if detail.first_deposit_date is not None
                    else None
                ),
                "display_title": detail.display_title,
                "asset_index": detail.index,
            }
            for asset_type, detail in snapshot.assets.items()
        ]
        if rows:
            self._conn.execute(insert(schema.asset_details), rows)

    def get_general_snapshot(
        self,
        account_id: str,
        for_update: bool = False,
    ) -> GeneralSnapshot | None:
        row = self._conn.execute(
            _general_snapshot_query(account_id, for_update)
        ).first()
        if row is None:
            return None
        return _general_from_row(row)

    def lock_general_snapshot(self, account_id: str) -> GeneralSnapshot | None:
        return self.get_general_snapshot(account_id, for_update=True)

    def put_general_snapshot(
        self,
        account_id: str,
        general: GeneralSnapshot,
    ) -> None:
        values = {
            "total": format_decimal(general.total),
            "ytd": format_decimal(general.ytd),
            "total_ytd": format_decimal(general.total_ytd),
        }
        result = self._conn.execute(
            update(schema.general_snapshots)
            .where(schema.general_snapshots.c.account_id == account_id)
            .values(**values)
        )
        if result.rowcount == 0:
            self._conn.execute(
                insert(schema.general_snapshots).values(
                    account_id=account_id,
                    **values,
                )
            )

    def delete_asset_snapshot(self, account_id: str) -> None:
        for table in (
            schema.asset_details,
            schema.fund_snapshots,
            schema.general_snapshots,
        ):
            self._conn.execute(delete(table).where(table.c.account_id == account_id))

    def complete_scheduled_activity(self, scheduled_id: str) -> bool:
        result = self._conn.execute(
            update(schema.scheduled_activities)
            .where(
                schema.scheduled_activities.c.id == scheduled_id,
                schema.scheduled_activities.c.status
                == ScheduledStatus.PENDING.value,
            )
            .values(status=ScheduledStatus.COMPLETED.value)
        )
        return result.rowcount == 1


class SqlAlchemyLedgerStore(LedgerStorePort):
    """Ledger store backed by SQLAlchemy Core tables."""

    def __init__(self, db_port: DatabaseEnginePort, logger=None) -> None:
        """Initialize the store.

        Args:
            db_port: Port providing access to the ledger engine.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._db_port = db_port
        self._logger = logger or get_app_logger()

    def create_schema(self) -> None:
        """Create any missing ledger tables."""
        with _store_errors("Schema creation"):
            schema.metadata.create_all(self._db_port.get_ledger_engine())

    @contextmanager
    def transaction(self) -> Iterator[SqlAlchemyLedgerTransaction]:
        engine = self._db_port.get_ledger_engine()
        with _store_errors("Ledger transaction"):
            with engine.begin() as conn:
                yield SqlAlchemyLedgerTransaction(conn)

    @contextmanager
    def _reading(self, operation: str) -> Iterator[Connection]:
        engine = self._db_port.get_ledger_engine()
        with _store_errors(operation):
            with engine.connect() as conn:
                yield conn

    # Activities

    def list_activities(self, account_id: str) -> list[Activity]:
        query = (
            select(schema.activities)
            .where(schema.activities.c.account_id == account_id)
            .order_by(schema.activities.c.seq)
        )
        with self._reading(f"Reading activities of {account_id}") as conn:
            rows = conn.execute(query).all()
        return [_activity_from_row(row) for row in rows]

    def query_activities(
        self,
        account_id: str,
        *,
        fund: str | None = None,
        types: Iterable[ActivityType] | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Activity]:
        table = schema.activities
        query = select(table).where(table.c.account_id == account_id)
        if fund is not None:
            query = query.where(table.c.fund == fund)
        if types is not None:
            query = query.where(
                table.c.activity_type.in_(
                    [ActivityType.parse(value).value for value in types]
                )
            )
        if start is not None:
            query = query.where(table.c.time >= format_instant(start))
        if end is not None:
            query = query.where(table.c.time <= format_instant(end))
        query = query.order_by(table.c.seq)
        with self._reading(f"Querying activities of {account_id}") as conn:
            rows = conn.execute(query).all()
        return [_activity_from_row(row) for row in rows]

    def list_namespace_activities(self, namespace: str) -> list[Activity]:
        members = select(schema.accounts.c.account_id).where(
            schema.accounts.c.namespace == namespace
        )
        query = (
            select(schema.activities)
            .where(schema.activities.c.account_id.in_(members))
            .order_by(schema.activities.c.seq)
        )
        with self._reading(f"Reading activities of namespace {namespace}") as conn:
            rows = conn.execute(query).all()
        return [_activity_from_row(row) for row in rows]

    def append_activity(self, account_id: str, activity: Activity) -> str:
        with self.transaction() as tx:
            return tx.append_activity(account_id, activity)

    # Balance points

    def _swap_points(self, table, key_column, key: str, points, operation: str):
        rows = [
            {
                key_column: key,
                "position": position,
                "account": point.account,
                "amount": format_decimal(point.amount),
                "cashflow": format_decimal(point.cashflow),
                "time": format_instant(point.time),
                "fund": point.fund,
            }
            for position, point in enumerate(points)
        ]
        with _store_errors(operation):
            with self._db_port.get_ledger_engine().begin() as conn:
                conn.execute(delete(table).where(table.c[key_column] == key))
                if rows:
                    conn.execute(insert(table), rows)
        return len(rows)

    def _read_points(self, table, key_column, key: str, operation: str):
        query = (
            select(table)
            .where(table.c[key_column] == key)
            .order_by(table.c.position)
        )
        with self._reading(operation) as conn:
            rows = conn.execute(query).all()
        return [
            BalancePoint(
                account=row.account,
                amount=coerce_decimal(row.amount),
                cashflow=coerce_decimal(row.cashflow),
                time=parse_instant(row.time),
                fund=row.fund,
            )
            for row in rows
        ]

    def replace_balance_points(
        self,
        account_id: str,
        points: Sequence[BalancePoint],
    ) -> int:
        return self._swap_points(
            schema.balance_points,
            "account_id",
            account_id,
            points,
            f"Replacing balance points of {account_id}",
        )

    def list_balance_points(self, account_id: str) -> list[BalancePoint]:
        return self._read_points(
            schema.balance_points,
            "account_id",
            account_id,
            f"Reading balance points of {account_id}",
        )

    def replace_overall_balance_points(
        self,
        namespace: str,
        points: Sequence[BalancePoint],
    ) -> int:
        return self._swap_points(
            schema.overall_balance_points,
            "namespace",
            namespace,
            points,
            f"Replacing overall balance points of {namespace}",
        )

    def list_overall_balance_points(self, namespace: str) -> list[BalancePoint]:
        return self._read_points(
            schema.overall_balance_points,
            "namespace",
            namespace,
            f"Reading overall balance points of {namespace}",
        )

    # Asset snapshots

    def get_asset_snapshot(self, account_id: str) -> AssetSnapshot | None:
        with self.transaction() as tx:
            funds = tx.read_fund_snapshots(account_id)
            general = tx.get_general_snapshot(account_id)
        if not funds and general is None:
            return None
        return AssetSnapshot(
            account_id=account_id,
            funds=funds,
            general=general or GeneralSnapshot(),
        )

    def save_asset_snapshot(self, snapshot: AssetSnapshot) -> None:
        with self.transaction() as tx:
            tx.delete_asset_snapshot(snapshot.account_id)
            for fund in snapshot.funds.values():
                tx.put_fund_snapshot(snapshot.account_id, fund)
            tx.put_general_snapshot(snapshot.account_id, snapshot.general)

    def update_year_to_date(
        self,
        account_id: str,
        ytd: Decimal,
        total_ytd: Decimal,
    ) -> None:
        with self.transaction() as tx:
            general = tx.lock_general_snapshot(account_id) or GeneralSnapshot()
            tx.put_general_snapshot(
                account_id,
                replace(general, ytd=ytd, total_ytd=total_ytd),
            )

    def reset_year_to_date(self, namespace: str) -> int:
        members = select(schema.accounts.c.account_id).where(
            schema.accounts.c.namespace == namespace
        )
        with self.transaction() as tx:
            result = tx.connection.execute(
                update(schema.general_snapshots)
                .where(schema.general_snapshots.c.account_id.in_(members))
                .values(ytd="0", total_ytd="0")
            )
            count = result.rowcount
        return count

    # Accounts

    def save_account(self, account: Account) -> None:
        with self.transaction() as tx:
            conn = tx.connection
            conn.execute(
                delete(schema.account_connections).where(
                    schema.account_connections.c.account_id == account.account_id
                )
            )
            conn.execute(
                delete(schema.accounts).where(
                    schema.accounts.c.account_id == account.account_id
                )
            )
            conn.execute(
                insert(schema.accounts).values(
                    account_id=account.account_id,
                    namespace=account.namespace,
                    display_name=account.display_name,
                )
            )
            if account.connected_accounts:
                conn.execute(
                    insert(schema.account_connections),
                    [
                        {
                            "account_id": account.account_id,
                            "position": position,
                            "connected_account_id": connected,
                        }
                        for position, connected in enumerate(
                            account.connected_accounts
                        )
                    ],
                )

    def get_account(self, account_id: str) -> Account | None:
        query = select(schema.accounts).where(
            schema.accounts.c.account_id == account_id
        )
        with self._reading(f"Reading account {account_id}") as conn:
            row = conn.execute(query).first()
        if row is None:
            return None
        return Account(
            account_id=row.account_id,
            namespace=row.namespace,
            display_name=row.display_name,
            connected_accounts=tuple(self.get_connected_accounts(account_id)),
        )

    def list_accounts(self, namespace: str) -> list[Account]:
        accounts_query = (
            select(schema.accounts)
            .where(schema.accounts.c.namespace == namespace)
            .order_by(schema.accounts.c.account_id)
        )
        links_query = (
            select(schema.account_connections)
            .where(
                schema.account_connections.c.account_id.in_(
                    select(schema.accounts.c.account_id).where(
                        schema.accounts.c.namespace == namespace
                    )
                )
            )
            .order_by(
                schema.account_connections.c.account_id,
                schema.account_connections.c.position,
            )
        )
        with self._reading(f"Listing accounts of {namespace}") as conn:
            rows = conn.execute(accounts_query).all()
            link_rows = conn.execute(links_query).all()
        links: dict[str, list[str]] = defaultdict(list)
        for link in link_rows:
            links[link.account_id].append(link.connected_account_id)
        return [
            Account(
                account_id=row.account_id,
                namespace=row.namespace,
                display_name=row.display_name,
                connected_accounts=tuple(links.get(row.account_id, [])),
            )
            for row in rows
        ]

    def get_connected_accounts(self, account_id: str) -> list[str]:
        query = (
            select(schema.account_connections.c.connected_account_id)
            .where(schema.account_connections.c.account_id == account_id)
            .order_by(schema.account_connections.c.position)
        )
        with self._reading(f"Reading connections of {account_id}") as conn:
            rows = conn.execute(query).all()
        return [row.connected_account_id for row in rows]

    # Scheduled activities

    def add_scheduled_activity(self, record: ScheduledActivity) -> str:
        values = {
            "id": record.id,
            "account_id": record.account_id,
            "status": record.status.value,
            "scheduled_time": format_instant(record.scheduled_time),
            "owner_namespace": record.owner_namespace,
            "activity": dump_json(
                activity_to_payload(record.activity)
                if record.activity is not None
                else None
            ),
            "asset_deltas": dump_json(
                asset_deltas_to_payload(record.asset_deltas)
                if record.asset_deltas
                else None
            ),
        }
        with self.transaction() as tx:
            tx.connection.execute(
                insert(schema.scheduled_activities).values(**values)
            )
        return record.id

    def get_scheduled_activity(
        self,
        scheduled_id: str,
    ) -> ScheduledActivity | None:
        query = select(schema.scheduled_activities).where(
            schema.scheduled_activities.c.id == scheduled_id
        )
        with self._reading(f"Reading scheduled activity {scheduled_id}") as conn:
            row = conn.execute(query).first()
        return self._scheduled_from_row(row) if row is not None else None

    def list_scheduled_activities(
        self,
        account_id: str | None = None,
    ) -> list[ScheduledActivity]:
        table = schema.scheduled_activities
        query = select(table).order_by(table.c.scheduled_time, table.c.id)
        if account_id is not None:
            query = query.where(table.c.account_id == account_id)
        with self._reading("Listing scheduled activities") as conn:
            rows = conn.execute(query).all()
        return [self._scheduled_from_row(row) for row in rows]

    def delete_scheduled_activity(self, scheduled_id: str) -> bool:
        with self.transaction() as tx:
            result = tx.connection.execute(
                delete(schema.scheduled_activities).where(
                    schema.scheduled_activities.c.id == scheduled_id
                )
            )
            deleted = result.rowcount > 0
        return deleted

    def query_due(self, now: datetime) -> list[ScheduledActivity]:
        table = schema.scheduled_activities
        query = (
            select(table)
            .where(
                table.c.status == ScheduledStatus.PENDING.value,
                table.c.scheduled_time <= format_instant(now),
            )
            .order_by(table.c.scheduled_time, table.c.id)
        )
        with self._reading("Querying due scheduled activities") as conn:
            rows = conn.execute(query).all()
        return [self._scheduled_from_row(row) for row in rows]

    def _scheduled_from_row(self, row) -> ScheduledActivity:
        """Decode a scheduled record.

        A stored payload that cannot be decoded is surfaced as a record with
        no activity, which settlement reports and skips.
        """
        activity = None
        asset_deltas = None
        try:
            payload = load_json(row.activity)
            if payload is not None:
                activity = activity_from_payload(payload)
            deltas_payload = load_json(row.asset_deltas)
            if deltas_payload:
                asset_deltas = asset_deltas_from_payload(deltas_payload)
        except InvalidActivityError as exc:
            self._logger.warning(
                f"Scheduled activity {row.id} has an undecodable payload: {exc}"
            )
            activity = None
            asset_deltas = None
        return ScheduledActivity(
            id=row.id,
            account_id=row.account_id,
            activity=activity,
            scheduled_time=parse_instant(row.scheduled_time),
            owner_namespace=row.owner_namespace,
            status=ScheduledStatus(row.status),
            asset_deltas=asset_deltas,
        )


__all__ = [
    "SqlAlchemyLedgerStore",
    "SqlAlchemyLedgerTransaction",
]
