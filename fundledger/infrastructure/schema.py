"""SQLAlchemy Core tables backing the ledger store.

Amounts are stored as decimal strings and instants as fixed-width UTC
strings (see ``fundledger.utils.instants.format_instant``) so that values
round-trip exactly and time range filters compare correctly on every
dialect.
"""

from sqlalchemy import (
    Boolean,
    Column,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
)

metadata = MetaData()

_ID = 64
_AMOUNT = 64
_INSTANT = 40

accounts = Table(
    "accounts",
    metadata,
    Column("account_id", String(_ID), primary_key=True),
    Column("namespace", String(_ID), nullable=False, index=True),
    Column("display_name", String(255), nullable=False, default=""),
)

account_connections = Table(
    "account_connections",
    metadata,
    Column("account_id", String(_ID), nullable=False),
    Column("position", Integer, nullable=False),
    Column("connected_account_id", String(_ID), nullable=False),
    PrimaryKeyConstraint("account_id", "position"),
)

activities = Table(
    "activities",
    metadata,
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("id", String(_ID), nullable=False, unique=True),
    Column("account_id", String(_ID), nullable=False, index=True),
    Column("time", String(_INSTANT), nullable=False),
    Column("activity_type", String(32), nullable=False),
    Column("amount", String(_AMOUNT), nullable=False),
    Column("recipient", String(255), nullable=False),
    Column("fund", String(_ID), nullable=False),
    Column("is_dividend", Boolean, nullable=False, default=False),
    Column("parent_collection", String(_ID), nullable=True),
    Column("created_at", String(_INSTANT), nullable=True),
)

balance_points = Table(
    "balance_points",
    metadata,
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("account_id", String(_ID), nullable=False, index=True),
    Column("position", Integer, nullable=False),
    Column("account", String(255), nullable=False),
    Column("amount", String(_AMOUNT), nullable=False),
    Column("cashflow", String(_AMOUNT), nullable=False),
    Column("time", String(_INSTANT), nullable=False),
    Column("fund", String(_ID), nullable=True),
)

overall_balance_points = Table(
    "overall_balance_points",
    metadata,
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("namespace", String(_ID), nullable=False, index=True),
    Column("position", Integer, nullable=False),
    Column("account", String(255), nullable=False),
    Column("amount", String(_AMOUNT), nullable=False),
    Column("cashflow", String(_AMOUNT), nullable=False),
    Column("time", String(_INSTANT), nullable=False),
    Column("fund", String(_ID), nullable=True),
)

fund_snapshots = Table(
    "fund_snapshots",
    metadata,
    Column("account_id", String(_ID), nullable=False),
    Column("fund", String(_ID), nullable=False),
    Column("total", String(_AMOUNT), nullable=False),
    PrimaryKeyConstraint("account_id", "fund"),
)

asset_details = Table(
    "asset_details",
    metadata,
    Column("account_id", String(_ID), nullable=False),
    Column("fund", String(_ID), nullable=False),
    Column("asset_type", String(_ID), nullable=False),
    Column("amount", String(_AMOUNT), nullable=False),
    Column("first_deposit_date", String(_INSTANT), nullable=True),
    Column("display_title", String(255), nullable=True),
    Column("asset_index", Integer, nullable=True),
    PrimaryKeyConstraint("account_id", "fund", "asset_type"),
)

general_snapshots = Table(
    "general_snapshots",
    metadata,
    Column("account_id", String(_ID), primary_key=True),
    Column("total", String(_AMOUNT), nullable=False),
    Column("ytd", String(_AMOUNT), nullable=False),
    Column("total_ytd", String(_AMOUNT), nullable=False),
)

scheduled_activities = Table(
    "scheduled_activities",
    metadata,
    Column("id", String(_ID), primary_key=True),
    Column("account_id", String(_ID), nullable=True, index=True),
    Column("status", String(16), nullable=False, index=True),
    Column("scheduled_time", String(_INSTANT), nullable=False),
    Column("owner_namespace", String(_ID), nullable=False),
    Column("activity", Text, nullable=True),
    Column("asset_deltas", Text, nullable=True),
)


__all__ = [
    "metadata",
    "accounts",
    "account_connections",
    "activities",
    "balance_points",
    "overall_balance_points",
    "fund_snapshots",
    "asset_details",
    "general_snapshots",
    "scheduled_activities",
]
