"""Database infrastructure for the fund ledger.

This module exposes helpers to create and reuse SQLAlchemy engines connected
to the ledger database. It belongs to the infrastructure layer because it
deals with external systems (PostgreSQL in production, SQLite for tests).
"""

import os

import dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool

from fundledger.application.ports.database import DatabaseEnginePort


def _get_env_var(name: str) -> str:
    """Read an environment variable or raise a descriptive error.

    Args:
        name: Name of the environment variable to read.

    Returns:
        str: The raw value of the environment variable.

    Raises:
        RuntimeError: If the environment variable is missing or empty.
    """
    dotenv.load_dotenv()
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing environment variable: {name}")
    return value


def _create_engine(db_url: str) -> Engine:
    """Create a configured SQLAlchemy engine.

    Args:
        db_url: Fully qualified database URL (including driver and credentials)

    Returns:
        Engine: A SQLAlchemy engine. Server databases get a small connection
        pool with health checks; SQLite keeps SQLAlchemy's default pooling.
    """
    if db_url.startswith("sqlite"):
        return create_engine(db_url, future=True)
    return create_engine(
        db_url,
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=5,
        pool_pre_ping=True,
        future=True,
    )


_engines: dict[str, Engine] = {}


def get_ledger_engine(db_url: str | None = None) -> Engine:
    """Get a cached SQLAlchemy engine for the ledger database.

    Args:
        db_url: Database URL; defaults to ``LEDGER_DB_URL``.

    Returns:
        Engine: Lazily initialized engine, one per URL.
    """
    resolved_url = db_url or _get_env_var("LEDGER_DB_URL")
    engine = _engines.get(resolved_url)
    if engine is None:
        engine = _create_engine(resolved_url)
        _engines[resolved_url] = engine
    return engine


class SqlAlchemyDatabaseEngineAdapter(DatabaseEnginePort):
    """DatabaseEnginePort implementation backed by SQLAlchemy engines.

    The adapter hides configuration details (environment variables, pooling)
    behind the port so the ledger store depends only on the protocol.
    """

    def __init__(self, db_url: str | None = None) -> None:
        """Initialize the adapter.

        Args:
            db_url: Optional explicit URL overriding ``LEDGER_DB_URL``.
        """
        self._db_url = db_url

    def get_ledger_engine(self) -> Engine:
        """Get the engine for the ledger database.

        Returns:
            Engine: SQLAlchemy engine connected to the ledger store.
        """
        return get_ledger_engine(self._db_url)


__all__ = ["get_ledger_engine", "SqlAlchemyDatabaseEngineAdapter"]
