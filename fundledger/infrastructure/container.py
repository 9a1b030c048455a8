"""Composition root for wiring infrastructure adapters."""

from fundledger.application.ports.database import DatabaseEnginePort
from fundledger.application.services import LedgerService
from fundledger.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from fundledger.infrastructure.ledger_store import SqlAlchemyLedgerStore
from fundledger.infrastructure.logging.logger import get_app_logger
from fundledger.infrastructure.settings import LedgerSettings


def build_database_adapter(db_url: str | None = None) -> DatabaseEnginePort:
    """Return the database adapter instance."""
    return SqlAlchemyDatabaseEngineAdapter(db_url)


def build_ledger_store(
    db_port: DatabaseEnginePort | None = None,
    logger=None,
) -> SqlAlchemyLedgerStore:
    """Return a ledger store with its tables created."""
    resolved_db = db_port or build_database_adapter()
    store = SqlAlchemyLedgerStore(resolved_db, logger=logger or get_app_logger())
    store.create_schema()
    return store


def build_ledger_service(
    store: SqlAlchemyLedgerStore | None = None,
    settings: LedgerSettings | None = None,
    logger=None,
) -> LedgerService:
    """Return the ledger facade configured from the environment."""
    resolved_logger = logger or get_app_logger()
    resolved_settings = settings or LedgerSettings.from_env()
    resolved_store = store or build_ledger_store(logger=resolved_logger)
    return LedgerService(
        resolved_store,
        logger=resolved_logger,
        namespace=resolved_settings.namespace,
        ytd_fund=resolved_settings.ytd_fund,
        ira_pattern=resolved_settings.ira_pattern,
        sweep_budget_seconds=resolved_settings.sweep_budget_seconds,
    )


__all__ = [
    "build_database_adapter",
    "build_ledger_store",
    "build_ledger_service",
]
