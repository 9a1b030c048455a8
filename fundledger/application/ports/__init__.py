"""Application ports package."""

from .database import DatabaseEnginePort
from .ledger_store import LedgerStorePort, LedgerTransactionPort

__all__ = [
    "DatabaseEnginePort",
    "LedgerStorePort",
    "LedgerTransactionPort",
]
