"""Application use cases package."""

from .batch_jobs import (
    BatchRunResult,
    RebuildAllLedgersUseCase,
    RefreshAllYearToDateUseCase,
    ResetYearToDateUseCase,
)
from .rebuild_ledger import (
    LedgerRebuildResult,
    OverallLedgerRebuildResult,
    RebuildLedgerUseCase,
    RebuildOverallLedgerUseCase,
)
from .schedule_activity import ScheduleActivityUseCase
from .settlement_sweep import SettlementSweepResult, SettlementSweepUseCase
from .year_to_date import YearToDateFigures, YearToDateUseCase

__all__ = [
    "BatchRunResult",
    "RebuildAllLedgersUseCase",
    "RefreshAllYearToDateUseCase",
    "ResetYearToDateUseCase",
    "LedgerRebuildResult",
    "RebuildLedgerUseCase",
    "OverallLedgerRebuildResult",
    "RebuildOverallLedgerUseCase",
    "ScheduleActivityUseCase",
    "SettlementSweepResult",
    "SettlementSweepUseCase",
    "YearToDateFigures",
    "YearToDateUseCase",
]
