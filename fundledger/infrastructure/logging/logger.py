"""Logging helpers for the fund ledger.

Loggers write to daily files under ``<project root>/logs/<subdir>`` and,
optionally, to the console. ``get_app_logger`` serves the use cases and
``get_settlement_logger`` the hourly settlement job.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable

from fundledger.utils.utils import get_project_root

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class LoggerBuilder:
    """Fluent builder for configured ``logging.Logger`` instances."""

    def __init__(self) -> None:
        self._name = "fundledger"
        self._subdir = "app"
        self._prefix = "app_logs"
        self._console = True
        self._level = logging.INFO
        self._formatter_factory: Callable[[], logging.Formatter] = (
            self._default_formatter
        )
        self._file_handler_factory = self._default_file_handler
        self._console_handler_factory = self._default_console_handler
        self._logger: logging.Logger | None = None

    def name(self, value: str) -> "LoggerBuilder":
        self._name = value
        return self

    def subdir(self, value: str) -> "LoggerBuilder":
        self._subdir = value
        return self

    def prefix(self, value: str) -> "LoggerBuilder":
        self._prefix = value
        return self

    def console(self, enabled: bool) -> "LoggerBuilder":
        self._console = enabled
        return self

    def level(self, value: int) -> "LoggerBuilder":
        self._level = value
        return self

    def formatter(
        self,
        factory: Callable[[], logging.Formatter],
    ) -> "LoggerBuilder":
        self._formatter_factory = factory
        return self

    def file_handler(
        self,
        factory: Callable[[Path, logging.Formatter], logging.Handler],
    ) -> "LoggerBuilder":
        self._file_handler_factory = factory
        return self

    def console_handler(
        self,
        factory: Callable[[logging.Formatter], logging.Handler],
    ) -> "LoggerBuilder":
        self._console_handler_factory = factory
        return self

    def build(self) -> logging.Logger:
        """Create the logger once and return the same instance afterwards.

        Returns:
            logging.Logger: Logger with file and optional console handlers.
        """
        if self._logger is not None:
            return self._logger

        logger = logging.getLogger(self._name)
        logger.setLevel(self._level)
        logger.propagate = False
        if not logger.handlers:
            fmt = self._formatter_factory()
            log_dir = get_project_root() / "logs" / self._subdir
            log_dir.mkdir(parents=True, exist_ok=True)
            log_path = log_dir / f"{self._today_stamp()}_{self._prefix}.log"
            logger.addHandler(self._file_handler_factory(log_path, fmt))
            if self._console:
                logger.addHandler(self._console_handler_factory(fmt))
        self._logger = logger
        return logger

    @staticmethod
    def _today_stamp() -> str:
        return datetime.now().strftime("%Y%m%d")

    @staticmethod
    def _default_formatter() -> logging.Formatter:
        return logging.Formatter(_DEFAULT_FORMAT)

    @staticmethod
    def _default_file_handler(
        path: Path,
        fmt: logging.Formatter,
    ) -> logging.FileHandler:
        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setLevel(logging.INFO)
        handler.setFormatter(fmt)
        return handler

    @staticmethod
    def _default_console_handler(
        fmt: logging.Formatter,
    ) -> logging.StreamHandler:
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)
        handler.setFormatter(fmt)
        return handler


class Logger:
    """Singleton wrapper delegating to a built ``logging.Logger``."""

    _instance = None
    _subdir = "app"
    _prefix = "app_logs"

    def __new__(cls, name: str = "fundledger"):
        if cls._instance is None:
            instance = super().__new__(cls)
            instance.logger = (
                LoggerBuilder()
                .name(name)
                .subdir(cls._subdir)
                .prefix(cls._prefix)
                .build()
            )
            cls._instance = instance
        return cls._instance

    def debug(self, msg, *args, **kwargs) -> None:
        self.logger.debug(msg, *args, **kwargs)

    def info(self, msg, *args, **kwargs) -> None:
        self.logger.info(msg, *args, **kwargs)

    def warning(self, msg, *args, **kwargs) -> None:
        self.logger.warning(msg, *args, **kwargs)

    def error(self, msg, *args, **kwargs) -> None:
        self.logger.error(msg, *args, **kwargs)

    def exception(self, msg, *args, **kwargs) -> None:
        self.logger.exception(msg, *args, **kwargs)

    def critical(self, msg, *args, **kwargs) -> None:
        self.logger.critical(msg, *args, **kwargs)


class AppLogger(Logger):
    """Logger shared by the ledger use cases."""

    _instance = None


class SettlementLogger(Logger):
    """Logger dedicated to settlement sweeps."""

    _instance = None
    _subdir = "settlement"
    _prefix = "settlement_logs"


def get_app_logger() -> AppLogger:
    """Return the application logger singleton."""
    return AppLogger("fundledger")


def get_settlement_logger() -> SettlementLogger:
    """Return the settlement logger singleton."""
    return SettlementLogger("fundledger.settlement")


__all__ = [
    "LoggerBuilder",
    "Logger",
    "AppLogger",
    "SettlementLogger",
    "get_app_logger",
    "get_settlement_logger",
]
