"""Settings helpers for the ledger use cases and adapters."""

from dataclasses import dataclass
import os
import re

import dotenv

from fundledger.domain.constants import (
    DEFAULT_IRA_PATTERN,
    DEFAULT_NAMESPACE,
    DEFAULT_YTD_FUND,
)
from fundledger.infrastructure.logging.logger import get_app_logger


@dataclass(frozen=True)
class LedgerSettings:
    """Tunable behavior of the ledger core.

    Attributes:
        namespace: Default owning namespace for accounts and schedules.
        ytd_fund: Fund whose profit and income count toward YTD.
        ira_pattern: Regular expression marking IRA recipients.
        sweep_budget_seconds: Time budget of one settlement sweep.
    """

    namespace: str = DEFAULT_NAMESPACE
    ytd_fund: str = DEFAULT_YTD_FUND
    ira_pattern: str = DEFAULT_IRA_PATTERN
    sweep_budget_seconds: float = 300.0

    @classmethod
    def from_env(cls) -> "LedgerSettings":
        """Build settings from environment variables (and a ``.env`` file).

        Returns:
            LedgerSettings: Settings sourced from environment variables.
        """
        dotenv.load_dotenv()
        logger = get_app_logger()
        namespace = os.getenv("LEDGER_NAMESPACE", "").strip() or DEFAULT_NAMESPACE
        ytd_fund = os.getenv("LEDGER_YTD_FUND", "").strip() or DEFAULT_YTD_FUND
        ira_pattern = cls._read_pattern(
            os.getenv("LEDGER_IRA_PATTERN"),
            logger=logger,
        )
        budget = cls._read_budget(
            os.getenv("LEDGER_SWEEP_BUDGET_SECONDS"),
            logger=logger,
        )
        return cls(
            namespace=namespace,
            ytd_fund=ytd_fund,
            ira_pattern=ira_pattern,
            sweep_budget_seconds=budget,
        )

    @staticmethod
    def _read_pattern(raw_value: str | None, logger) -> str:
        """Return a compilable IRA pattern, falling back to the default.

        Args:
            raw_value: Raw environment value.
            logger: Logger used for warnings.

        Returns:
            str: The configured or default pattern.
        """
        if not raw_value:
            return DEFAULT_IRA_PATTERN
        try:
            re.compile(raw_value)
        except re.error:
            logger.warning(
                f"Invalid LEDGER_IRA_PATTERN '{raw_value}', "
                f"using '{DEFAULT_IRA_PATTERN}'"
            )
            return DEFAULT_IRA_PATTERN
        return raw_value

    @staticmethod
    def _read_budget(raw_value: str | None, logger) -> float:
        """Return a positive sweep budget, falling back to the default.

        Args:
            raw_value: Raw environment value.
            logger: Logger used for warnings.

        Returns:
            float: Budget in seconds.
        """
        default = LedgerSettings.sweep_budget_seconds
        if not raw_value:
            return default
        try:
            budget = float(raw_value)
        except ValueError:
            budget = -1.0
        if budget <= 0:
            logger.warning(
                f"Invalid LEDGER_SWEEP_BUDGET_SECONDS '{raw_value}', "
                f"using {default}"
            )
            return default
        return budget


__all__ = ["LedgerSettings"]
