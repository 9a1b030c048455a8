"""CLI adapter refreshing the stored YTD figures of every account."""

import os

from fundledger.infrastructure.container import build_ledger_service
from fundledger.infrastructure.logging.logger import get_app_logger
from fundledger.infrastructure.settings import LedgerSettings
from fundledger.utils.instants import utc_now


def _parse_year(value: str | None, logger) -> int:
    """Parse the target year, defaulting to the current year.

    Args:
        value: Year string such as ``2024``.
        logger: Logger used for warnings.

    Returns:
        int: Parsed year, or the current UTC year when missing or invalid.
    """
    current_year = utc_now().year
    if not value:
        return current_year
    try:
        return int(value)
    except ValueError:
        logger.warning(
            f"Invalid year '{value}'. Falling back to {current_year}."
        )
        return current_year


def main() -> None:
    """Refresh YTD and network YTD for the configured namespace."""
    logger = get_app_logger()
    settings = LedgerSettings.from_env()
    year = _parse_year(os.getenv("LEDGER_YTD_YEAR"), logger)
    service = build_ledger_service(settings=settings, logger=logger)

    result = service.refresh_all_year_to_date(year, settings.namespace)

    print(
        f"Refreshed {year} YTD for {len(result.succeeded)} accounts "
        f"in '{settings.namespace}' ({len(result.failed)} failed)."
    )


if __name__ == "__main__":  # pragma: no cover
    main()
