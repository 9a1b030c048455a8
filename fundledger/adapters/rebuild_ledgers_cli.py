"""CLI adapter rebuilding the balance points of every account, then the
namespace-wide series."""

from fundledger.infrastructure.container import build_ledger_service
from fundledger.infrastructure.logging.logger import get_app_logger
from fundledger.infrastructure.settings import LedgerSettings


def main() -> None:
    """Rebuild all ledgers of the configured namespace."""
    logger = get_app_logger()
    settings = LedgerSettings.from_env()
    service = build_ledger_service(settings=settings, logger=logger)

    result = service.rebuild_all_ledgers(settings.namespace)

    print(
        f"Rebuilt ledgers for {len(result.succeeded)} accounts "
        f"in '{settings.namespace}' ({len(result.failed)} failed)."
    )

    overall = service.rebuild_overall_ledger(settings.namespace)
    print(
        f"Rebuilt {overall.points_written} overall balance points "
        f"for '{settings.namespace}'."
    )


if __name__ == "__main__":  # pragma: no cover
    main()
