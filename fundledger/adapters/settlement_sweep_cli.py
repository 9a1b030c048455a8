"""CLI adapter running one settlement sweep.

Meant to be invoked by an external scheduler (for example hourly cron):
every pending scheduled activity due at the current time is settled.
"""

from fundledger.infrastructure.container import build_ledger_service
from fundledger.infrastructure.logging.logger import get_settlement_logger


def main() -> None:
    """Run the settlement sweep use case."""
    logger = get_settlement_logger()
    service = build_ledger_service(logger=logger)

    result = service.run_settlement_sweep()

    print(
        f"Settled {result.processed} scheduled activities "
        f"(failed={result.failed}, skipped={result.skipped}, "
        f"deferred={result.deferred})."
    )


if __name__ == "__main__":  # pragma: no cover
    main()
