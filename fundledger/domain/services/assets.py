"""Asset snapshot updates applied during settlement."""

from collections.abc import Iterable, Mapping
from datetime import datetime
from decimal import Decimal
from logging import Logger

from fundledger.domain.models import (
    AssetDetail,
    AssetDetailOverride,
    FundSnapshot,
)
from fundledger.utils.instants import parse_instant


def normalize_first_deposit_date(
    raw_value,
    existing: datetime | None,
    logger: Logger | None = None,
) -> datetime | None:
    """Normalize a supplied first deposit date.

    Args:
        raw_value: Instant, date, or string supplied by the caller.
        existing: Value currently stored for the slot.
        logger: Optional logger used to report unparseable values.

    Returns:
        datetime | None: The parsed instant, or ``existing`` when nothing
        usable was supplied.
    """
    if raw_value is None or raw_value == "":
        return existing
    try:
        parsed = parse_instant(raw_value)
    except ValueError:
        if logger is not None:
            logger.warning(
                f"Ignoring unparseable firstDepositDate {raw_value!r}"
            )
        return existing
    return parsed if parsed is not None else existing


def apply_fund_overrides(
    snapshot: FundSnapshot | None,
    fund: str,
    overrides: Mapping[str, AssetDetailOverride],
    logger: Logger | None = None,
) -> FundSnapshot:
    """Return a fund snapshot with the overrides applied and total refreshed.

    Args:
        snapshot: Current snapshot, or None when the fund has none yet.
        fund: Fund the overrides target.
        overrides: Replacement values keyed by asset type.
        logger: Optional logger for date normalization warnings.

    Returns:
        FundSnapshot: New snapshot whose total is the sum of its assets.
    """
    assets = dict(snapshot.assets) if snapshot is not None else {}
    for asset_type, override in overrides.items():
        current = assets.get(asset_type)
        assets[asset_type] = AssetDetail(
            amount=override.amount,
            first_deposit_date=normalize_first_deposit_date(
                override.first_deposit_date,
                current.first_deposit_date if current else None,
                logger,
            ),
            display_title=override.display_title,
            index=override.index,
        )
    updated = FundSnapshot(fund=fund, assets=assets)
    return FundSnapshot(fund=fund, total=updated.computed_total, assets=assets)


def compute_general_total(funds: Iterable[FundSnapshot]) -> Decimal:
    """Return the sum of the fund totals."""
    return sum((snapshot.total for snapshot in funds), Decimal("0"))


__all__ = [
    "normalize_first_deposit_date",
    "apply_fund_overrides",
    "compute_general_total",
]
