"""Domain models for per-account asset snapshots."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from fundledger.utils.decimal_utils import coerce_decimal


@dataclass(frozen=True)
class AssetDetail:
    """Balance held in one (fund, asset type) slot."""

    amount: Decimal
    first_deposit_date: datetime | None = None
    display_title: str | None = None
    index: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", coerce_decimal(self.amount))


@dataclass(frozen=True)
class AssetDetailOverride:
    """Replacement values for one slot, as supplied with a scheduled activity.

    ``first_deposit_date`` keeps whatever the caller supplied (an instant, a
    date, or a string); it is normalized when the override is applied.
    """

    amount: Decimal
    first_deposit_date: datetime | date | str | None = None
    display_title: str | None = None
    index: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", coerce_decimal(self.amount))


@dataclass(frozen=True)
class FundSnapshot:
    """Current balances of one fund, keyed by asset type."""

    fund: str
    total: Decimal = Decimal("0")
    assets: dict[str, AssetDetail] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "total", coerce_decimal(self.total))

    @property
    def computed_total(self) -> Decimal:
        """Return the sum of the asset amounts."""
        return sum(
            (detail.amount for detail in self.assets.values()),
            Decimal("0"),
        )


@dataclass(frozen=True)
class GeneralSnapshot:
    """Rolled-up figures across every fund of an account."""

    total: Decimal = Decimal("0")
    ytd: Decimal = Decimal("0")
    total_ytd: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        for name in ("total", "ytd", "total_ytd"):
            object.__setattr__(self, name, coerce_decimal(getattr(self, name)))


@dataclass(frozen=True)
class AssetSnapshot:
    """Full asset view of an account: one entry per fund plus the rollup."""

    account_id: str
    funds: dict[str, FundSnapshot] = field(default_factory=dict)
    general: GeneralSnapshot = field(default_factory=GeneralSnapshot)


AssetDeltas = dict[str, dict[str, AssetDetailOverride]]


__all__ = [
    "AssetDetail",
    "AssetDetailOverride",
    "FundSnapshot",
    "GeneralSnapshot",
    "AssetSnapshot",
    "AssetDeltas",
]
