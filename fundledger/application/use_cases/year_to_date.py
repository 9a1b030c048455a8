"""Use case computing year-to-date totals for accounts and their network."""

from dataclasses import dataclass
from decimal import Decimal

from fundledger.application.ports.ledger_store import LedgerStorePort
from fundledger.domain.constants import DEFAULT_YTD_FUND
from fundledger.domain.services.ytd import (
    YTD_ACTIVITY_TYPES,
    iter_connected_accounts,
    sum_amounts,
)
from fundledger.infrastructure.logging.logger import get_app_logger
from fundledger.utils.instants import year_bounds


@dataclass(frozen=True)
class YearToDateFigures:
    """YTD figures stored on an account's general snapshot.

    Attributes:
        account_id: Account the figures belong to.
        year: Calendar year covered.
        ytd: The account's own YTD total.
        total_ytd: YTD summed over the account's connected network.
    """

    account_id: str
    year: int
    ytd: Decimal
    total_ytd: Decimal


class YearToDateUseCase:
    """Compute YTD totals from profit and income activities of one fund."""

    def __init__(
        self,
        store: LedgerStorePort,
        logger=None,
        fund: str = DEFAULT_YTD_FUND,
    ) -> None:
        """Initialize the use case.

        Args:
            store: Port providing activity queries and account connections.
            logger: Optional logger compatible with logging.Logger-like API.
            fund: Fund whose activities count toward YTD.
        """
        self._store = store
        self._logger = logger or get_app_logger()
        self._fund = fund

    def year_to_date(self, account_id: str, year: int) -> Decimal:
        """Return the account's YTD total for ``year``.

        Args:
            account_id: Account to total.
            year: Calendar year; bounds are inclusive.

        Returns:
            Decimal: Sum of qualifying activity amounts.
        """
        start, end = year_bounds(year)
        activities = self._store.query_activities(
            account_id,
            fund=self._fund,
            types=YTD_ACTIVITY_TYPES,
            start=start,
            end=end,
        )
        return sum_amounts(activities)

    def network_year_to_date(self, account_id: str, year: int) -> Decimal:
        """Return YTD summed over every account reachable from ``account_id``.

        Each reachable account, including the start, contributes once no
        matter how many connections point at it.

        Args:
            account_id: Account where the traversal starts.
            year: Calendar year.

        Returns:
            Decimal: Network YTD total.
        """
        total = Decimal("0")
        visited = 0
        for member in iter_connected_accounts(
            account_id,
            self._store.get_connected_accounts,
        ):
            total += self.year_to_date(member, year)
            visited += 1
        self._logger.info(
            f"Network YTD for account {account_id} ({year}) covered "
            f"{visited} accounts: {total}"
        )
        return total

    def refresh(self, account_id: str, year: int) -> YearToDateFigures:
        """Compute both figures and store them on the general snapshot.

        Args:
            account_id: Account to refresh.
            year: Calendar year.

        Returns:
            YearToDateFigures: The stored figures.
        """
        ytd = self.year_to_date(account_id, year)
        total_ytd = self.network_year_to_date(account_id, year)
        self._store.update_year_to_date(account_id, ytd, total_ytd)
        self._logger.info(
            f"Updated YTD for account {account_id}: ytd={ytd}, "
            f"total_ytd={total_ytd}"
        )
        return YearToDateFigures(
            account_id=account_id,
            year=year,
            ytd=ytd,
            total_ytd=total_ytd,
        )


__all__ = ["YearToDateUseCase", "YearToDateFigures"]
