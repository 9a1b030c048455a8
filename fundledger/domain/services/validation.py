"""Domain validation helpers."""

from fundledger.domain.exceptions import InvariantViolationError
from fundledger.domain.models import AssetSnapshot, FundSnapshot
from fundledger.domain.services.assets import compute_general_total


def validate_fund_snapshot(account_id: str, snapshot: FundSnapshot) -> None:
    """Raise when a fund total disagrees with its asset amounts.

    Raises:
        InvariantViolationError: If ``total`` is not the sum of the assets.
    """
    expected = snapshot.computed_total
    if snapshot.total != expected:
        raise InvariantViolationError(
            f"Fund {snapshot.fund} of account {account_id} has "
            f"total={snapshot.total} but its assets sum to {expected}"
        )


def validate_asset_snapshot(snapshot: AssetSnapshot) -> None:
    """Raise when any fund or the general total is inconsistent.

    Raises:
        InvariantViolationError: If a fund total or the general total does
            not match the amounts it rolls up.
    """
    for fund in snapshot.funds.values():
        validate_fund_snapshot(snapshot.account_id, fund)
    expected = compute_general_total(snapshot.funds.values())
    if snapshot.general.total != expected:
        raise InvariantViolationError(
            f"Account {snapshot.account_id} has general total="
            f"{snapshot.general.total} but its funds sum to {expected}"
        )


__all__ = ["validate_fund_snapshot", "validate_asset_snapshot"]
