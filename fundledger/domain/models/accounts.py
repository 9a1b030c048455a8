"""Domain models for ledger accounts."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Account:
    """Account owning an activity log and asset balances.

    Attributes:
        account_id: Store identifier of the account.
        namespace: Collection tag the account belongs to.
        display_name: Human readable name.
        connected_accounts: Ordered identifiers of linked accounts.
    """

    account_id: str
    namespace: str
    display_name: str = ""
    connected_accounts: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "connected_accounts", tuple(self.connected_accounts)
        )


__all__ = ["Account"]
