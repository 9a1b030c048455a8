"""Domain constants for the fund ledger."""

CUMULATIVE_ACCOUNT = "cumulative"

DEFAULT_YTD_FUND = "AGQ"

DEFAULT_IRA_PATTERN = "IRA"

DEFAULT_NAMESPACE = "users"

UNSPECIFIED_FUND = "Unspecified"


__all__ = [
    "CUMULATIVE_ACCOUNT",
    "DEFAULT_YTD_FUND",
    "DEFAULT_IRA_PATTERN",
    "DEFAULT_NAMESPACE",
    "UNSPECIFIED_FUND",
]
