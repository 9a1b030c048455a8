"""Fund ledger core: balance points, YTD totals and scheduled settlement."""

__version__ = "0.1.0"
