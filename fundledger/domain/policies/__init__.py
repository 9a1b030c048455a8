"""Domain policies package."""

from .eligibility import is_ira_recipient, is_ledger_eligible

__all__ = ["is_ira_recipient", "is_ledger_eligible"]
