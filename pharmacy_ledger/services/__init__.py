"""Bookkeeping rules and the services built on them."""

from pharmacy_ledger.services.entry_validator import EntryValidator
from pharmacy_ledger.services.transaction_group_service import (
    TransactionGroupService,
)
from pharmacy_ledger.services.funding_service import FundingService

__all__ = ["EntryValidator", "TransactionGroupService", "FundingService"]
