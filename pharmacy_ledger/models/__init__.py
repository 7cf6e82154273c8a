"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from pharmacy_ledger.models.base import Base
from pharmacy_ledger.models.enums import TransactionStatus, FundingType
from pharmacy_ledger.models.transaction_group import (
    TransactionGroup,
    TransactionEntry,
)

__all__ = [
    "Base",
    "TransactionStatus",
    "FundingType",
    "TransactionGroup",
    "TransactionEntry",
]
