"""
Pydantic schemas for funding lineage queries.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from pharmacy_ledger.models.enums import TransactionStatus, FundingType


class FundingUsageDetail(BaseModel):
    """One entry that draws on a funding source."""
    transaction_id: str
    group_number: str
    description: str
    used_amount: Decimal
    transaction_date: datetime
    status: TransactionStatus


class FundingUsage(BaseModel):
    """How much of a source transaction has been drawn so far."""
    source_transaction_id: str
    group_number: str
    total_amount: Decimal
    used_amount: Decimal
    remaining_amount: Decimal
    usage_details: list[FundingUsageDetail] = Field(default_factory=list)


class FundingAllocationResult(BaseModel):
    """Outcome of checking the funding sources of one transaction."""
    is_valid: bool
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class FundingPathItem(BaseModel):
    """One hop in the chain from an original source to a transaction."""
    transaction_id: str
    group_number: str
    description: str
    total_amount: Decimal
    funding_type: FundingType
    status: TransactionStatus
    level: int
