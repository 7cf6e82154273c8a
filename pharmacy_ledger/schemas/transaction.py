"""
Pydantic schemas for transaction group responses.

Requests are accepted as plain JSON objects and shaped by the
assembler, so that malformed input turns into validation
messages instead of framework errors. Responses are typed.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from pharmacy_ledger.models.enums import TransactionStatus, FundingType
from pharmacy_ledger.schemas.validation import StatusPermissions


class TransactionEntryResponse(BaseModel):
    sequence: int
    account_id: str
    debit_amount: Decimal
    credit_amount: Decimal
    description: str | None
    source_transaction_id: str | None
    funding_path: list[str] | None

    model_config = {"from_attributes": True}


class TransactionGroupResponse(BaseModel):
    """Transaction group in API responses."""
    id: str
    group_number: str
    description: str
    transaction_date: datetime
    organization_id: str | None
    receipt_url: str | None
    invoice_no: str | None
    total_amount: Decimal
    status: TransactionStatus
    linked_transaction_ids: list[str] | None
    source_transaction_id: str | None
    funding_type: FundingType
    entries: list[TransactionEntryResponse]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TransactionGroupDetailResponse(TransactionGroupResponse):
    """Transaction group together with the actions its status allows."""
    permissions: StatusPermissions
