"""
Pydantic schemas for bookkeeping rule results.

These are returned by the entry validator and the lifecycle
rules. They are plain values: nothing in them refers back
to the data that was checked.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from pharmacy_ledger.models.enums import TransactionStatus


class ValidationResult(BaseModel):
    """Outcome of a validation pass."""
    is_valid: bool
    errors: list[str] = Field(default_factory=list)


class BalanceDetails(BaseModel):
    """Raw debit/credit totals for a running balance indicator."""
    is_balanced: bool
    total_debit: Decimal
    total_credit: Decimal
    difference: Decimal


class StatusPermissions(BaseModel):
    """What may be done with a transaction group in a given status."""
    status: TransactionStatus
    can_edit: bool
    can_delete: bool
    can_confirm: bool
