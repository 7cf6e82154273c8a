"""
Funding lineage API endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pharmacy_ledger.api.errors import to_http_error
from pharmacy_ledger.models.base import get_db
from pharmacy_ledger.schemas.funding import (
    FundingAllocationResult,
    FundingPathItem,
    FundingUsage,
)
from pharmacy_ledger.services.funding_service import FundingService

router = APIRouter(prefix="/funding", tags=["Funding"])


@router.get("/{transaction_id}/usage", response_model=FundingUsage)
def get_funding_usage(transaction_id: str, db: Session = Depends(get_db)):
    """How much of a source transaction has been drawn, and by whom."""
    service = FundingService(db)
    try:
        return service.track_usage(transaction_id)
    except ValueError as e:
        raise to_http_error(e)


@router.get(
    "/{transaction_id}/validation",
    response_model=FundingAllocationResult,
)
def validate_funding(transaction_id: str, db: Session = Depends(get_db)):
    """Check a transaction's funded entries against their sources."""
    service = FundingService(db)
    try:
        return service.validate_allocation(transaction_id)
    except ValueError as e:
        raise to_http_error(e)


@router.get("/{transaction_id}/path", response_model=list[FundingPathItem])
def get_funding_path(transaction_id: str, db: Session = Depends(get_db)):
    """The chain of sources a transaction descends from, oldest first."""
    service = FundingService(db)
    try:
        return service.get_funding_path(transaction_id)
    except ValueError as e:
        raise to_http_error(e)
