"""
Transaction group API endpoints.

The API layer is thin — it handles HTTP concerns (status codes,
response formatting) and delegates the bookkeeping rules to
the services. Request bodies are plain JSON objects; the
entry validator, not the framework, reports what is wrong
with them.
"""

from fastapi import APIRouter, Body, Depends, Response
from sqlalchemy.orm import Session

from pharmacy_ledger.api.errors import to_http_error
from pharmacy_ledger.models.base import get_db
from pharmacy_ledger.models.enums import TransactionStatus, FundingType
from pharmacy_ledger.schemas.transaction import (
    TransactionGroupResponse,
    TransactionGroupDetailResponse,
)
from pharmacy_ledger.schemas.validation import (
    StatusPermissions,
    ValidationResult,
)
from pharmacy_ledger.services import lifecycle
from pharmacy_ledger.services.assembler import (
    convert_inbound_to_standard,
    prepare_copy_mode_data,
)
from pharmacy_ledger.services.entry_validator import EntryValidator
from pharmacy_ledger.services.transaction_group_service import (
    TransactionGroupService,
)

router = APIRouter(prefix="/transactions", tags=["Transactions"])


def _detail(group) -> TransactionGroupDetailResponse:
    response = TransactionGroupResponse.model_validate(group)
    return TransactionGroupDetailResponse(
        **response.model_dump(),
        permissions=lifecycle.get_permissions(group.status),
    )


@router.post("/validate", response_model=ValidationResult)
def validate_transaction(payload: dict = Body(...)):
    """
    Check a candidate transaction without storing it.

    Always answers 200; the result says whether it may be submitted.
    """
    return EntryValidator().validate_transaction(payload)


@router.get("", response_model=list[TransactionGroupResponse])
def list_transactions(
    status: TransactionStatus | None = None,
    funding_type: FundingType | None = None,
    source_transaction_id: str | None = None,
    db: Session = Depends(get_db),
):
    """List transaction groups, drafts first."""
    service = TransactionGroupService(db)
    return service.list_transactions(
        status=status,
        funding_type=funding_type,
        source_transaction_id=source_transaction_id,
    )


@router.post(
    "", response_model=TransactionGroupDetailResponse, status_code=201
)
def create_transaction(
    payload: dict = Body(...),
    db: Session = Depends(get_db),
):
    """Store a new transaction group as a draft."""
    service = TransactionGroupService(db)
    try:
        group = service.create(payload)
        db.commit()
        return _detail(group)
    except ValueError as e:
        db.rollback()
        raise to_http_error(e)


@router.get("/{transaction_id}", response_model=TransactionGroupDetailResponse)
def get_transaction(transaction_id: str, db: Session = Depends(get_db)):
    service = TransactionGroupService(db)
    try:
        return _detail(service.get(transaction_id))
    except ValueError as e:
        raise to_http_error(e)


@router.put("/{transaction_id}", response_model=TransactionGroupDetailResponse)
def update_transaction(
    transaction_id: str,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
):
    """Replace a draft. Confirmed and cancelled groups answer 409."""
    service = TransactionGroupService(db)
    try:
        group = service.update(transaction_id, payload)
        db.commit()
        return _detail(group)
    except ValueError as e:
        db.rollback()
        raise to_http_error(e)


@router.delete("/{transaction_id}", status_code=204)
def delete_transaction(transaction_id: str, db: Session = Depends(get_db)):
    service = TransactionGroupService(db)
    try:
        service.delete(transaction_id)
        db.commit()
    except ValueError as e:
        db.rollback()
        raise to_http_error(e)
    return Response(status_code=204)


@router.post(
    "/{transaction_id}/confirm",
    response_model=TransactionGroupDetailResponse,
)
def confirm_transaction(transaction_id: str, db: Session = Depends(get_db)):
    """Confirm a draft. It can no longer be edited or deleted afterwards."""
    service = TransactionGroupService(db)
    try:
        group = service.confirm(transaction_id)
        db.commit()
        return _detail(group)
    except ValueError as e:
        db.rollback()
        raise to_http_error(e)


@router.post(
    "/{transaction_id}/cancel",
    response_model=TransactionGroupDetailResponse,
)
def cancel_transaction(transaction_id: str, db: Session = Depends(get_db)):
    service = TransactionGroupService(db)
    try:
        group = service.cancel(transaction_id)
        db.commit()
        return _detail(group)
    except ValueError as e:
        db.rollback()
        raise to_http_error(e)


@router.get(
    "/{transaction_id}/permissions",
    response_model=StatusPermissions,
)
def get_transaction_permissions(
    transaction_id: str,
    db: Session = Depends(get_db),
):
    """What the current status of a transaction group allows."""
    service = TransactionGroupService(db)
    try:
        group = service.get(transaction_id)
    except ValueError as e:
        raise to_http_error(e)
    return lifecycle.get_permissions(group.status)


@router.get("/{transaction_id}/copy")
def copy_transaction(transaction_id: str, db: Session = Depends(get_db)):
    """
    Seed for a new draft "like this one".

    Accounts and amounts are kept; descriptions, documents and
    funding links are not.
    """
    service = TransactionGroupService(db)
    try:
        group = service.get(transaction_id)
    except ValueError as e:
        raise to_http_error(e)
    standard = convert_inbound_to_standard(service.to_raw(group))
    return prepare_copy_mode_data(standard)
