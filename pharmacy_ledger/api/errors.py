"""
Translation of service errors into HTTP errors.

Validation failures carry the full list of messages so a
client can show every problem at once.
"""

from fastapi import HTTPException

from pharmacy_ledger.services.exceptions import (
    TransactionNotFoundError,
    TransactionStateError,
    TransactionValidationError,
)


def to_http_error(error: ValueError) -> HTTPException:
    if isinstance(error, TransactionNotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, TransactionStateError):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, TransactionValidationError):
        return HTTPException(
            status_code=400,
            detail={
                "message": "Transaction is invalid",
                "errors": error.errors,
            },
        )
    return HTTPException(status_code=400, detail=str(error))
