"""
Domain errors raised by the persistence-backed services.

They derive from ValueError so that callers catching
ValueError around service calls keep working. The pure
bookkeeping rules never raise these; they return values.
"""


class LedgerServiceError(ValueError):
    """Base exception for transaction group service failures."""


class TransactionValidationError(LedgerServiceError):
    """Raised when a transaction group breaks the double-entry rules."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Transaction is invalid")


class TransactionStateError(LedgerServiceError):
    """Raised when the status of a transaction group forbids an action."""


class InvalidStatusTransitionError(TransactionStateError):
    """Raised on a status change the lifecycle does not allow."""


class TransactionNotFoundError(LedgerServiceError):
    """Raised when a transaction group id is malformed or unknown."""
