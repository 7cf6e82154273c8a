"""
Transaction group lifecycle rules.

This module defines the ONLY allowed status transitions for
transaction groups, and derives from the status alone what
may be done with a group:

    draft ──► confirmed
      │
      └─────► cancelled

Confirmed and cancelled are terminal. Only a draft may be
edited, deleted or confirmed.

No database access and no side effects; the persistence
service calls validate_transition() before writing.
"""

from pharmacy_ledger.models.enums import TransactionStatus
from pharmacy_ledger.schemas.validation import StatusPermissions
from pharmacy_ledger.services.exceptions import InvalidStatusTransitionError

DRAFT = TransactionStatus.DRAFT
CONFIRMED = TransactionStatus.CONFIRMED
CANCELLED = TransactionStatus.CANCELLED

TERMINAL_STATES = frozenset({CONFIRMED, CANCELLED})

ALLOWED_TRANSITIONS = {
    DRAFT: (CONFIRMED, CANCELLED),
    CONFIRMED: (),
    CANCELLED: (),
}

# Sorting only; carries no business meaning.
STATUS_PRIORITY = {
    DRAFT: 1,
    CONFIRMED: 2,
    CANCELLED: 3,
}
UNKNOWN_STATUS_PRIORITY = 99

STATUS_LABELS = {
    DRAFT: "Draft",
    CONFIRMED: "Confirmed",
    CANCELLED: "Cancelled",
}

STATUS_CHANGE_MESSAGES = {
    (DRAFT, CONFIRMED): (
        "Transaction confirmed. It is now locked and can no longer "
        "be edited or deleted."
    ),
    (DRAFT, CANCELLED): (
        "Transaction cancelled. It is kept for the record and can no "
        "longer be edited or deleted."
    ),
    (CONFIRMED, CANCELLED): (
        "A confirmed transaction cannot be cancelled."
    ),
    (CANCELLED, CONFIRMED): (
        "A cancelled transaction cannot be confirmed."
    ),
}


def _coerce(status) -> TransactionStatus | None:
    if isinstance(status, TransactionStatus):
        return status
    try:
        return TransactionStatus(status)
    except (ValueError, TypeError):
        return None


def is_valid_status(value) -> bool:
    return _coerce(value) is not None


def get_default_status() -> TransactionStatus:
    return DRAFT


def get_permissions(status=None) -> StatusPermissions:
    """
    Map a status to the actions it allows.

    A missing or unrecognised status is treated as draft. This
    is the single place edit/delete/confirm rights come from.
    """
    current = _coerce(status) or DRAFT
    allowed = current == DRAFT
    return StatusPermissions(
        status=current,
        can_edit=allowed,
        can_delete=allowed,
        can_confirm=allowed,
    )


def is_valid_status_transition(from_status, to_status) -> bool:
    current = _coerce(from_status)
    target = _coerce(to_status)
    if current is None or target is None:
        return False
    if current in TERMINAL_STATES:
        return False
    return target in ALLOWED_TRANSITIONS[current]


def get_available_transitions(status) -> list[TransactionStatus]:
    current = _coerce(status)
    if current is None:
        return []
    return list(ALLOWED_TRANSITIONS[current])


def is_final_status(status) -> bool:
    return _coerce(status) in TERMINAL_STATES


def is_editable(status) -> bool:
    return _coerce(status) == DRAFT


def get_status_priority(status) -> int:
    """Sort key: draft < confirmed < cancelled, unknown values last."""
    current = _coerce(status)
    if current is None:
        return UNKNOWN_STATUS_PRIORITY
    return STATUS_PRIORITY[current]


def _label(status) -> str:
    current = _coerce(status)
    if current is None:
        return str(status)
    return STATUS_LABELS[current]


def get_status_change_message(from_status, to_status) -> str:
    current = _coerce(from_status)
    target = _coerce(to_status)
    message = STATUS_CHANGE_MESSAGES.get((current, target))
    if message is not None:
        return message
    return (
        f"Status changed from {_label(from_status)} "
        f"to {_label(to_status)}"
    )


def validate_transition(from_status, to_status) -> None:
    """Raise InvalidStatusTransitionError unless the transition is allowed."""
    if not is_valid_status_transition(from_status, to_status):
        raise InvalidStatusTransitionError(
            f"Transaction cannot transition from "
            f"'{_label(from_status)}' to '{_label(to_status)}': "
            f"{get_status_change_message(from_status, to_status)}"
        )
