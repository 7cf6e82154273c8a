"""
Transaction assembler — shaping transaction groups at the boundary.

Three directions of data flow go through here:
- inbound: whatever the persistence layer hands back becomes
  the standard internal shape (convert_inbound_to_standard)
- outbound: a validated transaction group becomes a clean
  submission payload (clean_for_submission)
- copy: an existing group becomes the seed of a new draft
  (prepare_copy_mode_data)

Funding lineage fields (linked_transaction_ids,
source_transaction_id, funding_type, funding_path) are carried
through but never interpreted.

Nothing here raises. Every conversion falls back to a safe
default; the entry validator decides whether the content is
correct.
"""

import logging
from collections.abc import Mapping
from datetime import datetime

from pharmacy_ledger.models.enums import FundingType, TransactionStatus
from pharmacy_ledger.utils import (
    ZERO,
    is_valid_object_id,
    parse_amount,
    parse_date,
)

logger = logging.getLogger(__name__)

# Key under which some callers nest the group header, with the
# entries as a sibling list:
#   {"transaction_group": {...header...}, "entries": [...]}
ENVELOPE_KEY = "transaction_group"

_MISSING = object()


def safe_get(obj, dot_path: str, default=None):
    """
    Read a nested value such as "transaction_group.entries.0.account_id".

    Walks dicts by key, lists by index and other objects by
    attribute. Any missing step, or a None result, gives default.
    """
    if not isinstance(dot_path, str) or not dot_path:
        return default

    current = obj
    for key in dot_path.split("."):
        if current is None:
            return default
        if isinstance(current, Mapping):
            current = current.get(key, _MISSING)
        elif isinstance(current, (list, tuple)):
            if not key.lstrip("-").isdigit():
                return default
            index = int(key)
            if not -len(current) <= index < len(current):
                return default
            current = current[index]
        else:
            current = getattr(current, key, _MISSING)
        if current is _MISSING:
            return default

    return default if current is None else current


# --- Field readers ---

def _text(value) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _trimmed(value) -> str:
    return _text(value).strip()


def _reference(value) -> str | None:
    """Reduce a populated reference ({"id": ...} or {"_id": ...}) to its id."""
    if isinstance(value, Mapping):
        value = safe_get(value, "id") or safe_get(value, "_id")
    if value is None:
        return None
    return _text(value)


def _parse_date(value) -> datetime:
    """Read a transaction date; anything missing or unreadable means now."""
    parsed = parse_date(value)
    if parsed is None:
        if value not in (None, ""):
            logger.debug("Unreadable transaction date %r, using now", value)
        return datetime.now()
    return parsed


def _funding_type(value) -> FundingType:
    try:
        return FundingType(value)
    except (ValueError, TypeError):
        return FundingType.ORIGINAL


def _status(value) -> TransactionStatus:
    try:
        return TransactionStatus(value)
    except (ValueError, TypeError):
        return TransactionStatus.DRAFT


def _id_list(value) -> list[str] | None:
    if not isinstance(value, (list, tuple)):
        return None
    ids = [_reference(item) for item in value]
    return [i for i in ids if i]


def _unwrap(raw: Mapping) -> tuple[Mapping, list]:
    """Split a possibly enveloped record into header and entries."""
    header = raw.get(ENVELOPE_KEY)
    if isinstance(header, Mapping):
        entries = raw.get("entries")
        if not isinstance(entries, (list, tuple)):
            entries = header.get("entries")
    else:
        header = raw
        entries = raw.get("entries")
    if not isinstance(entries, (list, tuple)):
        entries = []
    return header, list(entries)


# --- Inbound ---

def convert_inbound_entry_to_standard(raw_entry) -> dict:
    """Default every entry field; lineage fields only when present."""
    if not isinstance(raw_entry, Mapping):
        raw_entry = {}

    entry = {
        "account_id": _reference(raw_entry.get("account_id")) or "",
        "debit_amount": parse_amount(raw_entry.get("debit_amount")) or ZERO,
        "credit_amount": parse_amount(raw_entry.get("credit_amount")) or ZERO,
        "description": _text(raw_entry.get("description")),
    }

    source_id = _reference(raw_entry.get("source_transaction_id"))
    if source_id:
        entry["source_transaction_id"] = source_id
    funding_path = _id_list(raw_entry.get("funding_path"))
    if funding_path is not None:
        entry["funding_path"] = funding_path
    return entry


def convert_inbound_to_standard(raw) -> dict:
    """
    Turn a stored or received transaction group into the standard shape.

    Accepts the flat shape and the enveloped one. Returns an
    empty dict, with a warning, when there is nothing to convert.
    """
    if raw is None:
        logger.warning("No transaction data to convert")
        return {}
    if not isinstance(raw, Mapping):
        logger.warning(
            "Cannot convert transaction data of type %s",
            type(raw).__name__,
        )
        return {}

    header, entries = _unwrap(raw)

    standard = {
        "description": _text(header.get("description")),
        "transaction_date": _parse_date(header.get("transaction_date")),
        "organization_id": _reference(header.get("organization_id")) or None,
        "receipt_url": _text(header.get("receipt_url")),
        "invoice_no": _text(header.get("invoice_no")),
        "entries": [convert_inbound_entry_to_standard(e) for e in entries],
        "linked_transaction_ids": _id_list(
            header.get("linked_transaction_ids")
        ),
        "source_transaction_id": (
            _reference(header.get("source_transaction_id")) or None
        ),
        "funding_type": _funding_type(header.get("funding_type")),
        "status": _status(header.get("status")),
    }

    record_id = _reference(header.get("id")) or _reference(header.get("_id"))
    if record_id:
        standard["id"] = record_id
    return standard


# --- Copy ---

def prepare_copy_mode_data(original) -> dict:
    """
    Seed a new draft from an existing transaction group.

    Accounts and amounts are kept. Free text, document
    references and every funding lineage field start over,
    so the copy never inherits the original's funding links.
    """
    source = convert_inbound_to_standard(original) if original else {}

    entries = [
        {
            "account_id": entry["account_id"],
            "debit_amount": entry["debit_amount"],
            "credit_amount": entry["credit_amount"],
            "description": "",
        }
        for entry in source.get("entries", [])
    ]

    return {
        "description": "",
        "transaction_date": datetime.now(),
        "organization_id": source.get("organization_id"),
        "receipt_url": "",
        "invoice_no": "",
        "status": TransactionStatus.DRAFT,
        "funding_type": FundingType.ORIGINAL,
        "entries": entries,
    }


# --- Outbound ---

def _clean_entry(raw_entry, parent_description: str) -> dict:
    if not isinstance(raw_entry, Mapping):
        raw_entry = {}

    entry = {"account_id": _trimmed(_reference(raw_entry.get("account_id")))}
    for key in ("debit_amount", "credit_amount"):
        value = raw_entry.get(key)
        amount = parse_amount(value)
        # Unreadable amounts pass through for the validator to report.
        entry[key] = amount if amount is not None else value

    description = _trimmed(raw_entry.get("description")) or parent_description
    if description:
        entry["description"] = description

    source_id = _trimmed(_reference(raw_entry.get("source_transaction_id")))
    if source_id:
        entry["source_transaction_id"] = source_id
    funding_path = _id_list(raw_entry.get("funding_path"))
    if funding_path:
        entry["funding_path"] = funding_path
    return entry


def clean_for_submission(data) -> dict:
    """
    Build the payload handed to the persistence layer.

    Empty text fields are left out, a blank organization
    becomes None, and entries without a description take the
    transaction's. Running it on its own output changes nothing.
    """
    if not isinstance(data, Mapping):
        data = {}

    payload = {}

    description = _trimmed(data.get("description"))
    if description:
        payload["description"] = description
    if data.get("transaction_date") is not None:
        payload["transaction_date"] = data["transaction_date"]
    for key in ("receipt_url", "invoice_no"):
        value = _trimmed(data.get(key))
        if value:
            payload[key] = value

    payload["organization_id"] = (
        _trimmed(_reference(data.get("organization_id"))) or None
    )

    linked = _id_list(data.get("linked_transaction_ids"))
    if linked:
        payload["linked_transaction_ids"] = linked
    source_id = _trimmed(_reference(data.get("source_transaction_id")))
    if source_id:
        payload["source_transaction_id"] = source_id
    payload["funding_type"] = _funding_type(data.get("funding_type"))

    entries = data.get("entries")
    if not isinstance(entries, (list, tuple)):
        entries = []
    payload["entries"] = [_clean_entry(e, description) for e in entries]
    return payload


__all__ = [
    "convert_inbound_to_standard",
    "convert_inbound_entry_to_standard",
    "prepare_copy_mode_data",
    "clean_for_submission",
    "safe_get",
    "is_valid_object_id",
]
