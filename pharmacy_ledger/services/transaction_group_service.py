"""
Transaction group service — storing and changing transaction groups.

Each write follows the same path:
1. Ask the lifecycle rules whether the current status allows it
2. Validate the candidate with the entry validator
3. Clean it with the assembler
4. Write the header and its entries

The service takes a database session and never commits; the
caller decides when to commit or roll back.
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from pharmacy_ledger.models.enums import TransactionStatus, FundingType
from pharmacy_ledger.models.transaction_group import (
    TransactionGroup,
    TransactionEntry,
)
from pharmacy_ledger.services import lifecycle
from pharmacy_ledger.services.assembler import clean_for_submission
from pharmacy_ledger.services.entry_validator import EntryValidator
from pharmacy_ledger.services.exceptions import (
    TransactionNotFoundError,
    TransactionStateError,
    TransactionValidationError,
)
from pharmacy_ledger.utils import is_valid_object_id, parse_date

logger = logging.getLogger(__name__)

GROUP_NUMBER_PREFIX = "TXN"


class TransactionGroupService:

    def __init__(self, db: Session, validator: EntryValidator | None = None):
        self.db = db
        self.validator = validator or EntryValidator()

    # --- Reads ---

    def get(self, transaction_id: str) -> TransactionGroup:
        """
        Get a transaction group by id.

        Malformed ids are rejected before they reach the database.
        """
        if not is_valid_object_id(transaction_id):
            raise TransactionNotFoundError(
                f"Invalid transaction id '{transaction_id}'"
            )
        group = self.db.get(TransactionGroup, transaction_id)
        if not group:
            raise TransactionNotFoundError(
                f"Transaction {transaction_id} not found"
            )
        return group

    def list_transactions(
        self,
        status: TransactionStatus | None = None,
        funding_type: FundingType | None = None,
        source_transaction_id: str | None = None,
    ) -> list[TransactionGroup]:
        """Drafts first, then confirmed, then cancelled; newest first within each."""
        query = select(TransactionGroup)
        if status is not None:
            query = query.where(TransactionGroup.status == status)
        if funding_type is not None:
            query = query.where(TransactionGroup.funding_type == funding_type)
        if source_transaction_id is not None:
            query = query.where(
                TransactionGroup.source_transaction_id == source_transaction_id
            )

        groups = list(self.db.execute(query).scalars().all())
        groups.sort(key=lambda g: g.transaction_date, reverse=True)
        groups.sort(key=lambda g: lifecycle.get_status_priority(g.status))
        return groups

    @staticmethod
    def to_raw(group: TransactionGroup) -> dict:
        """The stored shape of a group as a plain dict, entries included."""
        return {
            "id": group.id,
            "group_number": group.group_number,
            "description": group.description,
            "transaction_date": group.transaction_date,
            "organization_id": group.organization_id,
            "receipt_url": group.receipt_url,
            "invoice_no": group.invoice_no,
            "total_amount": group.total_amount,
            "status": group.status,
            "linked_transaction_ids": group.linked_transaction_ids,
            "source_transaction_id": group.source_transaction_id,
            "funding_type": group.funding_type,
            "entries": [
                {
                    "sequence": entry.sequence,
                    "account_id": entry.account_id,
                    "debit_amount": entry.debit_amount,
                    "credit_amount": entry.credit_amount,
                    "description": entry.description,
                    "source_transaction_id": entry.source_transaction_id,
                    "funding_path": entry.funding_path,
                }
                for entry in group.entries
            ],
        }

    # --- Writes ---

    def create(self, data: dict) -> TransactionGroup:
        """
        Validate and store a new transaction group as a draft.

        Raises TransactionValidationError with every problem found.
        """
        payload = self._validated_payload(data)

        group = TransactionGroup(
            group_number=self._next_group_number(payload["transaction_date"]),
            status=lifecycle.get_default_status(),
        )
        self._apply(group, payload)
        self.db.add(group)
        self.db.flush()

        logger.info(
            "Created transaction %s (%s) for %s",
            group.group_number, group.id, group.total_amount,
        )
        return group

    def update(self, transaction_id: str, data: dict) -> TransactionGroup:
        """Replace the header and entries of a draft."""
        group = self.get(transaction_id)
        if not lifecycle.get_permissions(group.status).can_edit:
            raise TransactionStateError(
                f"Transaction {group.group_number} is "
                f"{group.status.value} and can no longer be edited"
            )

        payload = self._validated_payload(data)
        group.entries.clear()
        self.db.flush()
        self._apply(group, payload)
        self.db.flush()

        logger.info("Updated transaction %s", group.group_number)
        return group

    def confirm(self, transaction_id: str) -> TransactionGroup:
        """
        Confirm a draft, locking it.

        The stored content is validated again; a draft that was
        saved under older rules must still balance to be confirmed.
        """
        group = self.get(transaction_id)
        lifecycle.validate_transition(
            group.status, TransactionStatus.CONFIRMED
        )

        result = self.validator.validate_transaction(self.to_raw(group))
        if not result.is_valid:
            raise TransactionValidationError(result.errors)

        group.status = TransactionStatus.CONFIRMED
        self.db.flush()
        logger.info("Confirmed transaction %s", group.group_number)
        return group

    def cancel(self, transaction_id: str) -> TransactionGroup:
        group = self.get(transaction_id)
        lifecycle.validate_transition(
            group.status, TransactionStatus.CANCELLED
        )
        group.status = TransactionStatus.CANCELLED
        self.db.flush()
        logger.info("Cancelled transaction %s", group.group_number)
        return group

    def delete(self, transaction_id: str) -> None:
        group = self.get(transaction_id)
        if not lifecycle.get_permissions(group.status).can_delete:
            raise TransactionStateError(
                f"Transaction {group.group_number} is "
                f"{group.status.value} and cannot be deleted"
            )
        self.db.delete(group)
        self.db.flush()
        logger.info("Deleted transaction %s", group.group_number)

    # --- Helpers ---

    def _validated_payload(self, data: dict) -> dict:
        result = self.validator.validate_transaction(data or {})
        if not result.is_valid:
            logger.info(
                "Rejected transaction with %d validation errors",
                len(result.errors),
            )
            raise TransactionValidationError(result.errors)

        payload = clean_for_submission(data)
        transaction_date = parse_date(payload["transaction_date"])
        if transaction_date is None:
            raise TransactionValidationError(
                ["Transaction date is not a valid date"]
            )
        payload["transaction_date"] = transaction_date
        return payload

    def _apply(self, group: TransactionGroup, payload: dict) -> None:
        group.description = payload["description"]
        group.transaction_date = payload["transaction_date"]
        group.organization_id = payload["organization_id"]
        group.receipt_url = payload.get("receipt_url")
        group.invoice_no = payload.get("invoice_no")
        group.linked_transaction_ids = payload.get("linked_transaction_ids")
        group.source_transaction_id = payload.get("source_transaction_id")
        group.funding_type = payload["funding_type"]
        group.total_amount = self.validator.calculate_total_amount(
            payload["entries"]
        )
        group.entries = [
            TransactionEntry(
                sequence=sequence,
                account_id=entry["account_id"],
                debit_amount=entry["debit_amount"],
                credit_amount=entry["credit_amount"],
                description=entry.get("description"),
                source_transaction_id=entry.get("source_transaction_id"),
                funding_path=entry.get("funding_path"),
            )
            for sequence, entry in enumerate(payload["entries"], start=1)
        ]

    def _next_group_number(self, transaction_date: datetime) -> str:
        """TXN-YYYYMMDD-NNN, numbered per transaction date."""
        prefix = f"{GROUP_NUMBER_PREFIX}-{transaction_date:%Y%m%d}-"
        numbers = self.db.execute(
            select(TransactionGroup.group_number).where(
                TransactionGroup.group_number.like(f"{prefix}%")
            )
        ).scalars().all()
        last = max(
            (int(n[len(prefix):]) for n in numbers if n[len(prefix):].isdigit()),
            default=0,
        )
        return f"{prefix}{last + 1:03d}"
