"""
Funding service — how value flows between stored transactions.

An entry that names a source_transaction_id draws on the value
of that earlier transaction. This service answers three
questions about those links:
1. How much of a source has been drawn, and by whom
2. Whether a transaction draws more than its sources still hold
3. Which chain of sources a transaction descends from

The entry validator knows nothing about any of this; it only
checks a transaction on its own.
"""

import logging
from collections import defaultdict
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from pharmacy_ledger.models.enums import TransactionStatus
from pharmacy_ledger.models.transaction_group import (
    TransactionGroup,
    TransactionEntry,
)
from pharmacy_ledger.schemas.funding import (
    FundingAllocationResult,
    FundingPathItem,
    FundingUsage,
    FundingUsageDetail,
)
from pharmacy_ledger.services.exceptions import TransactionNotFoundError
from pharmacy_ledger.services.transaction_group_service import (
    TransactionGroupService,
)
from pharmacy_ledger.utils import ZERO, is_valid_object_id

logger = logging.getLogger(__name__)


def entry_used_amount(entry: TransactionEntry) -> Decimal:
    """The value an entry takes from its source: its debit, else its credit."""
    if entry.debit_amount and entry.debit_amount > ZERO:
        return entry.debit_amount
    return entry.credit_amount or ZERO


class FundingService:

    def __init__(self, db: Session):
        self.db = db
        self.transactions = TransactionGroupService(db)

    def track_usage(
        self,
        source_transaction_id: str,
        exclude_transaction_id: str | None = None,
    ) -> FundingUsage:
        """
        Sum what other transactions have drawn from a source.

        Cancelled transactions hold no claim on their sources.
        Raises TransactionNotFoundError for an unknown source.
        """
        source = self.transactions.get(source_transaction_id)

        query = (
            select(TransactionEntry, TransactionGroup)
            .join(TransactionEntry.transaction_group)
            .where(
                TransactionEntry.source_transaction_id == source.id,
                TransactionGroup.status != TransactionStatus.CANCELLED,
            )
        )
        if exclude_transaction_id is not None:
            query = query.where(TransactionGroup.id != exclude_transaction_id)

        details = []
        used_amount = ZERO
        for entry, group in self.db.execute(query).all():
            amount = entry_used_amount(entry)
            used_amount += amount
            details.append(FundingUsageDetail(
                transaction_id=group.id,
                group_number=group.group_number,
                description=group.description,
                used_amount=amount,
                transaction_date=group.transaction_date,
                status=group.status,
            ))
        details.sort(key=lambda d: d.transaction_date, reverse=True)

        total_amount = source.total_amount or ZERO
        return FundingUsage(
            source_transaction_id=source.id,
            group_number=source.group_number,
            total_amount=total_amount,
            used_amount=used_amount,
            remaining_amount=total_amount - used_amount,
            usage_details=details,
        )

    def validate_allocation(self, transaction_id: str) -> FundingAllocationResult:
        """
        Check every funded entry of a transaction against its source.

        Entries drawing on the same source are counted together.
        Unfunded entries only earn a recommendation.
        """
        group = self.transactions.get(transaction_id)
        issues = []
        recommendations = []

        if not group.entries:
            issues.append("Transaction has no entries")
            return FundingAllocationResult(
                is_valid=False, issues=issues, recommendations=recommendations
            )

        usages: dict[str, FundingUsage | None] = {}
        claimed: dict[str, Decimal] = defaultdict(lambda: ZERO)

        for index, entry in enumerate(group.entries, start=1):
            amount = (entry.debit_amount or ZERO) + (entry.credit_amount or ZERO)
            source_id = entry.source_transaction_id

            if not source_id:
                if amount > ZERO:
                    recommendations.append(
                        f"Entry {index} ({amount:.2f}) has no funding "
                        f"source; consider linking one for tracking"
                    )
                continue
            if source_id == group.id:
                continue

            if source_id not in usages:
                try:
                    usages[source_id] = self.track_usage(
                        source_id, exclude_transaction_id=group.id
                    )
                except TransactionNotFoundError as e:
                    usages[source_id] = None
                    issues.append(
                        f"Entry {index}: funding source could not be "
                        f"verified: {e}"
                    )
                    continue
                source_status = self.db.get(TransactionGroup, source_id).status
                if source_status != TransactionStatus.CONFIRMED:
                    issues.append(
                        f"Entry {index}: funding source "
                        f"{usages[source_id].group_number} is not confirmed"
                    )

            usage = usages[source_id]
            if usage is None:
                continue
            claimed[source_id] += amount
            if claimed[source_id] > usage.remaining_amount:
                issues.append(
                    f"Entry {index} draws {amount:.2f}, more than the "
                    f"{usage.remaining_amount:.2f} still available from "
                    f"{usage.group_number}"
                )

        if self._references_itself(group):
            issues.append(
                "Circular reference: a transaction cannot be its own "
                "funding source"
            )

        logger.info(
            "Funding check for %s: %s",
            group.group_number,
            "passed" if not issues else f"{len(issues)} issue(s)",
        )
        return FundingAllocationResult(
            is_valid=not issues,
            issues=issues,
            recommendations=recommendations,
        )

    @staticmethod
    def _references_itself(group: TransactionGroup) -> bool:
        if group.source_transaction_id == group.id:
            return True
        if group.id in (group.linked_transaction_ids or []):
            return True
        return any(e.source_transaction_id == group.id for e in group.entries)

    def get_funding_path(self, transaction_id: str) -> list[FundingPathItem]:
        """
        Follow source_transaction_id links back to the original source.

        Returned oldest first; level 0 is where the funds began.
        The walk stops at a missing source or a repeated id.
        """
        group = self.transactions.get(transaction_id)
        chain = [group]
        seen = {group.id}

        current = group
        while current.source_transaction_id:
            source_id = current.source_transaction_id
            if source_id in seen:
                logger.warning(
                    "Funding path of %s loops back to %s",
                    group.group_number, source_id,
                )
                break
            if not is_valid_object_id(source_id):
                break
            parent = self.db.get(TransactionGroup, source_id)
            if parent is None:
                break
            chain.append(parent)
            seen.add(parent.id)
            current = parent

        chain.reverse()
        return [
            FundingPathItem(
                transaction_id=item.id,
                group_number=item.group_number,
                description=item.description,
                total_amount=item.total_amount,
                funding_type=item.funding_type,
                status=item.status,
                level=level,
            )
            for level, item in enumerate(chain)
        ]
