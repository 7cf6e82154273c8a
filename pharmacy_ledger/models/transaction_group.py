"""
Transaction group and transaction entry models.

A transaction group is one double-entry posting: a header
(description, date, document references, funding lineage)
and two or more entries. Entries belong to exactly one group
and are deleted with it.

The model is only the data structure. Balance, entry shape
and status rules are enforced by the services before
anything reaches these tables.

Columns filled from caller input (descriptions, account and
source references, document references) have no length limit.
Only the generated id and group number are fixed width.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, Numeric, ForeignKey, Integer, JSON,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pharmacy_ledger.models.base import Base, generate_object_id
from pharmacy_ledger.models.enums import TransactionStatus, FundingType


class TransactionGroup(Base):
    __tablename__ = "transaction_groups"

    id: Mapped[str] = mapped_column(
        String(24), primary_key=True, default=generate_object_id
    )
    group_number: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(
        String, nullable=False
    )
    transaction_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )
    organization_id: Mapped[str | None] = mapped_column(
        String, nullable=True, index=True
    )
    receipt_url: Mapped[str | None] = mapped_column(
        String, nullable=True
    )
    invoice_no: Mapped[str | None] = mapped_column(
        String, nullable=True
    )
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    status: Mapped[TransactionStatus] = mapped_column(
        SAEnum(
            TransactionStatus,
            name="transaction_status_enum",
            values_callable=lambda e: [m.value for m in e],
            create_constraint=True,
        ),
        nullable=False,
        default=TransactionStatus.DRAFT,
    )

    # Funding lineage
    linked_transaction_ids: Mapped[list[str] | None] = mapped_column(
        JSON, nullable=True
    )
    source_transaction_id: Mapped[str | None] = mapped_column(
        String, nullable=True, index=True
    )
    funding_type: Mapped[FundingType] = mapped_column(
        SAEnum(
            FundingType,
            name="funding_type_enum",
            values_callable=lambda e: [m.value for m in e],
            create_constraint=True,
        ),
        nullable=False,
        default=FundingType.ORIGINAL,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    entries: Mapped[list["TransactionEntry"]] = relationship(
        back_populates="transaction_group",
        cascade="all, delete-orphan",
        order_by="TransactionEntry.sequence",
    )

    def __repr__(self) -> str:
        return (
            f"<TransactionGroup {self.group_number} "
            f"{self.total_amount} ({self.status.value})>"
        )


class TransactionEntry(Base):
    """One debit or credit leg of a transaction group."""

    __tablename__ = "transaction_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    transaction_group_id: Mapped[str] = mapped_column(
        ForeignKey("transaction_groups.id"), nullable=False, index=True
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    account_id: Mapped[str] = mapped_column(
        String, nullable=False, index=True
    )
    debit_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    credit_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    description: Mapped[str | None] = mapped_column(
        String, nullable=True
    )
    source_transaction_id: Mapped[str | None] = mapped_column(
        String, nullable=True, index=True
    )
    funding_path: Mapped[list[str] | None] = mapped_column(
        JSON, nullable=True
    )

    transaction_group: Mapped["TransactionGroup"] = relationship(
        back_populates="entries"
    )

    def __repr__(self) -> str:
        return (
            f"<TransactionEntry {self.account_id} "
            f"D{self.debit_amount} C{self.credit_amount}>"
        )
