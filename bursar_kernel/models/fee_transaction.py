"""
Module: bursar_kernel.models.fee_transaction
Responsibility: ORM persistence for per-student fee transactions.
Architecture position: Kernel > Models.

Fee transactions are a ledger parallel to the journal: a billed fee is a
``debit``, a payment a ``credit``.  They are read only by the cash-flow
statement, through the fee adapter.  ``journal_entry_id`` records the entry
the authoring workflow posted for the transaction, when it posted one; the
link is informational and is never used to reconcile the two ledgers.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from bursar_kernel.db.base import TenantScopedBase


class FeeTransaction(TenantScopedBase):
    __tablename__ = "fee_transactions"

    __table_args__ = (
        Index("idx_fee_tx_tenant_date", "tenant_id", "transaction_date"),
        Index("idx_fee_tx_student", "student_id"),
    )

    student_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # "debit" (billed) or "credit" (paid)
    type: Mapped[str] = mapped_column(String(10), nullable=False)

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    transaction_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    payment_method: Mapped[str | None] = mapped_column(String(100), nullable=True)

    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    journal_entry_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        return f"<FeeTransaction {self.id} {self.type} {self.amount}>"
