"""
Module: bursar_kernel.models.cash_record
Responsibility: ORM persistence for standalone (non-fee) school income and
    expense records, the other operating inputs of the cash-flow statement.
Architecture position: Kernel > Models.
"""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from bursar_kernel.db.base import TenantScopedBase


class CashRecordKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class CashRecordModel(TenantScopedBase):
    """A school income or expense record."""

    __tablename__ = "cash_records"

    __table_args__ = (
        Index("idx_cash_record_tenant_kind_date", "tenant_id", "kind", "record_date"),
    )

    kind: Mapped[str] = mapped_column(String(10), nullable=False)

    record_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    description: Mapped[str] = mapped_column(String(1000), nullable=False, default="")

    account_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Expense category or income source
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)

    payment_method: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<CashRecord {self.kind} {self.id} {self.amount}>"
