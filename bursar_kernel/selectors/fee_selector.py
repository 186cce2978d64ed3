"""
Module: bursar_kernel.selectors.fee_selector
Responsibility: Tenant-scoped reads of the cash-flow statement's
    non-journal inputs: student fee transactions and school income /
    expense records.
Architecture position: Kernel > Selectors.

Undated rows are always returned; the report builders exclude them from
date windows.
"""

from datetime import date

from sqlalchemy import and_, or_, select

from bursar_kernel.domain.values import (
    CashRecord,
    FeeTransactionData,
    FeeTransactionType,
)
from bursar_kernel.models.cash_record import CashRecordKind, CashRecordModel
from bursar_kernel.models.fee_transaction import FeeTransaction
from bursar_kernel.selectors.base import BaseSelector


def _in_range(column, from_date: date | None, to_date: date | None):
    conditions = []
    if from_date is not None:
        conditions.append(column >= from_date)
    if to_date is not None:
        conditions.append(column <= to_date)
    if not conditions:
        return None
    return or_(and_(*conditions), column.is_(None))


class FeeSelector(BaseSelector):
    """Fee transactions plus standalone income and expense records."""

    def list_transactions(
        self,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> list[FeeTransactionData]:
        stmt = select(FeeTransaction).where(FeeTransaction.tenant_id == self.tenant_id)
        window = _in_range(FeeTransaction.transaction_date, from_date, to_date)
        if window is not None:
            stmt = stmt.where(window)
        stmt = stmt.order_by(
            FeeTransaction.transaction_date,
            FeeTransaction.created_at,
            FeeTransaction.id,
        )
        return [
            FeeTransactionData(
                transaction_id=row.id,
                student_id=row.student_id,
                type=FeeTransactionType(row.type),
                amount=row.amount,
                transaction_date=row.transaction_date,
                payment_method=row.payment_method,
                description=row.description,
                journal_entry_id=row.journal_entry_id,
            )
            for row in self.session.execute(stmt).scalars()
        ]

    def _list_cash_records(
        self,
        kind: CashRecordKind,
        from_date: date | None,
        to_date: date | None,
    ) -> list[CashRecord]:
        stmt = select(CashRecordModel).where(
            CashRecordModel.tenant_id == self.tenant_id,
            CashRecordModel.kind == kind.value,
        )
        window = _in_range(CashRecordModel.record_date, from_date, to_date)
        if window is not None:
            stmt = stmt.where(window)
        stmt = stmt.order_by(
            CashRecordModel.record_date,
            CashRecordModel.created_at,
            CashRecordModel.id,
        )
        return [
            CashRecord(
                record_id=row.id,
                record_date=row.record_date,
                amount=row.amount,
                description=row.description,
                account_id=row.account_id,
                category=row.category,
                payment_method=row.payment_method,
            )
            for row in self.session.execute(stmt).scalars()
        ]

    def list_income_records(
        self,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> list[CashRecord]:
        return self._list_cash_records(CashRecordKind.INCOME, from_date, to_date)

    def list_expense_records(
        self,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> list[CashRecord]:
        return self._list_cash_records(CashRecordKind.EXPENSE, from_date, to_date)
