"""
Records -- Parse raw document-store mappings into domain value objects.

Responsibility:
    The school's documents arrive as loosely-typed mappings with camelCase
    keys (``accountName``, ``accountType``, ``transactionDate``) and dates
    that may be native dates, ISO strings, or store timestamp objects.  This
    module normalizes them into the frozen types in
    ``bursar_kernel.domain.values``.

Architecture position:
    Kernel > Domain.  Pure; logs but performs no other I/O.

Invariants enforced:
    - A date that cannot be interpreted becomes ``None`` (malformed) and is
      logged; it never raises.  Downstream builders exclude such records
      from every date-window computation.
    - Absent debit / credit amounts become ``Decimal("0")``.

Failure modes:
    - ``ValueError`` for a non-numeric amount or an unknown account category.
      Those are structural corruptions of a document, not a data-quality
      nuance, so they propagate.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from bursar_kernel.domain.values import (
    AccountCategory,
    AccountInfo,
    CashRecord,
    FeeTransactionData,
    FeeTransactionType,
    JournalEntryData,
    JournalLineData,
    to_decimal,
)
from bursar_kernel.logging_config import get_logger

logger = get_logger("domain.records")


def coerce_date(value: Any) -> date | None:
    """
    Interpret a stored date value.

    Accepts ``date``, ``datetime`` (truncated to its date), ISO-8601 strings
    (a trailing ``Z`` is accepted), and timestamp objects exposing
    ``to_date()`` or ``toDate()``.  Anything else returns None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    for attr in ("to_date", "toDate"):
        method = getattr(value, attr, None)
        if callable(method):
            return coerce_date(method())
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def _record_date(
    raw: Any, *, record_type: str, record_id: str,
) -> date | None:
    parsed = coerce_date(raw)
    if parsed is None:
        logger.warning(
            "record_date_malformed",
            extra={
                "record_type": record_type,
                "record_id": record_id,
                "raw_value": repr(raw),
            },
        )
    return parsed


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def account_from_mapping(doc: Mapping[str, Any]) -> AccountInfo:
    """Build an ``AccountInfo`` from a chart-of-accounts document."""
    return AccountInfo(
        account_id=str(doc["id"]),
        name=str(doc.get("accountName") or doc.get("name") or ""),
        category=AccountCategory.parse(
            doc.get("accountType") or doc.get("category")
        ),
        code=_optional_str(doc.get("accountCode") or doc.get("code")),
        parent_id=_optional_str(doc.get("parentAccountId")),
        description=_optional_str(doc.get("description")),
    )


def journal_line_from_mapping(doc: Mapping[str, Any]) -> JournalLineData:
    return JournalLineData(
        account_id=str(doc["accountId"]),
        debit=to_decimal(doc.get("debit")),
        credit=to_decimal(doc.get("credit")),
        description=_optional_str(doc.get("description")),
        account_name=_optional_str(doc.get("accountName")),
    )


def journal_entry_from_mapping(doc: Mapping[str, Any]) -> JournalEntryData:
    """Build a ``JournalEntryData`` from a journal-entry document."""
    entry_id = str(doc["id"])
    return JournalEntryData(
        entry_id=entry_id,
        effective_date=_record_date(
            doc.get("date"), record_type="journal_entry", record_id=entry_id,
        ),
        description=str(doc.get("description") or ""),
        lines=tuple(
            journal_line_from_mapping(line) for line in doc.get("lines") or ()
        ),
        source_document_id=_optional_str(doc.get("sourceDocumentId")),
        source_document_type=_optional_str(doc.get("sourceDocumentType")),
        posted_by_id=_optional_str(doc.get("postedByAdminId")),
        posted_by_name=_optional_str(doc.get("postedByAdminName")),
    )


def fee_transaction_from_mapping(
    doc: Mapping[str, Any],
) -> FeeTransactionData:
    """Build a ``FeeTransactionData`` from a student fee-transaction document."""
    transaction_id = str(doc["id"])
    return FeeTransactionData(
        transaction_id=transaction_id,
        student_id=str(doc.get("studentId") or ""),
        type=FeeTransactionType(str(doc["type"]).strip().lower()),
        amount=to_decimal(doc.get("amount")),
        transaction_date=_record_date(
            doc.get("transactionDate"),
            record_type="fee_transaction",
            record_id=transaction_id,
        ),
        payment_method=_optional_str(doc.get("paymentMethod")),
        description=_optional_str(doc.get("description")),
        journal_entry_id=_optional_str(doc.get("journalEntryId")),
    )


def cash_record_from_mapping(doc: Mapping[str, Any]) -> CashRecord:
    """
    Build a ``CashRecord`` from a school income or expense document.

    Income documents name their classification ``source``; expense documents
    call it ``category``.  Both land in ``CashRecord.category``; likewise
    ``paymentMethodReceived`` (income) and ``paymentMethod`` (expense).
    """
    record_id = str(doc["id"])
    return CashRecord(
        record_id=record_id,
        record_date=_record_date(
            doc.get("date"), record_type="cash_record", record_id=record_id,
        ),
        amount=to_decimal(doc.get("amount")),
        description=str(doc.get("description") or ""),
        account_id=_optional_str(doc.get("accountId")),
        category=_optional_str(doc.get("category") or doc.get("source")),
        payment_method=_optional_str(
            doc.get("paymentMethod") or doc.get("paymentMethodReceived")
        ),
    )
