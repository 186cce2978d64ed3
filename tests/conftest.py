"""
Pytest fixtures for the bursar ledger test suite.

Provides:
- Structured-logging setup and a ``captured_logs`` fixture
- A fresh in-memory SQLite database per test, with the immutability
  listeners registered
- A deterministic clock
- Builders for accounts, journal entries and fee transactions, plus the
  small "Cash / Tuition Revenue / Salaries" school used across the
  reporting tests
"""

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO
from typing import Generator
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from bursar_kernel.db.engine import (
    create_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from bursar_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from bursar_kernel.domain.clock import DeterministicClock
from bursar_kernel.domain.values import (
    AccountCategory,
    AccountInfo,
    FeeTransactionData,
    FeeTransactionType,
    JournalEntryData,
    JournalLineData,
)
from bursar_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from bursar_kernel.models.account import Account
from bursar_kernel.models.journal import JournalEntry, JournalLine

TENANT_ID = "school-001"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture bursar_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            build_trial_balance(...)
            logs = captured_logs()
            assert any(r["message"] == "trial_balance_built" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("bursar_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """
    Session on a private in-memory SQLite database.

    Each test gets its own database, so nothing needs truncating and no
    test can see another's rows.
    """
    init_engine_from_url("sqlite://")
    create_tables()
    register_immutability_listeners()
    s = get_session()
    try:
        yield s
    finally:
        s.rollback()
        s.close()
        reset_engine()


@pytest.fixture
def without_immutability():
    """Temporarily drop the immutability listeners (seeding corrupt data)."""
    unregister_immutability_listeners()
    yield
    register_immutability_listeners()


# =============================================================================
# Clock fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(datetime(2024, 3, 31, 9, 0, 0, tzinfo=timezone.utc))


# =============================================================================
# Value builders
# =============================================================================


def make_account(
    account_id: str,
    name: str,
    category: AccountCategory | str,
    code: str | None = None,
) -> AccountInfo:
    return AccountInfo(
        account_id=account_id,
        name=name,
        category=AccountCategory.parse(category),
        code=code,
    )


def make_entry(
    entry_date: date | None,
    *lines: tuple,
    entry_id: str | None = None,
    description: str = "",
) -> JournalEntryData:
    """
    Build a journal entry from ``(account_id, debit, credit)`` tuples.

    Amounts may be given as strings or ints.
    """
    return JournalEntryData(
        entry_id=entry_id or str(uuid4()),
        effective_date=entry_date,
        description=description,
        lines=tuple(
            JournalLineData(
                account_id=account_id,
                debit=Decimal(str(debit)),
                credit=Decimal(str(credit)),
            )
            for account_id, debit, credit in lines
        ),
    )


def make_fee(
    tx_type: str,
    amount,
    tx_date: date | None,
    payment_method: str | None = None,
    tx_id: str | None = None,
    student_id: str = "student-1",
) -> FeeTransactionData:
    return FeeTransactionData(
        transaction_id=tx_id or str(uuid4()),
        student_id=student_id,
        type=FeeTransactionType(tx_type),
        amount=Decimal(str(amount)),
        transaction_date=tx_date,
        payment_method=payment_method,
    )


@pytest.fixture
def school_accounts() -> list[AccountInfo]:
    """Cash (1000), Fees Payable (2000), Capital (3000), Tuition Revenue (4000), Salaries (5000)."""
    return [
        make_account("cash", "Cash", AccountCategory.ASSET, "1000"),
        make_account("payable", "Fees Received in Advance", AccountCategory.LIABILITY, "2000"),
        make_account("capital", "Capital", AccountCategory.EQUITY, "3000"),
        make_account("tuition", "Tuition Revenue", AccountCategory.REVENUE, "4000"),
        make_account("salaries", "Salaries", AccountCategory.EXPENSE, "5000"),
    ]


@pytest.fixture
def school_entries() -> list[JournalEntryData]:
    """Collect 1000 tuition in January, pay 400 salaries in February."""
    return [
        make_entry(
            date(2024, 1, 10),
            ("cash", "1000", "0"),
            ("tuition", "0", "1000"),
            entry_id="je-1",
            description="Term 1 tuition",
        ),
        make_entry(
            date(2024, 2, 10),
            ("salaries", "400", "0"),
            ("cash", "0", "400"),
            entry_id="je-2",
            description="February salaries",
        ),
    ]


# =============================================================================
# ORM seeding helpers
# =============================================================================


def seed_account(
    session: Session,
    account_id: str,
    name: str,
    category: AccountCategory,
    code: str | None = None,
    tenant_id: str = TENANT_ID,
) -> Account:
    account = Account(
        id=account_id,
        tenant_id=tenant_id,
        name=name,
        category=category.value,
        code=code,
    )
    session.add(account)
    session.flush()
    return account


def seed_entry(
    session: Session,
    entry_date: date | None,
    *lines: tuple,
    entry_id: str | None = None,
    description: str = "",
    tenant_id: str = TENANT_ID,
    created_at: datetime | None = None,
) -> JournalEntry:
    """Persist an entry built from ``(account_id, debit, credit)`` tuples."""
    entry = JournalEntry(
        id=entry_id or str(uuid4()),
        tenant_id=tenant_id,
        effective_date=entry_date,
        description=description,
    )
    if created_at is not None:
        entry.created_at = created_at
    for seq, (account_id, debit, credit) in enumerate(lines):
        entry.lines.append(
            JournalLine(
                account_id=account_id,
                line_seq=seq,
                debit=Decimal(str(debit)),
                credit=Decimal(str(credit)),
            )
        )
    session.add(entry)
    session.flush()
    return entry


@pytest.fixture
def seeded_school(session):
    """The small school persisted for TENANT_ID."""
    seed_account(session, "cash", "Cash", AccountCategory.ASSET, "1000")
    seed_account(session, "capital", "Capital", AccountCategory.EQUITY, "3000")
    seed_account(session, "tuition", "Tuition Revenue", AccountCategory.REVENUE, "4000")
    seed_account(session, "salaries", "Salaries", AccountCategory.EXPENSE, "5000")
    seed_entry(
        session, date(2024, 1, 10),
        ("cash", "1000", "0"), ("tuition", "0", "1000"),
        entry_id="je-1", description="Term 1 tuition",
    )
    seed_entry(
        session, date(2024, 2, 10),
        ("salaries", "400", "0"), ("cash", "0", "400"),
        entry_id="je-2", description="February salaries",
    )
    return session
