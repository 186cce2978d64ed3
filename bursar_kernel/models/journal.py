"""
Module: bursar_kernel.models.journal
Responsibility: ORM persistence for journal entries and their lines -- the
    single source of truth for every balance and statement.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Append-only: ORM listeners in db/immutability.py raise
      JournalImmutableError on UPDATE or DELETE of an entry or a line.
    - Balance is NOT enforced on write.  Entries imported from the document
      store may be unbalanced; the reporting layer detects and reports them.
    - ``effective_date`` is nullable: an imported entry whose stored date was
      unreadable is kept, and excluded from every date-window computation.

Ordering:
    Entries are read in (effective_date, created_at, id) order; created_at
    stands in for insertion order.  Lines keep their position in the entry
    via ``line_seq``.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bursar_kernel.db.base import Base, TenantScopedBase


class JournalEntry(TenantScopedBase):
    """A dated, described group of debit and credit lines."""

    __tablename__ = "journal_entries"

    __table_args__ = (
        Index("idx_journal_tenant_date", "tenant_id", "effective_date"),
    )

    effective_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    description: Mapped[str] = mapped_column(
        String(1000), nullable=False, default="",
    )

    # Provenance: audit display only
    source_document_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    source_document_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    posted_by_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    posted_by_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    lines: Mapped[list["JournalLine"]] = relationship(
        back_populates="entry",
        order_by="JournalLine.line_seq",
        cascade="save-update, merge",
    )

    def __repr__(self) -> str:
        return f"<JournalEntry {self.id} {self.effective_date}>"


class JournalLine(Base):
    """One debit or credit line.  Exactly one of debit/credit is normally non-zero."""

    __tablename__ = "journal_lines"

    __table_args__ = (
        Index("idx_journal_line_account", "account_id"),
    )

    entry_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("journal_entries.id"),
        nullable=False,
        index=True,
    )

    # Plain string, no foreign key: see models/account.py
    account_id: Mapped[str] = mapped_column(String(64), nullable=False)

    line_seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    debit: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    credit: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # Display cache captured at posting time
    account_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    entry: Mapped[JournalEntry] = relationship(back_populates="lines")

    def __repr__(self) -> str:
        return f"<JournalLine {self.account_id} Dr {self.debit} Cr {self.credit}>"
