"""
Module: bursar_kernel.selectors.journal_selector
Responsibility: The Journal Store -- the append-only sequence of journal
    entries that every balance is derived from.
Architecture position: Kernel > Selectors.

``JournalStore`` is the in-memory snapshot consumed by the report builders.
Its iteration order is insertion order, which is the tie-break for entries
sharing an effective date.  ``JournalSelector`` reads a tenant's entries in
(effective_date, created_at, id) order, so a store built from it preserves
the order the school recorded them in.

Invariants enforced:
    - Entries are never modified or removed from a store.
    - Balance is NOT checked on append; unbalanced entries are surfaced by
      the reporting layer as warnings.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import date

from sqlalchemy import or_, select
from sqlalchemy.orm import selectinload

from bursar_kernel.domain.values import JournalEntryData, JournalLineData
from bursar_kernel.models.journal import JournalEntry
from bursar_kernel.selectors.base import BaseSelector


class JournalStore:
    """Append-only, insertion-ordered collection of journal entries."""

    def __init__(self, entries: Iterable[JournalEntryData] = ()):
        self._entries: list[JournalEntryData] = list(entries)

    def append(self, entry: JournalEntryData) -> None:
        self._entries.append(entry)

    def extend(self, entries: Iterable[JournalEntryData]) -> None:
        self._entries.extend(entries)

    def entries(self) -> tuple[JournalEntryData, ...]:
        """All entries in insertion order."""
        return tuple(self._entries)

    def __iter__(self) -> Iterator[JournalEntryData]:
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


class JournalSelector(BaseSelector):
    """Tenant-scoped reads of journal entries and their lines."""

    @staticmethod
    def _to_data(entry: JournalEntry) -> JournalEntryData:
        lines = tuple(
            JournalLineData(
                account_id=line.account_id,
                debit=line.debit,
                credit=line.credit,
                description=line.description,
                account_name=line.account_name,
            )
            for line in sorted(entry.lines, key=lambda x: x.line_seq)
        )
        return JournalEntryData(
            entry_id=entry.id,
            effective_date=entry.effective_date,
            description=entry.description,
            lines=lines,
            source_document_id=entry.source_document_id,
            source_document_type=entry.source_document_type,
            posted_by_id=entry.posted_by_id,
            posted_by_name=entry.posted_by_name,
        )

    def list_entries(
        self,
        to_date: date | None = None,
        include_undated: bool = True,
    ) -> list[JournalEntryData]:
        """
        Entries dated on or before ``to_date`` (all entries when None).

        Undated entries are included by default so that the report builders
        can surface them as malformed rather than have them vanish.
        """
        stmt = (
            select(JournalEntry)
            .options(selectinload(JournalEntry.lines))
            .where(JournalEntry.tenant_id == self.tenant_id)
        )
        if to_date is not None:
            if include_undated:
                stmt = stmt.where(
                    or_(
                        JournalEntry.effective_date <= to_date,
                        JournalEntry.effective_date.is_(None),
                    )
                )
            else:
                stmt = stmt.where(JournalEntry.effective_date <= to_date)
        elif not include_undated:
            stmt = stmt.where(JournalEntry.effective_date.is_not(None))
        stmt = stmt.order_by(
            JournalEntry.effective_date,
            JournalEntry.created_at,
            JournalEntry.id,
        )
        return [self._to_data(e) for e in self.session.execute(stmt).scalars()]

    def get_entry(self, entry_id: str) -> JournalEntryData | None:
        entry = self.session.execute(
            select(JournalEntry)
            .options(selectinload(JournalEntry.lines))
            .where(
                JournalEntry.tenant_id == self.tenant_id,
                JournalEntry.id == entry_id,
            )
        ).scalar_one_or_none()
        if entry is None:
            return None
        return self._to_data(entry)

    def store(self, to_date: date | None = None) -> JournalStore:
        """Snapshot the tenant's journal into a JournalStore."""
        return JournalStore(self.list_entries(to_date=to_date))
