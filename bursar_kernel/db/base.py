"""
Module: bursar_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.  Provides
    the string primary key convention, the type annotation map for consistent
    column types, and the TenantScopedBase mixin every ledger table uses.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/, selectors/, domain/, or outer layers.

Invariants enforced:
    - String primary keys: document-store ids are kept verbatim; rows created
      without one get a uuid4 string.
    - Decimal precision: type_annotation_map maps Python Decimal to
      Numeric(38, 9).  NEVER use float for monetary amounts.
    - Tenant scoping: every ledger row carries a non-null, indexed tenant_id
      (the school the row belongs to).
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import ClassVar
from uuid import uuid4

from sqlalchemy import Date, DateTime, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def new_id() -> str:
    """Default primary key for rows created without a document id."""
    return str(uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is a string of at most 64 characters.
        - Decimal maps to Numeric(38, 9) -- financial-grade precision.
        - datetime maps to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        date: Date,
        str: String(255),
    }

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=new_id,
    )


class TenantScopedBase(Base):
    """
    Abstract base for rows owned by a single school.

    Guarantees:
        - tenant_id is required and indexed.
        - created_at defaults to the insert time; callers importing
          historical documents pass the stored creation time instead so
          that insertion order survives the import.
    """

    __abstract__ = True

    tenant_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
