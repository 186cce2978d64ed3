"""
Module: bursar_kernel.models.account
Responsibility: ORM persistence for a school's Chart of Accounts.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/values.py only.

Invariants enforced:
    - ``category`` is immutable once persisted (listener in
      db/immutability.py raises AccountCategoryImmutableError).
    - Accounts are NOT referenced by foreign key from journal lines: the
      administrative layer may delete an account that lines still point at,
      and reports must tolerate the orphaned id.
"""

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from bursar_kernel.db.base import TenantScopedBase
from bursar_kernel.domain.values import AccountCategory


class Account(TenantScopedBase):
    """Chart of Accounts entry for one school."""

    __tablename__ = "accounts"

    __table_args__ = (
        Index("idx_account_tenant_code", "tenant_id", "code"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Stored as the lowercase enum value ("asset", "revenue", ...)
    category: Mapped[str] = mapped_column(String(20), nullable=False)

    code: Mapped[str | None] = mapped_column(String(50), nullable=True)

    parent_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    def __repr__(self) -> str:
        return f"<Account {self.code or self.id}: {self.name}>"

    @property
    def category_enum(self) -> AccountCategory:
        return AccountCategory.parse(self.category)
