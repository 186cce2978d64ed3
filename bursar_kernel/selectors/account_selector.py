"""
Module: bursar_kernel.selectors.account_selector
Responsibility: The Account Registry -- lookup of a school's chart of
    accounts.
Architecture position: Kernel > Selectors.

``AccountRegistry`` is the in-memory snapshot every report builder consumes.
``AccountSelector`` reads a tenant's accounts from the database and hands
back a registry.

Failure modes:
    - ``get_account`` raises AccountNotFoundError for an unknown id.
    - ``find_account`` returns None for an unknown id; aggregate reports use
      it so that an orphaned id degrades instead of aborting.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from sqlalchemy import select

from bursar_kernel.domain.values import AccountCategory, AccountInfo
from bursar_kernel.exceptions import AccountNotFoundError
from bursar_kernel.models.account import Account
from bursar_kernel.selectors.base import BaseSelector


class AccountRegistry:
    """
    Immutable, ordered snapshot of a chart of accounts.

    Accounts are kept in the order supplied.  A duplicate id keeps the first
    occurrence.
    """

    def __init__(self, accounts: Iterable[AccountInfo] = (), tenant_id: str | None = None):
        self.tenant_id = tenant_id
        by_id: dict[str, AccountInfo] = {}
        for account in accounts:
            by_id.setdefault(account.account_id, account)
        self._by_id = by_id

    def list_accounts(self) -> list[AccountInfo]:
        return list(self._by_id.values())

    def get_account(self, account_id: str) -> AccountInfo:
        try:
            return self._by_id[account_id]
        except KeyError:
            raise AccountNotFoundError(account_id, self.tenant_id) from None

    def find_account(self, account_id: str) -> AccountInfo | None:
        return self._by_id.get(account_id)

    def by_category(self, category: AccountCategory) -> list[AccountInfo]:
        return [a for a in self._by_id.values() if a.category == category]

    def __contains__(self, account_id: object) -> bool:
        return account_id in self._by_id

    def __iter__(self) -> Iterator[AccountInfo]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)


class AccountSelector(BaseSelector):
    """Tenant-scoped reads of the ``accounts`` table."""

    @staticmethod
    def _to_info(account: Account) -> AccountInfo:
        return AccountInfo(
            account_id=account.id,
            name=account.name,
            category=AccountCategory.parse(account.category),
            code=account.code,
            parent_id=account.parent_id,
            description=account.description,
        )

    def list_accounts(self) -> list[AccountInfo]:
        """All of the tenant's accounts, ordered by code then name."""
        rows = self.session.execute(
            select(Account)
            .where(Account.tenant_id == self.tenant_id)
            .order_by(Account.code, Account.name, Account.id)
        ).scalars()
        return [self._to_info(row) for row in rows]

    def get_account(self, account_id: str) -> AccountInfo:
        account = self.session.execute(
            select(Account).where(
                Account.tenant_id == self.tenant_id,
                Account.id == account_id,
            )
        ).scalar_one_or_none()
        if account is None:
            raise AccountNotFoundError(account_id, self.tenant_id)
        return self._to_info(account)

    def registry(self) -> AccountRegistry:
        """Snapshot the tenant's chart of accounts."""
        return AccountRegistry(self.list_accounts(), tenant_id=self.tenant_id)
