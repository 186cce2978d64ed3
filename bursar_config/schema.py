"""
Configuration Schema (``bursar_config.schema``).

Frozen dataclasses describing the ledger engine's tunables.  Instances are
produced by ``bursar_config.loader``; nothing else constructs them from
files.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class LedgerEngineConfig:
    """
    Tunables for the ledger and statement builders.

    ``designated_cash_account_ids`` maps a tenant (school) id to the
    account ids whose journal lines make up that school's cash position.
    """

    entity_name: str = "School"
    currency: str = "UGX"
    balance_epsilon: Decimal = Decimal("0.001")
    report_tolerance: Decimal = Decimal("0.01")
    non_cash_payment_keywords: tuple[str, ...] = ("bursary", "scholarship")
    cash_account_keywords: tuple[str, ...] = ("cash", "bank")
    designated_cash_account_ids: Mapping[str, tuple[str, ...]] = field(
        default_factory=dict,
    )
    include_zero_balances: bool = True
    source: str | None = None

    def cash_accounts_for(self, tenant_id: str) -> tuple[str, ...]:
        """Designated cash account ids for a school (empty when none)."""
        return tuple(self.designated_cash_account_ids.get(tenant_id, ()))
