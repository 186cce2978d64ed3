"""
Reporting Configuration.

The subset of ``LedgerEngineConfig`` the reporting builders need, resolved
for one school (tenant).  Builders receive plain values from this object;
they never read configuration files themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Self

from bursar_config.schema import LedgerEngineConfig
from bursar_kernel.domain.values import BALANCE_EPSILON, REPORT_TOLERANCE
from bursar_kernel.logging_config import get_logger

logger = get_logger("modules.reporting.config")


@dataclass(frozen=True)
class ReportingConfig:
    """Configuration for report generation for a single school."""

    entity_name: str = "School"
    currency: str = "UGX"
    balance_epsilon: Decimal = BALANCE_EPSILON
    report_tolerance: Decimal = REPORT_TOLERANCE
    non_cash_payment_keywords: tuple[str, ...] = ("bursary", "scholarship")
    cash_account_keywords: tuple[str, ...] = ("cash", "bank")
    designated_cash_account_ids: tuple[str, ...] = ()
    include_zero_balances: bool = True

    def __post_init__(self):
        if self.balance_epsilon <= 0:
            raise ValueError("balance_epsilon must be positive")
        if self.report_tolerance <= 0:
            raise ValueError("report_tolerance must be positive")
        if len(self.currency) != 3:
            raise ValueError("currency must be a 3-letter ISO 4217 code")

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.info("reporting_config_created_with_defaults")
        return cls()

    @classmethod
    def for_tenant(cls, config: LedgerEngineConfig, tenant_id: str) -> Self:
        """Resolve the engine config for one school."""
        return cls(
            entity_name=config.entity_name,
            currency=config.currency,
            balance_epsilon=config.balance_epsilon,
            report_tolerance=config.report_tolerance,
            non_cash_payment_keywords=tuple(config.non_cash_payment_keywords),
            cash_account_keywords=tuple(config.cash_account_keywords),
            designated_cash_account_ids=config.cash_accounts_for(tenant_id),
            include_zero_balances=config.include_zero_balances,
        )
