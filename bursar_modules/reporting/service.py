"""
Reporting Module Service (``bursar_modules.reporting.service``).

Responsibility
--------------
Orchestrates report generation for one school -- account balances, trial
balance, balance sheet, income statement, cash-flow statement, account
and general ledgers, income and expense ledgers and financial ratios --
by bridging the kernel selectors to the pure builders in ``balances.py``,
``statements.py`` and ``ledgers.py``.  This is a **read-only** service.

Architecture position
---------------------
**Modules layer** -- thin glue.  Constructor: ``session`` + ``tenant_id``
+ ``clock`` + ``config``.  Every selector it creates is scoped to
``tenant_id``; there is no ambient "current school".

Invariants enforced
-------------------
* Read-only -- no mutations to the journal or any other table.
* Each report is computed from one read of the tenant's books, taken
  inside the caller's session.
* ``generated_at`` comes from the injected clock, never from the builders.

Failure modes
-------------
* Inverted date range  -> ``ReportInputError`` before any query runs.
* ``account_ledger`` for an id the school does not have  ->
  ``AccountNotFoundError``.
* Data-quality problems never raise; they are counted in the envelope and
  listed in the report's ``warnings``.

Audit relevance
---------------
Every report runs inside a ``LogContext`` carrying tenant_id and a fresh
report_id, so all log lines emitted while building it (including
integrity warnings) can be tied back to the report.
"""

from __future__ import annotations

from datetime import date
from uuid import uuid4

from sqlalchemy.orm import Session

from bursar_config import get_active_config
from bursar_config.schema import LedgerEngineConfig
from bursar_kernel.domain.clock import Clock, SystemClock
from bursar_kernel.exceptions import ReportInputError
from bursar_kernel.logging_config import LogContext, get_logger
from bursar_kernel.selectors.account_selector import AccountRegistry, AccountSelector
from bursar_kernel.selectors.fee_selector import FeeSelector
from bursar_kernel.selectors.journal_selector import JournalSelector, JournalStore

from bursar_modules.reporting.balances import compute_balance_snapshot
from bursar_modules.reporting.config import ReportingConfig
from bursar_modules.reporting.ledgers import build_account_ledger, build_general_ledger
from bursar_modules.reporting.models import (
    ReportEnvelope,
    ReportMetadata,
    ReportType,
)
from bursar_modules.reporting.statements import (
    build_balance_sheet,
    build_cash_flow_statement,
    build_expense_ledger,
    build_financial_ratios,
    build_income_ledger,
    build_income_statement,
    build_trial_balance,
)

logger = get_logger("modules.reporting.service")


class ReportingService:
    """
    Report generation service for one school.

    Guarantees
    ----------
    * Every public method returns a ``ReportEnvelope`` whose ``report`` is
      the typed report and whose ``metadata`` records what was asked for.
    * No financial logic lives in this class.
    * Clock is injectable for deterministic testing.
    """

    def __init__(
        self,
        session: Session,
        tenant_id: str,
        clock: Clock | None = None,
        config: LedgerEngineConfig | None = None,
    ):
        self._session = session
        self._tenant_id = tenant_id
        self._clock = clock or SystemClock()
        self._config = ReportingConfig.for_tenant(
            config or get_active_config(), tenant_id,
        )
        self._accounts = AccountSelector(session, tenant_id)
        self._journal = JournalSelector(session, tenant_id)
        self._fees = FeeSelector(session, tenant_id)

        logger.info(
            "reporting_service_initialized",
            extra={
                "tenant_id": tenant_id,
                "entity_name": self._config.entity_name,
                "currency": self._config.currency,
            },
        )

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _load(self, to_date: date | None) -> tuple[AccountRegistry, JournalStore]:
        registry = self._accounts.registry()
        store = self._journal.store(to_date=to_date)
        logger.debug(
            "books_loaded_for_reporting",
            extra={"account_count": len(registry), "entry_count": len(store)},
        )
        return registry, store

    def _envelope(
        self,
        report_id: str,
        report_type: ReportType,
        report: object,
        as_of_date: date,
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> ReportEnvelope:
        metadata = ReportMetadata(
            report_id=report_id,
            report_type=report_type,
            tenant_id=self._tenant_id,
            entity_name=self._config.entity_name,
            currency=self._config.currency,
            as_of_date=as_of_date,
            generated_at=self._clock.now().isoformat(),
            period_start=period_start,
            period_end=period_end,
        )
        warnings = getattr(report, "warnings", ())
        logger.info(
            "report_generated",
            extra={
                "report_type": report_type,
                "as_of_date": as_of_date,
                "warning_count": len(warnings),
            },
        )
        return ReportEnvelope(metadata=metadata, report=report, warning_count=len(warnings))

    def _bind(self):
        report_id = str(uuid4())
        return report_id, LogContext.bind(tenant_id=self._tenant_id, report_id=report_id)

    def _as_of(self, as_of_date: date | None) -> date:
        return as_of_date if as_of_date is not None else self._clock.today()

    @staticmethod
    def _check_range(start: date, end: date, report_type: ReportType) -> None:
        if start > end:
            raise ReportInputError(
                report_type.value, f"from_date {start} is after to_date {end}",
            )

    # =========================================================================
    # Public API
    # =========================================================================

    def account_balances(self, as_of_date: date | None = None) -> ReportEnvelope:
        """Chart of accounts with each account's balance (listing screens)."""
        as_of = self._as_of(as_of_date)
        report_id, ctx = self._bind()
        with ctx:
            registry, store = self._load(as_of)
            snapshot = compute_balance_snapshot(
                registry, store, as_of, self._config.balance_epsilon,
            )
            return self._envelope(report_id, ReportType.ACCOUNT_BALANCES, snapshot, as_of)

    def trial_balance(self, as_of_date: date | None = None) -> ReportEnvelope:
        """Trial balance as of a date (defaults to today)."""
        as_of = self._as_of(as_of_date)
        report_id, ctx = self._bind()
        with ctx:
            registry, store = self._load(as_of)
            report = build_trial_balance(
                registry,
                store,
                as_of,
                include_zero_balances=self._config.include_zero_balances,
                epsilon=self._config.balance_epsilon,
                tolerance=self._config.report_tolerance,
            )
            return self._envelope(report_id, ReportType.TRIAL_BALANCE, report, as_of)

    def balance_sheet(self, as_of_date: date | None = None) -> ReportEnvelope:
        """Balance sheet as of a date, with year-to-date net income in equity."""
        as_of = self._as_of(as_of_date)
        report_id, ctx = self._bind()
        with ctx:
            registry, store = self._load(as_of)
            report = build_balance_sheet(
                registry,
                store,
                as_of,
                epsilon=self._config.balance_epsilon,
                tolerance=self._config.report_tolerance,
            )
            return self._envelope(
                report_id, ReportType.BALANCE_SHEET, report, as_of,
                period_start=report.period_start, period_end=as_of,
            )

    def income_statement(self, period_start: date, period_end: date) -> ReportEnvelope:
        self._check_range(period_start, period_end, ReportType.INCOME_STATEMENT)
        report_id, ctx = self._bind()
        with ctx:
            registry, store = self._load(period_end)
            report = build_income_statement(
                registry, store, period_start, period_end,
                epsilon=self._config.balance_epsilon,
            )
            return self._envelope(
                report_id, ReportType.INCOME_STATEMENT, report, period_end,
                period_start=period_start, period_end=period_end,
            )

    def cash_flow(self, period_start: date, period_end: date) -> ReportEnvelope:
        """
        Cash-flow statement for a period.

        Fee transactions and income / expense records are read for the
        period; journal entries are read through ``period_end`` for the
        ending cash position.
        """
        self._check_range(period_start, period_end, ReportType.CASH_FLOW)
        report_id, ctx = self._bind()
        with ctx:
            registry, store = self._load(period_end)
            report = build_cash_flow_statement(
                registry,
                store,
                self._fees.list_transactions(period_start, period_end),
                self._fees.list_income_records(period_start, period_end),
                self._fees.list_expense_records(period_start, period_end),
                period_start,
                period_end,
                designated_cash_account_ids=self._config.designated_cash_account_ids,
                non_cash_payment_keywords=self._config.non_cash_payment_keywords,
                cash_account_keywords=self._config.cash_account_keywords,
            )
            return self._envelope(
                report_id, ReportType.CASH_FLOW, report, period_end,
                period_start=period_start, period_end=period_end,
            )

    def account_ledger(
        self,
        account_id: str,
        period_start: date,
        period_end: date,
    ) -> ReportEnvelope:
        """
        Ledger for one account.

        Raises:
            AccountNotFoundError: the school has no account with this id.
        """
        self._check_range(period_start, period_end, ReportType.ACCOUNT_LEDGER)
        report_id, ctx = self._bind()
        with ctx:
            account = self._accounts.get_account(account_id)
            store = self._journal.store(to_date=period_end)
            report = build_account_ledger(
                account, store, period_start, period_end,
                epsilon=self._config.balance_epsilon,
            )
            return self._envelope(
                report_id, ReportType.ACCOUNT_LEDGER, report, period_end,
                period_start=period_start, period_end=period_end,
            )

    def general_ledger(self, period_start: date, period_end: date) -> ReportEnvelope:
        self._check_range(period_start, period_end, ReportType.GENERAL_LEDGER)
        report_id, ctx = self._bind()
        with ctx:
            registry, store = self._load(period_end)
            report = build_general_ledger(registry, store, period_start, period_end)
            return self._envelope(
                report_id, ReportType.GENERAL_LEDGER, report, period_end,
                period_start=period_start, period_end=period_end,
            )

    def income_ledger(self, period_start: date, period_end: date) -> ReportEnvelope:
        """School income records in the period, newest first."""
        self._check_range(period_start, period_end, ReportType.INCOME_LEDGER)
        report_id, ctx = self._bind()
        with ctx:
            report = build_income_ledger(
                self._fees.list_income_records(period_start, period_end),
                period_start,
                period_end,
            )
            return self._envelope(
                report_id, ReportType.INCOME_LEDGER, report, period_end,
                period_start=period_start, period_end=period_end,
            )

    def expense_ledger(self, period_start: date, period_end: date) -> ReportEnvelope:
        """School expense records in the period, newest first."""
        self._check_range(period_start, period_end, ReportType.EXPENSE_LEDGER)
        report_id, ctx = self._bind()
        with ctx:
            report = build_expense_ledger(
                self._fees.list_expense_records(period_start, period_end),
                period_start,
                period_end,
            )
            return self._envelope(
                report_id, ReportType.EXPENSE_LEDGER, report, period_end,
                period_start=period_start, period_end=period_end,
            )

    def financial_ratios(
        self,
        period_start: date,
        period_end: date,
        as_of_date: date | None = None,
    ) -> ReportEnvelope:
        """
        Ratios over a period, with student dues as of ``as_of_date``.

        ``as_of_date`` defaults to ``period_end``.
        """
        self._check_range(period_start, period_end, ReportType.FINANCIAL_RATIOS)
        as_of = as_of_date if as_of_date is not None else period_end
        report_id, ctx = self._bind()
        with ctx:
            report = build_financial_ratios(
                self._fees.list_income_records(period_start, period_end),
                self._fees.list_expense_records(period_start, period_end),
                self._fees.list_transactions(to_date=as_of),
                period_start,
                period_end,
                as_of,
            )
            return self._envelope(
                report_id, ReportType.FINANCIAL_RATIOS, report, as_of,
                period_start=period_start, period_end=period_end,
            )
