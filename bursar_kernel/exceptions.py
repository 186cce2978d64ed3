"""
Typed Exception Hierarchy for the Bursar Kernel.

Every error raised by the kernel carries:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA as instance attributes (not just a message string)

Data-quality problems found while building a report (unbalanced entries,
unknown account ids, malformed dates, a missing cash account) are NOT
exceptions. They are returned as ``IntegrityWarning`` values alongside the
report.  Exceptions are reserved for contract violations and for requests
that cannot be answered at all (e.g. a ledger for an unknown account).

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    BursarKernelError (base)
    |
    +-- AccountError
    |   +-- AccountNotFoundError
    |   +-- AccountCategoryImmutableError
    |
    +-- JournalError
    |   +-- JournalImmutableError
    |
    +-- ReportError
    |   +-- ReportInputError
    |
    +-- ConfigError
        +-- ConfigValidationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category | Code                        | When Raised
---------|-----------------------------|-----------------------------------------
Account  | ACCOUNT_NOT_FOUND           | Account ID doesn't exist for the tenant
         | ACCOUNT_CATEGORY_IMMUTABLE  | Category change on a persisted account
---------|-----------------------------|-----------------------------------------
Journal  | JOURNAL_IMMUTABLE           | Update/delete of a stored entry or line
---------|-----------------------------|-----------------------------------------
Report   | REPORT_INPUT_INVALID        | Missing collaborator, inverted range
---------|-----------------------------|-----------------------------------------
Config   | CONFIG_INVALID              | YAML config fails validation

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        envelope = service.account_ledger(account_id, start, end)
    except AccountNotFoundError as e:
        return {"error": e.code, "account_id": e.account_id}
"""


class BursarKernelError(Exception):
    """
    Base exception for all bursar kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "BURSAR_KERNEL_ERROR"


# Account-related exceptions


class AccountError(BursarKernelError):
    """Base exception for account-related errors."""

    code: str = "ACCOUNT_ERROR"


class AccountNotFoundError(AccountError):
    """Account with given ID was not found in the registry."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_id: str, tenant_id: str | None = None):
        self.account_id = account_id
        self.tenant_id = tenant_id
        if tenant_id is None:
            super().__init__(f"Account not found: {account_id}")
        else:
            super().__init__(
                f"Account not found: {account_id} (tenant {tenant_id})"
            )


class AccountCategoryImmutableError(AccountError):
    """
    Attempt to change the category of a persisted account.

    Changing the category would silently flip the sign convention of every
    historical line posted to the account.
    """

    code: str = "ACCOUNT_CATEGORY_IMMUTABLE"

    def __init__(self, account_id: str, old_category: str, new_category: str):
        self.account_id = account_id
        self.old_category = old_category
        self.new_category = new_category
        super().__init__(
            f"Cannot change category of account {account_id} "
            f"from {old_category} to {new_category}"
        )


# Journal-related exceptions


class JournalError(BursarKernelError):
    """Base exception for journal-related errors."""

    code: str = "JOURNAL_ERROR"


class JournalImmutableError(JournalError):
    """Stored journal entries and lines are append-only."""

    code: str = "JOURNAL_IMMUTABLE"

    def __init__(self, entity_type: str, entity_id: str, operation: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.operation = operation
        super().__init__(
            f"{operation} not allowed on {entity_type} {entity_id}: "
            "journal records are append-only"
        )


# Report-related exceptions


class ReportError(BursarKernelError):
    """Base exception for report generation errors."""

    code: str = "REPORT_ERROR"


class ReportInputError(ReportError):
    """
    Report was requested with inputs that break the calling contract.

    Raised for programming errors only (a missing collaborator, an inverted
    date range).  Bad *data* never raises; it becomes a warning.
    """

    code: str = "REPORT_INPUT_INVALID"

    def __init__(self, report_type: str, reason: str):
        self.report_type = report_type
        self.reason = reason
        super().__init__(f"Invalid input for {report_type}: {reason}")


# Configuration-related exceptions


class ConfigError(BursarKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIG_ERROR"


class ConfigValidationError(ConfigError):
    """Configuration values failed validation."""

    code: str = "CONFIG_INVALID"

    def __init__(self, field: str, reason: str, source: str | None = None):
        self.field = field
        self.reason = reason
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(f"Invalid config field '{field}'{where}: {reason}")
