"""
Module: bursar_kernel.selectors.base
Responsibility: Abstract base class for all read-only, tenant-scoped query
    selectors.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/values.py.  MUST NOT import from bursar_modules or bursar_config.

Invariants enforced:
    - Read-only access: selectors accept a Session from the caller and MUST
      NOT call session.add(), session.delete(), session.commit(), or
      session.flush().
    - Value-object return convention: selectors return frozen domain values
      from bursar_kernel.domain.values, never ORM instances.
    - Session ownership: the caller owns the session and therefore the
      snapshot every report is computed from.
    - Tenant scope: every query is filtered by the selector's tenant_id.
      There is no ambient "current school".
"""

from abc import ABC

from sqlalchemy.orm import Session


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Args:
        session: SQLAlchemy session for database reads.
        tenant_id: School whose rows are visible to this selector.
    """

    def __init__(self, session: Session, tenant_id: str):
        if not tenant_id:
            raise ValueError("tenant_id is required")
        self.session = session
        self.tenant_id = tenant_id
