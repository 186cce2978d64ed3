"""
Bursar Kernel - ledger data model for a multi-tenant school administration app.

- Immutable domain values (accounts, journal entries, fee transactions)
- Append-only SQLAlchemy persistence, scoped per school
- Read-only selectors that snapshot a school's books for reporting
"""

__version__ = "0.1.0"
