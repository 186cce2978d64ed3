"""
ORM-Level Immutability Enforcement.

===============================================================================
WHY THIS EXISTS
===============================================================================

Reports recompute every balance from the full journal history.  Editing or
deleting a stored journal entry would silently rewrite every report that
was ever produced from it, and changing an account's category would flip
the sign convention of every line already posted to it.  Corrections are
made with new entries, never by mutating old ones.

SQLAlchemy fires events before UPDATE/DELETE operations reach the database.
We register listeners that intercept these events:

    session.flush()
         |
         v
    [before_update event] --> _check_*() --> JournalImmutableError
         |                                   AccountCategoryImmutableError
         v
    [before_delete event] --> _check_*() --> JournalImmutableError
         |
         v
    SQL sent to database (only if checks pass)

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity        | Rule
--------------|---------------------------------------------------------
JournalEntry  | Append-only: no UPDATE, no DELETE
JournalLine   | Append-only: no UPDATE, no DELETE
Account       | ``category`` may not change once persisted; other fields
              | (name, code, description) may be edited

Bulk ``session.execute(update(...))`` statements bypass mapper events; the
ledger never issues them.

===============================================================================
USAGE
===============================================================================

    from bursar_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # once at startup

To temporarily disable (TESTS ONLY):

    unregister_immutability_listeners()
"""

from sqlalchemy import event, inspect
from sqlalchemy.orm.attributes import get_history

from bursar_kernel.domain.values import AccountCategory
from bursar_kernel.exceptions import (
    AccountCategoryImmutableError,
    JournalImmutableError,
)
from bursar_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _block(entity_type: str, entity_id: str, operation: str, **extra) -> None:
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": entity_id,
            "operation": operation,
            **extra,
        },
    )
    raise JournalImmutableError(entity_type, entity_id, operation)


def _changed_columns(target) -> list[str]:
    # before_update also fires for rows flagged dirty with no net column change
    return [
        attr.key
        for attr in inspect(target).mapper.column_attrs
        if get_history(target, attr.key).has_changes()
    ]


def _check_journal_entry_update(mapper, connection, target):
    """Block any column change on a stored JournalEntry."""
    changed = _changed_columns(target)
    if changed:
        _block("JournalEntry", str(target.id), "UPDATE", fields=changed)


def _check_journal_entry_delete(mapper, connection, target):
    _block("JournalEntry", str(target.id), "DELETE")


def _check_journal_line_update(mapper, connection, target):
    changed = _changed_columns(target)
    if changed:
        _block("JournalLine", str(target.id), "UPDATE", fields=changed)


def _check_journal_line_delete(mapper, connection, target):
    _block("JournalLine", str(target.id), "DELETE")


def _category_key(value) -> str:
    # "Asset", " asset" and AccountCategory.ASSET all name the same category
    if isinstance(value, AccountCategory):
        return value.value
    return str(value).strip().lower()


def _check_account_category(mapper, connection, target):
    """
    Block a category change on a persisted Account.

    ``history.deleted`` holds the loaded (old) value; it is empty when the
    attribute was never loaded or did not change.
    """
    history = get_history(target, "category")
    if not history.deleted or not history.added:
        return
    old_category = _category_key(history.deleted[0])
    new_category = _category_key(history.added[0])
    if old_category == new_category:
        return
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "Account",
            "entity_id": str(target.id),
            "operation": "UPDATE",
            "field": "category",
        },
    )
    raise AccountCategoryImmutableError(
        str(target.id), old_category, new_category,
    )


_LISTENERS = (
    ("JournalEntry", "before_update", _check_journal_entry_update),
    ("JournalEntry", "before_delete", _check_journal_entry_delete),
    ("JournalLine", "before_update", _check_journal_line_update),
    ("JournalLine", "before_delete", _check_journal_line_delete),
    ("Account", "before_update", _check_account_category),
)


def _targets() -> dict:
    from bursar_kernel.models.account import Account
    from bursar_kernel.models.journal import JournalEntry, JournalLine

    return {
        "Account": Account,
        "JournalEntry": JournalEntry,
        "JournalLine": JournalLine,
    }


def register_immutability_listeners() -> None:
    """
    Register all immutability enforcement event listeners.

    Idempotent: listeners already registered are left in place.
    """
    targets = _targets()
    for model_name, event_name, listener in _LISTENERS:
        model = targets[model_name]
        if not event.contains(model, event_name, listener):
            event.listen(model, event_name, listener)


def unregister_immutability_listeners() -> None:
    """
    Remove immutability enforcement event listeners.

    WARNING: Only use this in tests.
    """
    targets = _targets()
    for model_name, event_name, listener in _LISTENERS:
        model = targets[model_name]
        if event.contains(model, event_name, listener):
            event.remove(model, event_name, listener)
