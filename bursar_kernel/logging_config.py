"""
Module: bursar_kernel.logging_config
Responsibility: JSON-lines logging for the ledger, with the school (tenant)
    and report id attached to every record emitted while a report runs.
Architecture position: Kernel, importable from every layer.

Every logger lives under the ``bursar_kernel`` namespace and does not
propagate to the root logger; ``configure_logging`` installs exactly one
handler the first time it is called.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Iterator

LOGGER_NAMESPACE = "bursar_kernel"

_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    "tenant_id": ContextVar("bursar_log_tenant_id", default=None),
    "report_id": ContextVar("bursar_log_report_id", default=None),
}


class LogContext:
    """Tenant and report fields shared by all log records of one report run."""

    @classmethod
    def set(cls, *, tenant_id: str | None = None, report_id: str | None = None) -> None:
        """Set fields; None leaves the current value in place."""
        for name, value in (("tenant_id", tenant_id), ("report_id", report_id)):
            if value is not None:
                _CONTEXT_VARS[name].set(value)

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return {
            name: var.get()
            for name, var in _CONTEXT_VARS.items()
            if var.get() is not None
        }

    @classmethod
    def clear(cls) -> None:
        for var in _CONTEXT_VARS.values():
            var.set(None)

    @classmethod
    @contextmanager
    def bind(cls, **fields: str | None) -> Iterator[type["LogContext"]]:
        """
        Set fields for the duration of a ``with`` block, then restore them.

        Raises:
            TypeError: for a field name other than tenant_id or report_id.
        """
        unknown = set(fields) - set(_CONTEXT_VARS)
        if unknown:
            raise TypeError(f"Unknown log context field(s): {sorted(unknown)}")
        tokens = [
            (_CONTEXT_VARS[name], _CONTEXT_VARS[name].set(value))
            for name, value in fields.items()
            if value is not None
        ]
        try:
            yield cls
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    # Decimal and anything else unknown
    return str(obj)


def _exception_fields(exc_info) -> dict[str, Any]:
    exc = exc_info[1]
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # BursarKernelError subclasses keep their context as public attributes
    fields.update(
        (f"exc_{key}", value)
        for key, value in vars(exc).items()
        if not key.startswith("_") and key != "code"
    )
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per line: ts, level, logger, message, context, extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


def get_logger(name: str) -> logging.Logger:
    """Logger for ``bursar_kernel.<name>``."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


_setup_lock = threading.Lock()
_installed_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Install the JSON handler on the ``bursar_kernel`` logger.

    Only the first call has any effect until ``reset_logging`` runs.  With
    neither ``handler`` nor ``stream`` given, records go to stderr.
    """
    global _installed_handler
    with _setup_lock:
        if _installed_handler is not None:
            return
        if handler is None:
            handler = logging.StreamHandler(stream or sys.stderr)
        _installed_handler = handler

    _installed_handler.setFormatter(StructuredFormatter())
    namespace_logger = logging.getLogger(LOGGER_NAMESPACE)
    namespace_logger.setLevel(level)
    namespace_logger.propagate = False
    namespace_logger.addHandler(_installed_handler)


def reset_logging() -> None:
    """Remove the installed handler so the next configure_logging applies. Tests only."""
    global _installed_handler
    with _setup_lock:
        handler, _installed_handler = _installed_handler, None
    namespace_logger = logging.getLogger(LOGGER_NAMESPACE)
    if handler is not None:
        namespace_logger.removeHandler(handler)
    namespace_logger.setLevel(logging.WARNING)
