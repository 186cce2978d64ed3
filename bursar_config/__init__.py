"""
bursar_config -- single public entrypoint for ledger engine configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Report builders receive plain values derived
    from the returned ``LedgerEngineConfig``; they never read files.

Architecture position:
    Configuration.  Sits above ``bursar_kernel`` and below
    ``bursar_modules``.  The kernel MUST NEVER import from
    ``bursar_config``.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``bursar_config_loaded`` log entry carrying the source file and a
    checksum of the merged configuration, tying each report back to the
    exact settings it was produced with.
"""

from __future__ import annotations

from pathlib import Path

from bursar_config.loader import compute_checksum, load_config, load_raw, parse_config
from bursar_config.schema import LedgerEngineConfig
from bursar_kernel.logging_config import get_logger

_logger = get_logger("config")

__all__ = [
    "LedgerEngineConfig",
    "get_active_config",
    "load_config",
]


def get_active_config(path: Path | str | None = None) -> LedgerEngineConfig:
    """
    The ONLY public configuration entrypoint.

    Args:
        path: Optional school-specific YAML overlaid on the packaged
            defaults.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ConfigValidationError: If the merged configuration is invalid.
    """
    raw = load_raw(path)
    source = str(path) if path is not None else "defaults"
    config = parse_config(raw, source=source)

    _logger.info(
        "bursar_config_loaded",
        extra={
            "config_source": source,
            "checksum": compute_checksum(raw),
            "currency": config.currency,
            "designated_tenant_count": len(config.designated_cash_account_ids),
        },
    )
    return config
