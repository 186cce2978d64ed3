"""
Configuration Loader (``bursar_config.loader``).

Responsibility
--------------
Reads the packaged ``defaults.yaml`` and an optional school-specific YAML
file, overlays the second on the first, validates the result, and builds a
frozen ``LedgerEngineConfig``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid values  -> ``ConfigValidationError`` naming the offending field.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from bursar_config.schema import LedgerEngineConfig
from bursar_kernel.exceptions import ConfigValidationError

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

_KNOWN_KEYS = frozenset({
    "entity_name",
    "currency",
    "balance_epsilon",
    "report_tolerance",
    "non_cash_payment_keywords",
    "cash_account_keywords",
    "designated_cash_account_ids",
    "include_zero_balances",
})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigValidationError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigValidationError("<root>", "expected a mapping", str(path))
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a parsed config mapping."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _positive_decimal(data: dict[str, Any], key: str, source: str | None) -> Decimal:
    try:
        value = Decimal(str(data[key]))
    except (InvalidOperation, ValueError) as exc:
        raise ConfigValidationError(key, f"not a number: {data[key]!r}", source) from exc
    if not value.is_finite():
        raise ConfigValidationError(key, "must be a finite number", source)
    if value <= 0:
        raise ConfigValidationError(key, "must be positive", source)
    return value


def _keywords(data: dict[str, Any], key: str, source: str | None) -> tuple[str, ...]:
    raw = data.get(key) or []
    if isinstance(raw, str) or not isinstance(raw, list):
        raise ConfigValidationError(key, "expected a list of strings", source)
    words = tuple(str(word).strip().lower() for word in raw if str(word).strip())
    return words


def parse_config(data: dict[str, Any], source: str | None = None) -> LedgerEngineConfig:
    """
    Validate a merged config mapping and build a ``LedgerEngineConfig``.

    Raises:
        ConfigValidationError: on an unknown key or an invalid value.
    """
    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ConfigValidationError(unknown[0], "unknown configuration key", source)

    currency = str(data.get("currency", ""))
    if len(currency) != 3 or not currency.isalpha():
        raise ConfigValidationError(
            "currency", "must be a 3-letter ISO 4217 code", source,
        )

    designated_raw = data.get("designated_cash_account_ids") or {}
    if not isinstance(designated_raw, dict):
        raise ConfigValidationError(
            "designated_cash_account_ids", "expected a mapping of tenant to ids", source,
        )
    designated: dict[str, tuple[str, ...]] = {}
    for tenant_id, ids in designated_raw.items():
        if isinstance(ids, str):
            ids = [ids]
        if not isinstance(ids, list):
            raise ConfigValidationError(
                "designated_cash_account_ids",
                f"expected a list of account ids for tenant {tenant_id!r}",
                source,
            )
        designated[str(tenant_id)] = tuple(str(i) for i in ids)

    include_zero = data.get("include_zero_balances", True)
    if not isinstance(include_zero, bool):
        raise ConfigValidationError("include_zero_balances", "expected true or false", source)

    return LedgerEngineConfig(
        entity_name=str(data.get("entity_name") or "School"),
        currency=currency.upper(),
        balance_epsilon=_positive_decimal(data, "balance_epsilon", source),
        report_tolerance=_positive_decimal(data, "report_tolerance", source),
        non_cash_payment_keywords=_keywords(data, "non_cash_payment_keywords", source),
        cash_account_keywords=_keywords(data, "cash_account_keywords", source),
        designated_cash_account_ids=designated,
        include_zero_balances=include_zero,
        source=source,
    )


def load_raw(path: Path | str | None = None) -> dict[str, Any]:
    """Packaged defaults overlaid with the keys of ``path`` (if given)."""
    data = load_yaml_file(DEFAULTS_PATH)
    if path is not None:
        data.update(load_yaml_file(Path(path)))
    return data


def load_config(path: Path | str | None = None) -> LedgerEngineConfig:
    """Load, overlay and validate configuration."""
    source = str(path) if path is not None else str(DEFAULTS_PATH)
    return parse_config(load_raw(path), source=source)
