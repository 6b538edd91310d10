"""
Configuration Loader (``tour_config.loader``).

Responsibility
--------------
Loads YAML settings files and parses them into the frozen
``tour_config.schema.LedgerSettings``.  Callers obtain settings through
``tour_config.get_active_settings()`` or ``tour_config.load_settings()``.

Invariants enforced
-------------------
* Unknown keys are rejected, so a typo never silently falls back to a default.
* Currency codes must be registered ISO 4217 codes.
* ``compute_checksum`` is a deterministic SHA-256 of the effective values.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid or unknown values  -> ``ValueError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from tour_config.schema import DebtDeletePolicy, LedgerSettings
from tour_kernel.domain.currency import CurrencyRegistry
from tour_kernel.utils.hashing import hash_payload

_SECTIONS: dict[str, tuple[str, ...]] = {
    "ledger": (
        "default_currency",
        "default_reservation_currency",
        "tour_expense_category",
        "urgency_window_days",
    ),
    "receivables": (
        "placeholder_company_name",
        "placeholder_company_category",
        "debt_on_reservation_delete",
    ),
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data


def flatten_sections(data: dict[str, Any], origin: str) -> dict[str, Any]:
    """Turn ``{section: {key: value}}`` into ``{key: value}``, rejecting unknowns."""
    values: dict[str, Any] = {}
    for section, body in data.items():
        allowed = _SECTIONS.get(section)
        if allowed is None:
            raise ValueError(f"{origin}: unknown section '{section}'")
        if not isinstance(body, dict):
            raise ValueError(f"{origin}: section '{section}' must be a mapping")
        for key, value in body.items():
            if key not in allowed:
                raise ValueError(f"{origin}: unknown key '{section}.{key}'")
            values[key] = value
    return values


def _currency(value: Any, key: str) -> str:
    if not isinstance(value, str) or not CurrencyRegistry.is_valid(value):
        raise ValueError(f"{key}: not a known currency code: {value!r}")
    return CurrencyRegistry.normalize(value)


def _text(value: Any, key: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{key}: must be a non-empty string")
    return value.strip()


def parse_settings(values: dict[str, Any], source: str = "<memory>") -> LedgerSettings:
    """Build LedgerSettings from a flat mapping; missing keys keep defaults."""
    defaults = LedgerSettings()
    merged = {**defaults.as_dict(), **values}

    window = merged["urgency_window_days"]
    if isinstance(window, bool) or not isinstance(window, int) or window < 0:
        raise ValueError(f"urgency_window_days: must be a non-negative integer, got {window!r}")

    try:
        policy = DebtDeletePolicy(merged["debt_on_reservation_delete"])
    except ValueError:
        raise ValueError(
            "debt_on_reservation_delete: expected one of "
            f"{[p.value for p in DebtDeletePolicy]}, got {merged['debt_on_reservation_delete']!r}"
        ) from None

    return LedgerSettings(
        default_currency=_currency(merged["default_currency"], "default_currency"),
        default_reservation_currency=_currency(
            merged["default_reservation_currency"], "default_reservation_currency"
        ),
        tour_expense_category=_text(merged["tour_expense_category"], "tour_expense_category"),
        urgency_window_days=window,
        placeholder_company_name=_text(
            merged["placeholder_company_name"], "placeholder_company_name"
        ),
        placeholder_company_category=_text(
            merged["placeholder_company_category"], "placeholder_company_category"
        ),
        debt_on_reservation_delete=policy,
        source=source,
    )


def compute_checksum(settings: LedgerSettings) -> str:
    """Deterministic SHA-256 of the effective values (source excluded)."""
    return hash_payload(settings.as_dict())
