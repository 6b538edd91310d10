"""
tour_config -- settings for the tour ledger.

Responsibility:
    Single entry point for runtime settings through ``get_active_settings()``.
    Settings are read from the packaged ``defaults.yaml``, then overlaid by an
    explicit file and by the file named in ``TOUR_LEDGER_CONFIG``.

Failure modes:
    - ``FileNotFoundError`` for an override path that does not exist.
    - ``ValueError`` for unknown keys or invalid values.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path

from tour_config.loader import (
    compute_checksum,
    flatten_sections,
    load_yaml_file,
    parse_settings,
)
from tour_config.schema import DebtDeletePolicy, LedgerSettings
from tour_kernel.logging_config import get_logger

logger = get_logger("config")

ENV_VAR = "TOUR_LEDGER_CONFIG"
DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

_active: LedgerSettings | None = None
_active_lock = threading.Lock()


def load_settings(path: str | Path | None = None) -> LedgerSettings:
    """
    Load settings from defaults, an optional file and the environment.

    Args:
        path: Override file applied after the packaged defaults.  When None,
            the file named by TOUR_LEDGER_CONFIG is used if set.
    """
    values = flatten_sections(load_yaml_file(DEFAULTS_PATH), str(DEFAULTS_PATH))
    sources = [str(DEFAULTS_PATH)]

    override = path if path is not None else os.environ.get(ENV_VAR)
    if override:
        override_path = Path(override)
        values.update(flatten_sections(load_yaml_file(override_path), str(override_path)))
        sources.append(str(override_path))

    settings = parse_settings(values, source=" + ".join(sources))
    logger.info(
        "TOUR_CONFIG_TRACE",
        extra={
            "config_source": settings.source,
            "checksum": compute_checksum(settings),
            "default_currency": settings.default_currency,
        },
    )
    return settings


def get_active_settings() -> LedgerSettings:
    """Process-wide settings, loaded once."""
    global _active
    with _active_lock:
        if _active is None:
            _active = load_settings()
        return _active


def reset_active_settings() -> None:
    """Forget cached settings. FOR TESTING ONLY."""
    global _active
    with _active_lock:
        _active = None


__all__ = [
    "DebtDeletePolicy",
    "LedgerSettings",
    "compute_checksum",
    "get_active_settings",
    "load_settings",
    "reset_active_settings",
]
