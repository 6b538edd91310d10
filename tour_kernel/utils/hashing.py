"""
Deterministic hashing utilities.

Used to fingerprint effective configuration and derived records so that two
computations can be compared for equality without field-by-field diffs.
"""

import dataclasses
import hashlib
import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


def _json_serializer(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        # 10 and 10.00 hash the same
        return str(obj.normalize())
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (tuple, frozenset, set)):
        return list(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonicalize_json(data: Any) -> str:
    """
    Convert data to canonical JSON: sorted keys, no whitespace, and stable
    encodings for Decimal, dates, enums and dataclasses.
    """
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        default=_json_serializer,
    )


def hash_payload(payload: Any) -> str:
    """Hex-encoded SHA-256 of the canonical JSON form of ``payload``."""
    return hashlib.sha256(canonicalize_json(payload).encode("utf-8")).hexdigest()
