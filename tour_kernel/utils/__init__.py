"""Utility modules for the tour kernel."""

from tour_kernel.utils.hashing import canonicalize_json, hash_payload
from tour_kernel.utils.keyed_lock import KeyedLock

__all__ = ["KeyedLock", "canonicalize_json", "hash_payload"]
