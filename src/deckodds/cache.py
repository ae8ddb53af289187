"""
Caller-owned LRU cache for repeated calculations.

Keys are a SHA-256 of a canonical JSON encoding of every input, so a
change to the deck or to any parameter can never hit a stale entry.
Hits hand back a deep copy; callers never share the stored result.
"""

import copy
import hashlib
import json
import logging
from collections import OrderedDict
from dataclasses import asdict, is_dataclass
from typing import Any, Callable, Hashable, Optional

from .config import DEFAULT_CACHE_SIZE

logger = logging.getLogger(__name__)

_MISSING = object()


def _canonical(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return _canonical(asdict(value))
    if isinstance(value, dict):
        return {str(k): _canonical(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_canonical(v) for v in value]
    return value


def make_key(*parts: Any) -> str:
    """Hash every input part into a stable cache key."""
    payload = json.dumps(_canonical(list(parts)), sort_keys=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class ResultCache:
    """Least-recently-used cache of computed results."""

    def __init__(self, max_size: int = DEFAULT_CACHE_SIZE):
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.max_size = max_size
        self._entries: "OrderedDict[Hashable, Any]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def get(self, key: Hashable, default: Optional[Any] = None) -> Any:
        if key not in self._entries:
            return default
        # Move to end (most recently used)
        self._entries.move_to_end(key)
        return self._entries[key]

    def set(self, key: Hashable, value: Any) -> None:
        if key in self._entries:
            self._entries.move_to_end(key)
        elif len(self._entries) >= self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted cache entry %s", evicted)
        self._entries[key] = value

    def clear(self) -> None:
        self._entries.clear()

    def get_or_compute(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        """Return the cached value for key, computing and storing it on a miss."""
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            self.hits += 1
            return copy.deepcopy(value)

        self.misses += 1
        value = compute()
        self.set(key, copy.deepcopy(value))
        return value
