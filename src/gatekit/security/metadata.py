"""Side-table of decoration metadata attached to functions.

Entries are keyed by the function object (held weakly) and then by an
arbitrary hashable key, usually a per-guard signal. Lookups follow the
``__wrapped__`` chain so metadata survives ``functools.wraps`` decorators
stacked on top.
"""

from __future__ import annotations

import threading
import weakref
from typing import Any, Callable, Hashable, Iterator

_MISSING = object()


def _unwrap_chain(fn: Callable[..., Any]) -> Iterator[Callable[..., Any]]:
    seen: set[int] = set()
    current: Any = fn
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = getattr(current, "__wrapped__", None)


class MetadataTable:
    """Write-once-at-load, read-at-dispatch metadata store."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: weakref.WeakKeyDictionary[
            Callable[..., Any], dict[Hashable, Any]
        ] = weakref.WeakKeyDictionary()

    @staticmethod
    def accepts(fn: Any) -> bool:
        """Whether ``fn`` can carry entries (it must be weakly referenceable)."""
        try:
            weakref.ref(fn)
        except TypeError:
            return False
        return True

    def define(self, fn: Callable[..., Any], key: Hashable, value: Any) -> None:
        with self._lock:
            self._entries.setdefault(fn, {})[key] = value

    def append(self, fn: Callable[..., Any], key: Hashable, value: Any) -> None:
        with self._lock:
            bucket = self._entries.setdefault(fn, {})
            bucket[key] = (*bucket.get(key, ()), value)

    def get(
        self, fn: Callable[..., Any], key: Hashable, default: Any = None
    ) -> Any:
        for candidate in _unwrap_chain(fn):
            if not self.accepts(candidate):
                continue
            value = self._entries.get(candidate, {}).get(key, _MISSING)
            if value is not _MISSING:
                return value
        return default

    def has(self, fn: Callable[..., Any], key: Hashable) -> bool:
        return self.get(fn, key, _MISSING) is not _MISSING


metadata = MetadataTable()
