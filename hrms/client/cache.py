"""Query cache for the employee client: explicit keys, stale times and invalidation."""

from __future__ import annotations

import time
from collections.abc import Callable, Hashable
from typing import Any

from hrms.models.employee import EmployeeQuery, ExtensionKind

CacheKey = tuple[Hashable, ...]

LIST_STALE_SECONDS = 5 * 60
DETAIL_STALE_SECONDS = 2 * 60
STATS_STALE_SECONDS = 10 * 60
DEFAULT_STALE_SECONDS = 60


class EmployeeKeys:
    """Cache keys, hierarchical so a prefix invalidates a whole group."""

    ALL: CacheKey = ("employees",)

    @staticmethod
    def lists() -> CacheKey:
        return (*EmployeeKeys.ALL, "list")

    @staticmethod
    def list(query: EmployeeQuery) -> CacheKey:
        return (*EmployeeKeys.lists(), tuple(sorted(query.model_dump().items())))

    @staticmethod
    def details() -> CacheKey:
        return (*EmployeeKeys.ALL, "detail")

    @staticmethod
    def detail(employee_id: str) -> CacheKey:
        return (*EmployeeKeys.details(), employee_id)

    @staticmethod
    def extension(kind: ExtensionKind, employee_id: str) -> CacheKey:
        return (*EmployeeKeys.ALL, ExtensionKind(kind).value, employee_id)

    @staticmethod
    def stats() -> CacheKey:
        return (*EmployeeKeys.ALL, "stats")


class QueryCache:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[CacheKey, tuple[Any, float]] = {}

    def __contains__(self, key: CacheKey) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        if self._clock() >= entry[1]:
            del self._entries[key]
            return False
        return True

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return True

    def get(self, key: CacheKey, default: Any = None) -> Any:
        if key not in self:
            return default
        return self._entries[key][0]

    def set(self, key: CacheKey, value: Any, stale_seconds: float = DEFAULT_STALE_SECONDS) -> None:
        self._entries[key] = (value, self._clock() + stale_seconds)

    def remove(self, key: CacheKey) -> None:
        self._entries.pop(key, None)

    def invalidate(self, prefix: CacheKey) -> int:
        """Drop every entry whose key starts with prefix; returns the count dropped."""
        stale = [key for key in self._entries if key[: len(prefix)] == prefix]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
