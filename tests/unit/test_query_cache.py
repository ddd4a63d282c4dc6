from __future__ import annotations

from hrms.client.cache import (
    DETAIL_STALE_SECONDS,
    LIST_STALE_SECONDS,
    EmployeeKeys,
    QueryCache,
)
from hrms.models.employee import EmployeeQuery, ExtensionKind


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_entry_is_fresh_until_stale_time():
    clock = FakeClock()
    cache = QueryCache(clock=clock)
    key = EmployeeKeys.detail("EMP1")

    cache.set(key, "value", DETAIL_STALE_SECONDS)
    clock.now += DETAIL_STALE_SECONDS - 1
    assert key in cache
    assert cache.get(key) == "value"

    clock.now += 1
    assert key not in cache
    assert cache.get(key, "missing") == "missing"
    assert len(cache) == 0


def test_cached_none_is_a_hit():
    cache = QueryCache(clock=FakeClock())
    key = EmployeeKeys.extension(ExtensionKind.PERSONAL, "EMP1")

    cache.set(key, None)

    assert key in cache
    assert cache.get(key, "missing") is None


def test_list_keys_identify_query():
    first = EmployeeKeys.list(EmployeeQuery(search="an"))
    same = EmployeeKeys.list(EmployeeQuery(search="an"))
    other = EmployeeKeys.list(EmployeeQuery(search="an", page=1))

    assert first == same
    assert first != other
    assert first[: len(EmployeeKeys.lists())] == EmployeeKeys.lists()


def test_invalidate_drops_prefix_only():
    cache = QueryCache(clock=FakeClock())
    cache.set(EmployeeKeys.list(EmployeeQuery()), [], LIST_STALE_SECONDS)
    cache.set(EmployeeKeys.list(EmployeeQuery(page=1)), [], LIST_STALE_SECONDS)
    cache.set(EmployeeKeys.detail("EMP1"), "detail")
    cache.set(EmployeeKeys.stats(), "stats")

    dropped = cache.invalidate(EmployeeKeys.lists())

    assert dropped == 2
    assert EmployeeKeys.detail("EMP1") in cache
    assert EmployeeKeys.stats() in cache


def test_invalidate_root_drops_everything():
    cache = QueryCache(clock=FakeClock())
    cache.set(EmployeeKeys.detail("EMP1"), "detail")
    cache.set(EmployeeKeys.extension("contact", "EMP1"), "contact")

    assert cache.invalidate(EmployeeKeys.ALL) == 2
    assert len(cache) == 0


def test_remove_and_clear():
    cache = QueryCache(clock=FakeClock())
    cache.set(EmployeeKeys.detail("EMP1"), "a")
    cache.set(EmployeeKeys.detail("EMP2"), "b")

    cache.remove(EmployeeKeys.detail("EMP1"))
    cache.remove(EmployeeKeys.detail("EMP404"))
    assert EmployeeKeys.detail("EMP1") not in cache
    assert EmployeeKeys.detail("EMP2") in cache

    cache.clear()
    assert len(cache) == 0


def test_empty_cache_is_truthy():
    cache = QueryCache(clock=FakeClock())
    assert len(cache) == 0
    assert cache
