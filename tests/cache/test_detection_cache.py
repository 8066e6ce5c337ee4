from __future__ import annotations

import threading
import time

import pytest

from chordsheet.cache import DetectionCache, content_key


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_content_key_depends_on_text_and_salt() -> None:
    assert content_key("C G") == content_key("C G")
    assert content_key("C G") != content_key("C  G")
    assert content_key("C G", salt="complex=1") != content_key("C G", salt="complex=0")
    assert len(content_key("")) == 64


def test_get_or_compute_reuses_cached_value() -> None:
    cache: DetectionCache[str] = DetectionCache(ttl_seconds=60, max_entries=4)
    calls: list[str] = []

    def compute() -> str:
        calls.append("run")
        return "result"

    assert cache.get_or_compute("C G Am F", compute) == "result"
    assert cache.get_or_compute("C G Am F", compute) == "result"
    assert calls == ["run"]
    assert cache.hits == 1
    assert cache.misses == 1


def test_entries_expire_after_ttl() -> None:
    clock = FakeClock()
    cache: DetectionCache[int] = DetectionCache(ttl_seconds=10, max_entries=4, timer=clock)
    values = iter(range(10))

    assert cache.get_or_compute("text", lambda: next(values)) == 0
    clock.now = 5
    assert cache.get_or_compute("text", lambda: next(values)) == 0
    clock.now = 11
    assert cache.get_or_compute("text", lambda: next(values)) == 1
    assert len(cache) == 1


def test_max_entries_bounds_the_cache() -> None:
    cache: DetectionCache[str] = DetectionCache(ttl_seconds=60, max_entries=2)

    for text in ("a", "b", "c"):
        cache.get_or_compute(text, lambda text=text: text.upper())

    assert len(cache) == 2


def test_salt_separates_configurations() -> None:
    cache: DetectionCache[str] = DetectionCache(ttl_seconds=60, max_entries=4)

    assert cache.get_or_compute("C", lambda: "complex", salt="complex=1") == "complex"
    assert cache.get_or_compute("C", lambda: "strict", salt="complex=0") == "strict"


def test_concurrent_requests_compute_once() -> None:
    cache: DetectionCache[str] = DetectionCache(ttl_seconds=60, max_entries=4)
    calls: list[int] = []
    calls_lock = threading.Lock()
    barrier = threading.Barrier(8)
    results: list[str] = []

    def compute() -> str:
        with calls_lock:
            calls.append(1)
        time.sleep(0.05)
        return "tokens"

    def worker() -> None:
        barrier.wait()
        results.append(cache.get_or_compute("same sheet", compute))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(calls) == 1
    assert results == ["tokens"] * 8


def test_failed_computation_is_not_cached() -> None:
    cache: DetectionCache[str] = DetectionCache(ttl_seconds=60, max_entries=4)

    def broken() -> str:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        cache.get_or_compute("x", broken)
    assert cache.get_or_compute("x", lambda: "ok") == "ok"


def test_failed_computations_release_key_locks() -> None:
    cache: DetectionCache[str] = DetectionCache(ttl_seconds=60, max_entries=4)

    def broken() -> str:
        raise RuntimeError("boom")

    for index in range(5):
        with pytest.raises(RuntimeError):
            cache.get_or_compute(f"sheet {index}", broken)

    assert cache._key_locks == {}
    assert len(cache) == 0


def test_invalid_limits_are_rejected() -> None:
    with pytest.raises(ValueError):
        DetectionCache(ttl_seconds=0)
    with pytest.raises(ValueError):
        DetectionCache(max_entries=0)
