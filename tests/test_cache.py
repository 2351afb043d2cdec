from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from link_preview.core.cache import PreviewCache, get_default_cache
from link_preview.core.models import OpenGraphData, Preview


def _preview(title: str) -> Preview:
    return Preview(page_title=title, open_graph=OpenGraphData())


def test_size_never_exceeds_capacity() -> None:
    c = PreviewCache(max_cache_elements=3)
    for i in range(20):
        c.set(f"k{i % 7}", _preview(str(i)))
        assert len(c) <= 3


def test_access_order_evicts_least_recently_used() -> None:
    c = PreviewCache.builder().access_order(True).max_cache_elements(2).build()
    c.set("A", _preview("a"))
    c.set("B", _preview("b"))
    assert c.get("A") is not None
    c.set("C", _preview("c"))
    assert c.keys() == frozenset({"A", "C"})


def test_insertion_order_ignores_reads() -> None:
    c = PreviewCache.builder().access_order(False).max_cache_elements(2).build()
    c.set("A", _preview("a"))
    c.set("B", _preview("b"))
    c.get("A")
    c.set("C", _preview("c"))
    assert c.keys() == frozenset({"B", "C"})


def test_overwrite_replaces_value_without_growing() -> None:
    c = PreviewCache(max_cache_elements=2)
    c.set("A", _preview("a1"))
    c.set("B", _preview("b"))
    c.set("A", _preview("a2"))
    assert len(c) == 2
    assert c.get("A") == _preview("a2")
    # The overwrite counted as a use of A, so B goes first.
    c.set("C", _preview("c"))
    assert c.keys() == frozenset({"A", "C"})


def test_remove_reports_prior_presence() -> None:
    c = PreviewCache()
    c["k"] = _preview("k")
    assert c.remove("k") is True
    assert c.remove("k") is False
    with pytest.raises(KeyError):
        c["k"]


def test_clear_and_keys_snapshot() -> None:
    c = PreviewCache()
    c.set("a", _preview("a"))
    c.set("b", _preview("b"))
    snapshot = c.keys()
    c.clear()
    assert len(c) == 0
    assert snapshot == frozenset({"a", "b"})


def test_contains_does_not_refresh_recency() -> None:
    c = PreviewCache(max_cache_elements=2)
    c.set("A", _preview("a"))
    c.set("B", _preview("b"))
    assert "A" in c
    c.set("C", _preview("c"))
    assert "A" not in c


def test_zero_capacity_stores_nothing() -> None:
    c = PreviewCache(max_cache_elements=0)
    c.set("a", _preview("a"))
    assert len(c) == 0
    assert c.get("a") is None


def test_builder_defaults_and_validation() -> None:
    c = PreviewCache.builder().build()
    assert c.max_cache_elements == 100
    assert c.access_order is True
    with pytest.raises(ValueError):
        PreviewCache(max_cache_elements=-1)
    with pytest.raises(ValueError):
        PreviewCache.builder().load_factor(0).build()
    with pytest.raises(ValueError):
        PreviewCache.builder().initial_capacity(-5).build()


def test_default_cache_is_a_process_singleton() -> None:
    first = get_default_cache()
    assert PreviewCache.default() is first
    assert get_default_cache() is first
    with ThreadPoolExecutor(max_workers=8) as pool:
        seen = list(pool.map(lambda _: get_default_cache(), range(32)))
    assert all(c is first for c in seen)


def test_concurrent_access_keeps_bound() -> None:
    c = PreviewCache(max_cache_elements=16)
    values = [_preview(str(i)) for i in range(64)]

    def worker(n: int) -> None:
        for i in range(500):
            key = f"k{(n * 31 + i) % 64}"
            c.set(key, values[(n + i) % 64])
            c.get(f"k{i % 64}")
            if i % 7 == 0:
                c.remove(f"k{(i * 3) % 64}")
            assert len(c) <= 16

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(worker, range(8)))

    assert len(c) <= 16
    assert len(c.keys()) == len(c)
