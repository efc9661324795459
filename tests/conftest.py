"""Shared helpers for cache tests."""

import pytest

from lru_store.utils.lru import LRUCache


def assert_cache_invariants(cache: LRUCache) -> None:
    """Walk the arena in both directions and check the list is consistent."""
    forward = []
    prev = None
    slot = cache._head
    while slot is not None:
        node = cache._slots[slot]
        assert node is not None, f"head chain reaches free slot {slot}"
        assert node.prev == prev
        assert cache._index[node.key] == slot
        forward.append(slot)
        assert len(forward) <= len(cache._slots), "cycle in next links"
        prev = slot
        slot = node.next
    assert cache._tail == prev

    backward = []
    slot = cache._tail
    while slot is not None:
        backward.append(slot)
        assert len(backward) <= len(cache._slots), "cycle in prev links"
        slot = cache._slots[slot].prev

    assert forward == list(reversed(backward))
    assert len(cache._index) == len(forward)
    assert len(cache) <= cache.capacity
    assert (cache._head is None) == (len(cache) == 0)
    assert (cache._tail is None) == (len(cache) == 0)
    live = [s for s, n in enumerate(cache._slots) if n is not None]
    assert sorted(live) == sorted(forward)
    assert sorted(cache._free) == sorted(set(range(len(cache._slots))) - set(live))


@pytest.fixture
def check_invariants():
    return assert_cache_invariants


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep a developer's .env or shell variables out of the tests."""
    monkeypatch.delenv("LRU_CACHE_CAPACITY", raising=False)
    monkeypatch.delenv("LRU_MEMOIZE_CAPACITY", raising=False)
    monkeypatch.setattr("lru_store.utils.config.load_dotenv", lambda *args, **kwargs: False)
