from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

from lru_store.utils.config import load_config

K = TypeVar("K")
V = TypeVar("V")

_LOGGER = logging.getLogger(__name__)


class CacheCapacityError(ValueError):
    """Raised when a cache is constructed with a negative capacity."""


@dataclass
class Node(Generic[K, V]):
    key: K
    value: V
    # slot handles into the owning cache's arena, not object references
    prev: Optional[int] = None
    next: Optional[int] = None


class LRUCache(Generic[K, V]):
    """Fixed-capacity LRU cache backed by a node arena.

    - get: 키가 존재하면 값을 반환하고 head(가장 최근 사용)로 옮긴다
    - set: 값을 저장/갱신하고 head로 옮긴다. 새 키가 용량을 넘기면 tail을 제거한다

    Nodes live in ``self._slots`` and link to each other by slot index,
    so the recency list holds no reference cycles. Freed slots are kept in
    ``self._free`` and reused before the arena grows.
    """

    def __init__(self, capacity: int) -> None:
        capacity = int(capacity)
        if capacity < 0:
            raise CacheCapacityError(f"LRUCache capacity must be >= 0, got {capacity}")
        self.capacity = capacity
        self._slots: List[Optional[Node[K, V]]] = []
        self._free: List[int] = []
        self._index: Dict[K, int] = {}
        self._head: Optional[int] = None
        self._tail: Optional[int] = None
        self._stats = {
            "hits": 0,
            "misses": 0,
            "writes": 0,
            "evictions": 0,
        }
        _LOGGER.debug("LRUCache created: capacity=%d", capacity)

    # -- public API -------------------------------------------------------

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        slot = self._index.get(key)
        if slot is None:
            self._stats["misses"] += 1
            return default
        self._stats["hits"] += 1
        self._move_to_head(slot)
        return self._node(slot).value

    def set(self, key: K, value: V) -> None:
        slot = self._index.get(key)
        if slot is not None:
            self._stats["writes"] += 1
            self._node(slot).value = value
            self._move_to_head(slot)
            return

        if self.capacity == 0:
            _LOGGER.debug("LRUCache capacity is 0, dropping key %r", key)
            return

        if len(self._index) >= self.capacity and self._tail is not None:
            self._evict_tail()

        slot = self._allocate(key, value)
        self._index[key] = slot
        self._push_head(slot)
        self._stats["writes"] += 1

    def keys(self) -> Iterator[K]:
        """Resident keys from most- to least-recently used.

        The order is captured up front, so calling ``get``/``set`` while
        iterating is safe and does not affect the keys yielded.
        """
        return iter([node.key for _, node in self._walk()])

    def items(self) -> Iterator[Tuple[K, V]]:
        return iter([(node.key, node.value) for _, node in self._walk()])

    def get_stats(self) -> Dict[str, Any]:
        """Return counters plus current size.

        ``writes`` counts values actually stored; inserts dropped by a
        zero-capacity cache are not counted. ``hit_rate`` is a percentage
        of ``get`` calls that hit, rounded to two places; it is 0.0 before
        the first read.
        """
        reads = self._stats["hits"] + self._stats["misses"]
        hit_rate = 0.0
        if reads > 0:
            hit_rate = (self._stats["hits"] / reads) * 100
        return {
            "capacity": self.capacity,
            "entries": len(self._index),
            "hits": self._stats["hits"],
            "misses": self._stats["misses"],
            "writes": self._stats["writes"],
            "evictions": self._stats["evictions"],
            "hit_rate": round(hit_rate, 2),
        }

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[K]:
        return self.keys()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(capacity={self.capacity}, entries={len(self._index)})"

    # -- arena / list maintenance -----------------------------------------

    def _node(self, slot: int) -> Node[K, V]:
        node = self._slots[slot]
        if node is None:
            raise RuntimeError(f"LRUCache slot {slot} is free")
        return node

    def _walk(self) -> Iterator[Tuple[int, Node[K, V]]]:
        slot = self._head
        while slot is not None:
            node = self._node(slot)
            yield slot, node
            slot = node.next

    def _allocate(self, key: K, value: V) -> int:
        node = Node(key, value)
        if self._free:
            slot = self._free.pop()
            self._slots[slot] = node
        else:
            slot = len(self._slots)
            self._slots.append(node)
        return slot

    def _release(self, slot: int) -> None:
        self._slots[slot] = None
        self._free.append(slot)

    def _unlink(self, slot: int) -> None:
        node = self._node(slot)
        if node.prev is not None:
            self._node(node.prev).next = node.next
        else:
            self._head = node.next
        if node.next is not None:
            self._node(node.next).prev = node.prev
        else:
            self._tail = node.prev
        node.prev = None
        node.next = None

    def _push_head(self, slot: int) -> None:
        node = self._node(slot)
        node.prev = None
        node.next = self._head
        if self._head is not None:
            self._node(self._head).prev = slot
        self._head = slot
        if self._tail is None:
            self._tail = slot

    def _move_to_head(self, slot: int) -> None:
        if slot == self._head:
            return
        self._unlink(slot)
        self._push_head(slot)

    def _evict_tail(self) -> None:
        slot = self._tail
        if slot is None:
            return
        node = self._node(slot)
        self._unlink(slot)
        del self._index[node.key]
        self._release(slot)
        self._stats["evictions"] += 1
        _LOGGER.debug("LRU eviction: key=%r (capacity=%d)", node.key, self.capacity)


def create_lru_cache(capacity: Optional[int] = None) -> LRUCache:
    """Build an ``LRUCache``; ``capacity=None`` uses ``LRU_CACHE_CAPACITY`` from the environment."""
    if capacity is None:
        capacity = load_config().default_capacity
    return LRUCache(capacity)
