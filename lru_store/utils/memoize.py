from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

from lru_store.utils.config import load_config
from lru_store.utils.lru import LRUCache

T = TypeVar("T")

_LOGGER = logging.getLogger(__name__)

# stands in for "not cached" so that None results are cached too
_MISSING = object()


def _make_key(args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Hashable:
    if not kwargs:
        return args
    return args + (_MISSING,) + tuple(sorted(kwargs.items()))


class MemoizeFunction(Generic[T]):
    """Cache a function's results in a bounded ``LRUCache``.

    Calls are keyed by their positional arguments plus the sorted keyword
    items, so every argument must be hashable. ``capacity=None`` reads
    ``LRU_MEMOIZE_CAPACITY`` from the environment.
    """

    def __init__(self, func: Callable[..., T], capacity: Optional[int] = None) -> None:
        if capacity is None:
            capacity = load_config().memoize_capacity
        self.func = func
        self.cache: LRUCache[Hashable, T] = LRUCache(capacity)
        functools.update_wrapper(self, func)

    def __call__(self, *args: Any, **kwargs: Any) -> T:
        key = _make_key(args, kwargs)
        cached = self.cache.get(key, _MISSING)
        if cached is not _MISSING:
            return cached
        result = self.func(*args, **kwargs)
        self.cache.set(key, result)
        return result

    def __get__(self, obj: Any, objtype: Any = None) -> Any:
        # bound methods share one cache; the instance becomes part of the key
        if obj is None:
            return self
        return functools.partial(self, obj)

    def cache_stats(self) -> Dict[str, Any]:
        return self.cache.get_stats()


def memoize(capacity: Optional[int] = None) -> Callable[[Callable[..., T]], MemoizeFunction[T]]:
    """Decorator form of ``MemoizeFunction``.

    Example:
        @memoize(capacity=128)
        def link(surface: str) -> Optional[str]:
            ...
    """

    def decorator(func: Callable[..., T]) -> MemoizeFunction[T]:
        _LOGGER.debug("Memoizing %s", getattr(func, "__qualname__", func))
        return MemoizeFunction(func, capacity)

    return decorator
