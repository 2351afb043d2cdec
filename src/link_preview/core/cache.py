from __future__ import annotations

import logging
import threading
from collections import OrderedDict

from link_preview.core.models import Preview

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_CAPACITY = 16
DEFAULT_LOAD_FACTOR = 0.75
DEFAULT_MAX_CACHE_ELEMENTS = 100


class PreviewCache:
    """Bounded in-memory map of cache key -> Preview.

    Eviction drops the least recently used entry (``access_order=True``) or
    the least recently inserted one (``access_order=False``). All access goes
    through a single lock; previews are small and lookups are cheap next to a
    network fetch.
    """

    def __init__(
        self,
        *,
        initial_capacity: int = DEFAULT_INITIAL_CAPACITY,
        load_factor: float = DEFAULT_LOAD_FACTOR,
        access_order: bool = True,
        max_cache_elements: int = DEFAULT_MAX_CACHE_ELEMENTS,
    ) -> None:
        if initial_capacity < 0:
            raise ValueError(f"initial_capacity must be >= 0, got {initial_capacity}")
        if not load_factor > 0:
            raise ValueError(f"load_factor must be > 0, got {load_factor}")
        if max_cache_elements < 0:
            raise ValueError(f"max_cache_elements must be >= 0, got {max_cache_elements}")
        # Sizing hints only; OrderedDict manages its own storage.
        self._initial_capacity = int(initial_capacity)
        self._load_factor = float(load_factor)
        self._access_order = bool(access_order)
        self._max = int(max_cache_elements)
        self._entries: OrderedDict[str, Preview] = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def builder() -> PreviewCacheBuilder:
        return PreviewCacheBuilder()

    @staticmethod
    def default() -> PreviewCache:
        return get_default_cache()

    @property
    def max_cache_elements(self) -> int:
        return self._max

    @property
    def access_order(self) -> bool:
        return self._access_order

    def get(self, key: str) -> Preview | None:
        with self._lock:
            value = self._entries.get(key)
            if value is not None and self._access_order:
                self._entries.move_to_end(key)
            return value

    def set(self, key: str, value: Preview) -> None:
        with self._lock:
            if key in self._entries and self._access_order:
                self._entries.move_to_end(key)
            self._entries[key] = value
            while len(self._entries) > self._max:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted %s from preview cache (max=%d)", evicted, self._max)

    def remove(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def keys(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._entries)

    def __getitem__(self, key: str) -> Preview:
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return value

    def __setitem__(self, key: str, value: Preview) -> None:
        self.set(key, value)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        return f"PreviewCache(size={len(self)}, max_cache_elements={self._max}, access_order={self._access_order})"


class PreviewCacheBuilder:
    def __init__(self) -> None:
        self._initial_capacity = DEFAULT_INITIAL_CAPACITY
        self._load_factor = DEFAULT_LOAD_FACTOR
        self._access_order = True
        self._max_cache_elements = DEFAULT_MAX_CACHE_ELEMENTS

    def initial_capacity(self, size: int) -> PreviewCacheBuilder:
        self._initial_capacity = size
        return self

    def load_factor(self, factor: float) -> PreviewCacheBuilder:
        self._load_factor = factor
        return self

    def access_order(self, access_order: bool) -> PreviewCacheBuilder:
        self._access_order = access_order
        return self

    def max_cache_elements(self, elements: int) -> PreviewCacheBuilder:
        self._max_cache_elements = elements
        return self

    def build(self) -> PreviewCache:
        return PreviewCache(
            initial_capacity=self._initial_capacity,
            load_factor=self._load_factor,
            access_order=self._access_order,
            max_cache_elements=self._max_cache_elements,
        )


_default_cache: PreviewCache | None = None
_default_cache_lock = threading.Lock()


def get_default_cache() -> PreviewCache:
    """Return the process-wide cache, creating it on first use."""

    global _default_cache
    if _default_cache is None:
        with _default_cache_lock:
            if _default_cache is None:
                _default_cache = PreviewCache()
    return _default_cache
