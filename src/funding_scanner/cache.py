"""
In-memory result cache.

Results are cached unfiltered; category filters (e.g. the China-only view)
are applied on every read to a copy, so changing the preference never needs a
re-extraction.
"""

import logging
import threading
from collections import OrderedDict
from collections.abc import Hashable, Iterable
from typing import Generic, TypeVar

from funding_scanner.models import FundingResult

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class LRUCache(Generic[K, V]):
    """Fixed-capacity least-recently-used map, safe to share between threads."""

    def __init__(self, max_size: int = 100):
        if max_size < 1:
            raise ValueError(f"Cache size must be positive, got {max_size}")
        self.max_size = max_size
        self._data: OrderedDict[K, V] = OrderedDict()
        self.lock = threading.RLock()

    def get(self, key: K) -> V | None:
        with self.lock:
            if key not in self._data:
                return None
            self._data.move_to_end(key)
            return self._data[key]

    def set(self, key: K, value: V) -> None:
        with self.lock:
            if key in self._data:
                self._data.move_to_end(key)
            self._data[key] = value

            while len(self._data) > self.max_size:
                evicted, _ = self._data.popitem(last=False)
                logger.debug(f"Evicted {evicted!r} from cache")

    def delete(self, key: K) -> bool:
        with self.lock:
            if key in self._data:
                del self._data[key]
                return True
            return False

    def clear(self) -> None:
        with self.lock:
            self._data.clear()

    def keys(self) -> list[K]:
        with self.lock:
            return list(self._data.keys())

    def __contains__(self, key: object) -> bool:
        with self.lock:
            return key in self._data

    def __len__(self) -> int:
        with self.lock:
            return len(self._data)


def filter_by_category(result: FundingResult, categories: Iterable[str] | None) -> FundingResult:
    """Copy of ``result`` keeping only funding of the given categories.

    ``None`` keeps everything. The input result is never modified.
    """
    if categories is None:
        return result.model_copy(update={"funding": list(result.funding)})

    wanted = set(categories)
    return result.model_copy(
        update={"funding": [f for f in result.funding if f.category in wanted]}
    )


class FundingCache:
    """Unfiltered funding results keyed by document identity."""

    def __init__(self, max_size: int = 100):
        self._cache: LRUCache[Hashable, FundingResult] = LRUCache(max_size)

    def get(
        self,
        key: Hashable,
        china_only: bool = False,
        categories: Iterable[str] | None = None,
    ) -> FundingResult | None:
        cached = self._cache.get(key)
        if cached is None:
            return None

        if china_only:
            categories = ["china"]
        return filter_by_category(cached, categories)

    def set(self, key: Hashable, result: FundingResult) -> None:
        self._cache.set(key, result)

    def forget(self, key: Hashable) -> None:
        """Invalidate one document, e.g. after it was deleted or replaced."""
        if self._cache.delete(key):
            logger.debug(f"Forgot cached funding for {key!r}")

    def clear(self) -> None:
        self._cache.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)
