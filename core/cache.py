"""
Content-addressed in-memory caches for analysis and rendering results.

Keys are hashes of the inputs an artifact depends on, so an entry can never go
stale; the only maintenance is FIFO eviction once a partition is full.
"""
import hashlib
import logging
from collections import OrderedDict
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100

# Per-partition capacities; partitions not listed use DEFAULT_CAPACITY.
PARTITION_CAPACITIES: Dict[str, int] = {
    "dependencies": 100,
    "existing_imports": 100,
    "complexity": 100,
    "script_content": 100,
    "import_statements": 50,
    "processed_js": 100,
}


def content_key(*parts: str) -> str:
    """Hash the given strings into a single cache key."""
    digest = hashlib.sha256()
    for part in parts:
        digest.update(part.encode("utf-8"))
        digest.update(b"\x00")
    return digest.hexdigest()


class ContentCache:
    """
    Bounded memo table for one kind of cached artifact.

    Lookups and inserts share a lock so a multi-threaded host can share the
    partition; identical keys always map to identical values, so racing
    writers are harmless.
    """

    def __init__(self, name: str, capacity: int = DEFAULT_CAPACITY):
        """
        Initialize the partition.

        Args:
            name: Partition name, used in log messages
            capacity: Number of entries kept before the oldest is evicted
        """
        if capacity <= 0:
            raise ValueError(f"Cache capacity must be positive, got {capacity}")
        self.name = name
        self.capacity = capacity
        self._entries: "OrderedDict[str, Any]" = OrderedDict()
        self._lock = Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[Any]:
        """
        Get a value from the cache.

        Args:
            key: The cache key

        Returns:
            The cached value or None if not present
        """
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._store(key, value)

    def get_or_compute(self, key: str, compute: Callable[[], Any]) -> Any:
        """Return the cached value for ``key``, computing and storing it on a miss."""
        with self._lock:
            if key in self._entries:
                self.hits += 1
                return self._entries[key]
            self.misses += 1

        value = compute()

        with self._lock:
            self._store(key, value)
        return value

    def _store(self, key: str, value: Any) -> None:
        # Re-inserting an existing key keeps its original FIFO position
        self._entries[key] = value
        while len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted {evicted[:12]} from '{self.name}' cache (capacity {self.capacity})")

    def resize(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError(f"Cache capacity must be positive, got {capacity}")
        with self._lock:
            self.capacity = capacity
            while len(self._entries) > self.capacity:
                self._entries.popitem(last=False)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def keys(self) -> List[str]:
        """Keys in insertion (eviction) order."""
        with self._lock:
            return list(self._entries.keys())

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def size(self) -> int:
        """Get the current number of cached entries."""
        with self._lock:
            return len(self._entries)


# Process-wide partitions, created on first use
_partitions: Dict[str, ContentCache] = {}
_partitions_lock = Lock()


def get_cache(partition: str) -> ContentCache:
    """Get the shared cache partition with the given name."""
    with _partitions_lock:
        cache = _partitions.get(partition)
        if cache is None:
            cache = ContentCache(partition, PARTITION_CAPACITIES.get(partition, DEFAULT_CAPACITY))
            _partitions[partition] = cache
        return cache


def configure_cache(partition: str, capacity: int) -> ContentCache:
    """Change a partition's capacity, evicting the oldest entries if it shrinks."""
    cache = get_cache(partition)
    cache.resize(capacity)
    return cache


def cache_stats() -> Dict[str, int]:
    with _partitions_lock:
        return {name: cache.size() for name, cache in _partitions.items()}


def clear_caches() -> None:
    """Empty every partition (capacities are kept)."""
    with _partitions_lock:
        partitions = list(_partitions.values())
    for cache in partitions:
        cache.clear()
