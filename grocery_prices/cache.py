"""Key-value cache with TTL expiry and JSON file persistence."""

import json
import logging
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class CacheEntry(Generic[T]):
    """A cached value with its expiry time (epoch milliseconds)."""

    value: T
    expiry: int

    def is_expired(self, now: int) -> bool:
        return now >= self.expiry

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "expiry": self.expiry}

    @classmethod
    def from_dict(cls, data: Any) -> "CacheEntry[T]":
        """Create from a snapshot entry, raising ValueError if malformed."""
        if not isinstance(data, dict) or "value" not in data or "expiry" not in data:
            raise ValueError(f"Malformed cache entry: {data!r}")
        expiry = data["expiry"]
        if isinstance(expiry, bool) or not isinstance(expiry, (int, float)):
            raise ValueError(f"Malformed cache expiry: {expiry!r}")
        return cls(value=data["value"], expiry=int(expiry))


class DurableCache(Generic[T]):
    """
    In-memory cache with TTL, mirrored to a JSON file.

    Every mutation rewrites the full snapshot. Expired entries are purged
    lazily when read, not proactively. Values must be JSON-serializable.

    Usage:
        cache = DurableCache(Path("package_size_cache.json"), ttl=timedelta(days=30))
        cache.set("tofu", {"size": "400g", "price": 2.49})
        cache.get("tofu")

    Pass path=None for a cache that lives only in memory.
    """

    def __init__(
        self,
        path: Path | None = None,
        ttl: timedelta | int = timedelta(hours=24),
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.path = Path(path) if path is not None else None
        self.ttl_ms = int(ttl.total_seconds() * 1000) if isinstance(ttl, timedelta) else int(ttl)
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._load()

    def set(self, key: str, value: T) -> T:
        """Store a value, persist the snapshot and return the value."""
        self._entries[key] = CacheEntry(value=value, expiry=self._clock() + self.ttl_ms)
        self._save()
        return value

    def get(self, key: str) -> T | None:
        """Get a value if present and unexpired; expired entries are evicted."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if entry.is_expired(self._clock()):
            del self._entries[key]
            self._save()
            return None

        return entry.value

    def clear(self) -> None:
        """Drop all entries and persist the empty snapshot."""
        self._entries.clear()
        self._save()

    def items(self) -> Iterator[tuple[str, T]]:
        """Iterate over unexpired entries without evicting anything."""
        now = self._clock()
        for key, entry in list(self._entries.items()):
            if not entry.is_expired(now):
                yield key, entry.value

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and not entry.is_expired(self._clock())

    def _load(self) -> None:
        """Load unexpired entries from the snapshot file, healing it if corrupt."""
        if self.path is None or not self.path.exists():
            return

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("Cache snapshot is not a JSON object")

            now = self._clock()
            entries: dict[str, CacheEntry[T]] = {}
            for key, raw in data.items():
                entry: CacheEntry[T] = CacheEntry.from_dict(raw)
                if not entry.is_expired(now):
                    entries[key] = entry
        except (OSError, ValueError) as e:
            # json.JSONDecodeError is a ValueError
            logger.error("Error loading cache from %s: %s", self.path, e)
            self._entries = {}
            self._save()
            return

        self._entries = entries
        logger.info("Loaded %d cached items from %s", len(entries), self.path)

    def _save(self) -> None:
        """Write the full snapshot; failures are logged and the cache stays in memory."""
        if self.path is None:
            return

        snapshot = {key: entry.to_dict() for key, entry in self._entries.items()}
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, indent=2)
            tmp_path.replace(self.path)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error saving cache to %s: %s", self.path, e)
