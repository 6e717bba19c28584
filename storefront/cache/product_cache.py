"""
Two-tier product cache: in-process memory in front of a durable key-value store.

Entries are stored as ``{"data": ..., "timestamp": ..., "expiresAt": ...}``
JSON documents with epoch-millisecond times, so a cache file written by one
process is readable by the next. An entry is fresh while ``expiresAt > now``.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from storefront.cache.stores import KeyValueStore, StorageError
from storefront.utils.monitoring import log_info, record_cache_hit, record_cache_miss

logger = logging.getLogger(__name__)

PRODUCTS_LIST_TTL = 5 * 60
PRODUCT_DETAIL_TTL = 10 * 60

ALL_PRODUCTS_KEY = "mawu_products_all"
PRODUCT_KEY_PREFIX = "mawu_product_"
# Shared by both keys above; used to scope cleanup to product entries only.
PRODUCT_KEY_FAMILY = "mawu_product"


@dataclass
class CacheEntry:
    data: Any
    timestamp: int
    expires_at: int

    def is_fresh(self, now_ms: int) -> bool:
        return self.expires_at > now_ms

    def to_json(self) -> str:
        return json.dumps({"data": self.data, "timestamp": self.timestamp, "expiresAt": self.expires_at})

    @classmethod
    def from_json(cls, raw: str) -> "CacheEntry":
        parsed = json.loads(raw)
        if not isinstance(parsed, dict):
            raise ValueError("Cache entry must be a JSON object")
        return cls(data=parsed["data"], timestamp=int(parsed["timestamp"]), expires_at=int(parsed["expiresAt"]))


class ProductCache:
    def __init__(
        self,
        store: KeyValueStore,
        products_list_ttl: int = PRODUCTS_LIST_TTL,
        product_detail_ttl: int = PRODUCT_DETAIL_TTL,
        all_products_key: str = ALL_PRODUCTS_KEY,
        product_key_prefix: str = PRODUCT_KEY_PREFIX,
        key_family: str = PRODUCT_KEY_FAMILY,
        clock: Callable[[], float] = time.time,
        pending_counter: Optional[Callable[[], int]] = None,
    ) -> None:
        self.store = store
        self.products_list_ttl = products_list_ttl
        self.product_detail_ttl = product_detail_ttl
        self.all_products_key = all_products_key
        self.product_key_prefix = product_key_prefix
        self.key_family = key_family
        self._clock = clock
        self._pending_counter = pending_counter
        self._memory: Dict[str, CacheEntry] = {}
        self.clean_expired()

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    # ------------------------------------------------------------------ #
    # Generic entries
    # ------------------------------------------------------------------ #
    def get(self, key: str) -> Optional[Any]:
        """Return fresh data for ``key`` or None. Memory is checked before the store."""
        now = self._now_ms()

        mem_entry = self._memory.get(key)
        if mem_entry is not None:
            if mem_entry.is_fresh(now):
                record_cache_hit(key)
                return mem_entry.data
            del self._memory[key]

        try:
            stored = self.store.get(key)
            if stored:
                entry = CacheEntry.from_json(stored)
                if entry.is_fresh(now):
                    self._memory[key] = entry
                    record_cache_hit(key)
                    return entry.data
                self.store.remove(key)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Failed to read cache entry %s: %s", key, e)
            self._discard_stored(key)
        except StorageError as e:
            logger.warning("Cache store unavailable while reading %s: %s", key, e)

        record_cache_miss(key)
        return None

    def set(self, key: str, data: Any, ttl: int) -> None:
        """Store ``data`` for ``ttl`` seconds in memory and in the durable store."""
        now = self._now_ms()
        entry = CacheEntry(data=data, timestamp=now, expires_at=now + int(ttl * 1000))
        payload = entry.to_json()
        self._memory[key] = entry

        try:
            self.store.set(key, payload)
        except StorageError as e:
            logger.warning("Failed to write cache entry %s: %s", key, e)
            self.clean_expired()
            try:
                self.store.set(key, payload)
            except StorageError as retry_error:
                logger.error("Failed to write cache entry %s after cleanup: %s", key, retry_error)

    def remove(self, key: str) -> None:
        self._memory.pop(key, None)
        self._discard_stored(key)

    def _discard_stored(self, key: str) -> None:
        try:
            self.store.remove(key)
        except StorageError as e:
            logger.warning("Failed to remove cache entry %s: %s", key, e)

    def clean_expired(self) -> int:
        """Drop expired or unreadable product entries from both tiers. Returns how many were dropped."""
        now = self._now_ms()
        to_remove = []
        try:
            for key in self.store.keys():
                if not key.startswith(self.key_family):
                    continue
                try:
                    stored = self.store.get(key)
                    if stored and not CacheEntry.from_json(stored).is_fresh(now):
                        to_remove.append(key)
                except (ValueError, KeyError, TypeError):
                    to_remove.append(key)

            for key in to_remove:
                self.store.remove(key)
                self._memory.pop(key, None)
        except StorageError as e:
            logger.error("Failed to clean expired cache: %s", e)
            return 0

        if to_remove:
            log_info(f"Cleaned up {len(to_remove)} expired cache entries", "Cache", {"count": len(to_remove)})
        return len(to_remove)

    def clear_product_cache(self) -> None:
        for key in [k for k in self._memory if k.startswith(self.key_family)]:
            del self._memory[key]
        try:
            for key in [k for k in self.store.keys() if k.startswith(self.key_family)]:
                self.store.remove(key)
        except StorageError as e:
            logger.error("Failed to clear product cache: %s", e)

    # ------------------------------------------------------------------ #
    # Product helpers
    # ------------------------------------------------------------------ #
    def product_cache_key(self, slug: str) -> str:
        return f"{self.product_key_prefix}{slug}"

    def cache_products_list(self, products: Any) -> None:
        self.set(self.all_products_key, products, self.products_list_ttl)

    def get_cached_products_list(self) -> Optional[Any]:
        return self.get(self.all_products_key)

    def cache_product(self, slug: str, product: Any) -> None:
        self.set(self.product_cache_key(slug), product, self.product_detail_ttl)

    def get_cached_product(self, slug: str) -> Optional[Any]:
        return self.get(self.product_cache_key(slug))

    def invalidate_product(self, slug: Optional[str] = None) -> None:
        """Drop one product's entry (if given) and always the list entry."""
        if slug:
            self.remove(self.product_cache_key(slug))
        self.remove(self.all_products_key)

    def stats(self) -> Dict[str, int]:
        stats = {
            "memoryEntries": len(self._memory),
            "pendingRequests": self._pending_counter() if self._pending_counter else 0,
            "storageEntries": 0,
            "storageSize": 0,
        }
        try:
            for key in self.store.keys():
                if key.startswith(self.key_family):
                    stats["storageEntries"] += 1
                    value = self.store.get(key)
                    if value:
                        stats["storageSize"] += len(value)
        except StorageError as e:
            logger.warning("Failed to get cache stats: %s", e)
        return stats
