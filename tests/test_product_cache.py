import json

from storefront.cache.product_cache import ALL_PRODUCTS_KEY, CacheEntry, ProductCache
from storefront.cache.stores import MemoryStore, StorageError
from storefront.utils.monitoring import get_cache_statistics


class FlakyStore(MemoryStore):
    """Fails the first N writes, then behaves."""

    def __init__(self, failures: int):
        super().__init__()
        self.failures = failures
        self.write_attempts = 0

    def set(self, key, value):
        self.write_attempts += 1
        if self.failures > 0:
            self.failures -= 1
            raise StorageError("quota exceeded")
        super().set(key, value)


class BrokenStore(MemoryStore):
    def get(self, key):
        raise StorageError("unavailable")

    def set(self, key, value):
        raise StorageError("unavailable")

    def keys(self):
        raise StorageError("unavailable")


def test_set_then_get_returns_data_within_ttl(cache, clock):
    cache.set("mawu_product_x", {"a": 1}, ttl=60)
    clock.advance(59)
    assert cache.get("mawu_product_x") == {"a": 1}


def test_entry_expires_after_ttl(cache, clock, store):
    cache.set("mawu_product_x", {"a": 1}, ttl=60)
    clock.advance(61)
    assert cache.get("mawu_product_x") is None
    # expired durable copy is removed on read
    assert store.get("mawu_product_x") is None


def test_entry_written_to_store_in_wire_format(cache, clock, store):
    cache.set("mawu_product_x", [1, 2], ttl=300)
    raw = json.loads(store.get("mawu_product_x"))
    now_ms = int(clock() * 1000)
    assert raw == {"data": [1, 2], "timestamp": now_ms, "expiresAt": now_ms + 300_000}


def test_store_hit_is_restored_after_restart(store, clock):
    ProductCache(store, clock=clock).set("mawu_product_tee", {"slug": "tee"}, ttl=600)

    fresh = ProductCache(store, clock=clock)
    assert fresh.get("mawu_product_tee") == {"slug": "tee"}
    assert fresh.stats()["memoryEntries"] == 1


def test_corrupt_store_entry_is_discarded(cache, store):
    store.set("mawu_product_bad", "{oops")
    assert cache.get("mawu_product_bad") is None
    assert store.get("mawu_product_bad") is None


def test_hits_and_misses_are_counted(cache):
    cache.get("mawu_product_missing")
    cache.set("mawu_product_here", 1, ttl=10)
    cache.get("mawu_product_here")
    stats = get_cache_statistics()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["hit_rate"] == 50.0


def test_construction_cleans_expired_entries(store, clock):
    expired = CacheEntry(data=1, timestamp=0, expires_at=int(clock() * 1000) - 1)
    live = CacheEntry(data=2, timestamp=0, expires_at=int(clock() * 1000) + 10_000)
    store.set("mawu_product_old", expired.to_json())
    store.set("mawu_product_new", live.to_json())
    store.set("mawu_product_junk", "not json")
    store.set("mawu_cart_items", "[]")

    ProductCache(store, clock=clock)

    assert sorted(store.keys()) == ["mawu_cart_items", "mawu_product_new"]


def test_write_retries_once_after_cleanup(clock):
    store = FlakyStore(failures=1)
    cache = ProductCache(store, clock=clock)
    cache.set("mawu_product_x", 1, ttl=10)
    assert store.write_attempts == 2
    assert store.get("mawu_product_x") is not None


def test_write_failure_after_retry_keeps_memory_copy(clock):
    store = FlakyStore(failures=5)
    cache = ProductCache(store, clock=clock)
    cache.set("mawu_product_x", {"still": "here"}, ttl=10)
    assert store.write_attempts == 2
    assert cache.get("mawu_product_x") == {"still": "here"}


def test_unavailable_store_degrades_to_memory_only(clock):
    cache = ProductCache(BrokenStore(), clock=clock)
    cache.set("mawu_product_x", 5, ttl=10)
    assert cache.get("mawu_product_x") == 5
    assert cache.get("mawu_product_y") is None


def test_invalidate_product_drops_detail_and_list(cache, store):
    cache.cache_products_list([{"slug": "tee"}])
    cache.cache_product("tee", {"slug": "tee"})
    cache.cache_product("tote", {"slug": "tote"})

    cache.invalidate_product("tee")

    assert cache.get_cached_products_list() is None
    assert cache.get_cached_product("tee") is None
    assert cache.get_cached_product("tote") == {"slug": "tote"}


def test_clear_product_cache_leaves_other_keys(cache, store):
    store.set("mawu_cart_items", "[]")
    cache.cache_products_list([])
    cache.cache_product("tee", {})
    cache.clear_product_cache()
    assert store.keys() == ["mawu_cart_items"]
    assert cache.stats()["memoryEntries"] == 0


def test_stats_counts_family_entries(store, clock):
    cache = ProductCache(store, clock=clock, pending_counter=lambda: 2)
    cache.cache_products_list([1])
    cache.cache_product("tee", {"x": 1})
    store.set("unrelated", "zzz")
    stats = cache.stats()
    assert stats["memoryEntries"] == 2
    assert stats["storageEntries"] == 2
    assert stats["pendingRequests"] == 2
    assert stats["storageSize"] == len(store.get(ALL_PRODUCTS_KEY)) + len(store.get("mawu_product_tee"))
