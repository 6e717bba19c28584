"""
Client-side product caching: durable stores, TTL cache and request deduplication
"""
from .dedup import RequestDeduplicator
from .product_cache import ProductCache
from .stores import JsonFileStore, MemoryStore, RedisStore, StorageError, store_from_env

__all__ = [
    'RequestDeduplicator',
    'ProductCache',
    'JsonFileStore',
    'MemoryStore',
    'RedisStore',
    'StorageError',
    'store_from_env',
]
