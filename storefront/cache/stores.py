"""
Durable key-value stores used by the product cache and the cart.

Every store maps string keys to string values (callers serialise JSON
themselves). Three implementations share the same interface:

- MemoryStore: process-local dict, used in tests and as a last resort
- JsonFileStore: single JSON document on disk, survives restarts
- RedisStore: shared Redis instance when REDIS_URL is configured
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Union

import redis

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the underlying store cannot be read or written."""


class StorageQuotaExceeded(StorageError):
    """Raised when a write would push the store past its size quota."""


class KeyValueStore:
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError

    def keys(self) -> List[str]:
        raise NotImplementedError


def _size_of(data: Dict[str, str]) -> int:
    return sum(len(k) + len(v) for k, v in data.items())


class MemoryStore(KeyValueStore):
    def __init__(self, max_bytes: Optional[int] = None) -> None:
        self._data: Dict[str, str] = {}
        self.max_bytes = max_bytes

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.max_bytes is not None:
            candidate = dict(self._data)
            candidate[key] = value
            if _size_of(candidate) > self.max_bytes:
                raise StorageQuotaExceeded(f"Writing {key} would exceed {self.max_bytes} bytes")
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data.keys())


class JsonFileStore(KeyValueStore):
    """
    Stores all keys in one JSON object on disk.

    The file is re-read on every access so two processes sharing the file see
    each other's writes. A corrupt or unreadable file is treated as empty.
    """

    def __init__(self, path: Union[str, Path], max_bytes: Optional[int] = None) -> None:
        self.path = Path(path)
        self.max_bytes = max_bytes

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (ValueError, OSError) as e:
            logger.warning("Ignoring unreadable store file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _save(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        if self.max_bytes is not None and _size_of(data) > self.max_bytes:
            raise StorageQuotaExceeded(f"Writing {key} would exceed {self.max_bytes} bytes")
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def keys(self) -> List[str]:
        return list(self._load().keys())


class RedisStore(KeyValueStore):
    """
    Redis-backed store. Use when REDIS_URL is set.
    """

    def __init__(self, url: str, namespace: str = "storefront:") -> None:
        self._client = redis.from_url(url, decode_responses=True)
        self._namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    def get(self, key: str) -> Optional[str]:
        try:
            return self._client.get(self._key(key))
        except redis.RedisError as e:
            raise StorageError(str(e)) from e

    def set(self, key: str, value: str) -> None:
        try:
            self._client.set(self._key(key), value)
        except redis.RedisError as e:
            raise StorageError(str(e)) from e

    def remove(self, key: str) -> None:
        try:
            self._client.delete(self._key(key))
        except redis.RedisError as e:
            raise StorageError(str(e)) from e

    def keys(self) -> List[str]:
        try:
            raw = list(self._client.scan_iter(match=f"{self._namespace}*", count=100))
        except redis.RedisError as e:
            raise StorageError(str(e)) from e
        return [k[len(self._namespace):] for k in raw]

    def ping(self) -> bool:
        try:
            return self._client.ping()
        except redis.RedisError:
            return False


def store_from_env(default_path: Union[str, Path], max_bytes: Optional[int] = None) -> KeyValueStore:
    """Pick Redis when REDIS_URL is set, else a JSON file at ``default_path``."""
    url = os.getenv("REDIS_URL")
    if url:
        return RedisStore(url)
    return JsonFileStore(default_path, max_bytes=max_bytes)
