"""
Key-value storage backends for the emergency repositories.

The repositories only speak strings and string lists, so the same
controller logic runs against process memory or a shared redis.
"""

import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import redis

from core.config import settings
from core.logging import get_logger

logger = get_logger(__name__)


class KeyValueStore(ABC):
    """Minimal storage contract used by the emergency repositories."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove a key; returns True if it existed."""

    @abstractmethod
    def push_front(self, key: str, value: str) -> None:
        """Insert a value at the head of the list stored at key."""

    @abstractmethod
    def list_range(self, key: str) -> List[str]:
        """Whole list stored at key, head first; empty if missing."""


class InMemoryKeyValueStore(KeyValueStore):
    """Process-lifetime storage. Data is lost on restart."""

    def __init__(self):
        self._values: Dict[str, str] = {}
        self._lists: Dict[str, List[str]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def delete(self, key: str) -> bool:
        with self._lock:
            existed = key in self._values or key in self._lists
            self._values.pop(key, None)
            self._lists.pop(key, None)
            return existed

    def push_front(self, key: str, value: str) -> None:
        with self._lock:
            self._lists.setdefault(key, []).insert(0, value)

    def list_range(self, key: str) -> List[str]:
        with self._lock:
            return list(self._lists.get(key, []))


class RedisKeyValueStore(KeyValueStore):
    """Redis-backed storage, shared between workers."""

    def __init__(self, client: redis.Redis):
        self.client = client

    def get(self, key: str) -> Optional[str]:
        return self.client.get(key)

    def set(self, key: str, value: str) -> None:
        self.client.set(key, value)

    def delete(self, key: str) -> bool:
        return self.client.delete(key) > 0

    def push_front(self, key: str, value: str) -> None:
        self.client.lpush(key, value)

    def list_range(self, key: str) -> List[str]:
        return self.client.lrange(key, 0, -1)


def create_store(backend: str = None) -> KeyValueStore:
    """Build the storage backend named in settings (memory | redis)."""
    backend = (backend or settings.EMERGENCY_STORAGE_BACKEND).lower()

    if backend == "memory":
        logger.info("Using in-memory emergency storage")
        return InMemoryKeyValueStore()
    if backend == "redis":
        from core.redis import get_redis_connection

        logger.info("Using redis emergency storage")
        return RedisKeyValueStore(get_redis_connection())

    raise ValueError(f"Unknown emergency storage backend: {backend}")
