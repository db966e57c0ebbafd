"""Key-value storage backends for the entity stores."""
import logging
from typing import Dict, List, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from .errors import StoreError

logger = logging.getLogger(__name__)


class StorageBackend:
    """Interface shared by the storage backends.

    Values are JSON documents stored as text under string keys.
    """

    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    async def delete(self, key: str) -> bool:
        raise NotImplementedError

    async def keys(self, prefix: str) -> List[str]:
        raise NotImplementedError

    async def check_health(self) -> bool:
        return True

    async def close(self) -> None:
        pass


class MemoryBackend(StorageBackend):
    """In-process dictionary backend. Contents are lost on exit."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def keys(self, prefix: str) -> List[str]:
        return [key for key in list(self._data) if key.startswith(prefix)]


class RedisBackend(StorageBackend):
    """Redis backend. Every call is an independent round trip."""

    def __init__(self, client: redis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisBackend":
        """
        Build a backend from a Redis connection URL.

        Args:
            url: Redis URL, e.g. redis://localhost:6379/0

        Returns:
            RedisBackend using a pooled client with decoded responses
        """
        client = redis.from_url(url, encoding="utf-8", decode_responses=True)
        return cls(client)

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.client.get(key)
        except RedisError as e:
            logger.error(f"Redis error reading {key}: {e}")
            raise StoreError(f"Failed to read {key}") from e

    async def set(self, key: str, value: str) -> None:
        try:
            await self.client.set(key, value)
        except RedisError as e:
            logger.error(f"Redis error writing {key}: {e}")
            raise StoreError(f"Failed to write {key}") from e

    async def delete(self, key: str) -> bool:
        try:
            return bool(await self.client.delete(key))
        except RedisError as e:
            logger.error(f"Redis error deleting {key}: {e}")
            raise StoreError(f"Failed to delete {key}") from e

    async def keys(self, prefix: str) -> List[str]:
        try:
            return [key async for key in self.client.scan_iter(match=f"{prefix}*")]
        except RedisError as e:
            logger.error(f"Redis error scanning {prefix}*: {e}")
            raise StoreError(f"Failed to list keys for {prefix}") from e

    async def check_health(self) -> bool:
        try:
            return bool(await self.client.ping())
        except RedisError as e:
            logger.error(f"Redis health check error: {e}")
            return False

    async def close(self) -> None:
        try:
            await self.client.close()
            logger.info("Redis connection closed")
        except Exception as e:
            logger.error(f"Error closing Redis connection: {e}")


def create_backend(kind: str, redis_url: str) -> StorageBackend:
    """
    Create the storage backend selected by configuration.

    Args:
        kind: "memory" or "redis"
        redis_url: Connection URL used by the redis backend

    Returns:
        StorageBackend instance
    """
    if kind == "memory":
        logger.info("Using in-memory storage backend")
        return MemoryBackend()
    if kind == "redis":
        logger.info(f"Using redis storage backend at {redis_url}")
        return RedisBackend.from_url(redis_url)
    raise ValueError(f"Unknown storage backend: {kind}")
