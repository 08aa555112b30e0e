"""
Cache Service: Redis key-value store with JSON serialization.

Backs the persisted menu cache and the order store. Errors are logged and
swallowed so a Redis outage degrades to "nothing cached".
"""
import redis.asyncio as redis
from typing import Any, Optional
from pos_aggregator.utils.config import settings
import logging
import json

logger = logging.getLogger(__name__)


class CacheService:
    def __init__(self):
        self.redis_url = settings.REDIS_URL
        self.host = settings.REDIS_HOST
        self.port = settings.REDIS_PORT
        self.db = settings.REDIS_DB
        self.user = settings.REDIS_USERNAME
        self.pwd = settings.REDIS_PASSWORD
        self.ttl = settings.REDIS_CACHE_TTL
        self.redis = None

    async def connect(self):
        if not self.redis:
            url = self.redis_url or f"redis://{self.host}:{self.port}/{self.db}"
            if not url.startswith(("redis://", "rediss://")):
                url = f"redis://{url}"

            if "@" not in url and (self.user or self.pwd):
                prefix = "rediss://" if url.startswith("rediss://") else "redis://"
                host_part = url[len(prefix):]
                url = f"{prefix}{self.user or 'default'}:{self.pwd or ''}@{host_part}"

            self.redis = redis.from_url(url, encoding="utf-8", decode_responses=True)

    async def ping(self) -> bool:
        await self.connect()
        try:
            return bool(await self.redis.ping())
        except Exception as e:
            logger.error(f"Redis ping error: {e}")
            return False

    async def get(self, key: str) -> Optional[str]:
        await self.connect()
        try:
            return await self.redis.get(key)
        except Exception as e:
            logger.error(f"Redis get error for {key}: {e}")
            return None

    async def set(self, key: str, value: str, expire: Optional[int] = None) -> bool:
        """Store ``value``. ``expire=None`` uses the default TTL, ``0`` never expires."""
        await self.connect()
        ex = self.ttl if expire is None else (expire or None)
        try:
            await self.redis.set(key, value, ex=ex)
            return True
        except Exception as e:
            logger.error(f"Redis set error for {key}: {e}")
            return False

    async def get_json(self, key: str) -> Any:
        data = await self.get(key)
        if not data:
            return None
        try:
            return json.loads(data)
        except ValueError as e:
            logger.error(f"Corrupt JSON at {key}: {e}")
            return None

    async def set_json(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        return await self.set(key, json.dumps(value, default=str), expire=ttl)

    async def delete(self, key: str) -> bool:
        await self.connect()
        try:
            await self.redis.delete(key)
            return True
        except Exception as e:
            logger.error(f"Redis delete error for {key}: {e}")
            return False

    async def close(self):
        if self.redis:
            await self.redis.aclose()
            self.redis = None


cache_service = CacheService()
