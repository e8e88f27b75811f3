"""
Tiered response cache.

Redis with a TTL when it is configured and reachable at startup, otherwise an
in-process map with no expiry. The tier is chosen once; there is no failover
if Redis goes away later, failed calls just behave as misses.
"""

from dataclasses import dataclass
from enum import Enum
import threading
from typing import Awaitable, Callable, Dict, Mapping, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from products_api.services.cache_keys import is_cacheable
from products_api.utils import logger
from products_api.utils.config import (
    CACHE_KEY_PREFIX,
    CACHE_TTL,
    REDIS_CONNECT_TIMEOUT,
    REDIS_DB,
    REDIS_HOST,
    REDIS_PORT,
    REDIS_URL,
)

BYPASS_KEY = "n/a"


class CacheStatus(str, Enum):
    HIT = "HIT"
    MISS = "MISS"
    BYPASS = "BYPASS"


@dataclass
class CachedPayload:
    """Serialized response plus the cache diagnostics surfaced to clients."""

    payload: Optional[str]
    status: CacheStatus
    key: str


class MemoryCacheBackend:
    """Process-local cache; entries live until overwritten or restart."""

    name = "memory"

    def __init__(self):
        self._entries: Dict[str, str] = {}
        self._lock = threading.Lock()

    async def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._entries.get(key)

    async def set(self, key: str, value: str) -> None:
        with self._lock:
            self._entries[key] = value


class RedisCacheBackend:
    """
    Redis-backed cache with expiry.

    Attributes:
        redis: Async Redis client
        ttl: Time-to-live for entries in seconds
        prefix: Namespace prepended to every key
    """

    name = "redis"

    def __init__(self, redis: Redis, ttl: int = CACHE_TTL, prefix: str = CACHE_KEY_PREFIX):
        self.redis = redis
        self.ttl = ttl
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> Optional[str]:
        """Cached value, or None on a miss or when Redis fails."""
        try:
            return await self.redis.get(self._key(key))
        except RedisError as e:
            logger.error("❌ Redis GET error for key '%s': %s. Treating as miss.", key, str(e))
            return None

    async def set(self, key: str, value: str) -> None:
        """Store a value with the configured TTL; Redis failures are logged and ignored."""
        try:
            await self.redis.setex(self._key(key), self.ttl, value)
        except RedisError as e:
            logger.error("❌ Redis SET error for key '%s': %s. Value not cached.", key, str(e))

    async def close(self) -> None:
        await self.redis.aclose()


CacheBackend = MemoryCacheBackend | RedisCacheBackend


class CacheService:
    """Response cache used by the product routes."""

    def __init__(self, backend: Optional[CacheBackend] = None):
        self.backend = backend if backend is not None else MemoryCacheBackend()

    @property
    def backend_name(self) -> str:
        return self.backend.name

    async def get(self, key: str) -> Optional[str]:
        return await self.backend.get(key)

    async def set(self, key: str, value: str) -> None:
        await self.backend.set(key, value)

    async def fetch(self, key: str, compute: Callable[[], Awaitable[Optional[str]]], bypass: bool = False) -> CachedPayload:
        """
        Serve a serialized response from cache or compute it.

        Under bypass the cache is neither read nor written. A ``None`` result
        (e.g. not found) is never stored. Concurrent misses on one key each
        compute and write; the last write wins.

        Args:
            key: Derived cache key
            compute: Coroutine factory producing the serialized response
            bypass: Skip the cache entirely for this request

        Returns:
            CachedPayload: Payload, HIT/MISS/BYPASS status and the key used
        """
        if bypass:
            logger.info("Cache bypass requested for key '%s'", key)
            return CachedPayload(await compute(), CacheStatus.BYPASS, BYPASS_KEY)

        cacheable = is_cacheable(key)
        if cacheable:
            cached = await self.get(key)
            if cached:
                logger.info("Cache hit for key '%s' (%s)", key, self.backend_name)
                return CachedPayload(cached, CacheStatus.HIT, key)

        logger.info("Cache miss for key '%s' (%s)", key, self.backend_name)
        payload = await compute()
        if payload is not None and cacheable:
            await self.set(key, payload)
        return CachedPayload(payload, CacheStatus.MISS, key)

    async def close(self) -> None:
        if isinstance(self.backend, RedisCacheBackend):
            await self.backend.close()


def should_bypass_cache(headers: Mapping[str, str]) -> bool:
    """
    Whether the request asks to skip the cache.

    True for ``X-Bypass-Cache: 1`` (or ``true``), or a ``Cache-Control`` or
    ``Pragma`` header containing ``no-cache``.
    """
    bypass = (headers.get("x-bypass-cache") or "").strip().lower()
    cache_control = (headers.get("cache-control") or "").lower()
    pragma = (headers.get("pragma") or "").lower()
    return bypass in ("1", "true") or "no-cache" in cache_control or "no-cache" in pragma


def _redis_client() -> Optional[Redis]:
    if REDIS_URL:
        return Redis.from_url(REDIS_URL, decode_responses=True, socket_connect_timeout=REDIS_CONNECT_TIMEOUT, socket_timeout=REDIS_CONNECT_TIMEOUT)
    if REDIS_HOST:
        return Redis(
            host=REDIS_HOST,
            port=REDIS_PORT,
            db=REDIS_DB,
            decode_responses=True,
            socket_connect_timeout=REDIS_CONNECT_TIMEOUT,
            socket_timeout=REDIS_CONNECT_TIMEOUT,
        )
    return None


async def create_cache_service(redis: Optional[Redis] = None) -> CacheService:
    """
    Build the cache service, choosing the tier once at startup.

    Args:
        redis: Client to use instead of one built from configuration

    Returns:
        CacheService: Redis-backed when reachable, memory-backed otherwise
    """
    client = redis if redis is not None else _redis_client()
    if client is None:
        logger.info("No Redis configured; using in-memory response cache.")
        return CacheService(MemoryCacheBackend())

    try:
        await client.ping()
    except (RedisError, OSError) as e:
        logger.warning("⚠️ Redis unreachable at startup (%s); using in-memory response cache.", e)
        await client.aclose()
        return CacheService(MemoryCacheBackend())

    logger.info("Using Redis response cache (TTL %ds, prefix '%s').", CACHE_TTL, CACHE_KEY_PREFIX)
    return CacheService(RedisCacheBackend(client))
