"""
Redis cache for resource listings.

Listings are stored per resource under {prefix}:{resource}:{key} and the
whole resource namespace is dropped after any write to it. When Redis is
disabled or unreachable every call falls through to the loader.
"""

import logging
import json
from typing import Any, Optional, Callable, Dict, Iterable
from decimal import Decimal

import redis
from redis.exceptions import RedisError
from flask import Flask

logger = logging.getLogger(__name__)

DECIMAL_MARKER = '__decimal__'


def _encode(value: Any) -> str:
    """JSON with Decimal money values kept exact."""
    def default(obj: Any) -> Any:
        if isinstance(obj, Decimal):
            return {DECIMAL_MARKER: str(obj)}
        raise TypeError(f"Cannot cache value of type {type(obj).__name__}")
    return json.dumps(value, default=default)


def _decode(payload: str) -> Any:
    def object_hook(obj: Dict[str, Any]) -> Any:
        if DECIMAL_MARKER in obj:
            return Decimal(obj[DECIMAL_MARKER])
        return obj
    return json.loads(payload, object_hook=object_hook)


class CacheService:
    """Cache-aside store for listings, keyed by resource."""

    def __init__(self, app: Optional[Flask] = None):
        self.client: Optional[redis.Redis] = None
        self.prefix = 'saga'
        self.ttl = 60

        if app:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        self.prefix = app.config.get('CACHE_KEY_PREFIX', 'saga')
        self.ttl = app.config.get('CACHE_DEFAULT_TTL', 60)

        if not app.config.get('CACHE_ENABLED', False):
            logger.info("[CACHE] Disabled by configuration")
            return

        redis_url = app.config.get('REDIS_URL', 'redis://localhost:6379/0')
        try:
            client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=3,
                socket_timeout=3,
                health_check_interval=30
            )
            client.ping()
        except RedisError as e:
            logger.warning(f"[CACHE] Redis unreachable at {redis_url}: {e}. Listings will not be cached.")
            return

        self.client = client
        logger.info(f"[CACHE] Using Redis at {redis_url}")

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def key(self, resource: str, key: str) -> str:
        return f"{self.prefix}:{resource}:{key}"

    def memoize(self, resource: str, key: str, loader_fn: Callable[[], Any]) -> Any:
        """Return the cached value or load, store and return it."""
        if not self.enabled:
            return loader_fn()

        full_key = self.key(resource, key)
        try:
            cached = self.client.get(full_key)
            if cached is not None:
                return _decode(cached)
        except (RedisError, ValueError) as e:
            logger.warning(f"[CACHE] Read failed for {full_key}: {e}")

        value = loader_fn()
        try:
            self.client.setex(full_key, self.ttl, _encode(value))
        except (RedisError, TypeError) as e:
            logger.warning(f"[CACHE] Write failed for {full_key}: {e}")
        return value

    def invalidate(self, resources: Iterable[str]) -> int:
        """Drop every cached key of the given resources."""
        if not self.enabled:
            return 0

        deleted = 0
        for resource in resources:
            pattern = self.key(resource, '*')
            try:
                keys = list(self.client.scan_iter(match=pattern, count=100))
                if keys:
                    deleted += self.client.delete(*keys)
            except RedisError as e:
                logger.warning(f"[CACHE] Invalidation failed for {pattern}: {e}")
        if deleted:
            logger.info(f"[CACHE] Invalidated {deleted} key(s) for {', '.join(resources)}")
        return deleted


_cache_service: Optional[CacheService] = None


def init_cache(app: Flask) -> None:
    """Create the cache singleton from app config."""
    global _cache_service
    _cache_service = CacheService(app)
    app.extensions['cache'] = _cache_service


def get_cache() -> CacheService:
    if _cache_service is None:
        raise RuntimeError("Cache not initialized.")
    return _cache_service


def invalidate(*resources: str) -> None:
    """Best-effort invalidation; a missing cache never fails a write."""
    if _cache_service is None:
        return
    _cache_service.invalidate(resources)
