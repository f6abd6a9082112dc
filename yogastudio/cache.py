"""
Redis caching for read-mostly data (public business settings)
"""
import json
import logging
from typing import Any, Optional

from .config import CACHE_ENABLED
from .rate_limiter import get_redis_client

logger = logging.getLogger(__name__)

PUBLIC_SETTINGS_KEY = "settings:public"


class Cache:
    """Redis cache wrapper with automatic serialization"""

    def __init__(self, enabled: bool = CACHE_ENABLED):
        self.enabled = enabled
        self.redis_client = None

    def _get_client(self):
        """Lazy load Redis client"""
        if not self.enabled:
            return None
        if self.redis_client is None:
            try:
                self.redis_client = get_redis_client()
            except Exception as e:
                logger.warning(f"⚠️ Redis cache unavailable: {e}")
                return None
        return self.redis_client

    def get(self, key: str) -> Optional[Any]:
        client = self._get_client()
        if not client:
            return None

        try:
            value = client.get(key)
            if value:
                logger.debug(f"✅ Cache HIT: {key}")
                return json.loads(value)
            logger.debug(f"❌ Cache MISS: {key}")
            return None
        except Exception as e:
            logger.error(f"❌ Cache get error for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: int = 3600) -> bool:
        """Set value in cache with TTL (default 1 hour)"""
        client = self._get_client()
        if not client:
            return False

        try:
            client.setex(key, ttl, json.dumps(value, default=str))
            logger.debug(f"✅ Cache SET: {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.error(f"❌ Cache set error for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        client = self._get_client()
        if not client:
            return False

        try:
            client.delete(key)
            logger.debug(f"✅ Cache DELETE: {key}")
            return True
        except Exception as e:
            logger.error(f"❌ Cache delete error for {key}: {e}")
            return False


cache = Cache()


def get_public_settings_cached() -> Optional[dict]:
    return cache.get(PUBLIC_SETTINGS_KEY)


def set_public_settings_cached(settings: dict, ttl: int) -> bool:
    return cache.set(PUBLIC_SETTINGS_KEY, settings, ttl)


def invalidate_public_settings_cache() -> bool:
    """Invalidate the public settings map after an admin update"""
    return cache.delete(PUBLIC_SETTINGS_KEY)
