"""
Hybrid in-memory + Redis rate limiting for the public write endpoints
(bookings, inquiries, newsletter sign-ups, ratings).

Counts live in process memory and are synced to Redis periodically so that
several workers share one window. Without REDIS_URL the limiter runs from
memory only.
"""

import logging
import time
from threading import Lock
from typing import Optional

import redis
from fastapi import HTTPException, Request, status

from .config import RATE_LIMIT_ENABLED, REDIS_URL

logger = logging.getLogger(__name__)

redis_client: Optional[redis.Redis] = None

# {key: {'count': int, 'reset_time': int, 'last_redis_sync': int}}
memory_cache: dict[str, dict] = {}
cache_lock = Lock()

MEMORY_CACHE_SYNC_INTERVAL = 10
MEMORY_CACHE_CLEANUP_INTERVAL = 60
last_cleanup_time = 0


def get_redis_client() -> Optional[redis.Redis]:
    """Get or create the shared Redis client; None when Redis is not configured"""
    global redis_client

    if redis_client is None and REDIS_URL:
        logger.info("🔄 Initializing Redis connection...")
        if "@" in REDIS_URL:
            protocol = REDIS_URL.split("@")[0].split(":")[0]
            masked_url = f"{protocol}:****@{REDIS_URL.split('@')[1]}"
        else:
            masked_url = REDIS_URL
        logger.info(f"📡 Using Redis URL connection: {masked_url}")

        try:
            client = redis.from_url(
                REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=15,
                socket_timeout=30,
                retry_on_timeout=True,
                health_check_interval=30,
                max_connections=20,
            )
            client.ping()
            redis_client = client
            logger.info("✅ Redis connected successfully via URL")
        except Exception as e:
            logger.error(f"❌ Failed to connect to Redis via URL: {str(e)}")
            raise

    return redis_client


def cleanup_expired_cache():
    """Remove expired entries from memory cache"""
    global last_cleanup_time
    current_time = int(time.time())

    if current_time - last_cleanup_time < MEMORY_CACHE_CLEANUP_INTERVAL:
        return

    with cache_lock:
        expired_keys = [k for k, v in memory_cache.items() if current_time >= v.get("reset_time", 0)]
        for k in expired_keys:
            del memory_cache[k]

        if expired_keys:
            logger.debug(f"🧹 Cleaned up {len(expired_keys)} expired rate limit entries")

    last_cleanup_time = current_time


def _load_entry(key: str, window_seconds: int, client: Optional[redis.Redis], now: int) -> dict:
    """Start a window from Redis' view of the key when it has one"""
    if client is not None:
        try:
            redis_count = client.get(key)
            redis_ttl = client.ttl(key)
            if redis_count and redis_ttl > 0:
                return {"count": int(redis_count), "reset_time": now + redis_ttl, "last_redis_sync": now}
        except Exception as e:
            logger.warning(f"⚠️ Failed to load from Redis, using memory only: {e}")
    return {"count": 0, "reset_time": now + window_seconds, "last_redis_sync": now}


def check_rate_limit(
    key: str, limit: int, window_seconds: int, client: Optional[redis.Redis] = None
) -> tuple[bool, int, int]:
    """Check whether `key` may make another request in the current window

    Returns:
        Tuple of (is_allowed, current_count, ttl_seconds)
    """
    try:
        current_time = int(time.time())
        cleanup_expired_cache()

        with cache_lock:
            if key not in memory_cache:
                memory_cache[key] = _load_entry(key, window_seconds, client, current_time)

            cache_entry = memory_cache[key]

            if current_time >= cache_entry["reset_time"]:
                cache_entry["count"] = 0
                cache_entry["reset_time"] = current_time + window_seconds
                cache_entry["last_redis_sync"] = 0

            is_allowed = cache_entry["count"] < limit
            if is_allowed:
                cache_entry["count"] += 1

            # Sync to Redis periodically, not on every request
            if client is not None and current_time - cache_entry.get("last_redis_sync", 0) >= MEMORY_CACHE_SYNC_INTERVAL:
                try:
                    client.set(key, cache_entry["count"], ex=window_seconds)
                    cache_entry["last_redis_sync"] = current_time
                    logger.debug(f"📡 Synced {key} to Redis: {cache_entry['count']}/{limit}")
                except Exception as e:
                    logger.warning(f"⚠️ Failed to sync to Redis: {e}")

            ttl = cache_entry["reset_time"] - current_time
            return is_allowed, cache_entry["count"], max(0, ttl)

    except Exception as e:
        logger.error(f"❌ Rate limit check failed: {str(e)}")
        logger.warning("🔒 Denying request due to rate limiting error (fail-closed mode)")
        return False, limit, 0


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def rate_limit_dependency(
    request: Request,
    limit: int,
    window_seconds: int,
    key_prefix: str = "rate_limit",
    use_ip: bool = True,
):
    """
    FastAPI dependency for rate limiting

    Args:
        request: FastAPI request object
        limit: Maximum requests allowed
        window_seconds: Time window in seconds
        key_prefix: Prefix for the counter key
        use_ip: If True, limit per client IP, otherwise globally
    """
    if not RATE_LIMIT_ENABLED:
        return

    try:
        client = get_redis_client()
    except Exception as e:
        logger.warning("🔒 Denying request due to rate limiting error (fail-closed mode)")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Rate limiting service temporarily unavailable",
        ) from e

    key = f"{key_prefix}:{client_ip(request)}" if use_ip else f"{key_prefix}:global"
    is_allowed, current_count, ttl = check_rate_limit(key, limit, window_seconds, client)

    if not is_allowed:
        logger.warning(f"🚫 Rate limit EXCEEDED for {key} - {current_count}/{limit} requests used")
        raise HTTPException(
            status_code=429,
            detail={
                "message": f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds.",
                "retry_after": ttl,
                "limit": limit,
                "window_seconds": window_seconds,
            },
            headers={"Retry-After": str(ttl)},
        )

    request.state.rate_limit_remaining = limit - current_count
    request.state.rate_limit_limit = limit
    request.state.rate_limit_reset = int(time.time()) + ttl


def create_rate_limiter(limit: int, window_seconds: int, key_prefix: str = "rate_limit", use_ip: bool = True):
    """
    Create a rate limiter dependency with specific parameters

    Example usage:
        rate_limit_bookings = create_rate_limiter(limit=10, window_seconds=3600, key_prefix="bookings")

        @router.post("/bookings")
        async def create_booking(data: BookingCreate, _: None = Depends(rate_limit_bookings)):
            ...
    """

    async def rate_limiter(request: Request):
        return await rate_limit_dependency(request, limit, window_seconds, key_prefix, use_ip)

    return rate_limiter


# Limits shared by the public routers
rate_limit_public_forms = create_rate_limiter(limit=10, window_seconds=3600, key_prefix="forms")
rate_limit_bookings = create_rate_limiter(limit=20, window_seconds=3600, key_prefix="bookings")
rate_limit_ratings = create_rate_limiter(limit=60, window_seconds=3600, key_prefix="ratings")
rate_limit_views = create_rate_limiter(limit=300, window_seconds=3600, key_prefix="views")
