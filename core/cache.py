"""
Redis client manager
Handles connection pooling and analysis result caching
"""

import hashlib
import json
import logging
from typing import Any, Optional

import redis

from config import settings

logger = logging.getLogger(__name__)

CACHE_PREFIX = "cache:analysis:"


def analysis_cache_key(url: str, options: Optional[dict] = None) -> str:
    """Cache key for one URL plus the option set that produced the result"""
    digest = hashlib.sha1(
        json.dumps(options or {}, sort_keys=True).encode("utf-8")
    ).hexdigest()[:12]
    return f"{CACHE_PREFIX}{url}:{digest}"


class RedisClient:
    """
    Redis connection manager with connection pooling.
    """

    def __init__(self, redis_url: Optional[str] = None):
        redis_url = redis_url or settings.REDIS_URL

        try:
            self.pool = redis.ConnectionPool.from_url(
                redis_url,
                max_connections=20,
                decode_responses=True,
                socket_timeout=5,
                socket_connect_timeout=5,
                retry_on_timeout=True,
            )
            self.client = redis.Redis(connection_pool=self.pool)
            self.client.ping()
            logger.info("✅ Redis connected successfully")
        except redis.ConnectionError as e:
            logger.error(f"❌ Redis connection failed: {str(e)}")
            raise RuntimeError(f"Failed to connect to Redis: {str(e)}")

    def ping(self) -> bool:
        """Check if Redis is available"""
        try:
            return self.client.ping()
        except redis.ConnectionError:
            return False

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Store a value, JSON-encoding anything that is not a string"""
        try:
            if not isinstance(value, str):
                value = json.dumps(value, default=str)
            if ttl:
                return bool(self.client.setex(key, ttl, value))
            return bool(self.client.set(key, value))
        except redis.RedisError as e:
            logger.error(f"Redis SET failed for key '{key}': {str(e)}")
            return False

    def get(self, key: str, decode_json: bool = True) -> Optional[Any]:
        try:
            value = self.client.get(key)
        except redis.RedisError as e:
            logger.error(f"Redis GET failed for key '{key}': {str(e)}")
            return None

        if value is None or not decode_json:
            return value
        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return value

    def cache_analysis(self, url: str, options: dict, result: dict, ttl: Optional[int] = None) -> bool:
        return self.set(analysis_cache_key(url, options), result, ttl=ttl or settings.CACHE_TTL)

    def get_cached_analysis(self, url: str, options: dict) -> Optional[dict]:
        return self.get(analysis_cache_key(url, options))

    def clear_cache(self, pattern: str = f"{CACHE_PREFIX}*") -> int:
        """
        Clear cached entries matching a pattern.

        Returns:
            Number of keys deleted
        """
        try:
            keys = list(self.client.scan_iter(match=pattern, count=500))
            if keys:
                return self.client.delete(*keys)
            return 0
        except redis.RedisError as e:
            logger.error(f"Redis cache clear failed for pattern '{pattern}': {str(e)}")
            return 0

    def get_stats(self) -> dict:
        try:
            info = self.client.info()
            return {
                "connected_clients": info.get("connected_clients", 0),
                "used_memory_human": info.get("used_memory_human", "unknown"),
                "total_commands_processed": info.get("total_commands_processed", 0),
            }
        except redis.RedisError as e:
            logger.error(f"Failed to get Redis stats: {str(e)}")
            return {"error": str(e)}

    def close(self):
        """Close Redis connection pool"""
        try:
            self.pool.disconnect()
            logger.info("Redis connection closed")
        except redis.RedisError as e:
            logger.error(f"Error closing Redis connection: {str(e)}")


# Global Redis client instance
redis_client: Optional[RedisClient] = None


def get_redis_client() -> RedisClient:
    """Get or create the global Redis client instance."""
    global redis_client

    if redis_client is None:
        redis_client = RedisClient()

    return redis_client


def close_redis_client():
    """Close the global Redis client"""
    global redis_client

    if redis_client is not None:
        redis_client.close()
        redis_client = None
