"""
Redis connection management.

This module provides the singleton Redis client shared by the report
store and the distributed rate limiter.
"""

import redis
from redis import ConnectionPool
from typing import Optional
import logging

from config.settings import settings

logger = logging.getLogger(__name__)


# Singleton instances
_redis_client: Optional[redis.Redis] = None
_redis_pool: Optional[ConnectionPool] = None


def get_redis_client() -> redis.Redis:
    """
    Get or create Redis client singleton with connection pooling.

    Returns:
        redis.Redis: Connected Redis client

    Raises:
        ConnectionError: If unable to connect to Redis
    """
    global _redis_client, _redis_pool

    if _redis_client is None:
        try:
            _redis_pool = ConnectionPool(
                host=settings.REDIS_HOST,
                port=settings.REDIS_PORT,
                db=settings.REDIS_DB,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5
            )

            client = redis.Redis(connection_pool=_redis_pool)
            client.ping()
            _redis_client = client
            logger.info(f"Connected to Redis at {settings.REDIS_HOST}:{settings.REDIS_PORT}")

        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            _redis_pool = None
            raise ConnectionError(f"Redis connection failed: {e}")

    return _redis_client


def test_connections() -> dict:
    """
    Test the connection to Redis.

    Returns:
        dict: Status of each connection
    """
    status = {
        "redis": {"connected": False, "error": None}
    }

    try:
        client = get_redis_client()
        client.ping()
        status["redis"]["connected"] = True
    except Exception as e:
        status["redis"]["error"] = str(e)

    return status


def close_connections():
    """
    Close the Redis connection gracefully.
    Call this on application shutdown.
    """
    global _redis_client, _redis_pool

    if _redis_client is not None:
        try:
            _redis_client.close()
            logger.info("Closed Redis connection")
        except Exception as e:
            logger.error(f"Error closing Redis connection: {e}")
        finally:
            _redis_client = None

    if _redis_pool is not None:
        try:
            _redis_pool.disconnect()
            logger.info("Closed Redis connection pool")
        except Exception as e:
            logger.error(f"Error closing Redis pool: {e}")
        finally:
            _redis_pool = None
