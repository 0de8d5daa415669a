"""
Per-caller rate limiting.

The limiter depends only on the RateLimitStore interface. Two stores are
provided: a process-local map (single instance deployments) and a Redis
store whose check-and-increment runs as one Lua script, so it holds across
horizontally scaled instances.
"""

import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional

import redis

from config.settings import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitRecord:
    """Usage of one caller inside its current window."""
    caller_id: str
    count: int
    window_reset_at: float


class RateLimitStore:
    """Key-value store able to consume slots from a fixed window atomically."""

    def consume(self, key: str, window_seconds: int, limit: int, slots: int = 1) -> bool:
        """
        Consume slots if capacity remains.

        Returns:
            bool: True if consumed, False if the limit would be exceeded
            (state is left unchanged)
        """
        raise NotImplementedError


class InMemoryRateLimitStore(RateLimitStore):
    """Process-local store guarded by a lock."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._lock = threading.Lock()
        self._records: Dict[str, RateLimitRecord] = {}
        self._last_sweep = clock()

    def consume(self, key: str, window_seconds: int, limit: int, slots: int = 1) -> bool:
        now = self._clock()
        with self._lock:
            if now - self._last_sweep > window_seconds:
                self._evict_expired(now)

            record = self._records.get(key)
            if record is None or now > record.window_reset_at:
                record = RateLimitRecord(caller_id=key, count=0, window_reset_at=now + window_seconds)

            if record.count + slots > limit:
                return False

            self._records[key] = replace(record, count=record.count + slots)
            return True

    def _evict_expired(self, now: float):
        expired = [key for key, record in self._records.items() if now > record.window_reset_at]
        for key in expired:
            del self._records[key]
        self._last_sweep = now

    def get_record(self, key: str) -> Optional[RateLimitRecord]:
        return self._records.get(key)

    def clear(self):
        with self._lock:
            self._records.clear()


# KEYS[1] = counter key; ARGV = limit, slots, window in ms
_CONSUME_SCRIPT = """
local current = tonumber(redis.call('GET', KEYS[1]) or '0')
local limit = tonumber(ARGV[1])
local slots = tonumber(ARGV[2])
if current + slots > limit then
    return 0
end
redis.call('INCRBY', KEYS[1], slots)
if redis.call('PTTL', KEYS[1]) < 0 then
    redis.call('PEXPIRE', KEYS[1], ARGV[3])
end
return 1
"""


class RedisRateLimitStore(RateLimitStore):
    """Redis-backed store shared by every server instance."""

    def __init__(self, client: redis.Redis, prefix: str = "ratelimit:"):
        self.client = client
        self.prefix = prefix
        self._script = client.register_script(_CONSUME_SCRIPT)

    def consume(self, key: str, window_seconds: int, limit: int, slots: int = 1) -> bool:
        result = self._script(
            keys=[f"{self.prefix}{key}"],
            args=[limit, slots, int(window_seconds * 1000)]
        )
        return int(result) == 1


class RateLimiter:
    """Gate for the scan pipeline: `limit` slots per caller per window."""

    def __init__(
        self,
        store: RateLimitStore,
        limit: int = 5,
        window_seconds: int = 3600
    ):
        self.store = store
        self.limit = limit
        self.window_seconds = window_seconds

    def try_consume(self, caller_id: str, slots: int = 1) -> bool:
        """
        Consume `slots` units for a caller, all or nothing.

        Args:
            caller_id: Caller identity (client IP)
            slots: 1 for a scan, 2 for a comparison

        Returns:
            bool: False when the caller is over the limit
        """
        try:
            allowed = self.store.consume(caller_id, self.window_seconds, self.limit, slots)
        except redis.RedisError as e:
            # Shared store unavailable: let the request through rather than block every caller
            logger.warning(f"⚠️  Rate limit store unavailable, allowing request: {e}")
            return True

        if not allowed:
            logger.info(f"Rate limit exceeded for {caller_id} ({slots} slot(s) requested)")
        return allowed


# Singleton instance
_rate_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """Get or create the rate limiter for the configured backend."""
    global _rate_limiter
    if _rate_limiter is None:
        store: RateLimitStore
        if settings.RATE_LIMIT_BACKEND == "redis":
            from config.database import get_redis_client
            try:
                store = RedisRateLimitStore(get_redis_client())
            except (ConnectionError, redis.RedisError) as e:
                # Unreachable at startup: limit per process instead of failing every request
                logger.warning(f"⚠️  Redis rate limit store unavailable, using in-memory store: {e}")
                store = InMemoryRateLimitStore()
        else:
            store = InMemoryRateLimitStore()
        _rate_limiter = RateLimiter(
            store,
            limit=settings.RATE_LIMIT_MAX,
            window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS
        )
        logger.info(f"Rate limiter ready ({settings.RATE_LIMIT_BACKEND}, {settings.RATE_LIMIT_MAX}/window)")
    return _rate_limiter


def reset_rate_limiter():
    global _rate_limiter
    _rate_limiter = None
