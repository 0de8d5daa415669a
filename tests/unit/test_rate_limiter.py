"""
Tests for the per-caller rate limiter.
"""

import threading
import time

import fakeredis
import pytest
import redis

from config.settings import settings
from utils.rate_limiter import (
    InMemoryRateLimitStore,
    RateLimiter,
    RateLimitStore,
    RedisRateLimitStore,
    get_rate_limiter,
    reset_rate_limiter,
)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def make_limiter(clock=None, limit=5, window=3600):
    store = InMemoryRateLimitStore(clock=clock or FakeClock())
    return RateLimiter(store, limit=limit, window_seconds=window), store


def test_five_scans_then_rejected():
    limiter, _ = make_limiter()
    assert all(limiter.try_consume("1.2.3.4") for _ in range(5))
    assert limiter.try_consume("1.2.3.4") is False


def test_window_reset_allows_again():
    clock = FakeClock()
    limiter, store = make_limiter(clock)
    for _ in range(5):
        limiter.try_consume("caller")
    assert not limiter.try_consume("caller")

    clock.now += 3600.5
    assert limiter.try_consume("caller")
    assert store.get_record("caller").count == 1


def test_reset_only_after_window_end():
    clock = FakeClock()
    limiter, _ = make_limiter(clock)
    for _ in range(5):
        limiter.try_consume("caller")

    clock.now += 3600  # exactly at reset time, still inside the window
    assert not limiter.try_consume("caller")


def test_callers_are_independent():
    limiter, _ = make_limiter()
    for _ in range(5):
        limiter.try_consume("a")
    assert limiter.try_consume("b")


def test_two_slot_consumption_is_atomic():
    limiter, store = make_limiter()
    for _ in range(4):
        assert limiter.try_consume("caller")

    assert limiter.try_consume("caller", slots=2) is False
    assert store.get_record("caller").count == 4
    assert limiter.try_consume("caller", slots=1)


def test_records_are_replaced_not_mutated():
    limiter, store = make_limiter()
    limiter.try_consume("caller")
    first = store.get_record("caller")
    limiter.try_consume("caller")
    second = store.get_record("caller")

    assert first is not second
    assert first.count == 1
    assert second.count == 2
    assert first.window_reset_at == second.window_reset_at


def test_concurrent_consumption_never_exceeds_limit():
    limiter, store = make_limiter(limit=5)
    results = []

    def worker():
        results.append(limiter.try_consume("caller"))

    threads = [threading.Thread(target=worker) for _ in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 5
    assert store.get_record("caller").count == 5


def test_limiter_depends_only_on_store_interface():
    class CountingStore(RateLimitStore):
        def __init__(self):
            self.calls = []

        def consume(self, key, window_seconds, limit, slots=1):
            self.calls.append((key, window_seconds, limit, slots))
            return True

    store = CountingStore()
    limiter = RateLimiter(store, limit=7, window_seconds=60)
    assert limiter.try_consume("caller", slots=2)
    assert store.calls == [("caller", 60, 7, 2)]


def test_expired_callers_are_evicted():
    clock = FakeClock()
    limiter, store = make_limiter(clock, window=60)
    limiter.try_consume("old-caller")

    clock.now += 61
    limiter.try_consume("new-caller")

    assert store.get_record("old-caller") is None
    assert store.get_record("new-caller").count == 1


def test_store_outage_fails_open():
    class DownStore(RateLimitStore):
        def consume(self, key, window_seconds, limit, slots=1):
            raise redis.ConnectionError("Connection refused")

    limiter = RateLimiter(DownStore(), limit=1, window_seconds=60)
    assert limiter.try_consume("caller")
    assert limiter.try_consume("caller", slots=2)


def test_unreachable_redis_falls_back_to_process_limits(monkeypatch):
    def refuse():
        raise ConnectionError("Redis connection failed: Connection refused")

    monkeypatch.setattr(settings, "RATE_LIMIT_BACKEND", "redis")
    monkeypatch.setattr("config.database.get_redis_client", refuse)
    reset_rate_limiter()

    limiter = get_rate_limiter()
    assert isinstance(limiter.store, InMemoryRateLimitStore)
    assert all(limiter.try_consume("caller") for _ in range(5))
    assert not limiter.try_consume("caller")
    assert get_rate_limiter() is limiter


@pytest.fixture
def redis_store():
    client = fakeredis.FakeRedis(decode_responses=True)
    return RedisRateLimitStore(client), client


def test_redis_store_counts_slots(redis_store):
    store, client = redis_store
    limiter = RateLimiter(store, limit=5, window_seconds=3600)

    assert all(limiter.try_consume("1.2.3.4") for _ in range(5))
    assert not limiter.try_consume("1.2.3.4")
    assert limiter.try_consume("5.6.7.8")
    assert client.get("ratelimit:1.2.3.4") == "5"
    assert 0 < client.pttl("ratelimit:1.2.3.4") <= 3600 * 1000


def test_redis_store_refuses_two_slots_atomically(redis_store):
    store, client = redis_store
    limiter = RateLimiter(store, limit=5, window_seconds=3600)
    for _ in range(4):
        limiter.try_consume("caller")

    assert not limiter.try_consume("caller", slots=2)
    assert client.get("ratelimit:caller") == "4"
    assert limiter.try_consume("caller")


def test_redis_window_expires(redis_store):
    store, client = redis_store
    assert store.consume("caller", window_seconds=0.05, limit=1)
    assert not store.consume("caller", window_seconds=0.05, limit=1)

    time.sleep(0.15)
    assert store.consume("caller", window_seconds=0.05, limit=1)
