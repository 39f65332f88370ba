"""Tests for app.services.circuit_breaker — Redis-backed breaker and registry."""
import time
import pytest
from unittest.mock import MagicMock

from app.services.circuit_breaker import (
    CircuitBreaker, CircuitOpenError, CLOSED, OPEN, HALF_OPEN,
    get_breaker, get_all_breakers, init_breakers, _registry,
)


class FakeRedis:
    """Minimal in-memory Redis fake for circuit breaker tests."""

    def __init__(self):
        self.get_store = {}
        self.hash_store = {}

    def get(self, key):
        return self.get_store.get(key)

    def set(self, key, value):
        self.get_store[key] = value

    def incr(self, key):
        val = int(self.get_store.get(key, 0)) + 1
        self.get_store[key] = str(val)
        return val

    def delete(self, *keys):
        for k in keys:
            self.get_store.pop(k, None)
            self.hash_store.pop(k, None)

    def hset(self, key, field, value):
        self.hash_store.setdefault(key, {})[field] = value

    def hincrby(self, key, field, amount):
        h = self.hash_store.setdefault(key, {})
        h[field] = str(int(h.get(field, 0)) + amount)

    def hgetall(self, key):
        return dict(self.hash_store.get(key, {}))

    def pipeline(self):
        return FakePipeline(self)


class FakePipeline:
    """Fake Redis pipeline that executes immediately."""

    def __init__(self, redis):
        self._redis = redis
        self._ops = []

    def set(self, key, value):
        self._ops.append(('set', key, value))
        return self

    def delete(self, *keys):
        self._ops.append(('delete', keys))
        return self

    def hincrby(self, key, field, amount):
        self._ops.append(('hincrby', key, field, amount))
        return self

    def hset(self, key, field, value):
        self._ops.append(('hset', key, field, value))
        return self

    def execute(self):
        for op in self._ops:
            if op[0] == 'set':
                self._redis.set(op[1], op[2])
            elif op[0] == 'delete':
                self._redis.delete(*op[1])
            elif op[0] == 'hincrby':
                self._redis.hincrby(op[1], op[2], op[3])
            elif op[0] == 'hset':
                self._redis.hset(op[1], op[2], op[3])
        self._ops = []


@pytest.fixture
def fake_redis():
    """In-memory Redis fake with dict-backed storage."""
    return FakeRedis()


@pytest.fixture
def cb(fake_redis):
    """Fresh circuit breaker with fake Redis."""
    return CircuitBreaker('test_svc', fake_redis, failure_threshold=3, reset_timeout=10)


def _fail():
    raise ValueError("boom")


def _trip(cb):
    for _ in range(cb.failure_threshold):
        with pytest.raises(ValueError):
            cb.call(_fail)


# ---------------------------------------------------------------------------
# State transitions
# ---------------------------------------------------------------------------

class TestCircuitBreakerStates:
    """CLOSED → OPEN → HALF_OPEN → CLOSED."""

    def test_starts_closed(self, cb):
        assert cb.state == CLOSED

    def test_counts_failures_below_threshold(self, cb):
        for _ in range(2):
            with pytest.raises(ValueError):
                cb.call(_fail)
        assert cb.failure_count == 2
        assert cb.state == CLOSED

    def test_opens_at_threshold(self, cb):
        _trip(cb)
        assert cb.state == OPEN

    def test_open_rejects_calls_without_calling(self, cb):
        _trip(cb)
        func = MagicMock()
        with pytest.raises(CircuitOpenError) as exc_info:
            cb.call(func)
        assert exc_info.value.name == 'test_svc'
        assert 0 <= exc_info.value.retry_after <= 10
        func.assert_not_called()

    def test_half_open_after_timeout(self, cb, fake_redis):
        _trip(cb)
        fake_redis.get_store[cb._key('last_failure')] = str(time.time() - 20)
        assert cb.state == HALF_OPEN

    def test_success_in_half_open_closes(self, cb, fake_redis):
        _trip(cb)
        fake_redis.get_store[cb._key('last_failure')] = str(time.time() - 20)
        assert cb.call(lambda: 'recovered') == 'recovered'
        assert cb.state == CLOSED
        assert cb.failure_count == 0

    def test_success_resets_failure_count(self, cb):
        with pytest.raises(ValueError):
            cb.call(_fail)
        cb.call(lambda: 'ok')
        assert cb.failure_count == 0

    def test_redis_down_behaves_closed(self):
        broken = MagicMock()
        broken.get.side_effect = ConnectionError('redis down')
        broken.incr.side_effect = ConnectionError('redis down')
        broken.pipeline.side_effect = ConnectionError('redis down')
        cb = CircuitBreaker('flaky', broken)
        assert cb.state == CLOSED
        assert cb.call(lambda: 'ok') == 'ok'
        with pytest.raises(ValueError):
            cb.call(_fail)


# ---------------------------------------------------------------------------
# Reset + health
# ---------------------------------------------------------------------------

class TestCircuitBreakerReset:

    def test_reset_closes_circuit(self, cb):
        _trip(cb)
        cb.reset()
        assert cb.state == CLOSED
        assert cb.failure_count == 0
        assert cb.call(lambda: 'ok') == 'ok'


class TestCircuitBreakerHealth:

    def test_health_after_success(self, cb):
        cb.call(lambda: 'ok')
        health = cb.get_health()
        assert health['name'] == 'test_svc'
        assert health['state'] == CLOSED
        assert health['total_success'] == 1
        assert health['total_failure'] == 0

    def test_health_after_failure(self, cb):
        with pytest.raises(ValueError):
            cb.call(_fail)
        health = cb.get_health()
        assert health['total_failure'] == 1
        assert health['last_error'] == 'boom'

    def test_health_decodes_bytes(self, cb, fake_redis):
        fake_redis.hash_store[cb._key('health')] = {b'success': b'4', b'last_error': b'timeout'}
        health = cb.get_health()
        assert health['total_success'] == 4
        assert health['last_error'] == 'timeout'

    def test_health_includes_thresholds(self, cb):
        health = cb.get_health()
        assert health['failure_threshold'] == 3
        assert health['reset_timeout'] == 10


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class TestCircuitBreakerRegistry:

    def test_init_breakers(self, fake_redis):
        breakers = init_breakers(fake_redis)
        assert set(breakers) == {'apify', 'anthropic'}
        assert breakers['apify'].reset_timeout == 300
        all_b = get_all_breakers()
        assert all_b['anthropic'] is breakers['anthropic']

    def test_get_breaker_creates_on_demand(self, fake_redis):
        cb = get_breaker('new_service', fake_redis, failure_threshold=5)
        assert cb.name == 'new_service'
        assert cb.failure_threshold == 5
        assert get_breaker('new_service') is cb
        _registry.pop('new_service')
