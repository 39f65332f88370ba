"""
Redis-backed circuit breakers for the external services the pipeline calls.

States:
  - CLOSED    → calls pass through
  - OPEN      → too many consecutive failures, calls fail fast with CircuitOpenError
  - HALF_OPEN → reset_timeout elapsed, the next call is let through as a probe

Success/failure counters live in a Redis hash per service and feed /api/health.
Redis trouble never blocks a call: the breaker then behaves as CLOSED.
"""
import logging
import time

logger = logging.getLogger('services.circuit_breaker')

CLOSED = 'closed'
OPEN = 'open'
HALF_OPEN = 'half_open'


class CircuitOpenError(Exception):
    """Raised instead of calling a service whose circuit is open."""
    def __init__(self, name, retry_after=None):
        self.name = name
        self.retry_after = retry_after
        super().__init__(f"Circuit breaker '{name}' is OPEN — service unavailable")


def _text(value):
    if isinstance(value, bytes):
        return value.decode()
    return value


class CircuitBreaker:
    """
    Usage:
        cb = CircuitBreaker('apify', redis_client, failure_threshold=3, reset_timeout=300)
        run = cb.call(client.actor(actor_id).call, run_input=payload)
    """

    PREFIX = 'cb'

    def __init__(self, name, redis_client, failure_threshold=3, reset_timeout=300):
        self.name = name
        self.redis = redis_client
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout

    def _key(self, suffix):
        return f'{self.PREFIX}:{self.name}:{suffix}'

    # ── State ─────────────────────────────────────────────────────────

    @property
    def state(self):
        try:
            current = _text(self.redis.get(self._key('state')))
            if current is None:
                return CLOSED
            if current == OPEN and self._seconds_since_failure() > self.reset_timeout:
                self.redis.set(self._key('state'), HALF_OPEN)
                return HALF_OPEN
            return current
        except Exception:
            return CLOSED

    @property
    def failure_count(self):
        try:
            return int(_text(self.redis.get(self._key('failures'))) or 0)
        except Exception:
            return 0

    def _seconds_since_failure(self):
        last = _text(self.redis.get(self._key('last_failure')))
        if not last:
            return float('inf')
        return time.time() - float(last)

    # ── Calls ─────────────────────────────────────────────────────────

    def call(self, func, *args, **kwargs):
        """Run func(*args, **kwargs) unless the circuit is open."""
        if self.state == OPEN:
            try:
                retry_after = max(0, self.reset_timeout - self._seconds_since_failure())
            except Exception:
                retry_after = None
            raise CircuitOpenError(self.name, retry_after=retry_after)

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            self._on_failure(e)
            raise
        self._on_success()
        return result

    def _on_success(self):
        try:
            pipe = self.redis.pipeline()
            pipe.set(self._key('state'), CLOSED)
            pipe.set(self._key('failures'), 0)
            pipe.hincrby(self._key('health'), 'success', 1)
            pipe.hset(self._key('health'), 'last_success', str(time.time()))
            pipe.execute()
        except Exception:
            logger.debug("Could not record success for '%s'", self.name)

    def _on_failure(self, error):
        try:
            failures = self.redis.incr(self._key('failures'))
            now = str(time.time())
            self.redis.set(self._key('last_failure'), now)
            pipe = self.redis.pipeline()
            pipe.hincrby(self._key('health'), 'failure', 1)
            pipe.hset(self._key('health'), 'last_failure', now)
            pipe.hset(self._key('health'), 'last_error', str(error)[:200])
            pipe.execute()
            if failures >= self.failure_threshold:
                self.redis.set(self._key('state'), OPEN)
                logger.warning("Circuit '%s' OPENED after %d failures: %s", self.name, failures, error)
            else:
                logger.info("Circuit '%s' failure %d/%d: %s",
                            self.name, failures, self.failure_threshold, error)
        except Exception:
            logger.debug("Could not record failure for '%s'", self.name)

    def reset(self):
        """Force the circuit back to CLOSED."""
        try:
            pipe = self.redis.pipeline()
            pipe.set(self._key('state'), CLOSED)
            pipe.set(self._key('failures'), 0)
            pipe.delete(self._key('last_failure'))
            pipe.execute()
            logger.info("Circuit '%s' manually reset to CLOSED", self.name)
        except Exception as e:
            logger.error("Failed to reset circuit '%s': %s", self.name, e)

    # ── Health ────────────────────────────────────────────────────────

    def get_health(self):
        """Counters and state for the health endpoint."""
        health = {
            'name': self.name,
            'state': 'unknown',
            'failure_count': 0,
            'failure_threshold': self.failure_threshold,
            'reset_timeout': self.reset_timeout,
            'total_success': 0,
            'total_failure': 0,
            'last_error': '',
        }
        try:
            data = {_text(k): _text(v) for k, v in self.redis.hgetall(self._key('health')).items()}
            health.update({
                'state': self.state,
                'failure_count': self.failure_count,
                'total_success': int(data.get('success', 0)),
                'total_failure': int(data.get('failure', 0)),
                'last_error': data.get('last_error', ''),
            })
        except Exception:
            pass
        return health


# ── Registry ──────────────────────────────────────────────────────────────

_registry = {}


def get_breaker(name, redis_client=None, **kwargs):
    """Get or create the named breaker (one per service per process)."""
    if name not in _registry:
        if redis_client is None:
            from app.extensions import redis_client as rc
            redis_client = rc
        _registry[name] = CircuitBreaker(name, redis_client, **kwargs)
    return _registry[name]


def get_all_breakers():
    return dict(_registry)


def init_breakers(redis_client):
    """Register breakers for every external service the pipeline talks to."""
    breakers = {
        'apify': CircuitBreaker('apify', redis_client, failure_threshold=5, reset_timeout=300),
        'anthropic': CircuitBreaker('anthropic', redis_client, failure_threshold=5, reset_timeout=60),
    }
    _registry.update(breakers)
    return breakers
