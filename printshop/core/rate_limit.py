"""
Fixed window rate limiting on top of the Django cache.

With the django-redis backend the counters are shared by every process
serving the API. With the local memory cache they are per process.
"""
import logging

from django.core.cache import cache

logger = logging.getLogger(__name__)


class RateLimiter:
    """Allow `max_attempts` calls per `window` seconds for each identifier"""

    def __init__(self, max_attempts=5, window=15 * 60, prefix='ratelimit'):
        self.max_attempts = max_attempts
        self.window = window
        self.prefix = prefix

    def _key(self, identifier):
        return f"{self.prefix}:{identifier}"

    def is_allowed(self, identifier):
        """Count one attempt and report whether it is within the limit"""
        key = self._key(identifier)
        # add() only sets the key (and its expiry) when the window is new
        cache.add(key, 0, self.window)
        try:
            attempts = cache.incr(key)
        except ValueError:
            # Key expired between add() and incr()
            cache.set(key, 1, self.window)
            attempts = 1
        if attempts > self.max_attempts:
            logger.warning(f"Rate limit exceeded for {key} ({attempts}/{self.max_attempts})")
            return False
        return True

    def remaining(self, identifier):
        attempts = cache.get(self._key(identifier), 0)
        return max(self.max_attempts - attempts, 0)

    def reset(self, identifier):
        cache.delete(self._key(identifier))
