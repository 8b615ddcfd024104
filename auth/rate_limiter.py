"""Rate limiting for public lead submissions.

Uses Valkey with a fixed window per client IP: the first submission opens the
window, later ones only increment. Counters are the only state shared between
requests outside the database.
"""

from clients.valkey_client import ValkeyClient
from core.config import RateLimitConfig
from auth.exceptions import RateLimitedError


class SubmissionRateLimiter:
    """Per-IP throttle for lead form endpoints."""

    KEY_PREFIX = "ratelimit:lead_submission:"

    def __init__(self, valkey: ValkeyClient, config: RateLimitConfig):
        self._valkey = valkey
        self._config = config
        self._window_seconds = config.window_minutes * 60

    def _key(self, client_ip: str | None) -> str:
        """Generate rate limit key. Requests without a usable IP share one bucket."""
        return f"{self.KEY_PREFIX}{client_ip or 'unknown'}"

    def check_rate_limit(self, client_ip: str | None) -> None:
        """Check rate limit and increment counter.

        Raises:
            RateLimitedError: If the client exceeded its allowance for the window.
        """
        if not self._config.enabled:
            return

        key = self._key(client_ip)
        count = self._valkey.incr(key)

        # First hit opens the window
        if count == 1:
            self._valkey.expire(key, self._window_seconds)

        if count > self._config.max_submissions:
            ttl = self._valkey.ttl(key)
            if ttl < 0:
                # Counter lost its expiry; re-arm so the client is not locked out forever
                self._valkey.expire(key, self._window_seconds)
                ttl = self._window_seconds
            raise RateLimitedError(retry_after_seconds=max(ttl, 1))

    def get_remaining(self, client_ip: str | None) -> int:
        """Get remaining submissions in the current window."""
        current = self._valkey.get(self._key(client_ip))

        if current is None:
            return self._config.max_submissions

        return max(self._config.max_submissions - int(current), 0)
