import logging
import math
import threading
import time
from functools import wraps

from flask import current_app, request

from ..errors import RateLimitError

logger = logging.getLogger(__name__)

GENERAL = "general"
AUTH = "auth"
CREATE = "create"

_LIMIT_SETTINGS = {
    GENERAL: "RATE_LIMIT_GENERAL",
    AUTH: "RATE_LIMIT_AUTH",
    CREATE: "RATE_LIMIT_CREATE",
}


class FixedWindowRateLimiter:
    """Per-key request counters that reset when their window elapses."""

    def __init__(self, name, limit, window_seconds=60, clock=time.monotonic):
        self.name = name
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._windows = {}  # key -> [window_start, count]
        self._last_prune = clock()

    def hit(self, key):
        """Count a request for ``key``; return seconds to wait if over the limit, else 0."""
        now = self._clock()
        with self._lock:
            if now - self._last_prune >= self.window_seconds:
                self._prune(now)

            window = self._windows.get(key)
            if window is None or now - window[0] >= self.window_seconds:
                window = self._windows[key] = [now, 0]

            if window[1] >= self.limit:
                return max(1, math.ceil(window[0] + self.window_seconds - now))
            window[1] += 1
            return 0

    def reset(self):
        with self._lock:
            self._windows.clear()

    def _prune(self, now):
        stale = [k for k, (start, _) in self._windows.items() if now - start >= self.window_seconds]
        for key in stale:
            del self._windows[key]
        self._last_prune = now

    def status(self):
        with self._lock:
            return {
                "clients": len(self._windows),
                "requests_per_window": self.limit,
                "window_seconds": self.window_seconds,
            }


def client_ip():
    # ProxyFix has already resolved X-Forwarded-For into remote_addr
    return request.remote_addr or "unknown"


def get_limiter(name):
    return current_app.extensions["rate_limiters"][name]


def check_rate_limit(name):
    if not current_app.config.get("RATE_LIMIT_ENABLED", True):
        return
    ip = client_ip()
    retry_after = get_limiter(name).hit(ip)
    if retry_after:
        logger.warning("Rate limit exceeded: category=%s ip=%s path=%s", name, ip, request.path)
        raise RateLimitError(details={"category": name, "retry_after": retry_after})


def rate_limit(name):
    """Decorator applying an additional named limiter to a view."""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            check_rate_limit(name)
            return f(*args, **kwargs)
        return wrapper
    return decorator


def rate_limit_status():
    return {name: limiter.status() for name, limiter in current_app.extensions["rate_limiters"].items()}


def init_app(app):
    window = app.config.get("RATE_LIMIT_WINDOW_SECONDS", 60)
    app.extensions["rate_limiters"] = {
        name: FixedWindowRateLimiter(name, app.config.get(setting, 100), window)
        for name, setting in _LIMIT_SETTINGS.items()
    }

    @app.before_request
    def _global_rate_limit():
        check_rate_limit(GENERAL)
