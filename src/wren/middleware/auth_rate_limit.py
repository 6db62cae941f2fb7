"""Rate limiting for credential endpoints.

Counts requests per client in fixed windows. A client that goes over
``requests`` inside one window is refused with 429 for ``block_seconds``.
Only the configured methods and paths (``POST /login`` and
``POST /register`` by default) are counted.
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from wren.http.request import Request
from wren.http.response import Response, json_response
from wren.middleware.protocol import Next
from wren.security.audit import emit_security_event

logger = logging.getLogger("wren.security")


@dataclass(frozen=True, slots=True)
class AuthRateLimitConfig:
    """Which requests are counted, and how many are allowed."""

    requests: int = 10
    window_seconds: int = 60
    block_seconds: int = 300
    methods: tuple[str, ...] = ("POST",)
    paths: tuple[str, ...] = ("/login", "/register")
    # Header naming the client behind a trusted proxy, e.g. "x-forwarded-for".
    # None keys on the peer address; clients can forge this header otherwise.
    key_header: str | None = None


@dataclass(slots=True)
class _Window:
    started: float
    count: int = 0
    blocked_until: float = 0.0


class AuthRateLimitMiddleware:
    """Per-client fixed-window limiter.

    ``clock`` returns seconds; it defaults to ``time.time``.
    """

    __slots__ = ("_clock", "_config", "_lock", "_swept", "_windows")

    def __init__(
        self,
        config: AuthRateLimitConfig | None = None,
        *,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._config = config or AuthRateLimitConfig()
        self._clock = clock or time.time
        self._lock = threading.Lock()
        self._windows: dict[str, _Window] = {}
        self._swept = 0.0

    def _applies_to(self, request: Request) -> bool:
        if request.method not in self._config.methods:
            return False
        return any(
            request.path == limited or request.path.startswith(limited + "/")
            for limited in self._config.paths
        )

    def _client_key(self, request: Request) -> str:
        if self._config.key_header:
            forwarded = request.headers.get(self._config.key_header, "")
            first_hop = forwarded.split(",", 1)[0].strip()
            if first_hop:
                return first_hop
        return request.client[0] if request.client else "unknown"

    def _evict(self, now: float) -> None:
        """Drop windows that have ended and are not blocking. Caller holds the lock."""
        window_seconds = self._config.window_seconds
        stale = [
            key
            for key, window in self._windows.items()
            if window.started + window_seconds <= now and window.blocked_until <= now
        ]
        for key in stale:
            del self._windows[key]
        self._swept = now

    def _hit(self, key: str, now: float) -> int:
        """Count one request for *key*; return seconds to wait, 0 if allowed."""
        cfg = self._config
        with self._lock:
            if now - self._swept >= cfg.window_seconds:
                self._evict(now)
            window = self._windows.setdefault(key, _Window(started=now))
            if window.blocked_until > now:
                return max(1, int(window.blocked_until - now))
            if now - window.started >= cfg.window_seconds:
                window.started, window.count = now, 0
            window.count += 1
            if window.count <= cfg.requests:
                return 0
            window.blocked_until = now + cfg.block_seconds
            return cfg.block_seconds

    async def __call__(self, request: Request, next: Next) -> Response:
        if not self._applies_to(request):
            return await next(request)

        key = self._client_key(request)
        retry_after = self._hit(key, self._clock())
        if not retry_after:
            return await next(request)

        logger.warning("rate limited %s %s for %s", request.method, request.path, key)
        emit_security_event(
            "auth.rate_limited",
            request=request,
            details={"key": key, "retry_after": retry_after},
        )
        return json_response({"error": "Too Many Requests", "status": 429}, status=429).with_header(
            "Retry-After", str(retry_after)
        )
