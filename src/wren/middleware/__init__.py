"""Middleware — Protocol-based, no inheritance required.

App-wide middleware wraps every request, matched or not::

    async def mw(request: Request, next: Next) -> Response

Per-route checks (such as bearer-token verification) are guards on the
route chain instead; see ``wren.routing.chain``.

Built-in middleware:
    AuthRateLimitMiddleware -- Throttle credential endpoints per client
"""

from wren.middleware.auth_rate_limit import AuthRateLimitConfig, AuthRateLimitMiddleware
from wren.middleware.protocol import Middleware, Next

__all__ = [
    "AuthRateLimitConfig",
    "AuthRateLimitMiddleware",
    "Middleware",
    "Next",
]
