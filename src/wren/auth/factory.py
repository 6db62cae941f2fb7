"""Assemble a ready-to-serve authentication app."""

import logging
from dataclasses import replace

from wren.app import App
from wren.auth.controllers import AuthController
from wren.auth.guards import BearerTokenGuard
from wren.auth.routes import build_auth_routes
from wren.auth.store import AccountStore
from wren.config import AppConfig
from wren.middleware.auth_rate_limit import AuthRateLimitConfig, AuthRateLimitMiddleware
from wren.security.tokens import TokenService

logger = logging.getLogger("wren.auth")

_DEFAULT_RATE_LIMIT = AuthRateLimitConfig()


def create_app(
    config: AppConfig | None = None,
    *,
    store: AccountStore | None = None,
    tokens: TokenService | None = None,
    rate_limit: AuthRateLimitConfig | None = _DEFAULT_RATE_LIMIT,
    prefix: str = "",
) -> App:
    """Wire store, token service, controller and guard into an ``App``.

    *config* defaults to ``AppConfig.from_env()``; a ``secret_key`` is
    required unless a ready ``TokenService`` is passed. Pass
    ``rate_limit=None`` to disable credential throttling.
    """
    config = config or AppConfig.from_env()
    if store is None:
        store = AccountStore()
    if tokens is None:
        tokens = TokenService(
            config.secret_key,
            max_age=config.token_max_age,
            salt=config.token_salt,
        )

    app = App(config)
    if rate_limit is not None:
        if prefix:
            base = prefix.rstrip("/")
            rate_limit = replace(rate_limit, paths=tuple(f"{base}{p}" for p in rate_limit.paths))
        app.add_middleware(AuthRateLimitMiddleware(rate_limit))

    controller = AuthController(store, tokens)
    verify = BearerTokenGuard(tokens, store.get_by_id)
    app.mount(build_auth_routes(controller, verify), prefix=prefix)
    logger.debug("auth routes mounted at %r", prefix or "/")
    return app
