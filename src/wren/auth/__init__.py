"""Authentication feature — account store, handlers, token guard, route table."""

from wren.auth.controllers import AuthController
from wren.auth.factory import create_app
from wren.auth.guards import BearerTokenGuard
from wren.auth.routes import AuthHandlers, build_auth_routes
from wren.auth.store import Account, AccountExists, AccountStore

__all__ = [
    "Account",
    "AccountExists",
    "AccountStore",
    "AuthController",
    "AuthHandlers",
    "BearerTokenGuard",
    "build_auth_routes",
    "create_app",
]
