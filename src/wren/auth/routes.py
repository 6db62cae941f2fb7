"""The authentication route table.

    POST /register  -> register-account
    POST /login     -> authenticate-credentials
    GET  /profile   -> verify-bearer-token, then fetch-profile

The table only fixes membership and order; validation, storage, token
cryptography and response building belong to the collaborators passed in.
"""

from collections.abc import Callable
from typing import Any, Protocol

from wren.routing.table import RouteTable


class AuthHandlers(Protocol):
    """The handler side of the table. ``AuthController`` satisfies it."""

    def register(self, request: Any) -> Any: ...

    def login(self, request: Any) -> Any: ...

    def profile(self, request: Any) -> Any: ...


def build_auth_routes(handlers: AuthHandlers, verify: Callable[..., Any]) -> RouteTable:
    """Build and freeze the auth table around *handlers* and the *verify* guard."""
    table = RouteTable("auth")
    table.post("/register", handlers.register)
    table.post("/login", handlers.login)
    table.get("/profile", verify, handlers.profile)
    table.freeze()
    return table
