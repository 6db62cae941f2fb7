"""Wren exception hierarchy.

Shared across Router, RouteTable, App, guards and handlers so every module
raises and catches the same types.
"""

from dataclasses import dataclass


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when app configuration is invalid.

    Typically raised while building a route table or during ``App._freeze()``
    at startup, before any request is served.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, guards, or handlers. The ASGI handler catches
    these and dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class BadRequest(HTTPError):  # noqa: N818
    """400 — the request body or parameters are malformed."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class Unauthorized(HTTPError):  # noqa: N818
    """401 — missing or rejected credentials.

    Carries a ``WWW-Authenticate`` challenge for the configured scheme.
    """

    def __init__(self, detail: str = "Unauthorized", scheme: str = "Bearer") -> None:
        super().__init__(
            status=401,
            detail=detail,
            headers=(("WWW-Authenticate", scheme),),
        )


class NotFound(HTTPError):  # noqa: N818
    """404 — no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods and embeds
    the allowed methods in the detail string for developer visibility.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class Conflict(HTTPError):  # noqa: N818
    """409 — the request conflicts with existing state (e.g. a taken username)."""

    def __init__(self, detail: str = "Conflict") -> None:
        super().__init__(status=409, detail=detail)
