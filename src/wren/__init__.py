"""Wren — authentication routes on a small ASGI framework.

Declarative route tables with guard chains, immutable requests and
responses, and a ready-made register/login/profile feature.

Basic usage::

    from wren import App, RouteTable

    table = RouteTable("hello")
    table.get("/hello", lambda: {"hello": "world"})

    app = App()
    app.mount(table)

The bundled authentication app::

    from wren.auth import create_app

    app = create_app(AppConfig(secret_key="change-me"))
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "BadRequest",
    "ConfigurationError",
    "Conflict",
    "HTTPError",
    "Halt",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "Proceed",
    "Request",
    "Response",
    "RouteTable",
    "Unauthorized",
    "WrenError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "App":
        from wren.app import App

        return App

    if name == "AppConfig":
        from wren.config import AppConfig

        return AppConfig

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name == "Response":
        from wren.http.response import Response

        return Response

    if name in ("RouteTable", "Proceed", "Halt"):
        from wren import routing as _routing

        return getattr(_routing, name)

    if name in ("Middleware", "Next"):
        from wren.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in (
        "BadRequest",
        "ConfigurationError",
        "Conflict",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "Unauthorized",
        "WrenError",
    ):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
