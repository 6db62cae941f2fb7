"""The wren ``App``.

An app collects routes, mounted route tables, middleware, error handlers
and lifecycle hooks while it is being set up. The first request (or the
lifespan startup, or ``run()``) compiles all of that into a router and
freezes it; registration after that point is an error.
"""

import inspect
import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.types import ErrorHandler, Handler
from wren.config import AppConfig
from wren.middleware.protocol import Middleware
from wren.routing.route import Route
from wren.routing.router import Router
from wren.routing.table import RouteTable
from wren.server.handler import handle_request

logger = logging.getLogger("wren.server")


@dataclass(frozen=True, slots=True)
class _Registration:
    """One route as declared, before the router sees it."""

    path: str
    handler: Handler
    methods: tuple[str, ...]
    guards: tuple[Callable[..., Any], ...] = ()
    name: str | None = None

    def compile(self) -> Route:
        return Route(
            path=self.path,
            handler=self.handler,
            methods=frozenset(m.upper() for m in self.methods),
            guards=self.guards,
            name=self.name,
        )


async def _run_hooks(hooks: Sequence[Callable[..., Any]]) -> None:
    for hook in hooks:
        result = hook()
        if inspect.isawaitable(result):
            await result


class App:
    """An ASGI application serving route tables.

    Setup is single-threaded: decorators and ``mount()`` run at import
    time. Freezing takes a lock and re-checks the flag, so when several
    workers hit ``__call__`` at once only one of them compiles. The
    compiled router and middleware tuple are never mutated afterwards.
    """

    __slots__ = (
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_registered_middleware",
        "_registrations",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._registrations: list[_Registration] = []
        self._registered_middleware: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen = False
        self._freeze_lock = threading.Lock()

        # Filled in by _freeze()
        self._router: Router | None = None
        self._middleware: tuple[Middleware, ...] = ()

    # -- Setup --

    def route(
        self,
        path: str,
        *,
        methods: Sequence[str] = ("GET",),
        guards: Sequence[Callable[..., Any]] = (),
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator registering *handler* for ``path``.

        Args:
            path: Path pattern; parameters are written ``{name}`` or ``{name:int}``.
            methods: HTTP methods served by this route.
            guards: Units run in order before the handler; any may halt.
            name: Label shown by ``wren routes``.
        """

        def decorator(handler: Handler) -> Handler:
            self._check_not_frozen()
            self._registrations.append(
                _Registration(path, handler, tuple(methods), tuple(guards), name)
            )
            return handler

        return decorator

    def mount(self, table: RouteTable, *, prefix: str = "") -> None:
        """Add every entry of *table*, each path prefixed with *prefix*.

        Mounting freezes the table. A ``(method, path)`` claimed by two
        tables, or by a table and ``@app.route``, raises
        ``ConfigurationError`` when the app freezes.
        """
        self._check_not_frozen()
        base = prefix.rstrip("/")
        for entry in table.freeze():
            self._registrations.append(
                _Registration(
                    path=base + entry.path if base else entry.path,
                    handler=entry.handler,
                    methods=(entry.method,),
                    guards=entry.guards,
                    name=table.name,
                )
            )

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Decorator registering a handler for a status code or exception type."""

        def decorator(handler: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = handler
            return handler

        return decorator

    def add_middleware(self, middleware: Middleware) -> None:
        """Append app-wide middleware. The first one added is the outermost."""
        self._check_not_frozen()
        self._registered_middleware.append(middleware)

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Decorator for a sync or async hook run at lifespan startup."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Decorator for a sync or async hook run at lifespan shutdown."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Runtime --

    @property
    def routes(self) -> list[Route]:
        """Compiled routes. Reading this freezes the app."""
        self._ensure_frozen()
        assert self._router is not None
        return self._router.routes

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the app with pounce (needs the ``server`` extra)."""
        self._ensure_frozen()

        from wren.server.dev import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
        )

    async def startup(self) -> None:
        """Run the startup hooks in registration order."""
        await _run_hooks(self._startup_hooks)

    async def shutdown(self) -> None:
        """Run the shutdown hooks in registration order."""
        await _run_hooks(self._shutdown_hooks)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point for ``http`` and ``lifespan`` scopes."""
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return

        self._ensure_frozen()
        assert self._router is not None
        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            debug=self.config.debug,
            max_content_length=self.config.max_content_length,
        )

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        """Serve the lifespan protocol.

        The app freezes during startup, so a bad route table fails the
        server's startup rather than the first request.
        """
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    self._ensure_frozen()
                    await self.startup()
                except Exception as exc:
                    logger.exception("startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Freezing --

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if not self._frozen:
                self._freeze()

    def _freeze(self) -> None:
        """Compile registrations into the router. Caller holds ``_freeze_lock``."""
        router = Router()
        for registration in self._registrations:
            router.add(registration.compile())
        router.compile()
        self._router = router
        self._middleware = tuple(self._registered_middleware)
        self._frozen = True
        logger.debug("compiled %d routes", len(self._registrations))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests; "
                "register routes, tables and middleware during setup."
            )
            raise RuntimeError(msg)
