"""ASGI handler — translates ASGI scope/messages to wren types.

The only component besides the sender that touches raw ASGI. Converts
scope dicts to typed Request objects, dispatches through app middleware,
routing and the matched route's guard chain, and sends the Response
back through ASGI send().
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.invoke import invoke
from wren.errors import HTTPError
from wren.http.request import Request
from wren.http.response import Response
from wren.middleware.protocol import Next
from wren.routing.chain import run_chain
from wren.routing.params import convert_param
from wren.routing.route import Route
from wren.routing.router import Router, parse_path
from wren.server.errors import handle_http_error, handle_internal_error
from wren.server.negotiation import negotiate
from wren.server.sender import send_response

logger = logging.getLogger("wren.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
    max_content_length: int = 0,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive, max_body=max_content_length)

    async def dispatch(req: Request) -> Response:
        match = router.match(req.method, req.path)
        routed = req.with_path_params(match.path_params)

        async def terminal(final: Request) -> Any:
            return await _invoke_handler(match.route, final)

        result = await run_chain(match.route.guards, terminal, routed)
        return negotiate(result)

    # Wrap middleware around the dispatch, outermost first
    handler: Next = dispatch
    for mw in reversed(middleware):

        async def make_next(req: Request, _mw: Any = mw, _next: Next = handler) -> Response:
            return await _mw(req, _next)

        handler = make_next

    try:
        response = await handler(request)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug)

    logger.debug("%s %s -> %d", request.method, request.path, response.status)
    await send_response(response, send, head=request.method == "HEAD")


async def _invoke_handler(route: Route, request: Request) -> Any:
    """Call the matched route handler with arguments built from its signature."""
    kwargs = _build_handler_kwargs(route, request)
    return await invoke(route.handler, **kwargs)


def _build_handler_kwargs(route: Route, request: Request) -> dict[str, Any]:
    """Inspect the handler signature and build kwargs from the request.

    Resolution order:
    1. ``request`` parameter (by name or ``Request`` annotation)
    2. ``identity`` parameter (the identity attached by a guard)
    3. Path parameters (by name, converted per the route's converter)
    """
    path_params = request.path_params
    converters = {
        seg.param_name: seg.param_type for seg in parse_path(route.path) if seg.is_param
    }
    sig = inspect.signature(route.handler)
    kwargs: dict[str, Any] = {}

    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif name == "identity":
            kwargs[name] = request.identity
        elif name in path_params:
            kwargs[name] = convert_param(path_params[name], converters.get(name, "str"))

    return kwargs
