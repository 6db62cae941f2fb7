"""Error handling pipeline for wren requests.

Maps HTTPError exceptions and unexpected failures to JSON error responses,
using registered error handlers when present.
"""

import inspect
import logging
import traceback
from collections.abc import Callable
from typing import Any

from wren.errors import HTTPError
from wren.http.request import Request
from wren.http.response import Response, json_response
from wren.server.negotiation import negotiate

logger = logging.getLogger("wren.server")


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    Supports both sync and async error handlers.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    if inspect.isawaitable(result):
        result = await result
    return negotiate(result)


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)

    # Try exact exception type, then status code
    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        # Keep the exception's status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    response = json_response(
        {"error": exc.detail or f"Error {exc.status}", "status": exc.status},
        status=exc.status,
    )
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(500) or error_handlers.get(type(exc))
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        return response if response.status != 200 else response.with_status(500)

    body: dict[str, Any] = {"error": "Internal Server Error", "status": 500}
    if debug:
        body["exception"] = repr(exc)
        body["traceback"] = traceback.format_exception(exc)
    return json_response(body, status=500)
