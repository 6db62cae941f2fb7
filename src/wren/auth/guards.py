"""The bearer-token guard placed in front of protected routes."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeAlias

from wren._internal.invoke import invoke
from wren.http.request import Request
from wren.http.response import Response, json_response
from wren.routing.chain import Halt, Outcome, Proceed
from wren.security.audit import emit_security_event
from wren.security.tokens import TokenService

logger = logging.getLogger("wren.auth")

IdentityLoader: TypeAlias = Callable[[str], Awaitable[Any] | Any]


class BearerTokenGuard:
    """Verify ``Authorization: Bearer <token>`` and attach the identity.

    On success the chain continues with ``request.with_identity(identity)``.
    On any failure it halts with 401 and a ``WWW-Authenticate`` challenge,
    so the protected handler never runs.

    Usage::

        verify = BearerTokenGuard(tokens, store.get_by_id)
        table.get("/profile", verify, controller.profile)
    """

    __slots__ = ("_load_identity", "_scheme", "_tokens")

    def __init__(
        self,
        tokens: TokenService,
        load_identity: IdentityLoader,
        *,
        scheme: str = "Bearer",
    ) -> None:
        self._tokens = tokens
        self._load_identity = load_identity
        self._scheme = scheme

    def _extract_token(self, request: Request) -> str | None:
        header = request.authorization
        if not header:
            return None
        scheme, _, token = header.partition(" ")
        if scheme.lower() != self._scheme.lower():
            return None
        token = token.strip()
        return token or None

    def _reject(self, request: Request, reason: str, error: str | None = None) -> Halt:
        challenge = self._scheme if error is None else f'{self._scheme} error="{error}"'
        response: Response = json_response(
            {"error": reason, "status": 401}, status=401
        ).with_header("WWW-Authenticate", challenge)
        logger.debug("rejected %s %s: %s", request.method, request.path, reason)
        return Halt(response)

    async def __call__(self, request: Request) -> Outcome:
        token = self._extract_token(request)
        if token is None:
            return self._reject(request, "Missing bearer token.")

        subject = self._tokens.verify(token)
        if subject is None:
            emit_security_event(
                "auth.token.invalid", request=request, details={"scheme": self._scheme}
            )
            return self._reject(request, "Invalid or expired token.", "invalid_token")

        identity = await invoke(self._load_identity, subject)
        if identity is None:
            emit_security_event("auth.token.unknown_subject", request=request, user_id=subject)
            return self._reject(request, "Invalid or expired token.", "invalid_token")

        return Proceed(request.with_identity(identity))
