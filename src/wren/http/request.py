"""Immutable HTTP request.

Frozen metadata with async body access. Guards derive new requests
(e.g. with an attached identity) instead of mutating the one they got.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field, replace
from typing import Any

from wren._internal.asgi import Receive, Scope
from wren.errors import BadRequest, HTTPError
from wren.http.headers import Headers
from wren.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, etc.) is frozen at creation.
    Body is accessed asynchronously via ``.body()``, ``.json()``, ``.text()``.

    ``identity`` is ``None`` until a guard attaches one with
    ``with_identity()``; handlers behind a token guard can rely on it.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    path_params: dict[str, str]
    client: tuple[str, int] | None
    identity: Any = None

    # Private: ASGI receive callable for body streaming
    _receive: Receive | None = field(default=None, repr=False, compare=False)

    # Private: body cache, shared by every request derived from this one
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # Private: upper bound for the body size (0 = unlimited)
    _max_body: int = field(default=0, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def authorization(self) -> str | None:
        """The raw Authorization header value."""
        return self.headers.get("authorization")

    @property
    def url(self) -> str:
        """Path plus query string."""
        qs = self.query.raw
        if qs:
            return f"{self.path}?{qs.decode('latin-1')}"
        return self.path

    # -- Derivation --

    def with_identity(self, identity: Any) -> Request:
        """Return a copy of this request carrying *identity*."""
        return replace(self, identity=identity)

    def with_path_params(self, path_params: dict[str, str]) -> Request:
        """Return a copy of this request with matched path parameters."""
        return replace(self, path_params=path_params)

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached — the ASGI receive is consumed once, then
        the same bytes are returned on subsequent calls.

        Raises ``HTTPError(413)`` when the body exceeds the configured limit.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks: list[bytes] = []
        size = 0
        async for chunk in self.stream():
            size += len(chunk)
            if self._max_body and size > self._max_body:
                raise HTTPError(status=413, detail="Request body too large")
            chunks.append(chunk)
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes, None]:
        """Stream the request body in chunks."""
        if self._receive is None:
            return
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON.

        Raises ``BadRequest`` if the body is not valid JSON.
        """
        raw = await self.body()
        try:
            return json_module.loads(raw)
        except (UnicodeDecodeError, json_module.JSONDecodeError) as exc:
            raise BadRequest(f"Malformed JSON body: {exc}") from None

    async def text(self) -> str:
        """Read the body as UTF-8 text.

        Raises ``BadRequest`` if the body is not valid UTF-8.
        """
        raw = await self.body()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise BadRequest(f"Body is not valid UTF-8: {exc.reason}") from None

    # -- Factory --

    @classmethod
    def from_asgi(
        cls,
        scope: Scope,
        receive: Receive,
        *,
        max_body: int = 0,
    ) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            path_params={},
            client=tuple(client) if client else None,
            _receive=receive,
            _max_body=max_body,
        )
