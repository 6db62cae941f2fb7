"""Tests for wren.http.request — the immutable Request."""

from typing import Any

import pytest

from wren.errors import BadRequest, HTTPError
from wren.http.request import Request


def _receiver(*chunks: bytes):
    messages = [
        {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
        for i, chunk in enumerate(chunks)
    ]

    async def receive() -> dict[str, Any]:
        return messages.pop(0) if messages else {"type": "http.disconnect"}

    return receive


def _scope(**overrides: Any) -> dict[str, Any]:
    scope: dict[str, Any] = {
        "type": "http",
        "method": "post",
        "path": "/login",
        "query_string": b"next=%2Fprofile",
        "headers": [
            (b"content-type", b"application/json"),
            (b"authorization", b"Bearer abc"),
        ],
        "client": ["10.0.0.1", 1234],
    }
    scope.update(overrides)
    return scope


class TestFromAsgi:
    def test_metadata(self) -> None:
        request = Request.from_asgi(_scope(), _receiver(b""))

        assert request.method == "POST"
        assert request.path == "/login"
        assert request.content_type == "application/json"
        assert request.authorization == "Bearer abc"
        assert request.query.get("next") == "/profile"
        assert request.client == ("10.0.0.1", 1234)
        assert request.url == "/login?next=%2Fprofile"
        assert request.identity is None

    def test_url_without_query(self) -> None:
        request = Request.from_asgi(_scope(query_string=b""), _receiver(b""))
        assert request.url == "/login"


class TestBody:
    async def test_body_joins_chunks(self) -> None:
        request = Request.from_asgi(_scope(), _receiver(b'{"user":', b' "a"}'))
        assert await request.body() == b'{"user": "a"}'

    async def test_body_is_cached(self) -> None:
        request = Request.from_asgi(_scope(), _receiver(b"hello"))
        assert await request.body() == b"hello"
        assert await request.text() == "hello"

    async def test_derived_request_shares_body(self) -> None:
        request = Request.from_asgi(_scope(), _receiver(b'{"a": 1}'))
        assert await request.json() == {"a": 1}
        assert await request.with_identity("ada").json() == {"a": 1}

    async def test_malformed_json(self) -> None:
        request = Request.from_asgi(_scope(), _receiver(b"{nope"))
        with pytest.raises(BadRequest):
            await request.json()

    async def test_text_rejects_invalid_utf8(self) -> None:
        request = Request.from_asgi(_scope(), _receiver(b"\xff\xfe"))
        with pytest.raises(BadRequest, match="UTF-8"):
            await request.text()

    async def test_body_limit(self) -> None:
        request = Request.from_asgi(_scope(), _receiver(b"1234", b"5678"), max_body=6)
        with pytest.raises(HTTPError) as exc_info:
            await request.body()
        assert exc_info.value.status == 413


class TestDerivation:
    def test_with_identity_returns_copy(self) -> None:
        request = Request.from_asgi(_scope(), _receiver(b""))
        derived = request.with_identity({"id": "1"})

        assert derived.identity == {"id": "1"}
        assert request.identity is None
        assert derived.path == request.path

    def test_with_path_params(self) -> None:
        request = Request.from_asgi(_scope(), _receiver(b""))
        assert request.with_path_params({"id": "7"}).path_params == {"id": "7"}
        assert request.path_params == {}
