"""Tests for wren.auth.guards — the bearer-token guard."""

import pytest

from wren.auth.guards import BearerTokenGuard
from wren.auth.store import AccountStore
from wren.http.headers import Headers
from wren.http.query import QueryParams
from wren.http.request import Request
from wren.routing.chain import Halt, Proceed
from wren.security.tokens import TokenService


def _request(authorization: str | None = None) -> Request:
    raw = ((b"authorization", authorization.encode("latin-1")),) if authorization else ()
    return Request(
        method="GET",
        path="/profile",
        headers=Headers(raw),
        query=QueryParams(),
        path_params={},
        client=None,
    )


@pytest.fixture
def tokens() -> TokenService:
    return TokenService("guard-secret")


@pytest.fixture
def store() -> AccountStore:
    return AccountStore()


class TestBearerTokenGuard:
    async def test_missing_header_halts(self, tokens: TokenService, store: AccountStore) -> None:
        outcome = await BearerTokenGuard(tokens, store.get_by_id)(_request())

        assert isinstance(outcome, Halt)
        assert outcome.response.status == 401
        assert outcome.response.header("www-authenticate") == "Bearer"
        assert outcome.response.json["error"] == "Missing bearer token."

    async def test_wrong_scheme_halts(self, tokens: TokenService, store: AccountStore) -> None:
        outcome = await BearerTokenGuard(tokens, store.get_by_id)(_request("Basic YWRhOnB3"))

        assert isinstance(outcome, Halt)
        assert outcome.response.status == 401

    async def test_invalid_token_halts(self, tokens: TokenService, store: AccountStore) -> None:
        outcome = await BearerTokenGuard(tokens, store.get_by_id)(_request("Bearer junk"))

        assert isinstance(outcome, Halt)
        assert outcome.response.header("www-authenticate") == 'Bearer error="invalid_token"'

    async def test_unknown_subject_halts(self, tokens: TokenService, store: AccountStore) -> None:
        token = tokens.issue("ghost")
        outcome = await BearerTokenGuard(tokens, store.get_by_id)(_request(f"Bearer {token}"))

        assert isinstance(outcome, Halt)
        assert outcome.response.status == 401

    async def test_valid_token_attaches_identity(
        self, tokens: TokenService, store: AccountStore
    ) -> None:
        account = store.add("ada", "hash")
        token = tokens.issue(account.id)
        request = _request(f"bearer {token}")

        outcome = await BearerTokenGuard(tokens, store.get_by_id)(request)

        assert isinstance(outcome, Proceed)
        assert outcome.request.identity == account
        assert request.identity is None

    async def test_async_identity_loader(self, tokens: TokenService) -> None:
        async def load(subject: str) -> str:
            return f"user:{subject}"

        token = tokens.issue("7")
        outcome = await BearerTokenGuard(tokens, load)(_request(f"Bearer {token}"))

        assert isinstance(outcome, Proceed)
        assert outcome.request.identity == "user:7"
