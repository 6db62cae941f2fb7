"""Account handlers: register, login, profile.

Each handler takes the ``Request`` and returns a JSON-able value (or
raises an ``HTTPError``); the server turns both into responses.

Accepted request bodies (JSON objects)::

    POST /register  {"username": "ada", "password": "correct horse"}
    POST /login     {"username": "ada", "password": "correct horse"}

``user`` and ``pass`` are accepted as aliases for ``username`` and
``password``.
"""

import logging
import re
from typing import Any

from wren.auth.store import AccountExists, AccountStore
from wren.errors import BadRequest, Conflict, Unauthorized
from wren.http.request import Request
from wren.security.audit import emit_security_event
from wren.security.passwords import hash_password, verify_password
from wren.security.tokens import TokenService

logger = logging.getLogger("wren.auth")

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{3,32}$")
MIN_PASSWORD_LENGTH = 8

# Verified against when the username is unknown, so both failures cost one argon2 check
_DUMMY_HASH = hash_password("wren-unknown-account")


async def _read_credentials(request: Request) -> tuple[str, str]:
    """Pull ``(username, password)`` out of a JSON body or raise ``BadRequest``."""
    data = await request.json()
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object.")

    username = data.get("username", data.get("user"))
    password = data.get("password", data.get("pass"))
    if not isinstance(username, str) or not isinstance(password, str):
        raise BadRequest("Both 'username' and 'password' are required strings.")
    return username.strip(), password


class AuthController:
    """Register accounts, exchange credentials for tokens, serve profiles."""

    __slots__ = ("_store", "_tokens")

    def __init__(self, store: AccountStore, tokens: TokenService) -> None:
        self._store = store
        self._tokens = tokens

    async def register(self, request: Request) -> tuple[dict[str, Any], int]:
        """Create an account. 201 on success, 400 invalid input, 409 taken."""
        username, password = await _read_credentials(request)
        if not USERNAME_PATTERN.match(username):
            raise BadRequest(
                "Username must be 3-32 characters of letters, digits, '_', '.' or '-'."
            )
        if len(password) < MIN_PASSWORD_LENGTH:
            raise BadRequest(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")

        try:
            account = self._store.add(username, hash_password(password))
        except AccountExists:
            emit_security_event(
                "auth.register.conflict", request=request, details={"username": username}
            )
            raise Conflict(f"Username {username!r} is already registered.") from None

        logger.info("registered account %s", account.id)
        emit_security_event("auth.register.success", request=request, user_id=account.id)
        return account.public(), 201

    async def login(self, request: Request) -> dict[str, Any]:
        """Verify credentials and issue a bearer token. 401 on mismatch."""
        username, password = await _read_credentials(request)
        account = self._store.get_by_username(username)
        if account is None:
            verify_password(password, _DUMMY_HASH)
        if account is None or not verify_password(password, account.password_hash):
            emit_security_event(
                "auth.login.failure", request=request, details={"username": username}
            )
            raise Unauthorized("Invalid username or password.")

        emit_security_event("auth.login.success", request=request, user_id=account.id)
        return {
            "access_token": self._tokens.issue(account.id),
            "token_type": "Bearer",
            "expires_in": self._tokens.max_age,
        }

    async def profile(self, request: Request) -> dict[str, Any]:
        """Return the profile of the identity attached by the token guard."""
        account = request.identity
        if account is None:
            raise Unauthorized("Authentication required.")
        return account.public()
