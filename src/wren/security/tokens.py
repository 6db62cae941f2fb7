"""Signed, timestamped bearer tokens.

Tokens are ``itsdangerous`` URL-safe timed signatures over a small JSON
payload ``{"sub": <subject>, "jti": <random id>}``. They are signed, not
encrypted: never put secrets in the subject.
"""

import logging
import secrets
import threading
import time
from collections.abc import Callable
from typing import Any

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from wren.errors import ConfigurationError

logger = logging.getLogger("wren.security")


class TokenService:
    """Issue and verify bearer tokens for a subject (usually an account id).

    Usage::

        tokens = TokenService(secret_key=config.secret_key, max_age=3600)
        token = tokens.issue(account.id)
        tokens.verify(token)   # -> account.id
        tokens.revoke(token)
        tokens.verify(token)   # -> None
    """

    __slots__ = ("_clock", "_lock", "_revoked", "_serializer", "max_age")

    def __init__(
        self,
        secret_key: str,
        *,
        max_age: int = 3600,
        salt: str = "wren.auth.token",
        clock: Callable[[], float] | None = None,
    ) -> None:
        if not secret_key:
            msg = "TokenService requires a non-empty secret_key."
            raise ConfigurationError(msg)
        if max_age <= 0:
            msg = f"Token max_age must be positive, got {max_age}."
            raise ConfigurationError(msg)
        self.max_age = max_age
        self._serializer = URLSafeTimedSerializer(secret_key, salt=salt)
        self._lock = threading.Lock()
        self._clock = clock or time.time
        # jti -> time the token expires anyway; pruned once that has passed
        self._revoked: dict[str, float] = {}

    def issue(self, subject: str) -> str:
        """Return a new signed token for *subject*."""
        payload = {"sub": str(subject), "jti": secrets.token_urlsafe(12)}
        return self._serializer.dumps(payload)

    def _load(self, token: str) -> tuple[dict[str, Any], float] | None:
        """Return the payload and its expiry time, or ``None`` if unusable."""
        try:
            payload, signed_at = self._serializer.loads(
                token, max_age=self.max_age, return_timestamp=True
            )
        except SignatureExpired:
            logger.debug("bearer token expired")
            return None
        except BadSignature:
            logger.debug("bearer token signature rejected")
            return None
        if not isinstance(payload, dict) or not isinstance(payload.get("sub"), str):
            return None
        # Whole-second timestamps: still accepted while age == max_age
        return payload, signed_at.timestamp() + self.max_age + 1

    def _prune(self) -> None:
        """Forget revocations of tokens that have expired. Caller holds the lock."""
        now = self._clock()
        for jti in [j for j, expires in self._revoked.items() if expires <= now]:
            del self._revoked[jti]

    def verify(self, token: str) -> str | None:
        """Return the token's subject, or ``None`` if invalid, expired or revoked."""
        if not token:
            return None
        loaded = self._load(token)
        if loaded is None:
            return None
        payload, _ = loaded
        with self._lock:
            self._prune()
            if payload.get("jti") in self._revoked:
                return None
        return payload["sub"]

    def revoke(self, token: str) -> bool:
        """Revoke a valid token. Returns ``False`` if it was already unusable."""
        loaded = self._load(token)
        if loaded is None:
            return False
        payload, expires_at = loaded
        with self._lock:
            self._prune()
            self._revoked[str(payload.get("jti"))] = expires_at
        return True
