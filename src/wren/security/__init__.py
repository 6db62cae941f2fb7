"""Security utilities — password hashing, bearer tokens, audit events.

Password hashing::

    from wren.security import hash_password, verify_password

    hashed = hash_password("my-password")
    ok = verify_password("my-password", hashed)

Bearer tokens::

    from wren.security import TokenService

    tokens = TokenService(secret_key="...", max_age=3600)
    token = tokens.issue("42")
    subject = tokens.verify(token)  # "42", or None when invalid/expired
"""

from wren.security.audit import (
    SecurityEvent,
    emit_security_event,
    logging_sink,
    set_security_event_sink,
)
from wren.security.passwords import hash_password, verify_password
from wren.security.tokens import TokenService

__all__ = [
    "SecurityEvent",
    "TokenService",
    "emit_security_event",
    "hash_password",
    "logging_sink",
    "set_security_event_sink",
    "verify_password",
]
