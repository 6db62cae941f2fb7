"""In-memory account storage.

Thread-safe; usernames are unique case-insensitively. Swap in any object
with the same three methods to back the controllers with a database.
"""

import threading
import uuid
from dataclasses import dataclass, field
from time import time
from typing import Any

from wren.errors import WrenError


class AccountExists(WrenError):
    """Raised by ``AccountStore.add`` when the username is taken."""


@dataclass(frozen=True, slots=True)
class Account:
    """A registered account. Satisfies the ``id`` / ``is_authenticated`` user shape."""

    id: str
    username: str
    password_hash: str = field(repr=False)
    created_at: float = field(default_factory=time)
    is_authenticated: bool = True

    def public(self) -> dict[str, Any]:
        """Profile fields safe to return to the account owner."""
        return {
            "id": self.id,
            "username": self.username,
            "created_at": self.created_at,
        }


class AccountStore:
    """Accounts keyed by id, with a case-folded username index."""

    __slots__ = ("_by_id", "_by_username", "_lock")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_id: dict[str, Account] = {}
        self._by_username: dict[str, str] = {}

    def add(self, username: str, password_hash: str) -> Account:
        """Create and store an account.

        Raises ``AccountExists`` if *username* is already registered.
        """
        key = username.casefold()
        with self._lock:
            if key in self._by_username:
                msg = f"Account {username!r} already exists."
                raise AccountExists(msg)
            account = Account(id=uuid.uuid4().hex, username=username, password_hash=password_hash)
            self._by_id[account.id] = account
            self._by_username[key] = account.id
            return account

    def get_by_username(self, username: str) -> Account | None:
        with self._lock:
            account_id = self._by_username.get(username.casefold())
            return self._by_id.get(account_id) if account_id else None

    def get_by_id(self, account_id: str) -> Account | None:
        with self._lock:
            return self._by_id.get(account_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_id)
