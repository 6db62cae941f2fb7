"""Route tables — declarative ``(method, path) -> chain`` listings.

A table is built once at startup, frozen, and handed to ``App.mount()``.
It performs no I/O and no validation of requests; it only fixes which
units run, and in which order, for each ``(method, path)``.

Usage::

    table = RouteTable("auth")
    table.post("/register", controller.register)
    table.post("/login", controller.login)
    table.get("/profile", verify_token, controller.profile)
    entries = table.freeze()
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from wren.errors import ConfigurationError

HTTP_METHODS: frozenset[str] = frozenset(
    {"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"}
)


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """One row of a route table.

    ``units`` is the full ordered chain: every unit but the last is a
    guard, the last one is the terminal handler.
    """

    method: str
    path: str
    units: tuple[Callable[..., Any], ...]

    @property
    def guards(self) -> tuple[Callable[..., Any], ...]:
        return self.units[:-1]

    @property
    def handler(self) -> Callable[..., Any]:
        return self.units[-1]


def _normalize_path(path: str) -> str:
    if not path.startswith("/"):
        msg = f"Route path {path!r} must start with '/'."
        raise ConfigurationError(msg)
    return "/" + path.strip("/")


class RouteTable:
    """An ordered, duplicate-free list of route entries.

    Mutable until ``freeze()``; afterwards registration raises
    ``RuntimeError`` and the entries are a tuple shared by every reader.
    """

    __slots__ = ("_entries", "_frozen", "_keys", "name")

    def __init__(self, name: str | None = None) -> None:
        self.name = name
        self._entries: list[RouteEntry] = []
        self._keys: set[tuple[str, str]] = set()
        self._frozen = False

    # -- Registration --

    def route(self, method: str, path: str, *units: Callable[..., Any]) -> RouteEntry:
        """Register *units* (guards..., handler) for ``method path``.

        Raises ``ConfigurationError`` for an unknown method, an empty
        chain, a non-callable unit, or a ``(method, path)`` that is
        already registered in this table.
        """
        if self._frozen:
            msg = f"Route table {self.name or ''!s} is frozen; register routes before mounting."
            raise RuntimeError(msg)

        verb = method.upper()
        if verb not in HTTP_METHODS:
            msg = f"Unsupported HTTP method {method!r} for route {path!r}."
            raise ConfigurationError(msg)
        if not units:
            msg = f"Route {verb} {path!r} needs at least a handler."
            raise ConfigurationError(msg)
        for unit in units:
            if not callable(unit):
                msg = f"Route {verb} {path!r}: {unit!r} is not callable."
                raise ConfigurationError(msg)

        normalized = _normalize_path(path)
        key = (verb, normalized)
        if key in self._keys:
            msg = f"Duplicate route {verb} {normalized!r} in table {self.name or ''!s}."
            raise ConfigurationError(msg)

        entry = RouteEntry(method=verb, path=normalized, units=tuple(units))
        self._keys.add(key)
        self._entries.append(entry)
        return entry

    def get(self, path: str, *units: Callable[..., Any]) -> RouteEntry:
        return self.route("GET", path, *units)

    def post(self, path: str, *units: Callable[..., Any]) -> RouteEntry:
        return self.route("POST", path, *units)

    def put(self, path: str, *units: Callable[..., Any]) -> RouteEntry:
        return self.route("PUT", path, *units)

    def patch(self, path: str, *units: Callable[..., Any]) -> RouteEntry:
        return self.route("PATCH", path, *units)

    def delete(self, path: str, *units: Callable[..., Any]) -> RouteEntry:
        return self.route("DELETE", path, *units)

    # -- Freezing and introspection --

    def freeze(self) -> tuple[RouteEntry, ...]:
        """Stop accepting registrations and return the entries."""
        self._frozen = True
        return tuple(self._entries)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, method: str, path: str) -> RouteEntry | None:
        """Return the entry registered for exactly ``method path``, if any.

        This is a literal lookup on the declared pattern; request matching
        with path parameters is the router's job.
        """
        key = (method.upper(), "/" + path.strip("/"))
        if key not in self._keys:
            return None
        return next(e for e in self._entries if (e.method, e.path) == key)

    def __iter__(self) -> Iterator[RouteEntry]:
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        rows = ", ".join(f"{e.method} {e.path}" for e in self._entries)
        return f"RouteTable({self.name!r}, [{rows}])"
