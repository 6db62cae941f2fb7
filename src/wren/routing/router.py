"""Compiled router with trie-based path matching.

Routes are registered during setup and compiled into an immutable
lookup structure when the app freezes. Registering the same
``(method, path)`` twice is a configuration error, never a silent
override.
"""

import re
from dataclasses import dataclass

from wren.errors import ConfigurationError, MethodNotAllowed, NotFound
from wren.routing.params import CONVERTERS
from wren.routing.route import PathSegment, Route, RouteMatch


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"             -> [PathSegment("users")]
        "/users/{id}"        -> [PathSegment("users"), PathSegment("{id}", is_param=True, ...)]
        "/users/{id:int}"    -> [..., PathSegment("{id:int}", is_param=True, param_type="int")]
        "/files/{path:path}" -> [..., PathSegment("{path:path}", is_param=True, param_type="path")]

    Raises ``ConfigurationError`` for ``<param>`` placeholders and unknown
    converters.
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("<") and part.endswith(">"):
            msg = (
                f"Route {path!r} uses <param> syntax; wren path parameters "
                "are written as {param}."
            )
            raise ConfigurationError(msg)
        if part.startswith("{") and part.endswith("}"):
            inner = part[1:-1]
            param_name, _, param_type = inner.partition(":")
            param_type = param_type or "str"
            if param_type not in CONVERTERS:
                msg = f"Unknown path converter {param_type!r} in route {path!r}."
                raise ConfigurationError(msg)
            segments.append(
                PathSegment(
                    value=part,
                    is_param=True,
                    param_name=param_name,
                    param_type=param_type,
                )
            )
        else:
            segments.append(PathSegment(value=part))
    return segments


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("catch_all", "children", "param_child", "routes_by_method")

    def __init__(self) -> None:
        self.children: dict[str, _TrieNode] = {}
        # Single parameter child (only one param pattern per level)
        self.param_child: _ParamEdge | None = None
        # Catch-all edge (path converter); consumes the rest of the path
        self.catch_all: _CatchAllEdge | None = None
        self.routes_by_method: dict[str, Route] = {}


@dataclass(slots=True)
class _ParamEdge:
    param_name: str
    param_type: str
    regex: re.Pattern[str]
    node: _TrieNode


@dataclass(slots=True)
class _CatchAllEdge:
    param_name: str
    node: _TrieNode


def _register(node: _TrieNode, route: Route) -> None:
    for method in route.methods:
        existing = node.routes_by_method.get(method)
        if existing is not None:
            msg = (
                f"Duplicate route {method} {route.path!r}: already bound to "
                f"{getattr(existing.handler, '__qualname__', existing.handler)!s}."
            )
            raise ConfigurationError(msg)
    for method in route.methods:
        node.routes_by_method[method] = route


class Router:
    """Compiled router with trie-based path matching.

    Usage::

        router = Router()
        router.add(Route("/login", login, frozenset({"POST"})))
        router.add(Route("/users/{id:int}", show_user, frozenset({"GET"})))
        router.compile()
        match = router.match("POST", "/login")
    """

    __slots__ = ("_compiled", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route to the router. Must be called before compile().

        Raises ``ConfigurationError`` if any of the route's methods is
        already registered for the same path pattern.
        """
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        node = self._root
        for seg in parse_path(route.path):
            if seg.is_param and seg.param_type == "path":
                if node.catch_all is None:
                    node.catch_all = _CatchAllEdge(
                        param_name=seg.param_name or "path",
                        node=_TrieNode(),
                    )
                node = node.catch_all.node
                break

            if seg.is_param:
                if node.param_child is None:
                    pattern, _ = CONVERTERS[seg.param_type]
                    node.param_child = _ParamEdge(
                        param_name=seg.param_name or "",
                        param_type=seg.param_type,
                        regex=re.compile(f"^{pattern}$"),
                        node=_TrieNode(),
                    )
                elif node.param_child.param_name != seg.param_name:
                    msg = (
                        f"Route {route.path!r} names parameter {seg.param_name!r} "
                        f"where another route uses {node.param_child.param_name!r}."
                    )
                    raise ConfigurationError(msg)
                elif node.param_child.param_type != seg.param_type:
                    msg = (
                        f"Route {route.path!r} converts {seg.param_name!r} as "
                        f"{seg.param_type!r} where another route uses "
                        f"{node.param_child.param_type!r}."
                    )
                    raise ConfigurationError(msg)
                node = node.param_child.node
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        _register(node, route)

    @property
    def routes(self) -> list[Route]:
        """Return all registered routes, each once, in trie order."""
        seen: set[int] = set()
        result: list[Route] = []
        stack = [self._root]
        while stack:
            node = stack.pop(0)
            for route in node.routes_by_method.values():
                if id(route) not in seen:
                    seen.add(id(route))
                    result.append(route)
            stack.extend(node.children.values())
            if node.param_child is not None:
                stack.append(node.param_child.node)
            if node.catch_all is not None:
                stack.append(node.catch_all.node)
        return result

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request path and method against compiled routes.

        Returns a ``RouteMatch`` on success.
        Raises ``NotFound`` if no route matches the path.
        Raises ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        result = self._match_node(self._root, parts, 0, {})
        if result is None:
            raise NotFound(f"No route matches {method} {path!r}")

        node, params = result
        route = node.routes_by_method.get(method)
        if route is not None:
            return RouteMatch(route=route, path_params=params)
        raise MethodNotAllowed(frozenset(node.routes_by_method))

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> tuple[_TrieNode, dict[str, str]] | None:
        """Recursively match path parts; static beats param beats catch-all."""
        if index == len(parts):
            if node.routes_by_method:
                return node, params
            return None

        part = parts[index]

        if part in node.children:
            result = self._match_node(node.children[part], parts, index + 1, params)
            if result is not None:
                return result

        edge = node.param_child
        if edge is not None and edge.regex.match(part):
            result = self._match_node(
                edge.node, parts, index + 1, {**params, edge.param_name: part}
            )
            if result is not None:
                return result

        if node.catch_all is not None and node.catch_all.node.routes_by_method:
            remaining = "/".join(parts[index:])
            return node.catch_all.node, {**params, node.catch_all.param_name: remaining}

        return None
