"""Tests for wren.routing.router — compiled trie-based router."""

import pytest

from wren.errors import ConfigurationError, MethodNotAllowed, NotFound
from wren.routing.route import Route
from wren.routing.router import Router, parse_path


def _handler() -> str:
    return "ok"


def _other() -> str:
    return "other"


def _route(path: str, methods: frozenset[str] | None = None, handler=_handler) -> Route:
    return Route(path=path, handler=handler, methods=methods or frozenset({"GET"}))


class TestParsePath:
    def test_static(self) -> None:
        segments = parse_path("/profile")
        assert [s.value for s in segments] == ["profile"]
        assert segments[0].is_param is False

    def test_typed_param(self) -> None:
        segments = parse_path("/users/{id:int}")
        assert segments[1].is_param is True
        assert segments[1].param_name == "id"
        assert segments[1].param_type == "int"

    def test_root(self) -> None:
        assert parse_path("/") == []

    def test_rejects_angle_bracket_param(self) -> None:
        with pytest.raises(ConfigurationError, match="<param>"):
            parse_path("/share/<slug>")

    def test_rejects_unknown_converter(self) -> None:
        with pytest.raises(ConfigurationError, match="uuid"):
            parse_path("/users/{id:uuid}")


class TestRouterMatching:
    def test_static_routes(self) -> None:
        r = Router()
        r.add(_route("/register", frozenset({"POST"})))
        r.add(_route("/login", frozenset({"POST"})))
        r.add(_route("/profile"))
        r.compile()

        assert r.match("POST", "/register").route.path == "/register"
        assert r.match("POST", "/login").route.path == "/login"
        assert r.match("GET", "/profile").route.path == "/profile"

    def test_trailing_slash_ignored(self) -> None:
        r = Router()
        r.add(_route("/profile"))
        r.compile()

        assert r.match("GET", "/profile/").route.path == "/profile"

    def test_int_param(self) -> None:
        r = Router()
        r.add(_route("/users/{id:int}"))
        r.compile()

        assert r.match("GET", "/users/42").path_params == {"id": "42"}
        with pytest.raises(NotFound):
            r.match("GET", "/users/alice")

    def test_path_param(self) -> None:
        r = Router()
        r.add(_route("/files/{filepath:path}"))
        r.compile()

        match = r.match("GET", "/files/docs/api/index.html")
        assert match.path_params == {"filepath": "docs/api/index.html"}

    def test_static_preferred_over_param(self) -> None:
        r = Router()
        r.add(_route("/users/me"))
        r.add(_route("/users/{id}"))
        r.compile()

        assert r.match("GET", "/users/me").route.path == "/users/me"
        assert r.match("GET", "/users/42").route.path == "/users/{id}"

    def test_routes_lists_each_route_once(self) -> None:
        r = Router()
        r.add(_route("/login", frozenset({"GET", "POST"})))
        r.add(_route("/profile"))
        r.compile()

        assert sorted(route.path for route in r.routes) == ["/login", "/profile"]


class TestRouterErrors:
    def test_not_found(self) -> None:
        r = Router()
        r.add(_route("/profile"))
        r.compile()

        with pytest.raises(NotFound) as exc_info:
            r.match("GET", "/nonexistent")
        assert exc_info.value.status == 404

    def test_method_not_allowed(self) -> None:
        r = Router()
        r.add(_route("/login", frozenset({"POST"})))
        r.compile()

        with pytest.raises(MethodNotAllowed) as exc_info:
            r.match("GET", "/login")

        assert exc_info.value.status == 405
        assert dict(exc_info.value.headers)["Allow"] == "POST"

    def test_duplicate_method_and_path_rejected(self) -> None:
        r = Router()
        r.add(_route("/login", frozenset({"POST"})))

        with pytest.raises(ConfigurationError, match="Duplicate route POST '/login'"):
            r.add(_route("/login", frozenset({"POST"}), handler=_other))

    def test_same_path_different_methods_allowed(self) -> None:
        r = Router()
        r.add(_route("/login", frozenset({"GET"})))
        r.add(_route("/login", frozenset({"POST"}), handler=_other))
        r.compile()

        assert r.match("POST", "/login").route.handler is _other

    def test_conflicting_param_names_rejected(self) -> None:
        r = Router()
        r.add(_route("/users/{id}"))

        with pytest.raises(ConfigurationError, match="parameter"):
            r.add(_route("/users/{name}/posts"))

    def test_conflicting_param_converters_rejected(self) -> None:
        r = Router()
        r.add(_route("/users/{id}"))

        with pytest.raises(ConfigurationError, match="converts 'id' as 'int'"):
            r.add(_route("/users/{id:int}/posts"))

    def test_same_converter_shared(self) -> None:
        r = Router()
        r.add(_route("/users/{id:int}"))
        r.add(_route("/users/{id:int}/posts"))
        r.compile()

        assert r.match("GET", "/users/7/posts").path_params == {"id": "7"}

    def test_add_after_compile_raises(self) -> None:
        r = Router()
        r.compile()

        with pytest.raises(RuntimeError, match="Cannot add routes after compilation"):
            r.add(_route("/profile"))
