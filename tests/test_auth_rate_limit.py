"""Tests for auth-focused rate limiting middleware."""

from wren.app import App
from wren.http.request import Request
from wren.middleware.auth_rate_limit import AuthRateLimitConfig, AuthRateLimitMiddleware
from wren.security.audit import SecurityEvent, set_security_event_sink
from wren.testing import TestClient


class _Clock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _login_app(middleware: AuthRateLimitMiddleware) -> App:
    app = App()
    app.add_middleware(middleware)

    @app.route("/login", methods=["POST"])
    async def login_route(request: Request):
        _ = await request.body()
        return "ok"

    @app.route("/health", methods=["POST"])
    def health():
        return "ok"

    return app


async def test_limited_path_blocks_after_threshold() -> None:
    app = _login_app(
        AuthRateLimitMiddleware(
            AuthRateLimitConfig(requests=2, window_seconds=60, block_seconds=120, paths=("/login",))
        )
    )

    async with TestClient(app) as client:
        headers = {"x-forwarded-for": "1.2.3.4"}
        r1 = await client.post("/login", json={}, headers=headers)
        r2 = await client.post("/login", json={}, headers=headers)
        r3 = await client.post("/login", json={}, headers=headers)

    assert r1.status == 200
    assert r2.status == 200
    assert r3.status == 429
    assert r3.header("retry-after") == "120"
    assert r3.json == {"error": "Too Many Requests", "status": 429}


async def test_non_limited_path_is_ignored() -> None:
    app = _login_app(
        AuthRateLimitMiddleware(AuthRateLimitConfig(requests=1, paths=("/login",)))
    )

    async with TestClient(app) as client:
        responses = [await client.post("/health") for _ in range(3)]

    assert [r.status for r in responses] == [200, 200, 200]


async def test_limit_is_per_identity_key() -> None:
    app = _login_app(
        AuthRateLimitMiddleware(
            AuthRateLimitConfig(
                requests=1,
                window_seconds=60,
                block_seconds=120,
                paths=("/login",),
                key_header="x-forwarded-for",
            )
        )
    )

    async with TestClient(app) as client:
        first_ip_1 = await client.post("/login", headers={"x-forwarded-for": "10.0.0.1"})
        second_ip_1 = await client.post("/login", headers={"x-forwarded-for": "10.0.0.1"})
        first_ip_2 = await client.post(
            "/login", headers={"x-forwarded-for": "10.0.0.2, 172.16.0.1"}
        )

    assert first_ip_1.status == 200
    assert second_ip_1.status == 429
    assert first_ip_2.status == 200


async def test_falls_back_to_client_address() -> None:
    app = _login_app(
        AuthRateLimitMiddleware(AuthRateLimitConfig(requests=1, paths=("/login",)))
    )

    async with TestClient(app, client_addr=("192.0.2.7", 5000)) as client:
        r1 = await client.post("/login")
        r2 = await client.post("/login")

    assert (r1.status, r2.status) == (200, 429)


async def test_block_expires_with_clock() -> None:
    clock = _Clock()
    app = _login_app(
        AuthRateLimitMiddleware(
            AuthRateLimitConfig(requests=1, window_seconds=10, block_seconds=30, paths=("/login",)),
            clock=clock,
        )
    )

    async with TestClient(app) as client:
        assert (await client.post("/login")).status == 200
        blocked = await client.post("/login")
        assert blocked.status == 429

        clock.now += 10
        still_blocked = await client.post("/login")
        assert still_blocked.status == 429
        assert still_blocked.header("retry-after") == "20"

        clock.now += 21
        assert (await client.post("/login")).status == 200


async def test_rate_limit_emits_security_event() -> None:
    events: list[SecurityEvent] = []
    set_security_event_sink(events.append)
    try:
        app = _login_app(
            AuthRateLimitMiddleware(
                AuthRateLimitConfig(requests=0, paths=("/login",), key_header="x-forwarded-for")
            )
        )
        async with TestClient(app) as client:
            await client.post("/login", headers={"x-forwarded-for": "203.0.113.9"})
    finally:
        set_security_event_sink(None)

    assert [e.name for e in events] == ["auth.rate_limited"]
    assert events[0].details["key"] == "203.0.113.9"
    assert events[0].path == "/login"


async def test_forwarded_header_ignored_by_default() -> None:
    middleware = AuthRateLimitMiddleware(AuthRateLimitConfig(requests=2, paths=("/login",)))
    app = _login_app(middleware)

    async with TestClient(app) as client:
        statuses = [
            (await client.post("/login", headers={"x-forwarded-for": f"10.0.0.{i}"})).status
            for i in range(5)
        ]

    assert statuses == [200, 200, 429, 429, 429]
    assert list(middleware._windows) == ["127.0.0.1"]


async def test_stale_windows_are_evicted() -> None:
    clock = _Clock()
    middleware = AuthRateLimitMiddleware(
        AuthRateLimitConfig(
            requests=5, window_seconds=10, paths=("/login",), key_header="x-forwarded-for"
        ),
        clock=clock,
    )
    app = _login_app(middleware)

    async with TestClient(app) as client:
        for i in range(3):
            await client.post("/login", headers={"x-forwarded-for": f"10.0.0.{i}"})
        assert len(middleware._windows) == 3

        clock.now += 10
        await client.post("/login", headers={"x-forwarded-for": "10.0.0.99"})

    assert list(middleware._windows) == ["10.0.0.99"]


async def test_blocked_window_survives_eviction() -> None:
    clock = _Clock()
    middleware = AuthRateLimitMiddleware(
        AuthRateLimitConfig(
            requests=0,
            window_seconds=10,
            block_seconds=60,
            paths=("/login",),
            key_header="x-forwarded-for",
        ),
        clock=clock,
    )
    app = _login_app(middleware)

    async with TestClient(app) as client:
        await client.post("/login", headers={"x-forwarded-for": "10.0.0.1"})
        clock.now += 20
        await client.post("/login", headers={"x-forwarded-for": "10.0.0.2"})
        blocked = await client.post("/login", headers={"x-forwarded-for": "10.0.0.1"})

    assert blocked.status == 429
    assert blocked.header("retry-after") == "40"
