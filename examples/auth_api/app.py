"""Auth API — register, log in, and use the bearer token on your own routes.

Mounts the bundled auth table under ``/api/auth`` and a second table of
per-account notes that reuses the same token guard. Dict returns become
JSON; ``(value, 201)`` tuples set the status.

Run:
    cd examples/auth_api && WREN_SECRET_KEY=dev python app.py

Try it:
    curl -X POST localhost:8000/api/auth/register -d '{"username":"ada","password":"correct horse"}'
    curl -X POST localhost:8000/api/auth/login -d '{"username":"ada","password":"correct horse"}'
    curl localhost:8000/api/notes -H "Authorization: Bearer <token>"
"""

import os
import threading

from wren import App, AppConfig, Request, RouteTable
from wren.auth import AccountStore, AuthController, BearerTokenGuard, build_auth_routes
from wren.errors import BadRequest
from wren.security import TokenService

config = AppConfig(secret_key=os.environ.get("WREN_SECRET_KEY", "example-only-secret"))

store = AccountStore()
tokens = TokenService(config.secret_key, max_age=config.token_max_age)
verify = BearerTokenGuard(tokens, store.get_by_id)


# ---------------------------------------------------------------------------
# Notes, keyed by account id
# ---------------------------------------------------------------------------

_notes: dict[str, list[str]] = {}
_lock = threading.Lock()


def list_notes(request: Request):
    with _lock:
        return {"notes": list(_notes.get(request.identity.id, []))}


async def add_note(request: Request):
    data = await request.json()
    text = data.get("text") if isinstance(data, dict) else None
    if not isinstance(text, str) or not text.strip():
        raise BadRequest("'text' is required.")
    with _lock:
        notes = _notes.setdefault(request.identity.id, [])
        notes.append(text.strip())
        return {"id": len(notes), "text": notes[-1]}, 201


def logout(request: Request):
    _, _, token = (request.authorization or "").partition(" ")
    tokens.revoke(token.strip())
    return None


notes = RouteTable("notes")
notes.get("/notes", verify, list_notes)
notes.post("/notes", verify, add_note)

# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = App(config)
app.mount(build_auth_routes(AuthController(store, tokens), verify), prefix="/api/auth")
app.mount(notes, prefix="/api")
app.route("/api/auth/logout", methods=["POST"], guards=(verify,))(logout)


if __name__ == "__main__":
    app.run()
