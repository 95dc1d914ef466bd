"""Notes API — JSON app with bearer-token auth on a route group.

Demonstrates App.api() (JSON error bodies), group middleware, the
service container, JWT issuing and checking, and HTTPError from handlers.

Run with any WSGI server:
    gunicorn app:app
"""

import itertools

from sprig import JWT, App, AppConfig, HTTPError, Request, Response
from sprig.errors import InvalidToken

app = App.api(AppConfig(jwt_secret="notes-example-secret-change-me-please"))

_notes: dict[str, dict[str, str]] = {}
_ids = itertools.count(1)


def require_token(request: Request, response: Response, next):
    """Reject requests without a valid ``Authorization: Bearer`` token."""
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPError(status=401, detail="Missing bearer token")
    try:
        claims = app.container.resolve(JWT).decode(token)
    except InvalidToken as exc:
        raise HTTPError(status=401, detail=str(exc)) from exc
    request.parameters["user"] = claims["sub"]
    return next(request, response)


@app.post("/token")
def issue_token(request: Request, response: Response):
    user = request.input("user")
    if not user:
        raise HTTPError.make(400, "Field 'user' is required")
    return Response.json({"token": app.container.resolve(JWT).encode({"sub": user})}, status=201)


def note_routes(app: App) -> None:
    @app.get("/notes")
    def list_notes(request: Request, response: Response):
        owner = request.parameters["user"]
        return Response.json([n for n in _notes.values() if n["owner"] == owner])

    @app.post("/notes")
    def create_note(request: Request, response: Response):
        note_id = str(next(_ids))
        _notes[note_id] = {"id": note_id, "owner": request.parameters["user"], "text": request.input("text", "")}
        return Response.json(_notes[note_id], status=201)

    @app.get("/notes/:id")
    def show_note(request: Request, response: Response):
        note = _notes.get(request.get("id"))
        if note is None or note["owner"] != request.parameters["user"]:
            raise HTTPError.make(404)
        return Response.json(note)


app.group("/api", note_routes, [require_token])
