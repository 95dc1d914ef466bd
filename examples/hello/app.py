"""Hello World — the simplest sprig app.

Demonstrates static and parameter routes, returning vs. mutating the
response, middleware, a route group, and a custom error handler.

Run with any WSGI server:
    gunicorn app:app
"""

from sprig import App, Request, Response


def powered_by(request: Request, response: Response, next):
    response = next(request, response)
    return response.with_header("X-Powered-By", "sprig")


app = App()
app.use(powered_by)


@app.get("/")
def index(request: Request, response: Response):
    return response.with_body("Hello, World!")


@app.get("/greet/:name")
def greet(request: Request, response: Response):
    response.with_body(f"Hello, {request.get('name')}!")


@app.get("/custom")
def custom(request: Request, response: Response):
    return Response("Created").with_status(201).with_header("X-Custom", "sprig")


def admin_routes(app: App) -> None:
    @app.get("/stats")
    def stats(request: Request, response: Response):
        return Response.json({"routes": len(app.router.routes)})


app.group("/admin", admin_routes)


@app.error(404)
def not_found(request: Request, exc: Exception):
    return f"Nothing at /{request.path}"
