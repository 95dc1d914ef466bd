"""Test client for sprig applications.

Builds ``Request`` objects directly and runs them through ``App.handle``:
no server, no WSGI translation, same Response type as production.
Cookies set by responses are remembered and sent on later requests,
so session flows can be exercised across calls.
"""

from __future__ import annotations

import json as json_module
from typing import Any
from urllib.parse import quote, urlencode

from sprig.app import App
from sprig.http.request import Request
from sprig.http.response import Response


class TestClient:
    """Synchronous test client.

    Usage::

        client = TestClient(app)
        response = client.get("/user/42")
        assert response.status == 200
    """

    __test__ = False  # Tell pytest this is not a test class

    __slots__ = ("app", "cookies")

    def __init__(self, app: App) -> None:
        self.app = app
        self.cookies: dict[str, str] = {}

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        query: dict[str, str] | None = None,
        body: bytes | str = b"",
        form: dict[str, str] | None = None,
        json: Any = None,
    ) -> Response:
        """Send a request and return the app's Response."""
        all_headers = dict(headers or {})
        if form is not None:
            body = urlencode(form)
            all_headers.setdefault("Content-Type", "application/x-www-form-urlencoded")
        elif json is not None:
            body = json_module.dumps(json)
            all_headers.setdefault("Content-Type", "application/json")
        if self.cookies:
            jar = "; ".join(f"{name}={value}" for name, value in self.cookies.items())
            all_headers.setdefault("Cookie", jar)

        uri = f"{path}?{urlencode(query)}" if query else path
        request = Request.create(method, uri, headers=all_headers, body=body)

        response = self.app.handle(request)
        self._remember_cookies(response)
        return response

    def _remember_cookies(self, response: Response) -> None:
        for cookie in response.cookies:
            if cookie.max_age == 0:
                self.cookies.pop(cookie.name, None)
            else:
                self.cookies[cookie.name] = quote(cookie.value, safe="")

    def get(self, path: str, **kwargs: Any) -> Response:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Response:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Response:
        return self.request("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> Response:
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Response:
        return self.request("DELETE", path, **kwargs)
