"""HTTP response with a chainable ``.with_*()`` builder API.

A Response is an accumulator threaded through the middleware pipeline.
Every ``.with_*()`` call mutates the instance and returns it, so a
handler may either return the response or just modify it and return
nothing.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from sprig.errors import status_phrase
from sprig.http.cookies import SetCookie

StartResponse: TypeAlias = Callable[[str, list[tuple[str, str]]], Any]


@dataclass(slots=True)
class Response:
    """An HTTP response built up by handlers and middleware.

    Construct with defaults, then chain ``.with_*()`` calls::

        response.with_status(201).with_header("Location", "/user/7").with_body("created")
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: list[tuple[str, str]] = field(default_factory=list)
    cookies: list[SetCookie] = field(default_factory=list)

    # -- Chainable mutations --

    def with_status(self, status: int) -> Response:
        self.status = status
        return self

    def with_body(self, body: str | bytes) -> Response:
        self.body = body
        return self

    def with_header(self, name: str, value: str) -> Response:
        """Append a header. Repeated names are sent as separate lines."""
        self.headers.append((name, value))
        return self

    def with_headers(self, headers: Mapping[str, str] | Iterable[tuple[str, str]]) -> Response:
        pairs = headers.items() if isinstance(headers, Mapping) else headers
        self.headers.extend(pairs)
        return self

    def replace_header(self, name: str, value: str) -> Response:
        """Drop every header called *name* (any case), then set it once."""
        lowered = name.lower()
        self.headers = [(k, v) for k, v in self.headers if k.lower() != lowered]
        self.headers.append((name, value))
        return self

    def with_content_type(self, content_type: str) -> Response:
        self.content_type = content_type
        return self

    def with_cookie(
        self,
        name: str,
        value: str,
        *,
        max_age: int | None = None,
        path: str = "/",
        domain: str | None = None,
        secure: bool = False,
        httponly: bool = True,
        samesite: str = "lax",
    ) -> Response:
        """Attach a ``Set-Cookie`` directive."""
        self.cookies.append(
            SetCookie(
                name=name,
                value=value,
                max_age=max_age,
                path=path,
                domain=domain,
                secure=secure,
                httponly=httponly,
                samesite=samesite,
            )
        )
        return self

    def without_cookie(self, name: str, path: str = "/") -> Response:
        """Tell the client to delete a cookie (Max-Age=0)."""
        self.cookies.append(SetCookie.expired(name, path))
        return self

    # -- Factories --

    @classmethod
    def json(cls, data: Any, status: int = 200) -> Response:
        """A response whose body is *data* serialized as JSON."""
        return cls(
            body=json_module.dumps(data),
            status=status,
            content_type="application/json",
        )

    @classmethod
    def redirect(cls, url: str, status: int = 302) -> Response:
        return cls(status=status).with_header("Location", url)

    # -- Body helpers --

    @property
    def body_bytes(self) -> bytes:
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body

    def get_header(self, name: str) -> str | None:
        """First value of header *name* (case-insensitive), or None."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None

    # -- Wire output --

    @property
    def status_line(self) -> str:
        return f"{self.status} {status_phrase(self.status)}"

    def header_list(self) -> list[tuple[str, str]]:
        """Headers as sent on the wire.

        Adds Content-Type and Content-Length unless a handler set them,
        and one Set-Cookie line per attached cookie.
        """
        names = {key.lower() for key, _ in self.headers}
        wire = list(self.headers)
        if "content-type" not in names and self.content_type:
            wire.append(("Content-Type", self.content_type))
        if "content-length" not in names:
            wire.append(("Content-Length", str(len(self.body_bytes))))
        wire.extend(("Set-Cookie", cookie.to_header_value()) for cookie in self.cookies)
        return wire

    def send(self, start_response: StartResponse) -> list[bytes]:
        """Start a WSGI response and return the body iterable."""
        start_response(self.status_line, self.header_list())
        return [self.body_bytes]
