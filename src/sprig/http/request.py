"""HTTP request.

Metadata (method, path, headers, query, cookies, body) is fixed when the
request is built. The one field the framework writes afterwards is
``parameters``, which the router fills with captured path values.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

from sprig.http.cookies import parse_cookies
from sprig.http.datastructures import FormData, Headers, QueryParams

# Methods whose input is read from the query string rather than the body
_QUERY_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})

_FORM_TYPE = "application/x-www-form-urlencoded"
_JSON_TYPE = "application/json"


def _parse_port(value: object, default: int) -> int:
    try:
        return int(str(value))
    except ValueError:
        return default


def _split_host(value: str, default_port: int) -> tuple[str, int]:
    """Split a Host header into host and port.

    IPv6 literals keep their brackets: ``"[::1]:8000"`` gives
    ``("[::1]", 8000)``. A missing or non-numeric port gives *default_port*.
    """
    if ":" not in value.rpartition("]")[2]:
        return value, default_port
    host, _, port_text = value.rpartition(":")
    return host, _parse_port(port_text, default_port)


@dataclass(slots=True)
class Request:
    """An incoming HTTP request.

    ``path`` is stored without leading or trailing slashes
    (``"/user/42/"`` becomes ``"user/42"``), which is the form the router
    splits into segments. ``method`` is always upper-case.
    """

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    query: QueryParams = field(default_factory=QueryParams)
    cookies: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    scheme: str = "http"
    host: str = "localhost"
    port: int = 80
    parameters: dict[str, str] = field(default_factory=dict)

    # Parsed body cache (form/json), filled lazily
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        self.path = self.path.strip("/")

    # -- Computed properties --

    @property
    def content_type(self) -> str:
        """Media type of the body without parameters (``charset`` etc.)."""
        value = self.headers.get("content-type") or ""
        return value.split(";", 1)[0].strip().lower()

    @property
    def url(self) -> str:
        """Path with leading slash plus query string."""
        if self.query.raw:
            return f"/{self.path}?{self.query.raw}"
        return f"/{self.path}"

    # -- Lookup helpers --

    def get(self, key: str, default: Any = None) -> Any:
        """Return a path parameter, falling back to the query string."""
        if key in self.parameters:
            return self.parameters[key]
        return self.query.get(key, default)

    def input(self, key: str, default: Any = None) -> Any:
        """Return a client-supplied value from the natural source for the method.

        GET, HEAD, OPTIONS and TRACE read the query string; every other
        method reads the parsed body.
        """
        if self.method in _QUERY_METHODS:
            return self.query.get(key, default)
        return self.parsed_body().get(key, default)

    # -- Body access --

    def text(self) -> str:
        """The body decoded as UTF-8."""
        return self.body.decode("utf-8")

    def json(self) -> Any:
        """The body parsed as JSON. Raises ``ValueError`` on invalid input."""
        if "_json" not in self._cache:
            self._cache["_json"] = json_module.loads(self.body) if self.body else None
        return self._cache["_json"]

    def form(self) -> FormData:
        """The body parsed as URL-encoded form fields."""
        if "_form" not in self._cache:
            self._cache["_form"] = FormData.parse(self.body)
        return self._cache["_form"]

    def parsed_body(self) -> Mapping[str, Any]:
        """The body as a mapping, chosen by Content-Type.

        Form bodies give ``FormData``, JSON objects give a dict, anything
        else gives an empty dict.
        """
        if self.content_type == _FORM_TYPE:
            return self.form()
        if self.content_type == _JSON_TYPE:
            data = self.json()
            return data if isinstance(data, dict) else {}
        return {}

    # -- Factories --

    @classmethod
    def create(
        cls,
        method: str,
        uri: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes | str = b"",
    ) -> Request:
        """Build a request from a method and a URI such as ``"/user/42?x=1"``."""
        parts = urlsplit(uri)
        header_map = Headers(headers or {})
        raw = body.encode("utf-8") if isinstance(body, str) else body
        return cls(
            method=method,
            path=parts.path,
            headers=header_map,
            query=QueryParams(parts.query),
            cookies=parse_cookies(header_map.get("cookie", "")),
            body=raw,
        )

    @classmethod
    def from_environ(cls, environ: Mapping[str, Any]) -> Request:
        """Build a request from a WSGI environ.

        A ``_method`` field in a URL-encoded POST body overrides the
        request method, so HTML forms can issue PUT, PATCH and DELETE.
        """
        headers = Headers.from_environ(environ)
        scheme = str(environ.get("wsgi.url_scheme", "http")).lower()

        default_port = 443 if scheme == "https" else 80
        host_header = headers.get("host")
        if host_header:
            host, port = _split_host(host_header, default_port)
        else:
            host = str(environ.get("SERVER_NAME", "localhost"))
            port = _parse_port(environ.get("SERVER_PORT"), default_port)

        try:
            length = int(environ.get("CONTENT_LENGTH") or 0)
        except ValueError:
            length = 0
        stream = environ.get("wsgi.input")
        body = stream.read(length) if stream is not None and length > 0 else b""

        request = cls(
            method=str(environ.get("REQUEST_METHOD", "GET")),
            path=str(environ.get("PATH_INFO", "")),
            headers=headers,
            query=QueryParams(str(environ.get("QUERY_STRING", ""))),
            cookies=parse_cookies(headers.get("cookie", "")),
            body=body,
            scheme=scheme,
            host=host,
            port=port,
        )
        if request.method == "POST" and request.content_type == _FORM_TYPE:
            override = request.form().get("_method")
            if override:
                request.method = override.upper()
        return request
