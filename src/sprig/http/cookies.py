"""Cookie parsing and ``Set-Cookie`` serialization.

Values are percent-quoted on the way out and unquoted on the way in,
so session payloads and other opaque tokens survive the round trip.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote, unquote


def parse_cookies(header: str) -> dict[str, str]:
    """Parse a ``Cookie`` header into a name-value dict.

    Malformed pairs are skipped. Surrounding double quotes are removed.
    """
    cookies: dict[str, str] = {}
    for pair in (header or "").split(";"):
        name, sep, value = pair.strip().partition("=")
        if not sep or not name:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        cookies[name.strip()] = unquote(value)
    return cookies


@dataclass(frozen=True, slots=True)
class SetCookie:
    """One ``Set-Cookie`` directive carried by a Response."""

    name: str
    value: str
    max_age: int | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"

    @classmethod
    def expired(cls, name: str, path: str = "/") -> SetCookie:
        """A directive telling the client to drop *name* immediately."""
        return cls(name=name, value="", max_age=0, path=path)

    def to_header_value(self) -> str:
        attributes = [f"{self.name}={quote(self.value, safe='')}"]
        if self.max_age is not None:
            attributes.append(f"Max-Age={self.max_age}")
        if self.path:
            attributes.append(f"Path={self.path}")
        if self.domain:
            attributes.append(f"Domain={self.domain}")
        attributes.extend(
            flag for flag, enabled in (("Secure", self.secure), ("HttpOnly", self.httponly)) if enabled
        )
        if self.samesite:
            attributes.append(f"SameSite={self.samesite.capitalize()}")
        return "; ".join(attributes)
