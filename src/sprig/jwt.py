"""HS256 JSON Web Tokens.

Thin codec over PyJWT: one secret, one algorithm, ``exp`` honoured when
present. Verification failures surface as ``InvalidToken``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import jwt as pyjwt

from sprig.errors import ConfigurationError, InvalidToken

ALGORITHM = "HS256"


class JWT:
    """Encode and decode signed tokens with a shared secret.

    Usage::

        codec = JWT(config.jwt_secret)
        token = codec.encode({"sub": "42", "exp": int(time.time()) + 3600})
        claims = codec.decode(token)
    """

    __slots__ = ("_secret",)

    def __init__(self, secret: str) -> None:
        if not secret:
            msg = "JWT secret must not be empty."
            raise ConfigurationError(msg)
        self._secret = secret

    def encode(self, payload: Mapping[str, Any]) -> str:
        return pyjwt.encode(dict(payload), self._secret, algorithm=ALGORITHM)

    def decode(self, token: str) -> dict[str, Any]:
        """Verify *token* and return its claims.

        Raises ``InvalidToken`` for a bad signature, a malformed token,
        or an ``exp`` claim in the past.
        """
        try:
            return pyjwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except pyjwt.ExpiredSignatureError as exc:
            msg = "Token has expired"
            raise InvalidToken(msg) from exc
        except pyjwt.InvalidTokenError as exc:
            msg = f"Invalid token: {exc}"
            raise InvalidToken(msg) from exc
