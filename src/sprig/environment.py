"""``.env`` file loading.

Reads ``KEY=VALUE`` lines into a dict with light type coercion. The
process environment is never consulted or modified.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

logger = logging.getLogger("sprig.config")

_QUOTED = re.compile(r"""^(["']).*\1$""")
_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def coerce(raw: str) -> Any:
    """Convert an unquoted ``.env`` value to a Python value.

    ``true``/``false``/``null`` (any case) become ``True``/``False``/``None``.
    Numbers become ``int``, or ``float`` when they contain ``.`` or an
    exponent. Everything else stays a string.
    """
    lowered = raw.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered == "null":
        return None
    if _NUMBER.match(raw):
        if "." in raw or "e" in lowered:
            return float(raw)
        return int(raw)
    return raw


class Environment:
    """Values parsed from one or more ``.env`` files.

    Later files override earlier ones::

        env = Environment().load(".env").load(".env.local")
        debug = env.get("APP_DEBUG", False)
    """

    __slots__ = ("data",)

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self.data: dict[str, Any] = dict(data or {})

    def load(self, path: str | Path) -> Environment:
        """Parse *path* into ``data``. A missing file is silently skipped.

        Blank lines, ``#`` comments, and lines without ``=`` are ignored.
        Values wrapped in matching single or double quotes are kept as
        strings with the quotes removed.
        """
        file = Path(path)
        if not file.is_file():
            logger.debug("No environment file at %s", file)
            return self

        for line in file.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#") or "=" not in stripped:
                continue

            name, _, value = stripped.partition("=")
            name = name.strip()
            value = value.strip()

            if _QUOTED.match(value):
                self.data[name] = value[1:-1]
            else:
                self.data[name] = coerce(value)

        return self

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for *key*, or *default* if unset or ``null``."""
        value = self.data.get(key)
        return default if value is None else value
