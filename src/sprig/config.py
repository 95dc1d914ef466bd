"""Application configuration.

AppConfig is a frozen dataclass built either directly in code or from a
parsed ``.env`` file via ``AppConfig.from_environment``.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

from sprig.environment import Environment

# AppConfig field -> .env key
_ENV_KEYS: dict[str, str] = {
    "debug": "APP_DEBUG",
    "secret_key": "APP_SECRET_KEY",
    "content_type": "APP_CONTENT_TYPE",
    "session_cookie": "SESSION_COOKIE",
    "session_max_age": "SESSION_MAX_AGE",
    "jwt_secret": "JWT_SECRET",
    "log_level": "LOG_LEVEL",
}

HTML = "text/html; charset=utf-8"
JSON = "application/json"


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, secret_key="s3cr3t")
    """

    debug: bool = False

    # Security
    secret_key: str = ""
    jwt_secret: str = ""

    # Content type of error responses produced by the app itself
    content_type: str = HTML

    # Sessions
    session_cookie: str = "sprig_session"
    session_max_age: int = 86400  # 24 hours

    log_level: str = "info"

    @classmethod
    def from_environment(cls, env: Environment, **overrides: Any) -> AppConfig:
        """Build a config from ``.env`` values, then apply *overrides*.

        Keys not present in *env* keep their defaults.
        """
        values: dict[str, Any] = {}
        names = {f.name for f in fields(cls)}
        for name, key in _ENV_KEYS.items():
            value = env.get(key)
            if value is not None and name in names:
                values[name] = value
        values.update(overrides)
        if "secret_key" in values:
            values["secret_key"] = str(values["secret_key"])
        if "jwt_secret" in values:
            values["jwt_secret"] = str(values["jwt_secret"])
        return cls(**values)

    @property
    def is_api(self) -> bool:
        """True when errors are rendered as JSON."""
        return self.content_type.startswith(JSON)
