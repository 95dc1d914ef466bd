"""Service container — factories keyed by type or name, with lazy singletons."""

from __future__ import annotations

from collections.abc import Callable, Hashable
from typing import Any

from sprig.errors import ConfigurationError

_UNSET: Any = object()


class Container:
    """A small service registry.

    ``bind`` registers a factory called on every ``resolve``; ``once``
    registers one whose first result is cached::

        container = Container()
        container.once(JWT, lambda c: JWT(config.jwt_secret))
        jwt = container.resolve(JWT)

    Factories receive the container followed by any ``resolve`` arguments.
    A class key that was never bound is instantiated directly.
    """

    __slots__ = ("_bindings", "_instances")

    def __init__(self) -> None:
        self._bindings: dict[Hashable, Callable[..., Any]] = {}
        self._instances: dict[Hashable, Any] = {}

    def bind(self, key: Hashable, factory: Callable[..., Any] | None = None) -> Container:
        """Register *factory* for *key*. Without a factory, *key* must be a class."""
        if factory is None:
            if not isinstance(key, type):
                msg = f"Cannot bind {key!r} without a factory."
                raise ConfigurationError(msg)
            cls = key
            factory = lambda _container, *args: cls(*args)  # noqa: E731
        self._bindings[key] = factory
        self._instances.pop(key, None)
        return self

    def once(self, key: Hashable, factory: Callable[..., Any] | None = None) -> Container:
        """Register a lazy singleton: built on first ``resolve``, then reused."""
        self.bind(key, factory)
        self._instances[key] = _UNSET
        return self

    def resolve(self, key: Hashable, *args: Any) -> Any:
        """Return the service for *key*.

        Raises ``ConfigurationError`` for an unbound key that is not a class.
        """
        if key not in self._bindings:
            if isinstance(key, type):
                return key(*args)
            msg = f"Service {key!r} is not bound and cannot be instantiated."
            raise ConfigurationError(msg)

        cached = self._instances.get(key, _UNSET)
        if cached is not _UNSET:
            return cached

        instance = self._bindings[key](self, *args)
        if key in self._instances:
            self._instances[key] = instance
        return instance

    def __contains__(self, key: object) -> bool:
        return key in self._bindings
