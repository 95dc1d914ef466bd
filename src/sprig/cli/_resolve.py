"""Locate the App named on the command line."""

import importlib
from functools import reduce

from sprig.app import App


def resolve_app(target: str) -> App:
    """Import *target* and return the App it names.

    *target* is ``"package.module"`` or ``"package.module:name"``; the name
    defaults to ``app`` and may be dotted (``"web:site.app"``) to reach an
    App held on another object. Sprig apps are module-level instances, so
    nothing found is ever called.

    Raises:
        ModuleNotFoundError: The module cannot be imported.
        AttributeError: A name along the dotted path is missing.
        TypeError: The object found is not an App.
    """
    module_name, _, attr_path = target.partition(":")
    obj = reduce(getattr, (attr_path or "app").split("."), importlib.import_module(module_name))

    if not isinstance(obj, App):
        msg = f"{target!r} is a {type(obj).__name__}, expected sprig.App"
        raise TypeError(msg)
    return obj
