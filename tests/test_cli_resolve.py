"""Tests for sprig.cli._resolve — finding the App named on the command line."""

import sys
import types

import pytest

from sprig.app import App
from sprig.cli._resolve import resolve_app


@pytest.fixture
def site_module(monkeypatch: pytest.MonkeyPatch) -> types.ModuleType:
    """A throwaway module on sys.modules holding apps in several places."""
    mod = types.ModuleType("_sprig_site")
    mod.app = App()  # type: ignore[attr-defined]
    mod.admin = App()  # type: ignore[attr-defined]
    mod.site = types.SimpleNamespace(app=App())  # type: ignore[attr-defined]
    mod.create_app = App  # type: ignore[attr-defined]
    mod.title = "not an app"  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "_sprig_site", mod)
    return mod


class TestResolveApp:
    def test_defaults_to_app(self, site_module: types.ModuleType) -> None:
        assert resolve_app("_sprig_site") is site_module.app

    def test_named_attribute(self, site_module: types.ModuleType) -> None:
        assert resolve_app("_sprig_site:admin") is site_module.admin

    def test_dotted_attribute(self, site_module: types.ModuleType) -> None:
        assert resolve_app("_sprig_site:site.app") is site_module.site.app

    def test_callables_are_not_called(self, site_module: types.ModuleType) -> None:
        with pytest.raises(TypeError, match="expected sprig.App"):
            resolve_app("_sprig_site:create_app")

    def test_not_an_app(self, site_module: types.ModuleType) -> None:
        with pytest.raises(TypeError, match="is a str"):
            resolve_app("_sprig_site:title")

    def test_missing_attribute(self, site_module: types.ModuleType) -> None:
        with pytest.raises(AttributeError):
            resolve_app("_sprig_site:site.missing")

    def test_missing_module(self) -> None:
        with pytest.raises(ModuleNotFoundError):
            resolve_app("nonexistent_module_xyz:app")
