"""Tests loading the bundled test plugins from their archives."""

import importlib
import sys
import zipfile
import zipimport

import pytest

from plugin_fixtures import ALWAYS_THROW_EXCEPTION, SAMPLING, SERVICE_LOADER
from plugin_fixtures.compile import MANIFEST_NAME
from plugin_fixtures.plugin_api import SamplingPlugin
from plugin_fixtures.registry import FixtureRegistry


def _archive(registry: FixtureRegistry, name: str) -> str:
    return str(registry.outcome.results[name].artifact.path)


def _load_class(qualified_name: str):
    module_name, _, class_name = qualified_name.rpartition(".")
    return getattr(importlib.import_module(module_name), class_name)


def test_bundled_plugins_are_built(built_test_plugins: FixtureRegistry):
    assert built_test_plugins.fixture_names() == [ALWAYS_THROW_EXCEPTION, SAMPLING, SERVICE_LOADER]
    assert len(built_test_plugins.archive_paths()) == 3


def test_bundled_archives_contain_no_sources(built_test_plugins: FixtureRegistry):
    for path in built_test_plugins.archive_paths():
        with zipfile.ZipFile(path) as archive:
            names = archive.namelist()
        assert names[0] == MANIFEST_NAME
        assert "test_plugins/__init__.pyc" in names
        assert not [n for n in names if n.endswith(".py")]


def test_sampling_plugin_loads_from_archive(built_test_plugins: FixtureRegistry, isolated_imports):
    archive = _archive(built_test_plugins, SAMPLING)
    isolated_imports(archive)

    plugin = _load_class(SAMPLING)()
    plugin.configure({})

    assert isinstance(plugin, SamplingPlugin)
    assert isinstance(plugin.static_loader(), zipimport.zipimporter)
    assert isinstance(plugin.loader(), zipimport.zipimporter)
    assert "configure" in plugin.samples()
    assert sys.modules["test_plugins.sampling"].__file__.startswith(archive)


def test_always_throw_exception_plugin(built_test_plugins: FixtureRegistry, isolated_imports):
    isolated_imports(_archive(built_test_plugins, ALWAYS_THROW_EXCEPTION))

    with pytest.raises(RuntimeError, match="I always throw an exception"):
        _load_class(ALWAYS_THROW_EXCEPTION)


def test_service_loader_plugin_finds_its_services(
    built_test_plugins: FixtureRegistry, isolated_imports
):
    isolated_imports(_archive(built_test_plugins, SERVICE_LOADER))

    plugin = _load_class(SERVICE_LOADER)()

    samples = plugin.samples()
    assert list(samples) == ["loaded"]
    assert isinstance(samples["loaded"]["static"], zipimport.zipimporter)
    assert isinstance(samples["loaded"]["instance"], zipimport.zipimporter)


if __name__ == "__main__":
    pytest.main(sys.argv)
