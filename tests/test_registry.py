"""Tests for registry.py."""

import os
import sys
import threading
import zipfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from plugin_fixtures import registry as registry_module
from plugin_fixtures.compile import MANIFEST_NAME, CompilationFailed, FixtureBuilder
from plugin_fixtures.data import CompiledArtifact, Fixture, FixtureState, RegistryState
from plugin_fixtures.registry import FixtureRegistry

SAMPLING_SOURCE = "class Sampling:\n    def __init__(self):\n        pass\n"
OTHER_SOURCE = "class Other:\n    pass\n"
BROKEN_SOURCE = "class Broken(:\n    pass\n"


@pytest.fixture
def builder(resource_root: Path, tmp_archive_dir: Path) -> FixtureBuilder:
    return FixtureBuilder(search_path=[resource_root])


def _counting_builder(tmp_path: Path) -> MagicMock:
    """Create a mock builder producing empty archives."""
    mock = MagicMock(spec=FixtureBuilder)

    def _build(fixture: Fixture) -> CompiledArtifact:
        path = tmp_path / f"{fixture.resource_dir}.zip"
        path.write_bytes(b"")
        return CompiledArtifact(fixture=fixture.name, path=path)

    mock.build.side_effect = _build
    return mock


def test_end_to_end_single_fixture(plugin_tree, builder: FixtureBuilder):
    plugin_tree("sampling", {"sampling.py": SAMPLING_SOURCE})
    registry = FixtureRegistry.from_catalog({"sampling": "sampling"}, builder)

    registry.assert_initialized()

    assert registry.state == RegistryState.READY
    assert registry.fixture_state("sampling") == FixtureState.BUILT
    assert registry.fixture_names() == ["sampling"]
    paths = registry.archive_paths()
    assert len(paths) == 1
    assert os.path.isabs(paths[0])
    with zipfile.ZipFile(paths[0]) as archive:
        assert archive.namelist() == [MANIFEST_NAME, "sampling.pyc"]
    registry.cleanup()


def test_initialization_is_lazy_and_runs_once(tmp_path: Path):
    mock = _counting_builder(tmp_path)
    registry = FixtureRegistry.from_catalog({"a": "a", "b": "b"}, mock)

    assert registry.state == RegistryState.UNINITIALIZED
    assert registry.fixture_state("a") == FixtureState.PENDING
    assert mock.build.call_count == 0

    first = registry.archive_paths()
    for _ in range(3):
        registry.assert_initialized()
        assert registry.archive_paths() == first
    assert registry.initialize() is registry.outcome

    assert mock.build.call_count == 2
    assert first == [str(tmp_path / "a.zip"), str(tmp_path / "b.zip")]


def test_initialization_runs_once_across_threads(tmp_path: Path):
    mock = _counting_builder(tmp_path)
    registry = FixtureRegistry.from_catalog({"a": "a"}, mock)
    barrier = threading.Barrier(8)
    outcomes = []

    def _worker():
        barrier.wait()
        outcomes.append(registry.initialize())

    threads = [threading.Thread(target=_worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert mock.build.call_count == 1
    assert all(o is outcomes[0] for o in outcomes)


def test_failed_fixture_does_not_stop_siblings(plugin_tree, builder: FixtureBuilder):
    plugin_tree("sampling", {"sampling.py": SAMPLING_SOURCE})
    plugin_tree("broken", {"broken.py": BROKEN_SOURCE})
    plugin_tree("other", {"other.py": OTHER_SOURCE})
    registry = FixtureRegistry.from_catalog(
        {"sampling": "sampling", "broken": "broken", "other": "other"}, builder
    )

    with pytest.raises(AssertionError, match="'broken' failed with CompilationFailed") as excinfo:
        registry.assert_initialized()

    assert isinstance(excinfo.value.__cause__, CompilationFailed)
    assert "broken.py" in excinfo.value.__cause__.diagnostics
    assert registry.state == RegistryState.PARTIALLY_FAILED
    assert registry.fixture_state("broken") == FixtureState.FAILED
    assert registry.fixture_state("sampling") == FixtureState.BUILT
    assert registry.fixture_state("other") == FixtureState.BUILT
    assert registry.fixture_names() == ["sampling", "broken", "other"]
    paths = registry.archive_paths()
    assert len(paths) == 2
    assert [Path(p).name.split(".")[0] for p in paths] == ["sampling", "other"]
    registry.cleanup()


def test_first_error_by_build_order_is_reported(plugin_tree, builder: FixtureBuilder):
    plugin_tree("broken", {"broken.py": BROKEN_SOURCE})
    registry = FixtureRegistry.from_catalog({"missing": "missing", "broken": "broken"}, builder)

    with pytest.raises(AssertionError, match="'missing' failed with ResourceNotFound"):
        registry.assert_initialized()
    # The same failure is replayed on every call
    with pytest.raises(AssertionError, match="'missing'"):
        registry.assert_initialized()
    assert registry.archive_paths() == []


def test_unexpected_errors_are_captured(tmp_path: Path):
    mock = MagicMock(spec=FixtureBuilder)
    mock.build.side_effect = KeyError("boom")
    registry = FixtureRegistry.from_catalog({"a": "a"}, mock)

    outcome = registry.initialize()

    assert isinstance(outcome.error, KeyError)
    with pytest.raises(AssertionError) as excinfo:
        registry.assert_initialized()
    assert excinfo.value.__cause__ is outcome.error


def test_empty_catalog_has_no_plugins():
    registry = FixtureRegistry([])

    with pytest.raises(AssertionError, match="No test plugins loaded"):
        registry.assert_initialized()
    assert registry.archive_paths() == []
    assert registry.fixture_names() == []


def test_duplicate_fixture_names_are_rejected():
    with pytest.raises(ValueError, match="Duplicate"):
        FixtureRegistry(
            [Fixture(name="a", resource_dir="x"), Fixture(name="a", resource_dir="y")]
        )


def test_unknown_fixture_state():
    registry = FixtureRegistry([Fixture(name="a", resource_dir="a")])
    with pytest.raises(KeyError):
        registry.fixture_state("b")


def test_plugin_path_joins_archives(tmp_path: Path):
    registry = FixtureRegistry.from_catalog({"a": "a", "b": "b"}, _counting_builder(tmp_path))

    assert registry.plugin_path() == os.pathsep.join(
        [str(tmp_path / "a.zip"), str(tmp_path / "b.zip")]
    )


def test_cleanup_deletes_archives_and_is_idempotent(plugin_tree, builder: FixtureBuilder):
    plugin_tree("sampling", {"sampling.py": SAMPLING_SOURCE})
    registry = FixtureRegistry.from_catalog({"sampling": "sampling"}, builder)
    paths = registry.archive_paths()
    assert Path(paths[0]).exists()

    registry.cleanup()
    registry.cleanup()

    assert not Path(paths[0]).exists()


def test_cleanup_is_registered_at_exit(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    registered = []
    monkeypatch.setattr(registry_module.atexit, "register", registered.append)
    registry = FixtureRegistry.from_catalog({"a": "a", "b": "b"}, _counting_builder(tmp_path))

    registry.initialize()

    assert registered == [registry.cleanup]


def test_cleanup_failure_is_logged(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog):
    registry = FixtureRegistry.from_catalog({"a": "a"}, _counting_builder(tmp_path))
    registry.initialize()

    def _fail(self, missing_ok=False):
        raise PermissionError("busy")

    monkeypatch.setattr(Path, "unlink", _fail)
    registry.cleanup()

    assert "Could not delete test plugin archive" in caplog.text


def test_rebuild_keeps_source_tree_clean(plugin_tree, builder: FixtureBuilder):
    tree = plugin_tree("sampling", {"pkg/__init__.py": "", "pkg/sampling.py": SAMPLING_SOURCE})

    for _ in range(2):
        registry = FixtureRegistry.from_catalog({"sampling": "sampling"}, builder)
        registry.assert_initialized()
        registry.cleanup()

    assert sorted(p.relative_to(tree).as_posix() for p in tree.rglob("*.pyc")) == [
        "pkg/__init__.pyc",
        "pkg/sampling.pyc",
    ]


def test_shared_instance(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(FixtureRegistry, "_instance", None)

    registry = FixtureRegistry.get_instance()

    assert registry is FixtureRegistry.get_instance()
    assert registry.state == RegistryState.UNINITIALIZED
    assert registry_module.fixture_names() == [
        "test_plugins.always_throw_exception.AlwaysThrowException",
        "test_plugins.sampling.Sampling",
        "test_plugins.service_loader.ServiceLoaderPlugin",
    ]


if __name__ == "__main__":
    pytest.main(sys.argv)
