import sys
from pathlib import Path
from typing import Callable, Dict, Iterator

import pytest

from plugin_fixtures.testing import built_test_plugins  # noqa: F401

PluginTreeFactory = Callable[[str, Dict[str, str]], Path]


@pytest.fixture
def tmp_archive_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Use an isolated temporary directory for the fixture archives.

    This fixture sets PLUGIN_FIXTURES_ARCHIVE_DIR to a unique temporary directory for each test,
    so that archives of different tests never mix.
    """
    archive_dir = tmp_path / "archives"
    monkeypatch.setenv("PLUGIN_FIXTURES_ARCHIVE_DIR", str(archive_dir))
    return archive_dir


@pytest.fixture
def resource_root(tmp_path: Path) -> Path:
    """An empty resource root for test-specific plugin sources."""
    root = tmp_path / "resources"
    (root / "test-plugins").mkdir(parents=True)
    return root


@pytest.fixture
def plugin_tree(resource_root: Path) -> PluginTreeFactory:
    """Factory writing ``{relative path: content}`` into ``<resource_root>/test-plugins/<dir>``."""

    def _make(resource_dir: str, files: Dict[str, str]) -> Path:
        tree = resource_root / "test-plugins" / resource_dir
        tree.mkdir(parents=True, exist_ok=True)
        for rel, content in files.items():
            path = tree / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return tree

    return _make


@pytest.fixture
def isolated_imports(monkeypatch: pytest.MonkeyPatch) -> Iterator[Callable[[str], None]]:
    """Import from archives without leaking the imported modules into other tests.

    Yields a function that prepends an archive to ``sys.path`` for the duration of the test.
    The ``test_plugins`` modules are dropped from ``sys.modules`` afterwards.
    """
    yield lambda archive: monkeypatch.syspath_prepend(archive)
    for name in list(sys.modules):
        if name == "test_plugins" or name.startswith("test_plugins."):
            del sys.modules[name]
