"""Environment-driven configuration for plugin-fixtures."""

from __future__ import annotations

import os
import tempfile
from importlib import resources
from pathlib import Path
from typing import List


def get_bundled_resource_root() -> Path:
    """Get the resource root shipped inside the package.

    Returns
    -------
    Path
        The ``plugin_fixtures/resources`` directory.
    """
    return Path(str(resources.files("plugin_fixtures") / "resources"))


def get_resource_search_path() -> List[Path]:
    """Get the ordered list of resource roots searched for fixture sources.

    Roots listed in ``PLUGIN_FIXTURES_RESOURCE_PATH`` (separated by ``os.pathsep``) are searched
    first, followed by the bundled resource root.

    Returns
    -------
    List[Path]
        The resource roots, highest priority first.
    """
    roots: List[Path] = []
    value = os.environ.get("PLUGIN_FIXTURES_RESOURCE_PATH", "")
    for entry in value.split(os.pathsep):
        if entry:
            roots.append(Path(entry).expanduser())
    roots.append(get_bundled_resource_root())
    return roots


def get_archive_dir() -> Path:
    """Get the directory that receives the temporary fixture archives.

    The value of ``PLUGIN_FIXTURES_ARCHIVE_DIR`` is used if it is set, otherwise the system
    temporary directory. The directory is created if it does not exist.

    Returns
    -------
    Path
        The archive directory.
    """
    value = os.environ.get("PLUGIN_FIXTURES_ARCHIVE_DIR")
    path = Path(value).expanduser() if value else Path(tempfile.gettempdir())
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_logging_level() -> str:
    """Get the default logging level from ``PLUGIN_FIXTURES_LOGGING_LEVEL`` (default WARNING)."""
    return os.environ.get("PLUGIN_FIXTURES_LOGGING_LEVEL", "WARNING").upper()
