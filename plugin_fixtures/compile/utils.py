"""Utility functions shared by the fixture build steps."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Callable, List, Optional

SOURCE_SUFFIX = ".py"
"""Suffix of fixture source files. Source files are never packaged."""

COMPILED_SUFFIX = ".pyc"
"""Suffix of compiled output written next to each source file."""


def list_files(root: Path, predicate: Optional[Callable[[Path], bool]] = None) -> List[Path]:
    """Recursively list the regular files under a directory.

    Parameters
    ----------
    root : Path
        The directory to walk.
    predicate : Optional[Callable[[Path], bool]]
        Optional filter applied to every regular file.

    Returns
    -------
    List[Path]
        The matching files, sorted by their ``/``-separated path relative to ``root`` so that the
        order does not depend on the filesystem.
    """
    files = [p for p in root.rglob("*") if p.is_file() and (predicate is None or predicate(p))]
    return sorted(files, key=lambda p: to_entry_name(root, p))


def to_entry_name(root: Path, path: Path) -> str:
    """Get the archive entry name of a file: its path relative to ``root`` with ``/`` separators.

    Examples
    --------
    >>> to_entry_name(Path("/src"), Path("/src/test_plugins/sampling.pyc"))
    'test_plugins/sampling.pyc'
    """
    return path.relative_to(root).as_posix()


def to_module_name(root: Path, path: Path) -> str:
    """Get the dotted module name of a source file relative to the fixture root.

    ``pkg/__init__.py`` maps to ``pkg`` and ``pkg/mod.py`` maps to ``pkg.mod``.
    """
    parts = list(path.relative_to(root).with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    return ".".join(parts)


def create_archive_prefix(resource_dir: str) -> str:
    """Generate the file name prefix of a fixture archive.

    Parameters
    ----------
    resource_dir : str
        The resource directory of the fixture.

    Returns
    -------
    str
        The last path component of the resource directory, with characters outside
        ``[0-9a-zA-Z_-]`` replaced by underscores, followed by a dot.

    Examples
    --------
    >>> create_archive_prefix("service-loader")
    'service-loader.'
    """
    name = re.sub(r"[^0-9a-zA-Z_\-]", "_", Path(resource_dir).name) or "fixture"
    return name + "."
