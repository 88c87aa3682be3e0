"""Resolution of fixture source directories on the resource search path."""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath
from typing import Optional, Sequence

from plugin_fixtures.env import get_resource_search_path

from .errors import NotADirectory, NotReadable, ResourceNotFound


def locate_source_tree(resource_dir: str, search_path: Optional[Sequence[Path]] = None) -> Path:
    """Resolve a resource directory to a readable directory on the local filesystem.

    The roots of the search path are tried in order and the first root containing
    ``resource_dir`` wins, even if that entry turns out not to be a usable directory.

    Parameters
    ----------
    resource_dir : str
        The ``/``-separated path of the resource, relative to a resource root.
    search_path : Optional[Sequence[Path]]
        The resource roots. Defaults to ``get_resource_search_path()``.

    Returns
    -------
    Path
        The absolute path of the directory.

    Raises
    ------
    ResourceNotFound
        If no root contains the resource, or the resource path is not relative.
    NotADirectory
        If the resource is not a directory.
    NotReadable
        If the directory cannot be read or listed.
    """
    relative = PurePosixPath(resource_dir)
    if relative.is_absolute() or ".." in relative.parts:
        raise ResourceNotFound(f"Invalid test plugin resource: {resource_dir}")

    roots = list(search_path) if search_path is not None else get_resource_search_path()
    for root in roots:
        candidate = Path(root).joinpath(*relative.parts)
        if not candidate.exists():
            continue
        if not candidate.is_dir():
            raise NotADirectory(f"Resource is not a directory: {resource_dir} ({candidate})")
        if not os.access(candidate, os.R_OK | os.X_OK):
            raise NotReadable(f"Resource directory is not readable: {resource_dir} ({candidate})")
        return candidate.resolve()

    searched = os.pathsep.join(str(root) for root in roots)
    raise ResourceNotFound(f"Could not find test plugin resource: {resource_dir} in {searched}")
