"""Removal of compiled output left over by a previous build."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from .errors import CleanupFailed
from .utils import COMPILED_SUFFIX, list_files

logger = logging.getLogger(__name__)


def remove_compiled_files(source_dir: Path) -> List[Path]:
    """Delete every compiled file under a source directory.

    Empty ``__pycache__`` directories are removed as well. The tree is modified in place, so this
    must not run while another build of the same fixture is compiling.

    Parameters
    ----------
    source_dir : Path
        The fixture source directory.

    Returns
    -------
    List[Path]
        The deleted files.

    Raises
    ------
    CleanupFailed
        If a compiled file cannot be deleted.
    """
    stale = list_files(source_dir, lambda p: p.suffix == COMPILED_SUFFIX)
    for path in stale:
        try:
            path.unlink()
        except OSError as e:
            raise CleanupFailed(f"Could not delete old compiled file: {path}", path=path) from e

    for cache_dir in sorted(source_dir.rglob("__pycache__"), reverse=True):
        if cache_dir.is_dir() and not any(cache_dir.iterdir()):
            try:
                cache_dir.rmdir()
            except OSError as e:
                raise CleanupFailed(f"Could not delete {cache_dir}", path=cache_dir) from e

    if stale:
        logger.debug("Removed %d stale compiled files from %s", len(stale), source_dir)
    return stale
