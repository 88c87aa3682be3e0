"""Packaging of compiled fixture trees into zip archives."""

from __future__ import annotations

import logging
import shutil
import zipfile
from pathlib import Path
from typing import List, Union

from .errors import ArchiveWriteFailed
from .utils import SOURCE_SUFFIX, list_files, to_entry_name

logger = logging.getLogger(__name__)

MANIFEST_NAME = "META-INF/MANIFEST.MF"
"""Entry name of the archive manifest. It is always the first entry."""

MANIFEST_VERSION = "1.0"
"""Value of the ``Manifest-Version`` attribute."""

_CHUNK_SIZE = 64 * 1024
_ENTRY_DATE_TIME = (1980, 1, 1, 0, 0, 0)
_ENTRY_MODE = 0o644


def _make_entry(name: str) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(name, date_time=_ENTRY_DATE_TIME)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = _ENTRY_MODE << 16
    return info


def manifest_bytes() -> bytes:
    """Get the content of the manifest entry."""
    return f"Manifest-Version: {MANIFEST_VERSION}\r\n\r\n".encode("utf-8")


def write_archive(source_dir: Path, archive_path: Union[str, Path]) -> List[str]:
    """Package every non-source file of a directory into a new zip archive.

    The manifest is written first, followed by the files in sorted order. Entries carry a fixed
    timestamp, so packaging the same tree twice yields identical archives. File contents are
    streamed in bounded chunks.

    Parameters
    ----------
    source_dir : Path
        The compiled fixture tree.
    archive_path : Union[str, Path]
        The archive to create. An existing file is overwritten.

    Returns
    -------
    List[str]
        The entry names in the order they were written, manifest included.

    Raises
    ------
    ArchiveWriteFailed
        If any file cannot be read or the archive cannot be written. The partial archive is
        removed.
    """
    archive_path = Path(archive_path)
    files = list_files(source_dir, lambda p: p.suffix != SOURCE_SUFFIX)
    entries = [MANIFEST_NAME]
    try:
        with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr(_make_entry(MANIFEST_NAME), manifest_bytes())
            for path in files:
                name = to_entry_name(source_dir, path)
                if name == MANIFEST_NAME:
                    logger.warning("Ignoring manifest shipped in %s", source_dir)
                    continue
                with path.open("rb") as src, archive.open(_make_entry(name), "w") as dst:
                    shutil.copyfileobj(src, dst, _CHUNK_SIZE)
                entries.append(name)
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        archive_path.unlink(missing_ok=True)
        raise ArchiveWriteFailed(f"Could not write archive {archive_path}: {e}") from e

    logger.debug("Wrote %d entries to %s", len(entries), archive_path)
    return entries
