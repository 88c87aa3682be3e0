"""Builder turning a fixture source tree into a loadable archive."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import ClassVar, Optional, Sequence

from plugin_fixtures.data import CompiledArtifact, Fixture
from plugin_fixtures.env import get_archive_dir

from .archive import write_archive
from .cleaner import remove_compiled_files
from .compiler import compile_sources
from .errors import ArchiveWriteFailed
from .locator import locate_source_tree
from .utils import create_archive_prefix

logger = logging.getLogger(__name__)


class FixtureBuilder:
    """Builds fixtures into temporary zip archives.

    For each fixture the builder locates the sources under
    ``<resource root>/test-plugins/<resource_dir>``, removes stale compiled files, compiles the
    sources in place and packages everything except the sources into a fresh archive in the
    archive directory.

    The builder does not delete the archives it creates; that is the job of the owner of the
    returned artifacts.
    """

    _RESOURCE_PREFIX: ClassVar[str] = "test-plugins"
    """Directory under each resource root that contains the fixture sources."""

    _ARCHIVE_SUFFIX: ClassVar[str] = ".zip"
    """File suffix of the produced archives."""

    def __init__(
        self,
        search_path: Optional[Sequence[Path]] = None,
        archive_dir: Optional[Path] = None,
    ) -> None:
        """Initialize the builder.

        Parameters
        ----------
        search_path : Optional[Sequence[Path]]
            The resource roots. Defaults to ``get_resource_search_path()`` at build time.
        archive_dir : Optional[Path]
            The directory receiving the archives. Defaults to ``get_archive_dir()`` at build time.
        """
        self._search_path = list(search_path) if search_path is not None else None
        self._archive_dir = archive_dir

    def locate(self, fixture: Fixture) -> Path:
        """Resolve the source directory of a fixture.

        Raises
        ------
        ResourceNotFound, NotADirectory, NotReadable
            If the source directory cannot be used.
        """
        resource = f"{self._RESOURCE_PREFIX}/{fixture.resource_dir}"
        return locate_source_tree(resource, self._search_path)

    def build(self, fixture: Fixture) -> CompiledArtifact:
        """Build a fixture into an archive.

        Parameters
        ----------
        fixture : Fixture
            The fixture to build.

        Returns
        -------
        CompiledArtifact
            The produced archive.

        Raises
        ------
        FixtureBuildError
            If any of the build steps fails. No archive is left behind in that case.
        """
        source_dir = self.locate(fixture)
        remove_compiled_files(source_dir)
        result = compile_sources(source_dir)
        logger.debug("Compiled %d files for '%s'", len(result.compiled), fixture.name)

        archive_path = self._create_archive_file(fixture)
        # write_archive removes the file itself when packaging fails
        write_archive(source_dir, archive_path)
        return CompiledArtifact(fixture=fixture.name, path=archive_path)

    def _create_archive_file(self, fixture: Fixture) -> Path:
        try:
            if self._archive_dir is not None:
                archive_dir = self._archive_dir
                archive_dir.mkdir(parents=True, exist_ok=True)
            else:
                archive_dir = get_archive_dir()
            fd, name = tempfile.mkstemp(
                prefix=create_archive_prefix(fixture.resource_dir),
                suffix=self._ARCHIVE_SUFFIX,
                dir=archive_dir,
            )
        except OSError as e:
            raise ArchiveWriteFailed(f"Could not create archive for '{fixture.name}': {e}") from e
        os.close(fd)
        return Path(name).resolve()
