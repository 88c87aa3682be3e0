"""Compiler subsystem package.

This package turns fixture source trees into loadable archives. It includes:
- FixtureBuilder: locates, cleans, compiles and packages one fixture
- locate_source_tree: resolution of fixture sources on the resource search path
- remove_compiled_files: removal of stale compiled output
- compile_sources: in-process compilation with import resolution
- write_archive: deterministic packaging of the compiled tree

The typical workflow is:
1. Create a builder: builder = FixtureBuilder()
2. Build a fixture: artifact = builder.build(Fixture(name="...", resource_dir="sampling"))
3. Put artifact.path on the plugin search path
"""

from .archive import MANIFEST_NAME, MANIFEST_VERSION, write_archive
from .builder import FixtureBuilder
from .cleaner import remove_compiled_files
from .compiler import CompileResult, compile_sources
from .errors import (
    ArchiveWriteFailed,
    CleanupFailed,
    CompilationFailed,
    FixtureBuildError,
    NotADirectory,
    NotReadable,
    ResourceNotFound,
)
from .locator import locate_source_tree

__all__ = [
    "ArchiveWriteFailed",
    "CleanupFailed",
    "CompilationFailed",
    "CompileResult",
    "FixtureBuildError",
    "FixtureBuilder",
    "MANIFEST_NAME",
    "MANIFEST_VERSION",
    "NotADirectory",
    "NotReadable",
    "ResourceNotFound",
    "compile_sources",
    "locate_source_tree",
    "remove_compiled_files",
    "write_archive",
]
