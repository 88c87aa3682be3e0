from plugin_fixtures.catalog import ALWAYS_THROW_EXCEPTION, SAMPLING, SERVICE_LOADER
from plugin_fixtures.compile import (
    ArchiveWriteFailed,
    CleanupFailed,
    CompilationFailed,
    FixtureBuildError,
    FixtureBuilder,
    NotADirectory,
    NotReadable,
    ResourceNotFound,
)
from plugin_fixtures.data import (
    CompiledArtifact,
    Fixture,
    FixtureResult,
    FixtureState,
    InitializationOutcome,
    RegistryState,
)
from plugin_fixtures.logging import configure_logging, get_logger
from plugin_fixtures.registry import (
    FixtureRegistry,
    archive_paths,
    assert_initialized,
    fixture_names,
    plugin_path,
)

__all__ = [
    # Bundled plugin names
    "ALWAYS_THROW_EXCEPTION",
    "SAMPLING",
    "SERVICE_LOADER",
    # Registry API
    "FixtureRegistry",
    "assert_initialized",
    "archive_paths",
    "fixture_names",
    "plugin_path",
    # Builder
    "FixtureBuilder",
    # Errors
    "FixtureBuildError",
    "ResourceNotFound",
    "NotADirectory",
    "NotReadable",
    "CleanupFailed",
    "CompilationFailed",
    "ArchiveWriteFailed",
    # Data types
    "Fixture",
    "FixtureState",
    "CompiledArtifact",
    "FixtureResult",
    "InitializationOutcome",
    "RegistryState",
    # Logging
    "configure_logging",
    "get_logger",
]
