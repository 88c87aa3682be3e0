"""Strong-typed definitions of the test plugin fixtures and their build artifacts."""

from enum import Enum
from pathlib import Path

from pydantic import model_validator

from .utils import FrozenModelWithDocstrings, NonEmptyString


class FixtureState(str, Enum):
    """Lifecycle state of a single fixture."""

    PENDING = "pending"
    """The fixture has not been built yet."""
    BUILT = "built"
    """The fixture was compiled and packaged into an archive."""
    FAILED = "failed"
    """One of the build steps of the fixture failed."""


class Fixture(FrozenModelWithDocstrings):
    """A named, independently compiled source unit.

    The sources of a fixture live in ``<resource root>/test-plugins/<resource_dir>``. A fixture is
    created from the catalog when the registry is constructed and never changes afterwards.
    """

    name: NonEmptyString
    """The stable identifier exposed to tests, e.g. ``'test_plugins.sampling.Sampling'``."""
    resource_dir: NonEmptyString
    """The relative path of the fixture sources under the test plugin resource directory."""

    @model_validator(mode="after")
    def _validate_resource_dir(self) -> "Fixture":
        """Validate that the resource directory stays inside the resource root.

        Raises
        ------
        ValueError
            If the resource directory is absolute or contains parent directory traversal.
        """
        path = Path(self.resource_dir)
        if path.is_absolute():
            raise ValueError(f"Invalid resource directory (absolute path): {self.resource_dir}")
        if ".." in path.parts:
            raise ValueError(
                f"Invalid resource directory (parent directory traversal): {self.resource_dir}"
            )
        return self


class CompiledArtifact(FrozenModelWithDocstrings):
    """The archive produced for one fixture. Archives are written once and never modified."""

    fixture: NonEmptyString
    """The name of the fixture this archive was built from."""
    path: Path
    """Absolute path of the archive file."""
