"""Process-wide registry building the test plugin fixtures exactly once."""

from __future__ import annotations

import atexit
import os
import threading
from typing import ClassVar, Dict, List, Mapping, Optional, Sequence

from .catalog import DEFAULT_FIXTURES
from .compile import FixtureBuilder
from .data import (
    Fixture,
    FixtureResult,
    FixtureState,
    InitializationOutcome,
    RegistryState,
)
from .logging import get_logger

logger = get_logger("FixtureRegistry")


class FixtureRegistry:
    """Builds a fixed catalog of fixtures into archives once and exposes the result.

    Initialization runs on first access, or eagerly through ``initialize()``, and never again
    afterwards. A fixture that fails to build does not stop the other fixtures; its error is
    captured instead of raised, and the first captured error is replayed by
    ``assert_initialized()``. Every consumer must call ``assert_initialized()`` before relying on
    the archives, otherwise a failed build shows up as a silently missing archive.

    The archives are deleted at process exit, or earlier through ``cleanup()``.

    Use ``get_instance()`` to obtain the registry of the bundled catalog.
    """

    _instance: ClassVar[Optional["FixtureRegistry"]] = None
    """Shared registry of the bundled catalog."""

    _instance_lock: ClassVar[threading.Lock] = threading.Lock()

    _fixtures: List[Fixture]
    """The catalog, in build order."""

    _outcome: Optional[InitializationOutcome]
    """The published initialization outcome. Written once, under the lock."""

    def __init__(
        self, fixtures: Sequence[Fixture], builder: Optional[FixtureBuilder] = None
    ) -> None:
        """Initialize the registry. Nothing is built until first access.

        Parameters
        ----------
        fixtures : Sequence[Fixture]
            The catalog to build, in build order.
        builder : Optional[FixtureBuilder]
            The builder to use. Defaults to a builder using the environment configuration.

        Raises
        ------
        ValueError
            If two fixtures share a name.
        """
        names = [f.name for f in fixtures]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate fixture names in catalog: {duplicates}")
        self._fixtures = list(fixtures)
        self._builder = builder if builder is not None else FixtureBuilder()
        self._lock = threading.Lock()
        self._state = RegistryState.UNINITIALIZED
        self._outcome = None
        self._cleanup_registered = False

    @classmethod
    def from_catalog(
        cls, catalog: Mapping[str, str], builder: Optional[FixtureBuilder] = None
    ) -> "FixtureRegistry":
        """Create a registry from a mapping of fixture name to resource directory."""
        fixtures = [Fixture(name=name, resource_dir=d) for name, d in catalog.items()]
        return cls(fixtures, builder)

    @classmethod
    def get_instance(cls) -> "FixtureRegistry":
        """Get the shared registry of the bundled catalog. It is created on first call."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = FixtureRegistry(DEFAULT_FIXTURES)
        return cls._instance

    @property
    def state(self) -> RegistryState:
        return self._state

    @property
    def outcome(self) -> InitializationOutcome:
        """The initialization outcome, initializing first if needed."""
        return self.initialize()

    def initialize(self) -> InitializationOutcome:
        """Build every fixture of the catalog, once.

        Later calls, from any thread, return the outcome of the first call without building
        again.

        Returns
        -------
        InitializationOutcome
            The outcome shared by all callers.
        """
        outcome = self._outcome
        if outcome is not None:
            return outcome
        with self._lock:
            if self._outcome is None:
                self._state = RegistryState.INITIALIZING
                outcome = self._build_all()
                self._outcome = outcome
                self._state = outcome.state
            return self._outcome

    def _build_all(self) -> InitializationOutcome:
        results: Dict[str, FixtureResult] = {}
        for fixture in self._fixtures:
            logger.info("Building test plugin '%s' from '%s'", fixture.name, fixture.resource_dir)
            try:
                artifact = self._builder.build(fixture)
            except Exception as e:
                logger.exception("Could not set up test plugin '%s'", fixture.name)
                results[fixture.name] = FixtureResult(
                    fixture=fixture.name, state=FixtureState.FAILED, error=e
                )
                continue
            results[fixture.name] = FixtureResult(
                fixture=fixture.name, state=FixtureState.BUILT, artifact=artifact
            )
            if not self._cleanup_registered:
                atexit.register(self.cleanup)
                self._cleanup_registered = True
            logger.info("Built test plugin '%s' into %s", fixture.name, artifact.path)
        return InitializationOutcome(results=results)

    def assert_initialized(self) -> None:
        """Ensure that the fixtures were built before continuing.

        Raises
        ------
        AssertionError
            If any fixture failed to build, chained to the captured error, or if no fixture was
            built at all.
        """
        outcome = self.initialize()
        failure = outcome.first_failure
        if failure is not None:
            raise AssertionError(
                f"Test plugins did not initialize completely: '{failure.fixture}' failed with "
                f"{type(failure.error).__name__}: {failure.error}"
            ) from failure.error
        if not outcome.artifacts:
            raise AssertionError("No test plugins loaded")

    def fixture_state(self, name: str) -> FixtureState:
        """Get the lifecycle state of a fixture without triggering initialization.

        Raises
        ------
        KeyError
            If the fixture is not part of the catalog.
        """
        if name not in self.fixture_names():
            raise KeyError(f"Unknown fixture '{name}'")
        if self._outcome is None:
            return FixtureState.PENDING
        return self._outcome.results[name].state

    def archive_paths(self) -> List[str]:
        """Get the archive files of all built fixtures.

        Returns
        -------
        List[str]
            Absolute archive paths in catalog order.
        """
        return [str(a.path) for a in self.initialize().artifacts]

    def plugin_path(self) -> str:
        """Get the archive paths joined with ``os.pathsep``, ready for a plugin search path."""
        return os.pathsep.join(self.archive_paths())

    def fixture_names(self) -> List[str]:
        """Get the names of all fixtures of the catalog, in build order."""
        return [f.name for f in self._fixtures]

    def cleanup(self) -> None:
        """Delete the archives built by this registry.

        Deletion is best-effort: archives that cannot be removed are logged and left for the
        operating system. Calling this more than once is safe.
        """
        outcome = self._outcome
        if outcome is None:
            return
        for artifact in outcome.artifacts:
            try:
                artifact.path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Could not delete test plugin archive %s: %s", artifact.path, e)


def assert_initialized() -> None:
    """Ensure the bundled test plugins were built. See ``FixtureRegistry.assert_initialized``."""
    FixtureRegistry.get_instance().assert_initialized()


def archive_paths() -> List[str]:
    """Archive files of the bundled test plugins that were built."""
    return FixtureRegistry.get_instance().archive_paths()


def plugin_path() -> str:
    return FixtureRegistry.get_instance().plugin_path()


def fixture_names() -> List[str]:
    """Class names of the bundled test plugins."""
    return FixtureRegistry.get_instance().fixture_names()
