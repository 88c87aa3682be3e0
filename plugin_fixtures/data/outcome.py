"""Results of the one-shot fixture initialization."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Optional

from .fixture import CompiledArtifact, FixtureState


class RegistryState(str, Enum):
    """Global state of a fixture registry."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    """Every fixture of the catalog was built."""
    PARTIALLY_FAILED = "partially_failed"
    """At least one fixture failed to build."""


@dataclass(frozen=True)
class FixtureResult:
    """The build result of one fixture."""

    fixture: str
    state: FixtureState
    artifact: Optional[CompiledArtifact] = None
    error: Optional[Exception] = None


@dataclass(frozen=True)
class InitializationOutcome:
    """Process-wide, read-only result of building every fixture of a catalog.

    The outcome is computed exactly once by the registry; all callers observe the same instance.
    ``results`` keeps the build order of the catalog.
    """

    results: Mapping[str, FixtureResult] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "results", MappingProxyType(dict(self.results)))

    @property
    def first_failure(self) -> Optional[FixtureResult]:
        """The first failed fixture by build order, or None if nothing failed."""
        for result in self.results.values():
            if result.state == FixtureState.FAILED:
                return result
        return None

    @property
    def error(self) -> Optional[Exception]:
        """The first error captured during initialization."""
        failure = self.first_failure
        return failure.error if failure is not None else None

    @property
    def artifacts(self) -> List[CompiledArtifact]:
        """Artifacts of all built fixtures, in build order."""
        return [r.artifact for r in self.results.values() if r.artifact is not None]

    @property
    def state(self) -> RegistryState:
        if self.first_failure is not None:
            return RegistryState.PARTIALLY_FAILED
        return RegistryState.READY
