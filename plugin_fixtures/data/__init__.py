"""Data layer with strongly-typed fixture and build-result models."""

from .fixture import CompiledArtifact, Fixture, FixtureState
from .outcome import FixtureResult, InitializationOutcome, RegistryState
from .utils import FrozenModelWithDocstrings, NonEmptyString

__all__ = [
    "CompiledArtifact",
    "Fixture",
    "FixtureResult",
    "FixtureState",
    "FrozenModelWithDocstrings",
    "InitializationOutcome",
    "NonEmptyString",
    "RegistryState",
]
