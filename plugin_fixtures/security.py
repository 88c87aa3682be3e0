"""Security naming helpers and the security provider registry.

Principals are written as ``"type:name"``. Resource types and ACL operations are exposed to users
under their PascalCase display names (``"TransactionalId"``, ``"AlterConfigs"``) and map to closed
enums. Security providers are installed from a configured, comma separated list of registered
provider names.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping

from .logging import get_logger

logger = get_logger("SecurityUtils")

SECURITY_PROVIDERS_CONFIG = "security.providers"
"""Config key holding the comma separated names of the security providers to install."""


@dataclass(frozen=True)
class Principal:
    """An authenticated identity, e.g. ``Principal("User", "alice")``."""

    principal_type: str
    name: str

    def __str__(self) -> str:
        return f"{self.principal_type}:{self.name}"


def parse_principal(value: str) -> Principal:
    """Parse a principal of the form ``type:name``.

    Only the first ``:`` separates the type from the name, so names may contain colons.

    Raises
    ------
    ValueError
        If the value is empty or has no separator.
    """
    if not value or ":" not in value:
        raise ValueError(
            f"expected a string in format principalType:principalName but got {value!r}"
        )
    principal_type, _, name = value.partition(":")
    return Principal(principal_type, name)


def to_pascal_case(name: str) -> str:
    """Convert an upper snake case name to PascalCase (``ALTER_CONFIGS`` to ``AlterConfigs``)."""
    return "".join(part[:1].upper() + part[1:].lower() for part in name.split("_"))


def to_snake_case(name: str) -> str:
    """Convert a PascalCase name to upper snake case, e.g. ``AlterConfigs`` to ``ALTER_CONFIGS``."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).upper()


class ResourceType(Enum):
    """Types of resources an ACL can apply to."""

    UNKNOWN = 0
    ANY = 1
    TOPIC = 2
    GROUP = 3
    CLUSTER = 4
    TRANSACTIONAL_ID = 5
    DELEGATION_TOKEN = 6
    USER = 7


class AclOperation(Enum):
    """Operations an ACL can allow or deny."""

    UNKNOWN = 0
    ANY = 1
    ALL = 2
    READ = 3
    WRITE = 4
    CREATE = 5
    DELETE = 6
    ALTER = 7
    DESCRIBE = 8
    CLUSTER_ACTION = 9
    DESCRIBE_CONFIGS = 10
    ALTER_CONFIGS = 11
    IDEMPOTENT_WRITE = 12
    CREATE_TOKENS = 13
    DESCRIBE_TOKENS = 14
    TWO_PHASE_COMMIT = 15


_NAME_TO_RESOURCE_TYPE: Dict[str, ResourceType] = {
    to_pascal_case(member.name): member for member in ResourceType
}
_NAME_TO_OPERATION: Dict[str, AclOperation] = {
    to_pascal_case(member.name): member for member in AclOperation
}


def resource_type(name: str) -> ResourceType:
    """Look up a resource type by display name, ``UNKNOWN`` if there is none."""
    return _NAME_TO_RESOURCE_TYPE.get(name, ResourceType.UNKNOWN)


def operation(name: str) -> AclOperation:
    """Look up an ACL operation by display name, ``UNKNOWN`` if there is none."""
    return _NAME_TO_OPERATION.get(name, AclOperation.UNKNOWN)


def display_name(member: Enum) -> str:
    """Get the display name of a resource type or operation."""
    return to_pascal_case(member.name)


class SecurityProviderError(RuntimeError):
    """Raised when a configured security provider cannot be installed."""


class UnknownProviderError(SecurityProviderError):
    """No provider factory is registered under the configured name."""


class WrongCapabilityError(SecurityProviderError):
    """The factory produced an object that is not a SecurityProviderCreator."""


class ProviderConstructionError(SecurityProviderError):
    """The factory raised while creating the provider creator."""


class SecurityProviderCreator(ABC):
    """Capability interface of the objects that create security providers."""

    def configure(self, options: Mapping[str, Any]) -> None:
        """Configure the creator with the full client configuration."""

    @abstractmethod
    def provider(self) -> Any:
        """Get the provider to install."""
        ...


_PROVIDER_FACTORIES: Dict[str, Callable[[], Any]] = {}
_INSTALLED_PROVIDERS: List[Any] = []


def register_provider(name: str, factory: Callable[[], Any]) -> None:
    """Register a factory of SecurityProviderCreator under a name usable in the configuration.

    Raises
    ------
    ValueError
        If another factory is already registered under the name.
    """
    if name in _PROVIDER_FACTORIES and _PROVIDER_FACTORIES[name] is not factory:
        raise ValueError(f"Security provider '{name}' is already registered")
    _PROVIDER_FACTORIES[name] = factory


def installed_providers() -> List[Any]:
    """Get the installed providers, highest priority first."""
    return list(_INSTALLED_PROVIDERS)


def add_configured_security_providers(configs: Mapping[str, Any]) -> List[Any]:
    """Install the providers named by ``security.providers``.

    The n-th configured provider is inserted at position n of the installed providers, so the
    configured providers take precedence over previously installed ones, in configured order.

    Parameters
    ----------
    configs : Mapping[str, Any]
        The client configuration, also passed to each creator's ``configure``.

    Returns
    -------
    List[Any]
        The installed providers, in configured order.

    Raises
    ------
    UnknownProviderError
        If a name has no registered factory.
    WrongCapabilityError
        If a factory does not produce a SecurityProviderCreator.
    ProviderConstructionError
        If a factory raises.
    """
    value = configs.get(SECURITY_PROVIDERS_CONFIG)
    if not value:
        return []
    names = [n for n in re.sub(r"\s+", "", str(value)).split(",") if n]

    providers: List[Any] = []
    for index, name in enumerate(names):
        factory = _PROVIDER_FACTORIES.get(name)
        if factory is None:
            logger.error("Unrecognized security provider creator '%s'", name)
            raise UnknownProviderError(f"Unrecognized security provider creator '{name}'")
        try:
            creator = factory()
        except Exception as e:
            logger.error("Unexpected implementation of security provider creator '%s'", name)
            raise ProviderConstructionError(
                f"Could not construct security provider creator '{name}': {e}"
            ) from e
        if not isinstance(creator, SecurityProviderCreator):
            logger.error(
                "Creators provided through %s are expected to be SecurityProviderCreator",
                SECURITY_PROVIDERS_CONFIG,
            )
            raise WrongCapabilityError(
                f"Security provider creator '{name}' is a {type(creator).__name__}, "
                "expected a SecurityProviderCreator"
            )
        creator.configure(configs)
        provider = creator.provider()
        _INSTALLED_PROVIDERS.insert(index, provider)
        providers.append(provider)
    return providers
