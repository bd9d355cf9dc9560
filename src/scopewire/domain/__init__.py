"""
Domain layer - Core models, signals and contracts.

This layer contains the fundamental rules and models for dependency injection.
It has no dependencies on other layers.
"""

from .enums import Lifetime, ProviderKind
from .events import Event
from .exceptions import (
    CircularDependencyError,
    ConfigurationError,
    DIException,
    DisposalError,
    ScopeError,
    UnresolvedContractError,
)
from .interfaces import IContainer, IRegistrar, IResolver
from .models import ContainerOptions, Registration, ServiceKey

__all__ = [
    # Enums
    "Lifetime",
    "ProviderKind",
    # Events
    "Event",
    # Exceptions
    "DIException",
    "ConfigurationError",
    "CircularDependencyError",
    "UnresolvedContractError",
    "ScopeError",
    "DisposalError",
    # Interfaces
    "IRegistrar",
    "IResolver",
    "IContainer",
    # Models
    "ServiceKey",
    "Registration",
    "ContainerOptions",
]
