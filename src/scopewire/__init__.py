"""
scopewire: Dependency injection container with lifetime scopes, collections and a bootstrap hook.

Public API exports for the scopewire package.
"""

# Application exports
from scopewire.application.bootstrap_hook import RegisterContainerHook
from scopewire.application.bootstrapper import Bootstrapper
from scopewire.application.builder import ContainerBuilder
from scopewire.application.container import DIContainer
from scopewire.application.scope import Container, LifetimeScope

# Domain exports
from scopewire.domain.enums import Lifetime, ProviderKind
from scopewire.domain.events import Event
from scopewire.domain.exceptions import (
    CircularDependencyError,
    ConfigurationError,
    DIException,
    DisposalError,
    ScopeError,
    UnresolvedContractError,
)
from scopewire.domain.models import ContainerOptions

__version__ = "0.1.0"

__all__ = [
    # Containers
    "ContainerBuilder",
    "Container",
    "LifetimeScope",
    "DIContainer",
    # Bootstrapping
    "Bootstrapper",
    "RegisterContainerHook",
    "Event",
    # Configuration
    "ContainerOptions",
    # Enums
    "Lifetime",
    "ProviderKind",
    # Exceptions
    "DIException",
    "ConfigurationError",
    "CircularDependencyError",
    "UnresolvedContractError",
    "ScopeError",
    "DisposalError",
]
