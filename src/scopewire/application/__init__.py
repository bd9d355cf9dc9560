"""
Application layer - Registration, build and resolution.

This layer contains the use cases that orchestrate domain objects.
It depends only on the Domain layer.
"""

from .bootstrap_hook import RegisterContainerHook
from .bootstrapper import Bootstrapper
from .builder import ContainerBuilder
from .circular_detector import CircularDependencyDetector
from .container import DIContainer
from .lifetime_manager import LifetimeManager
from .registry import RegistrationIndex
from .resolver import DependencyResolver
from .scope import Container, LifetimeScope
from .validator import RegistrationValidator

__all__ = [
    "Bootstrapper",
    "CircularDependencyDetector",
    "Container",
    "ContainerBuilder",
    "DIContainer",
    "DependencyResolver",
    "LifetimeManager",
    "LifetimeScope",
    "RegisterContainerHook",
    "RegistrationIndex",
    "RegistrationValidator",
]
