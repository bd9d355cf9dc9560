"""
FastAPI integration module.

Provides helpers for resolving from scopewire containers inside FastAPI applications.
"""

from .integration import (
    ScopedContainerMiddleware,
    create_fastapi_dependency,
    create_lifespan,
    create_scoped_dependency,
    inject_dependencies,
    request_scope,
)

__all__ = [
    "create_fastapi_dependency",
    "create_scoped_dependency",
    "create_lifespan",
    "inject_dependencies",
    "request_scope",
    "ScopedContainerMiddleware",
]
