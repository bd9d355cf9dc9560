import functools
import inspect
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Type, TypeVar

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from scopewire.application import Bootstrapper
from scopewire.domain import IResolver

logger = logging.getLogger(__name__)

T = TypeVar("T")

SCOPE_STATE_ATTRIBUTE = "di_scope"


def create_fastapi_dependency(resolver: IResolver, contract: Type[T]) -> Callable[[], T]:
    """Create a FastAPI Depends() callable that resolves from a container or scope.

    The resolved instance lifetime follows the registration (transient,
    singleton per scope, or instance).

    Args:
        resolver: The built container or scope to resolve from.
        contract: The type to resolve when the dependency is called.

    Example:
        >>> get_user_repo = create_fastapi_dependency(container, UserRepository)
        >>>
        >>> @app.get("/users")
        >>> async def list_users(repo: UserRepository = Depends(get_user_repo)):
        ...     return await repo.get_all()
    """

    def dependency() -> T:
        return resolver.resolve(contract)

    return dependency


def request_scope(request: Request) -> IResolver:
    """Return the lifetime scope opened for the request by ``ScopedContainerMiddleware``.

    Raises:
        RuntimeError: If the middleware is not installed.
    """
    scope = getattr(request.state, SCOPE_STATE_ATTRIBUTE, None)
    if scope is None:
        raise RuntimeError(
            "Request does not have a lifetime scope. Did you forget to add ScopedContainerMiddleware?"
        )
    return scope


def create_scoped_dependency(contract: Type[T]) -> Callable[[Request], T]:
    """Create a FastAPI dependency that resolves from the request's lifetime scope.

    Singletons resolved this way are cached once per request. Requires the
    ScopedContainerMiddleware to be installed.

    Example:
        >>> app.add_middleware(ScopedContainerMiddleware, container=container)
        >>> get_request_context = create_scoped_dependency(RequestContext)
        >>>
        >>> @app.get("/process")
        >>> async def process_request(ctx: RequestContext = Depends(get_request_context)):
        ...     return {"request_id": ctx.request_id}
    """

    def scoped_dependency(request: Request) -> T:
        return request_scope(request).resolve(contract)

    return scoped_dependency


class ScopedContainerMiddleware(BaseHTTPMiddleware):
    """Middleware that opens a child lifetime scope for each request.

    The scope is available as ``request.state.di_scope`` and is disposed once
    the response has been produced, releasing the instances it created.

    Attributes:
        container: The built container or scope to derive request scopes from.
    """

    def __init__(self, app: FastAPI, container: IResolver):
        super().__init__(app)
        self.container = container

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        scope = self.container.begin_scope()
        setattr(request.state, SCOPE_STATE_ATTRIBUTE, scope)

        try:
            return await call_next(request)
        finally:
            scope.dispose()


def create_lifespan(bootstrapper: Bootstrapper) -> Callable[[FastAPI], Any]:
    """Create a FastAPI lifespan that initializes the bootstrapper and disposes its container.

    On startup, ``initialize()`` is called unless the bootstrapper was already
    initialized; on shutdown the container is disposed.

    Example:
        >>> bootstrapper = Bootstrapper().use_container_registration()
        >>> app = FastAPI(lifespan=create_lifespan(bootstrapper))
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if not bootstrapper.is_initialized:
            bootstrapper.initialize()
        try:
            yield
        finally:
            logger.info("Disposing container on application shutdown")
            bootstrapper.container.dispose()

    return lifespan


def inject_dependencies(resolver: IResolver, **contracts: Type[Any]) -> Callable:
    """Decorator that resolves keyword arguments of an endpoint from a container.

    Arguments already supplied by the caller are left alone.

    Example:
        >>> @app.get("/users")
        >>> @inject_dependencies(container, user_service=UserService)
        >>> async def list_users(user_service: UserService):
        ...     return await user_service.get_all()
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)
        unknown = set(contracts) - set(signature.parameters)
        if unknown:
            raise TypeError(f"{func.__name__} has no parameter(s) named {', '.join(sorted(unknown))}")

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            bound = signature.bind_partial(*args, **kwargs)
            for param_name, contract in contracts.items():
                if param_name not in bound.arguments:
                    kwargs[param_name] = resolver.resolve(contract)
            result = func(*args, **kwargs)
            if inspect.isawaitable(result):
                return await result
            return result

        # FastAPI must not treat injected parameters as request inputs
        wrapper.__signature__ = signature.replace(
            parameters=[param for name, param in signature.parameters.items() if name not in contracts]
        )
        return wrapper

    return decorator
