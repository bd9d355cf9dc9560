from typing import Any, Callable, Iterable, List, Optional, Type, TypeVar

from scopewire.application.builder import ContainerBuilder
from scopewire.application.scope import Container, LifetimeScope
from scopewire.domain import ContainerOptions, IContainer, ScopeError

T = TypeVar("T")


class DIContainer(IContainer):
    """Main dependency injection container.

    Combines the registration phase and the resolution phase behind one object:
    ``register_*`` calls go to an internal ``ContainerBuilder`` until ``build``
    or ``build_as_scope`` is called, after which resolution calls go to the
    resulting scope.

    Attributes:
        _builder: Registration store used before the build.
        _container: Root container, once built.
        _scope: Scope that resolution calls are delegated to.

    Example:
        >>> container = DIContainer()
        >>> container.register_singleton(Database, PostgresDatabase)
        >>> container.register_transient(UserService)
        >>> container.build()
        >>> service = container.resolve(UserService)
    """

    def __init__(self, options: Optional[ContainerOptions] = None, **overrides: Any) -> None:
        """Initialize the container with an empty registration store.

        Args:
            options: Policy flags for the container.
            **overrides: Individual ``ContainerOptions`` fields, e.g. ``auto_wire=True``.
        """
        self._builder = ContainerBuilder(options, **overrides)
        self._container: Optional[Container] = None
        self._scope: Optional[LifetimeScope] = None

    @property
    def builder(self) -> ContainerBuilder:
        return self._builder

    @property
    def container(self) -> Optional[Container]:
        return self._container

    @property
    def scope(self) -> Optional[LifetimeScope]:
        return self._scope

    @property
    def is_built(self) -> bool:
        return self._container is not None

    def register_transient(self, contract: Type[T], provider: Any = None, *, key: Optional[str] = None) -> "DIContainer":
        self._builder.register_transient(contract, provider, key=key)
        return self

    def register_singleton(self, contract: Type[T], provider: Any = None, *, key: Optional[str] = None) -> "DIContainer":
        self._builder.register_singleton(contract, provider, key=key)
        return self

    def register_instance(
        self,
        contract: Type[T],
        instance: T,
        *,
        key: Optional[str] = None,
        externally_owned: bool = False,
    ) -> "DIContainer":
        self._builder.register_instance(contract, instance, key=key, externally_owned=externally_owned)
        return self

    def register_collection(self, contract: Type[T], providers: Iterable[Any]) -> "DIContainer":
        self._builder.register_collection(contract, providers)
        return self

    def register_handler(
        self,
        contract: Type[T],
        handler: Callable[[], T],
        *,
        externally_owned: bool = False,
    ) -> "DIContainer":
        self._builder.register_handler(contract, handler, externally_owned=externally_owned)
        return self

    def build(self) -> Container:
        """Build the root container and resolve from it.

        Raises:
            ConfigurationError: If registrations are invalid or the container was already built.
        """
        self._container = self._builder.build()
        self._scope = self._container
        return self._container

    def build_as_scope(self) -> LifetimeScope:
        """Build the root container and resolve from a child scope of it.

        Singletons then live in the child scope rather than in the root container.
        """
        self._container = self._builder.build()
        self._scope = self._container.begin_scope()
        return self._scope

    def resolve(self, contract: Type[T]) -> T:
        return self._active_scope().resolve(contract)

    def resolve_named(self, contract: Type[T], key: str) -> T:
        return self._active_scope().resolve_named(contract, key)

    def resolve_all(self, contract: Type[T]) -> List[T]:
        return self._active_scope().resolve_all(contract)

    def inject_into(self, instance: T) -> T:
        return self._active_scope().inject_into(instance)

    def is_registered(self, contract: Type, key: Optional[str] = None) -> bool:
        if self._scope is None:
            return any(r.service.contract is contract and r.service.key == key for r in self._builder.registrations)
        return self._scope.is_registered(contract, key)

    def begin_scope(self) -> LifetimeScope:
        return self._active_scope().begin_scope()

    def dispose(self) -> None:
        """Dispose the root container, and with it every scope derived from it."""
        if self._container is not None:
            self._container.dispose()

    def _active_scope(self) -> LifetimeScope:
        if self._scope is None:
            raise ScopeError("Container has not been built. Call build() or build_as_scope() first.")
        return self._scope

    def __enter__(self) -> "DIContainer":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        self.dispose()
        return False
