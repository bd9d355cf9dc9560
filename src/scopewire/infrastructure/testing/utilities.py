from typing import Any, Callable, Optional, Tuple, Type, TypeVar

from scopewire.application import DIContainer, LifetimeScope
from scopewire.domain import ContainerOptions, IResolver, Lifetime

T = TypeVar("T")


class TestContainer(DIContainer):
    """DI container for testing with dependency override capabilities.

    Copies every registration of a parent container, then lets a test add
    overrides before building. Overrides are ordinary registrations made after
    the copied ones, so they win single resolution while the originals stay
    visible to ``resolve_all``.

    Attributes:
        _parent_container: The container whose registrations were copied.

    Example:
        >>> def test_user_service():
        ...     with TestContainer(container) as test_container:
        ...         mock_email = MockEmailService()
        ...         test_container.mock_instance(EmailService, mock_email)
        ...         test_container.build()
        ...
        ...         service = test_container.resolve(UserService)
        ...         service.send_welcome_email(user)
        ...         assert mock_email.send_called
    """

    __test__ = False  # Tell pytest not to collect this class as a test

    def __init__(
        self,
        parent_container: Optional[DIContainer] = None,
        options: Optional[ContainerOptions] = None,
        **overrides: Any,
    ) -> None:
        """Initialize the test container.

        Args:
            parent_container: Optional container to copy registrations and options from.
            options: Policy flags; defaults to the parent's.
            **overrides: Individual ``ContainerOptions`` fields.
        """
        if options is None and parent_container is not None:
            options = parent_container.builder.options
        super().__init__(options, **overrides)
        self._parent_container = parent_container
        if parent_container is not None:
            self._builder.add_registrations(parent_container.builder.registrations)

    def mock_instance(self, contract: Type[T], mock_instance: T, *, key: Optional[str] = None) -> "TestContainer":
        """Resolve ``contract`` to ``mock_instance``.

        The mock is never disposed by the container.

        Example:
            >>> test_container.mock_instance(DatabaseConnection, mock_db)
            >>> test_container.build()
            >>> assert test_container.resolve(UserService).db is mock_db
        """
        self.register_instance(contract, mock_instance, key=key, externally_owned=True)
        return self

    def mock_transient(self, contract: Type[T], factory: Callable[[], T]) -> "TestContainer":
        """Resolve ``contract`` to a fresh result of ``factory`` on every resolution."""
        self.register_transient(contract, lambda scope: factory())
        return self

    def override_registration(self, contract: Type[T], provider: Any, lifetime: Lifetime) -> "TestContainer":
        """Override a registration with a provider under the given lifetime.

        Example:
            >>> test_container.override_registration(CacheService, InMemoryCacheService, Lifetime.SINGLETON)
        """
        if lifetime == Lifetime.SINGLETON:
            self.register_singleton(contract, provider)
        elif lifetime == Lifetime.TRANSIENT:
            self.register_transient(contract, provider)
        else:
            self.register_instance(contract, provider)
        return self


def create_mock_container(*instances: Tuple[Type, Any], build: bool = True) -> TestContainer:
    """Create a test container resolving each contract to the given mock.

    Args:
        *instances: Tuples of (contract, mock_instance).
        build: Build the container before returning it.

    Example:
        >>> test_container = create_mock_container(
        ...     (DatabaseConnection, mock_db),
        ...     (CacheService, mock_cache),
        ... )
        >>> assert test_container.resolve(CacheService) is mock_cache
    """
    container = TestContainer()

    for contract, mock_instance in instances:
        container.mock_instance(contract, mock_instance)

    if build:
        container.build()
    return container


class MockScope:
    """Context manager opening a child lifetime scope and disposing it on exit.

    Example:
        >>> with MockScope(container) as scope:
        ...     ctx = scope.resolve(RequestContext)
        ...     service = scope.resolve(RequestService)
        ...     assert service.context is ctx
    """

    def __init__(self, parent: IResolver) -> None:
        self._parent = parent
        self._scope: Optional[LifetimeScope] = None

    def __enter__(self) -> LifetimeScope:
        self._scope = self._parent.begin_scope()
        return self._scope

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        if self._scope is not None:
            self._scope.dispose()
            self._scope = None
        return False
