from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, List, Optional, Type, TypeVar

T = TypeVar("T")


class IRegistrar(ABC):
    """Abstract interface for the registration phase of a container."""

    @abstractmethod
    def register_transient(self, contract: Type[T], provider: Any = None, *, key: Optional[str] = None) -> "IRegistrar":
        """Register a contract whose instances are created on every resolution.

        Args:
            contract: The type the service is requested by.
            provider: Implementation class, factory receiving the scope, or None to self-register.
            key: Optional name for keyed lookups.
        """

    @abstractmethod
    def register_singleton(self, contract: Type[T], provider: Any = None, *, key: Optional[str] = None) -> "IRegistrar":
        """Register a contract whose instance is created once per scope.

        Args:
            contract: The type the service is requested by.
            provider: Implementation class, factory receiving the scope, or None to self-register.
            key: Optional name for keyed lookups.
        """

    @abstractmethod
    def register_instance(self, contract: Type[T], instance: T, *, key: Optional[str] = None) -> "IRegistrar":
        """Register a pre-built instance for a contract."""

    @abstractmethod
    def register_collection(self, contract: Type[T], providers: Iterable[Any]) -> "IRegistrar":
        """Register several implementation classes or instances under one contract."""

    @abstractmethod
    def register_handler(self, contract: Type[T], handler: Callable[[], T]) -> "IRegistrar":
        """Register a zero-argument handler invoked once per scope."""


class IResolver(ABC):
    """Abstract interface for resolving services from a built container."""

    @abstractmethod
    def resolve(self, contract: Type[T]) -> T:
        """Resolve the last registration of a contract.

        Raises:
            UnresolvedContractError: If nothing can satisfy the contract.
        """

    @abstractmethod
    def resolve_named(self, contract: Type[T], key: str) -> T:
        """Resolve a contract registered under a key.

        Raises:
            UnresolvedContractError: If no registration exists for the key.
        """

    @abstractmethod
    def resolve_all(self, contract: Type[T]) -> List[T]:
        """Resolve every unnamed registration of a contract in registration order."""

    @abstractmethod
    def inject_into(self, instance: T) -> T:
        """Assign resolvable annotated attributes of an existing object."""

    @abstractmethod
    def is_registered(self, contract: Type, key: Optional[str] = None) -> bool:
        """Check whether a registration exists for the contract and key."""

    @abstractmethod
    def begin_scope(self) -> "IResolver":
        """Create and return a child scope."""

    @abstractmethod
    def dispose(self) -> None:
        """Release every disposable instance owned by this scope and its children."""


class IContainer(IRegistrar, IResolver):
    """Abstract interface for a container that registers, builds and resolves."""

    @abstractmethod
    def build(self) -> IResolver:
        """Compile registrations and make the root container the resolution root."""

    @abstractmethod
    def build_as_scope(self) -> IResolver:
        """Compile registrations and make a child of the root container the resolution root."""
