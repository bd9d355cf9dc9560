import inspect
import itertools
import logging
from typing import Any, Callable, Iterable, List, Optional, Tuple, Type, TypeVar

from scopewire.application.registry import RegistrationIndex
from scopewire.application.resolver import DependencyResolver
from scopewire.application.scope import Container, LifetimeScope
from scopewire.application.validator import RegistrationValidator
from scopewire.domain import (
    ConfigurationError,
    ContainerOptions,
    Event,
    IRegistrar,
    Lifetime,
    ProviderKind,
    Registration,
    ServiceKey,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ContainerBuilder(IRegistrar):
    """Accumulates registrations until the container is built.

    Registering never replaces earlier registrations: single resolution uses the
    last registration of a contract while ``resolve_all`` returns every one of
    them. Conformance of implementations to their contracts is checked by
    ``build``, not at registration time.

    Attributes:
        built: Fired with ``(builder, container)`` once ``build`` succeeds.
        _registrations: Registrations in registration order.

    Example:
        >>> builder = ContainerBuilder()
        >>> builder.register_singleton(Database, PostgresDatabase)
        >>> builder.register_transient(UserService)
        >>> container = builder.build()
        >>> service = container.resolve(UserService)
    """

    def __init__(self, options: Optional[ContainerOptions] = None, **overrides: Any) -> None:
        """Initialize an empty builder.

        Args:
            options: Policy flags for the container; defaults to ``ContainerOptions()``.
            **overrides: Individual ``ContainerOptions`` fields overriding ``options``.
        """
        base = options or ContainerOptions()
        self._options = ContainerOptions(**{**base.model_dump(), **overrides}) if overrides else base
        self._registrations: List[Registration] = []
        self._ids = itertools.count()
        self._resolver = DependencyResolver()
        self._built = False
        self.built = Event("container built")

    @property
    def options(self) -> ContainerOptions:
        return self._options

    @property
    def registrations(self) -> Tuple[Registration, ...]:
        return tuple(self._registrations)

    @property
    def is_built(self) -> bool:
        return self._built

    def register_transient(self, contract: Type[T], provider: Any = None, *, key: Optional[str] = None) -> "ContainerBuilder":
        """Register a contract created anew on every resolution.

        Args:
            contract: The type the service is requested by.
            provider: Implementation class, factory receiving the resolving scope, or None
                      to use the contract itself as the implementation.
            key: Optional name; the registration is then only reachable through ``resolve_named``.

        Example:
            >>> builder.register_transient(RequestHandler)
            >>> builder.register_transient(Notifier, EmailNotifier, key="email")
            >>> builder.register_transient(Clock, lambda scope: FixedClock(0))
        """
        self._add_provider(contract, provider, Lifetime.TRANSIENT, key)
        return self

    def register_singleton(self, contract: Type[T], provider: Any = None, *, key: Optional[str] = None) -> "ContainerBuilder":
        """Register a contract created once per lifetime scope, on first resolution.

        Args:
            contract: The type the service is requested by.
            provider: Implementation class, factory receiving the resolving scope, or None
                      to use the contract itself as the implementation.
            key: Optional name; the registration is then only reachable through ``resolve_named``.
        """
        self._add_provider(contract, provider, Lifetime.SINGLETON, key)
        return self

    def register_instance(
        self,
        contract: Type[T],
        instance: T,
        *,
        key: Optional[str] = None,
        externally_owned: bool = False,
    ) -> "ContainerBuilder":
        """Register a pre-built instance.

        The container never constructs it. Unless ``externally_owned`` is set, it
        is disposed with the root container.
        """
        self._add(
            contract,
            ProviderKind.INSTANCE,
            Lifetime.INSTANCE,
            key,
            instance=instance,
            externally_owned=externally_owned,
        )
        return self

    def register_collection(self, contract: Type[T], providers: Iterable[Any]) -> "ContainerBuilder":
        """Register several providers under one contract, preserving order and duplicates.

        Either every provider is a class, registered as a transient
        implementation, or none is, and each is registered as an instance.

        Raises:
            ConfigurationError: If classes and instances are mixed.

        Example:
            >>> builder.register_collection(Plugin, [CsvPlugin, JsonPlugin])
            >>> builder.build().resolve_all(Plugin)  # [CsvPlugin(), JsonPlugin()]
        """
        providers = list(providers)
        if len({inspect.isclass(provider) for provider in providers}) > 1:
            raise ConfigurationError(
                f"Collection for {_name(contract)} mixes classes and instances; register them separately",
                contract,
            )
        for provider in providers:
            if inspect.isclass(provider):
                self._add(contract, ProviderKind.TYPE, Lifetime.TRANSIENT, implementation=provider)
            else:
                self._add(contract, ProviderKind.INSTANCE, Lifetime.INSTANCE, instance=provider)
        return self

    def register_handler(
        self,
        contract: Type[T],
        handler: Callable[[], T],
        *,
        externally_owned: bool = False,
    ) -> "ContainerBuilder":
        """Register a zero-argument handler invoked once per lifetime scope.

        The handler itself is stored; it is called the first time the contract is
        resolved in each scope and its result cached there.
        """
        if not callable(handler):
            raise ConfigurationError(f"Handler for {_name(contract)} must be callable", contract)
        self._add(
            contract,
            ProviderKind.HANDLER,
            Lifetime.SINGLETON,
            handler=handler,
            externally_owned=externally_owned,
        )
        return self

    def add_registrations(self, registrations: Iterable[Registration]) -> "ContainerBuilder":
        """Append registrations taken from another builder, keeping their order.

        Each one receives a fresh id from this builder.
        """
        for registration in registrations:
            self._ensure_not_built()
            self._registrations.append(registration.model_copy(update={"registration_id": next(self._ids)}))
        return self

    def build(self) -> Container:
        """Validate and compile the registrations into the root container.

        Returns:
            The root ``Container``.

        Raises:
            ConfigurationError: If the builder was already built, or an
                implementation does not satisfy its contract.
            CircularDependencyError: If constructor dependencies form a cycle.
        """
        self._ensure_not_built()
        index = RegistrationIndex(self._registrations)
        RegistrationValidator(self._resolver, self._options).validate(index)

        self._built = True
        container = Container(index, self._options, resolver=self._resolver)
        logger.info(
            "Built container with %d registration(s) for %d service(s)",
            len(index),
            len(list(index.services())),
        )
        self.built.fire(self, container)
        return container

    def build_as_scope(self) -> LifetimeScope:
        """Build the root container and return a child scope of it as the resolution root."""
        return self.build().begin_scope()

    def _add_provider(self, contract: Any, provider: Any, lifetime: Lifetime, key: Optional[str]) -> Registration:
        if provider is None:
            provider = contract
        if inspect.isclass(provider):
            return self._add(contract, ProviderKind.TYPE, lifetime, key, implementation=provider)
        if callable(provider):
            return self._add(contract, ProviderKind.FACTORY, lifetime, key, factory=provider)
        raise ConfigurationError(
            f"Provider for {_name(contract)} must be a class, a factory or None, got {type(provider).__name__}",
            contract,
        )

    def _add(
        self,
        contract: Any,
        kind: ProviderKind,
        lifetime: Lifetime,
        key: Optional[str] = None,
        **provider: Any,
    ) -> Registration:
        self._ensure_not_built()
        if not inspect.isclass(contract):
            raise ConfigurationError(f"Contract must be a class, got {contract!r}", contract)
        if key is not None and (not isinstance(key, str) or not key):
            raise ConfigurationError(f"Key for {_name(contract)} must be a non-empty string", contract)

        registration = Registration(
            registration_id=next(self._ids),
            service=ServiceKey(contract=contract, key=key),
            lifetime=lifetime,
            kind=kind,
            **provider,
        )
        self._registrations.append(registration)
        logger.debug("Registered %s as %s %s", registration.service, lifetime, kind)
        return registration

    def _ensure_not_built(self) -> None:
        if self._built:
            raise ConfigurationError("Container already built; registrations are closed")

    def __repr__(self) -> str:
        state = "built" if self._built else "open"
        return f"ContainerBuilder({len(self._registrations)} registrations, {state})"


def _name(contract: Any) -> str:
    return getattr(contract, "__name__", repr(contract))
