import itertools
import logging
import threading
from typing import Any, Dict, List, Optional, Set, Type, TypeVar, get_origin

from scopewire.application.circular_detector import CircularDependencyDetector
from scopewire.application.lifetime_manager import LifetimeManager
from scopewire.application.registry import RegistrationIndex
from scopewire.application.resolver import DependencyResolver, collection_element
from scopewire.domain import (
    ContainerOptions,
    DisposalError,
    IResolver,
    Lifetime,
    ProviderKind,
    Registration,
    ScopeError,
    ServiceKey,
    UnresolvedContractError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LifetimeScope(IResolver):
    """Resolves services against a compiled registration index.

    Every scope caches its own singleton instances; child scopes see every
    registration of their parent but never its cached instances. Disposing a
    scope disposes its children first, then the instances it created.

    Attributes:
        _index: Registrations compiled by the builder, shared by the whole scope tree.
        _lifetime_manager: Singleton cache and disposal tracking for this scope.
        _children: Live child scopes in creation order.
    """

    def __init__(
        self,
        index: RegistrationIndex,
        options: ContainerOptions,
        parent: Optional["LifetimeScope"] = None,
        resolver: Optional[DependencyResolver] = None,
    ) -> None:
        self._index = index
        self._options = options
        self._parent = parent
        self._root: "Container" = parent.root if parent is not None else self
        self._resolver = resolver or DependencyResolver()
        self._lifetime_manager = LifetimeManager(options.track_transient_disposables)
        self._circular_detector = parent._circular_detector if parent is not None else CircularDependencyDetector()
        self._children: List["LifetimeScope"] = []
        self._children_lock = threading.Lock()
        self._disposed = False

    @property
    def parent(self) -> Optional["LifetimeScope"]:
        return self._parent

    @property
    def root(self) -> "Container":
        return self._root

    @property
    def options(self) -> ContainerOptions:
        return self._options

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def resolve(self, contract: Type[T]) -> T:
        """Resolve and return an instance of the specified contract.

        The last registration of the contract wins. Collection hints such as
        ``List[X]`` resolve every registration of ``X``.

        Args:
            contract: The type to resolve.

        Returns:
            Instance according to the registration's lifetime.

        Raises:
            UnresolvedContractError: If nothing can satisfy the contract.
            CircularDependencyError: If activation re-enters a contract already being activated.
            ScopeError: If the scope was disposed.

        Example:
            >>> user_service = scope.resolve(UserService)
        """
        self._ensure_active()
        element = collection_element(contract)
        if element is not None:
            values = self.resolve_all(element)
            return tuple(values) if get_origin(contract) is tuple else values

        registration = self._index.last(ServiceKey(contract=contract))
        if registration is None:
            registration = self._root._implicit_registration(contract)
        if registration is None:
            reason = "no registration found"
            if self._options.auto_wire:
                reason += " and the type cannot be auto-wired"
            raise UnresolvedContractError(contract, reason)
        return self._activate(registration)

    def resolve_named(self, contract: Type[T], key: str) -> T:
        """Resolve the last registration made under ``key``. Never auto-wires."""
        self._ensure_active()
        registration = self._index.last(ServiceKey(contract=contract, key=key))
        if registration is None:
            raise UnresolvedContractError(contract, "no registration found for key", key=key)
        return self._activate(registration)

    def resolve_all(self, contract: Type[T]) -> List[T]:
        """Resolve every unnamed registration of a contract, in registration order.

        Returns an empty list when nothing is registered.
        """
        self._ensure_active()
        return [self._activate(registration) for registration in self._index.lookup(ServiceKey(contract=contract))]

    def inject_into(self, instance: T) -> T:
        """Resolve and assign the registered dependencies of an object the container does not manage.

        Public annotated attributes and settable properties whose contract is
        registered are assigned; every other slot is left untouched.

        Example:
            >>> class View:
            ...     presenter: Presenter
            >>> view = scope.inject_into(View())
        """
        self._ensure_active()
        self._resolver.inject(instance, self)
        return instance

    def is_registered(self, contract: Type, key: Optional[str] = None) -> bool:
        if self._index.contains(contract, key):
            return True
        return key is None and self._root._has_implicit(contract)

    def begin_scope(self) -> "LifetimeScope":
        """Create a child scope.

        Example:
            >>> with container.begin_scope() as scope:
            ...     ctx1 = scope.resolve(RequestContext)
            ...     ctx2 = scope.resolve(RequestContext)
            ...     assert ctx1 is ctx2
        """
        self._ensure_active()
        child = LifetimeScope(self._index, self._options, parent=self, resolver=self._resolver)
        with self._children_lock:
            self._children.append(child)
        logger.debug("Began child scope at depth %d", child.depth)
        return child

    @property
    def depth(self) -> int:
        return 0 if self._parent is None else self._parent.depth + 1

    def dispose(self) -> None:
        """Dispose child scopes, newest first, then every instance this scope created.

        Each object is released once even when it was resolved under several
        contracts. Calling ``dispose`` again does nothing.

        Raises:
            DisposalError: If releasing one or more instances failed.
        """
        errors = self._dispose(set())
        if errors:
            raise DisposalError(errors)

    def _dispose(self, released: Set[int]) -> List[BaseException]:
        if self._disposed:
            return []
        self._disposed = True

        with self._children_lock:
            children = list(reversed(self._children))
            self._children.clear()

        errors: List[BaseException] = []
        for child in children:
            errors.extend(child._dispose(released))
        errors.extend(self._lifetime_manager.dispose(released, owner=self))

        if self._parent is not None:
            self._parent._forget(self)
        logger.debug("Disposed scope at depth %d", self.depth)
        return errors

    def _forget(self, child: "LifetimeScope") -> None:
        with self._children_lock:
            if child in self._children:
                self._children.remove(child)

    def _activate(self, registration: Registration) -> Any:
        if registration.lifetime == Lifetime.INSTANCE:
            return registration.instance

        with self._circular_detector.activating(registration.registration_id, registration.contract):
            return self._lifetime_manager.get_or_create(registration, lambda: self._create(registration))

    def _create(self, registration: Registration) -> Any:
        if registration.kind == ProviderKind.TYPE:
            return self._resolver.create(registration.implementation, self)
        if registration.kind == ProviderKind.FACTORY:
            return registration.factory(self)
        return registration.handler()

    def _ensure_active(self) -> None:
        if self._disposed:
            raise ScopeError("Cannot use a lifetime scope after it has been disposed")

    def __enter__(self) -> "LifetimeScope":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        self.dispose()
        return False

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"{type(self).__name__}(depth={self.depth}, {state})"


class Container(LifetimeScope):
    """Root lifetime scope produced by ``ContainerBuilder.build``.

    Owns the registered instances for disposal and records implicit
    registrations made by the auto-wire policy, which every child scope shares.
    """

    def __init__(
        self,
        index: RegistrationIndex,
        options: ContainerOptions,
        resolver: Optional[DependencyResolver] = None,
    ) -> None:
        super().__init__(index, options, parent=None, resolver=resolver)
        self._implicit: Dict[Any, Registration] = {}
        self._implicit_lock = threading.Lock()
        self._implicit_ids = itertools.count(index.next_id)
        for registration in index.registrations:
            if registration.kind == ProviderKind.INSTANCE:
                self._lifetime_manager.track(registration.instance, registration)

    @property
    def index(self) -> RegistrationIndex:
        return self._index

    def _has_implicit(self, contract: Any) -> bool:
        with self._implicit_lock:
            return contract in self._implicit

    def _implicit_registration(self, contract: Any) -> Optional[Registration]:
        if not self._options.auto_wire:
            return None
        with self._implicit_lock:
            registration = self._implicit.get(contract)
            if registration is not None:
                return registration
        if not self._resolver.can_auto_wire(contract, self.is_registered):
            return None
        with self._implicit_lock:
            registration = self._implicit.get(contract)
            if registration is None:
                registration = Registration(
                    registration_id=next(self._implicit_ids),
                    service=ServiceKey(contract=contract),
                    lifetime=Lifetime.TRANSIENT,
                    kind=ProviderKind.TYPE,
                    implementation=contract,
                )
                self._implicit[contract] = registration
                logger.debug("Implicitly registered %s as transient", registration.service)
            return registration
