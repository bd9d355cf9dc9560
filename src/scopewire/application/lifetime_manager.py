import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Set

from scopewire.domain import (
    CircularDependencyError,
    Lifetime,
    Registration,
    ScopeError,
    UnresolvedContractError,
)

logger = logging.getLogger(__name__)

_MISSING = object()


def is_disposable(instance: Any) -> bool:
    """Check whether an instance exposes ``dispose()`` or ``close()``."""
    return callable(getattr(instance, "dispose", None)) or callable(getattr(instance, "close", None))


def release(instance: Any) -> None:
    """Call ``dispose()`` on an instance, falling back to ``close()``."""
    dispose = getattr(instance, "dispose", None)
    if callable(dispose):
        dispose()
        return
    close = getattr(instance, "close", None)
    if callable(close):
        close()


class LifetimeManager:
    """Owns the instances of one lifetime scope.

    Caches singleton instances per registration, guards their first creation
    with a lock per registration, and records every disposable instance the
    scope created so it can be released when the scope is disposed.

    Attributes:
        _instances: Cache of singleton instances keyed by registration id.
        _locks: One re-entrant lock per singleton registration.
        _disposables: Disposable instances in creation order.
    """

    def __init__(self, track_transient_disposables: bool = True) -> None:
        self._track_transients = track_transient_disposables
        self._instances: Dict[int, Any] = {}
        self._locks: Dict[int, threading.RLock] = {}
        self._locks_guard = threading.Lock()
        self._disposables: List[Any] = []
        self._disposables_guard = threading.Lock()

    def get_or_create(self, registration: Registration, factory: Callable[[], Any]) -> Any:
        """Get existing instance or create new one based on lifetime.

        Args:
            registration: The registration being resolved.
            factory: Function to create new instance if needed.

        Returns:
            Instance according to lifetime rules:
            - Instance: Returns the registered object
            - Transient: Always creates new instance
            - Singleton: Returns the instance cached in this scope or creates and caches one
        """
        lifetime = registration.lifetime

        if lifetime == Lifetime.INSTANCE:
            return registration.instance

        if lifetime == Lifetime.TRANSIENT:
            instance = self._create(registration, factory)
            if self._track_transients:
                self.track(instance, registration)
            return instance

        # Lifetime.SINGLETON
        cached = self._instances.get(registration.registration_id, _MISSING)
        if cached is not _MISSING:
            return cached
        with self._lock_for(registration.registration_id):
            cached = self._instances.get(registration.registration_id, _MISSING)
            if cached is _MISSING:
                cached = self._create(registration, factory)
                self._instances[registration.registration_id] = cached
                self.track(cached, registration)
            return cached

    def _lock_for(self, registration_id: int) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(registration_id)
            if lock is None:
                lock = self._locks[registration_id] = threading.RLock()
            return lock

    @staticmethod
    def _create(registration: Registration, factory: Callable[[], Any]) -> Any:
        try:
            return factory()
        except (UnresolvedContractError, CircularDependencyError, ScopeError):
            raise
        except Exception as e:
            raise UnresolvedContractError(
                registration.contract,
                f"Failed to create instance: {str(e)}",
                key=registration.service.key,
            ) from e

    def track(self, instance: Any, registration: Optional[Registration] = None) -> None:
        """Record an instance for release when the scope is disposed."""
        if registration is not None and registration.externally_owned:
            return
        if not is_disposable(instance):
            return
        with self._disposables_guard:
            self._disposables.append(instance)

    def cached(self, registration_id: int) -> Any:
        """Return the cached singleton for a registration, or None."""
        instance = self._instances.get(registration_id, _MISSING)
        return None if instance is _MISSING else instance

    def dispose(self, released: Set[int], owner: Any = None) -> List[BaseException]:
        """Release tracked instances in reverse creation order.

        Args:
            released: Ids of objects already released during this disposal; updated in place.
            owner: The owning scope, never released through its own registry.

        Returns:
            The exceptions raised by failing releases.
        """
        with self._disposables_guard:
            disposables = list(reversed(self._disposables))
            self._disposables.clear()

        errors: List[BaseException] = []
        for instance in disposables:
            if instance is owner or id(instance) in released:
                continue
            released.add(id(instance))
            try:
                release(instance)
            except Exception as e:
                logger.warning("Failed to dispose %s: %s", type(instance).__name__, e)
                errors.append(e)

        self._instances.clear()
        return errors
