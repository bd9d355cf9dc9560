"""Application layer - Registers the container into itself once the host finishes initializing."""

import logging
import threading
from typing import Any, Optional

from scopewire.application.builder import ContainerBuilder
from scopewire.application.container import DIContainer
from scopewire.application.scope import Container, LifetimeScope
from scopewire.domain import ConfigurationError

logger = logging.getLogger(__name__)


class RegisterContainerHook:
    """Builds the host's container and makes each stage of it resolvable.

    Once the host raises ``initialization_completed``, the hook registers the
    ``ContainerBuilder``, builds the container, and opens one child scope.
    Afterwards ``ContainerBuilder``, ``Container`` and ``LifetimeScope`` resolve
    to three distinct objects. The hook reacts to the first signal only.
    A signal whose container was already built raises ``ConfigurationError``
    and does not count as that first signal.

    The subscription holds the hook weakly, so whoever owns the hook controls
    its lifetime; ``detach`` removes it explicitly.

    Example:
        >>> bootstrapper = Bootstrapper()
        >>> bootstrapper.use(RegisterContainerHook())
        >>> bootstrapper.initialize()
        >>> scope = bootstrapper.container.resolve(LifetimeScope)
    """

    def __init__(self) -> None:
        self._fired = False
        self._lock = threading.Lock()
        self._container: Optional[Container] = None
        self._scope: Optional[LifetimeScope] = None

    @property
    def has_fired(self) -> bool:
        return self._fired

    @property
    def scope(self) -> Optional[LifetimeScope]:
        """Child scope opened when the hook fired."""
        return self._scope

    def apply(self, host: Any) -> Any:
        """Subscribe to the host's ``initialization_completed`` event. Safe to call twice."""
        host.initialization_completed.subscribe(self._on_initialization_completed, weak=True)
        return host

    def detach(self, host: Any) -> bool:
        return host.initialization_completed.unsubscribe(self._on_initialization_completed)

    def _on_initialization_completed(self, sender: Any, *args: Any) -> None:
        container = getattr(sender, "container", None)
        with self._lock:
            if self._fired:
                return
            if not isinstance(container, DIContainer):
                logger.warning("Initialization signal from %r carries no DIContainer; nothing registered", sender)
                return
            if container.is_built:
                raise ConfigurationError(
                    "Container was built before initialization completed; "
                    "RegisterContainerHook must run before build()"
                )
            self._fired = True

        bound = {}
        builder = container.builder
        builder.register_instance(ContainerBuilder, builder, externally_owned=True)
        builder.register_handler(Container, lambda: bound["container"], externally_owned=True)
        builder.register_handler(LifetimeScope, lambda: bound["scope"], externally_owned=True)

        bound["container"] = self._container = container.build()
        bound["scope"] = self._scope = self._container.begin_scope()
        logger.info("Registered container builder, container and lifetime scope")
