import logging
from typing import Any, List, Optional

from scopewire.application.bootstrap_hook import RegisterContainerHook
from scopewire.application.container import DIContainer
from scopewire.domain import Event, ScopeError

logger = logging.getLogger(__name__)


class Bootstrapper:
    """Minimal host that owns a container and announces when it is initialized.

    Middlewares are objects with an ``apply(bootstrapper)`` method; the
    bootstrapper keeps a reference to each one it uses.

    Attributes:
        container: The container being configured.
        initialization_completed: Fired once with ``(bootstrapper,)`` by ``initialize``.
    """

    def __init__(self, container: Optional[DIContainer] = None) -> None:
        self.container = container if container is not None else DIContainer()
        self.initialization_completed = Event("initialization completed")
        self._middlewares: List[Any] = []
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def use(self, middleware: Any) -> "Bootstrapper":
        self._middlewares.append(middleware)
        middleware.apply(self)
        return self

    def use_container_registration(self) -> "Bootstrapper":
        """Use a ``RegisterContainerHook`` so the built container resolves itself."""
        return self.use(RegisterContainerHook())

    def initialize(self) -> None:
        """Raise ``initialization_completed``.

        Raises:
            ScopeError: If the bootstrapper was already initialized.
        """
        if self._initialized:
            raise ScopeError("Bootstrapper was already initialized")
        self._initialized = True
        logger.info("Initialization completed")
        self.initialization_completed.fire(self)
