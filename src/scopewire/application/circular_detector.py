"""Application layer - Runtime guard against re-entrant resolution."""

import threading
from contextlib import contextmanager
from typing import Any, Hashable, Iterator, List, Optional, Tuple

from scopewire.domain import CircularDependencyError


class CircularDependencyDetector:
    """Tracks the registrations being activated on the current thread.

    Cycles between constructor dependencies are rejected when the container is
    built; this guard catches the ones only reachable at runtime, such as a
    factory that resolves its own registration. Entries are keyed by node
    (a registration id when used by scopes), so a factory that resolves other
    registrations of its own contract is not a cycle.

    Attributes:
        _local: Thread-local storage for activation stacks of ``(node, contract)`` pairs.
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def _get_stack(self) -> List[Tuple[Hashable, Any]]:
        if not hasattr(self._local, "stack"):
            self._local.stack = []
        return self._local.stack

    def push(self, node: Hashable, contract: Optional[Any] = None) -> None:
        """Add a node to the current thread's activation stack.

        Args:
            node: Identity of what is being activated.
            contract: Contract reported in the dependency chain; defaults to ``node``.

        Raises:
            CircularDependencyError: If the node is already being activated.
        """
        contract = node if contract is None else contract
        stack = self._get_stack()
        nodes = [entry for entry, _ in stack]
        if node in nodes:
            chain = [entry_contract for _, entry_contract in stack[nodes.index(node) :]]
            raise CircularDependencyError(chain + [contract])
        stack.append((node, contract))

    def pop(self) -> None:
        stack = self._get_stack()
        if stack:
            stack.pop()

    @contextmanager
    def activating(self, node: Hashable, contract: Optional[Any] = None) -> Iterator[None]:
        """Keep ``node`` on the stack for the duration of the block."""
        self.push(node, contract)
        try:
            yield
        finally:
            self.pop()

    @property
    def depth(self) -> int:
        return len(self._get_stack())

    def clear(self) -> None:
        if hasattr(self._local, "stack"):
            self._local.stack.clear()
