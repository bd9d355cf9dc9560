"""Application layer - Build-time validation of registrations."""

import inspect
import logging
from typing import Any, Dict, Generic, Hashable, Iterator, List, Optional, Protocol, Set, Tuple

from scopewire.application.registry import RegistrationIndex
from scopewire.application.resolver import DependencyResolver, is_protocol
from scopewire.domain import (
    CircularDependencyError,
    ConfigurationError,
    ContainerOptions,
    ProviderKind,
    Registration,
    ServiceKey,
    UnresolvedContractError,
)

logger = logging.getLogger(__name__)

_IGNORED_BASES = (object, Protocol, Generic)


def _contract_members(contract: type) -> Tuple[Set[str], Set[str]]:
    """Public members a contract declares, split into attributes and annotation-only names."""
    attributes: Set[str] = set()
    annotated: Set[str] = set()
    for klass in inspect.getmro(contract):
        if klass in _IGNORED_BASES:
            continue
        attributes.update(name for name in vars(klass) if not name.startswith("_"))
        annotated.update(name for name in getattr(klass, "__annotations__", {}) if not name.startswith("_"))
    return attributes, annotated - attributes


def missing_members(candidate: Any, contract: type) -> List[str]:
    """List the public members of ``contract`` that ``candidate`` does not provide.

    Args:
        candidate: An implementation class or an instance.
        contract: The contract it should satisfy.
    """
    attributes, annotated = _contract_members(contract)
    candidate_annotations: Set[str] = set()
    if inspect.isclass(candidate):
        for klass in inspect.getmro(candidate):
            candidate_annotations.update(getattr(klass, "__annotations__", {}))

    missing = [name for name in attributes if not hasattr(candidate, name)]
    missing += [name for name in annotated if not hasattr(candidate, name) and name not in candidate_annotations]
    return sorted(missing)


def satisfies(candidate: Any, contract: type) -> bool:
    """Check nominally, then structurally, that a class or instance satisfies a contract."""
    candidate_type = candidate if inspect.isclass(candidate) else type(candidate)
    try:
        if issubclass(candidate_type, contract):
            return True
    except TypeError:
        # non runtime-checkable protocols
        pass
    return not missing_members(candidate, contract)


class RegistrationValidator:
    """Rejects registrations that can never resolve.

    Checks each registration against its contract, then walks the constructor
    dependency graph looking for cycles. Factories, handlers and instances have
    no visible dependencies and therefore break cycles.
    """

    def __init__(self, resolver: DependencyResolver, options: ContainerOptions) -> None:
        self._resolver = resolver
        self._options = options

    def validate(self, index: RegistrationIndex) -> None:
        """Validate a compiled index.

        Raises:
            ConfigurationError: If an implementation or instance does not satisfy its contract.
            CircularDependencyError: If the constructor dependency graph contains a cycle.
        """
        for registration in index.registrations:
            self._check_conformance(registration)
        self._check_cycles(index)
        logger.debug("Validated %d registration(s)", len(index))

    def _check_conformance(self, registration: Registration) -> None:
        contract = registration.contract
        if registration.kind == ProviderKind.TYPE:
            implementation = registration.implementation
            if inspect.isabstract(implementation) or is_protocol(implementation):
                raise ConfigurationError(
                    f"Implementation {implementation.__name__} registered for {registration.service} "
                    "is abstract and cannot be instantiated",
                    contract,
                )
            candidate = implementation
        elif registration.kind == ProviderKind.INSTANCE:
            candidate = registration.instance
        else:
            return

        if not satisfies(candidate, contract):
            candidate_name = getattr(candidate, "__name__", type(candidate).__name__)
            raise ConfigurationError(
                f"{candidate_name} does not satisfy contract {registration.service}: "
                f"missing {', '.join(missing_members(candidate, contract))}",
                contract,
            )

    def _check_cycles(self, index: RegistrationIndex) -> None:
        edges: Dict[Hashable, List[Tuple[Hashable, Any]]] = {}
        by_id = {registration.registration_id: registration for registration in index.registrations}

        def node_for(contract: Any, allow_implicit: bool) -> Optional[Tuple[Hashable, Any]]:
            registration = index.last(ServiceKey(contract=contract))
            if registration is not None:
                return registration.registration_id, registration.contract
            if allow_implicit and self._options.auto_wire and self._resolver.can_auto_wire(contract, index.contains):
                return ("implicit", contract), contract
            return None

        def successors(node: Hashable, contract: Any) -> List[Tuple[Hashable, Any]]:
            if node in edges:
                return edges[node]
            if isinstance(node, tuple):
                implementation = contract
            else:
                registration = by_id[node]
                implementation = registration.implementation if registration.kind == ProviderKind.TYPE else None

            found: List[Tuple[Hashable, Any]] = []
            if implementation is not None:
                try:
                    dependencies = self._resolver.constructor_dependencies(implementation)
                except UnresolvedContractError:
                    # reported when resolved
                    dependencies = []
                for dependency in dependencies:
                    if dependency.collection:
                        found.extend(
                            (r.registration_id, r.contract) for r in index.lookup(ServiceKey(contract=dependency.contract))
                        )
                        continue
                    target = node_for(dependency.contract, allow_implicit=not dependency.optional)
                    if target is not None:
                        found.append(target)
            edges[node] = found
            return found

        visited: Set[Hashable] = set()
        for registration in index.registrations:
            start = (registration.registration_id, registration.contract)
            if start[0] in visited:
                continue
            cycle = self._find_cycle(start, successors, visited)
            if cycle:
                raise CircularDependencyError(cycle)

    @staticmethod
    def _find_cycle(start, successors, visited: Set[Hashable]) -> Optional[List[Any]]:
        """Iterative depth-first search returning the first cycle as a chain of contracts."""
        path: List[Tuple[Hashable, Any]] = [start]
        on_path: Set[Hashable] = {start[0]}
        stack: List[Iterator[Tuple[Hashable, Any]]] = [iter(successors(*start))]

        while stack:
            advanced = False
            for node, contract in stack[-1]:
                if node in on_path:
                    first = next(i for i, (n, _) in enumerate(path) if n == node)
                    return [c for _, c in path[first:]] + [contract]
                if node in visited:
                    continue
                path.append((node, contract))
                on_path.add(node)
                stack.append(iter(successors(node, contract)))
                advanced = True
                break
            if not advanced:
                node, _ = path.pop()
                on_path.discard(node)
                visited.add(node)
                stack.pop()
        return None
