from typing import Any, List, Optional, Sequence, Type


def _contract_name(contract: Any) -> str:
    return getattr(contract, "__name__", None) or repr(contract)


class DIException(Exception):
    """Base exception for DI-related errors."""


class ConfigurationError(DIException):
    """Raised when registrations cannot form a valid container.

    This occurs when:
    - An implementation does not structurally satisfy its contract.
    - An implementation is abstract.
    - A contract or provider is not valid.
    - Registering into, or building, a container that was already built.

    Attributes:
        contract: The contract involved, when known.
    """

    def __init__(self, message: str, contract: Optional[Type] = None) -> None:
        self.contract = contract
        super().__init__(message)


class CircularDependencyError(ConfigurationError):
    """Raised when a circular dependency is detected.

    Attributes:
        dependency_chain: List of types involved in the circular dependency.
    """

    def __init__(self, dependency_chain: Sequence[Type]) -> None:
        self.dependency_chain: List[Type] = list(dependency_chain)
        message = f"Circular dependency detected: {' -> '.join(_contract_name(cls) for cls in self.dependency_chain)}"
        super().__init__(message, contract=self.dependency_chain[0] if self.dependency_chain else None)


class UnresolvedContractError(DIException):
    """Raised when a contract cannot be resolved.

    This occurs when:
    - No registration exists and the auto-wire fallback does not apply.
    - A named lookup has no registration for the key.
    - Constructing the instance failed.

    Attributes:
        contract: The contract that could not be resolved.
        key: The lookup key for named resolutions.
        reason: Optional reason for the failure.
    """

    def __init__(self, contract: Any, reason: Optional[str] = None, key: Optional[str] = None) -> None:
        self.contract = contract
        self.key = key
        self.reason = reason
        message = f"Cannot resolve contract: {_contract_name(contract)}"
        if key is not None:
            message += f" with key '{key}'"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)


class ScopeError(DIException):
    """Raised for invalid scope operations.

    This occurs when:
    - Resolving from a scope that was already disposed.
    - Resolving from a container that was not built yet.
    - Raising the initialization signal of a bootstrapper twice.
    """


class DisposalError(DIException):
    """Raised after a scope released its instances and some of them failed.

    Attributes:
        errors: The exceptions raised by the failing disposals, in disposal order.
    """

    def __init__(self, errors: Sequence[BaseException]) -> None:
        self.errors: List[BaseException] = list(errors)
        details = "; ".join(f"{type(error).__name__}: {error}" for error in self.errors)
        super().__init__(f"{len(self.errors)} instance(s) failed to dispose: {details}")
