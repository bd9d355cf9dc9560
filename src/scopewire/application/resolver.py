import collections.abc
import inspect
import logging
import types
from typing import Any, Callable, ClassVar, Dict, List, NamedTuple, Optional, Set, Tuple, Union, get_args, get_origin, get_type_hints

from scopewire.domain import CircularDependencyError, IResolver, ScopeError, UnresolvedContractError

logger = logging.getLogger(__name__)

_COLLECTION_ORIGINS = (
    list,
    tuple,
    collections.abc.Sequence,
    collections.abc.Collection,
    collections.abc.Iterable,
)
_UNION_TYPES = (Union, types.UnionType) if hasattr(types, "UnionType") else (Union,)


class Dependency(NamedTuple):
    """A single injectable slot of a constructor or an instance.

    Attributes:
        name: Parameter or attribute name.
        contract: The contract to resolve (the element type for collections).
        collection: Whether the slot receives every registration of the contract.
        optional: Whether the slot may stay unresolved (``Optional`` hint or default value).
        has_default: Whether the constructor parameter declares a default value.
        as_tuple: Whether a collection slot expects a tuple rather than a list.
    """

    name: str
    contract: Any
    collection: bool = False
    optional: bool = False
    has_default: bool = False
    as_tuple: bool = False


def collection_element(annotation: Any) -> Optional[Any]:
    """Return ``X`` for ``List[X]``, ``Sequence[X]``, ``Iterable[X]``, ``Tuple[X, ...]`` and friends."""
    origin = get_origin(annotation)
    if origin not in _COLLECTION_ORIGINS:
        return None
    args = get_args(annotation)
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return args[0]
        return None
    if len(args) == 1:
        return args[0]
    return None


def optional_inner(annotation: Any) -> Optional[Any]:
    """Return ``X`` for ``Optional[X]``; None for anything else."""
    if get_origin(annotation) not in _UNION_TYPES:
        return None
    args = [arg for arg in get_args(annotation) if arg is not type(None)]
    if len(args) == 1 and len(get_args(annotation)) == 2:
        return args[0]
    return None


def is_protocol(cls: Any) -> bool:
    return inspect.isclass(cls) and bool(getattr(cls, "_is_protocol", False))


def _describe(annotation: Any, name: str, has_default: bool) -> Dependency:
    inner = optional_inner(annotation)
    optional = inner is not None or has_default
    if inner is not None:
        annotation = inner
    element = collection_element(annotation)
    if element is not None:
        return Dependency(
            name,
            element,
            collection=True,
            optional=optional,
            has_default=has_default,
            as_tuple=get_origin(annotation) is tuple,
        )
    return Dependency(name, annotation, optional=optional, has_default=has_default)


def _class_annotations(cls: type) -> Dict[str, Tuple[Any, type]]:
    """Raw annotations of a class and its bases, each paired with the class declaring it."""
    annotations: Dict[str, Tuple[Any, type]] = {}
    for klass in reversed(inspect.getmro(cls)):
        if klass is object:
            continue
        try:
            if hasattr(inspect, "get_annotations"):
                own = inspect.get_annotations(klass)
            else:
                own = klass.__dict__.get("__annotations__", {})
        except NameError as e:
            logger.debug("Skipping annotations of %s: %s", klass.__name__, e)
            continue
        for name, annotation in own.items():
            annotations[name] = (annotation, klass)
    return annotations


def _evaluate_annotation(name: str, annotation: Any, owner: type) -> Any:
    """Evaluate one annotation as if it were declared alone on ``owner``."""
    holder = type(owner.__name__, (), {"__annotations__": {name: annotation}, "__module__": owner.__module__})
    return get_type_hints(holder, localns=dict(vars(owner)))[name]


class DependencyResolver:
    """Creates instances using constructor introspection and type hints.

    Uses Python's inspect module to analyze constructor signatures, and class
    annotations for property injection into existing objects.
    """

    def constructor_dependencies(self, cls: type) -> List[Dependency]:
        """List the injectable constructor parameters of a class.

        Args:
            cls: The class to inspect.

        Returns:
            One Dependency per parameter other than ``self``, ``*args`` and ``**kwargs``.

        Raises:
            UnresolvedContractError: If hints cannot be evaluated or a required parameter lacks one.
        """
        try:
            signature = inspect.signature(cls.__init__)
            type_hints = get_type_hints(cls.__init__)
        except (NameError, TypeError, ValueError) as e:
            raise UnresolvedContractError(cls, f"Cannot inspect constructor of {cls.__name__}: {e}") from e

        dependencies = []
        for index, (param_name, param) in enumerate(signature.parameters.items()):
            if index == 0 and param_name == "self":
                continue
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue

            has_default = param.default is not inspect.Parameter.empty
            if param_name not in type_hints:
                if has_default:
                    continue
                raise UnresolvedContractError(
                    cls,
                    f"Parameter '{param_name}' lacks type hint and has no default value.",
                )
            dependencies.append(_describe(type_hints[param_name], param_name, has_default))
        return dependencies

    def property_dependencies(self, cls: type) -> List[Dependency]:
        """List the public annotated attributes and settable properties of a class.

        Annotations are evaluated one at a time; a slot whose annotation cannot
        be evaluated, such as an unresolved forward reference, is skipped.
        """
        dependencies = []
        annotated: Set[str] = set()
        for name, (annotation, owner) in _class_annotations(cls).items():
            annotated.add(name)
            if name.startswith("_"):
                continue
            try:
                hint = _evaluate_annotation(name, annotation, owner)
            except (NameError, TypeError) as e:
                logger.debug("Skipping slot %s of %s: %s", name, cls.__name__, e)
                continue
            if hint is ClassVar or get_origin(hint) is ClassVar:
                continue
            dependencies.append(_describe(hint, name, has_default=False))

        for name, attribute in inspect.getmembers(cls, lambda member: isinstance(member, property)):
            if name.startswith("_") or name in annotated or attribute.fset is None or attribute.fget is None:
                continue
            try:
                hint = get_type_hints(attribute.fget).get("return")
            except (NameError, TypeError) as e:
                logger.debug("Skipping property %s of %s: %s", name, cls.__name__, e)
                continue
            if hint is not None:
                dependencies.append(_describe(hint, name, has_default=False))
        return dependencies

    def can_auto_wire(
        self,
        cls: Any,
        is_registered: Callable[[Any], bool],
        visiting: Optional[Set[Any]] = None,
    ) -> bool:
        """Check whether an unregistered class can be constructed implicitly.

        A class qualifies when it is concrete, is not a protocol or builtin, and
        each required constructor dependency is registered or itself qualifies.

        Args:
            cls: The candidate class.
            is_registered: Predicate telling whether a contract has a registration.
            visiting: Classes already on the current path.
        """
        if not inspect.isclass(cls) or inspect.isabstract(cls) or is_protocol(cls):
            return False
        if cls.__module__ == "builtins":
            return False

        visiting = (visiting or set()) | {cls}
        try:
            dependencies = self.constructor_dependencies(cls)
        except UnresolvedContractError:
            return False

        for dependency in dependencies:
            if dependency.collection or dependency.optional or is_registered(dependency.contract):
                continue
            if dependency.contract in visiting:
                return False
            if not self.can_auto_wire(dependency.contract, is_registered, visiting):
                return False
        return True

    def create(self, cls: type, scope: IResolver) -> Any:
        """Resolve all constructor dependencies from a scope and create the instance.

        Args:
            cls: The class to instantiate.
            scope: The scope to resolve dependencies from.

        Returns:
            Instance with all dependencies injected.

        Raises:
            UnresolvedContractError: If any dependency cannot be resolved or the constructor fails.
        """
        kwargs = {}
        for dependency in self.constructor_dependencies(cls):
            try:
                if dependency.collection:
                    values = scope.resolve_all(dependency.contract)
                    kwargs[dependency.name] = tuple(values) if dependency.as_tuple else values
                elif scope.is_registered(dependency.contract) or not dependency.optional:
                    kwargs[dependency.name] = scope.resolve(dependency.contract)
                elif not dependency.has_default:
                    kwargs[dependency.name] = None
            except (CircularDependencyError, ScopeError):
                raise
            except UnresolvedContractError as e:
                raise UnresolvedContractError(
                    cls,
                    f"Failed to resolve dependency for parameter '{dependency.name}': {e}",
                ) from e

        try:
            return cls(**kwargs)
        except Exception as e:
            raise UnresolvedContractError(cls, f"Failed to create instance: {e}") from e

    def inject(self, instance: Any, scope: IResolver) -> Tuple[str, ...]:
        """Assign every registered dependency slot of an existing object.

        Slots whose contract has no registration are left untouched.

        Returns:
            Names of the assigned slots.
        """
        assigned = []
        for dependency in self.property_dependencies(type(instance)):
            if not scope.is_registered(dependency.contract):
                continue
            if dependency.collection:
                values = scope.resolve_all(dependency.contract)
                value = tuple(values) if dependency.as_tuple else values
            else:
                value = scope.resolve(dependency.contract)
            setattr(instance, dependency.name, value)
            assigned.append(dependency.name)
        logger.debug("Injected %s into %s", assigned or "nothing", type(instance).__name__)
        return tuple(assigned)


__all__ = [
    "Dependency",
    "DependencyResolver",
    "collection_element",
    "is_protocol",
    "optional_inner",
]
