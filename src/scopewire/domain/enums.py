from enum import Enum


class Lifetime(str, Enum):
    """Defines how long a resolved instance lives.

    Attributes:
        TRANSIENT: New instance created on each resolution.
        SINGLETON: Single instance per lifetime scope, created on first resolution.
        INSTANCE: Pre-built object supplied at registration, never constructed.
    """

    TRANSIENT = "transient"
    SINGLETON = "singleton"
    INSTANCE = "instance"

    def __str__(self) -> str:
        return self.value


class ProviderKind(str, Enum):
    """Defines what satisfies a registered contract.

    Attributes:
        TYPE: Concrete class instantiated through constructor injection.
        FACTORY: Callable receiving the resolving scope and returning an instance.
        HANDLER: Zero-argument callable stored as-is and invoked at resolution time.
        INSTANCE: Pre-built object.
    """

    TYPE = "type"
    FACTORY = "factory"
    HANDLER = "handler"
    INSTANCE = "instance"

    def __str__(self) -> str:
        return self.value
