from typing import Any, Callable, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, model_validator

from scopewire.domain.enums import Lifetime, ProviderKind


class ServiceKey(BaseModel):
    """Identity under which a service is registered and requested.

    Attributes:
        contract: The type the service is requested by.
        key: Optional name for keyed lookups; unnamed and named keys never match.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    contract: Any = Field(..., description="The contract type.")
    key: Optional[str] = Field(default=None, description="Optional lookup key for named registrations.")

    def __str__(self) -> str:
        name = getattr(self.contract, "__name__", repr(self.contract))
        if self.key is None:
            return name
        return f"{name}['{self.key}']"


class Registration(BaseModel):
    """Value object binding a service key to a provider under a lifetime.

    Exactly one provider field is set, matching ``kind``.

    Attributes:
        registration_id: Monotonic id assigned by the builder; identifies cached instances.
        service: The service key this registration answers.
        lifetime: How long resolved instances live.
        kind: Which provider field is populated.
        implementation: Concrete class for TYPE registrations.
        factory: Callable receiving the resolving scope for FACTORY registrations.
        handler: Zero-argument callable for HANDLER registrations.
        instance: Pre-built object for INSTANCE registrations.
        externally_owned: Whether resolved instances are left alone when scopes are disposed.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    registration_id: int = Field(..., ge=0, description="Sequence number assigned at registration.")
    service: ServiceKey = Field(..., description="The service key this registration answers.")
    lifetime: Lifetime = Field(..., description="The lifetime of resolved instances.")
    kind: ProviderKind = Field(..., description="The kind of provider.")
    implementation: Optional[Type] = Field(default=None, description="Concrete implementation class.")
    factory: Optional[Callable[..., Any]] = Field(default=None, description="Factory receiving the resolving scope.")
    handler: Optional[Callable[[], Any]] = Field(default=None, description="Zero-argument handler.")
    instance: Any = Field(default=None, description="Pre-built instance.")
    externally_owned: bool = Field(default=False, description="Never dispose resolved instances with a scope.")

    @model_validator(mode="after")
    def _check_provider(self) -> "Registration":
        required = {
            ProviderKind.TYPE: self.implementation,
            ProviderKind.FACTORY: self.factory,
            ProviderKind.HANDLER: self.handler,
        }
        if self.kind in required and required[self.kind] is None:
            raise ValueError(f"{self.kind.value} registration requires a {self.kind.value} provider")
        if (self.kind == ProviderKind.INSTANCE) != (self.lifetime == Lifetime.INSTANCE):
            raise ValueError("instance providers must use the instance lifetime")
        return self

    @property
    def contract(self) -> Any:
        return self.service.contract


class ContainerOptions(BaseModel):
    """Policy flags applied to a container and every scope derived from it.

    Attributes:
        auto_wire: Construct unregistered concrete classes whose dependencies are satisfiable.
        track_transient_disposables: Dispose transient instances with the scope that created them.
            Tracked transients are held until that scope is disposed, so a long-lived
            root resolving many disposable transients keeps every one of them; turn
            this off for such roots, or resolve transients from short-lived child scopes.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    auto_wire: bool = Field(default=False, description="Enable implicit self-registration of concrete classes.")
    track_transient_disposables: bool = Field(
        default=True,
        description="Track disposable transient instances for release with their scope.",
    )
