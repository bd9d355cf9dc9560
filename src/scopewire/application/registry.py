from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from scopewire.domain import Registration, ServiceKey


class RegistrationIndex:
    """Immutable lookup from service key to its registrations in registration order.

    Produced once by ``ContainerBuilder.build`` and shared by the root container
    and every scope derived from it.
    """

    def __init__(self, registrations: Iterable[Registration]) -> None:
        self._registrations: Tuple[Registration, ...] = tuple(registrations)
        grouped: Dict[ServiceKey, List[Registration]] = {}
        for registration in self._registrations:
            grouped.setdefault(registration.service, []).append(registration)
        self._entries: Mapping[ServiceKey, Tuple[Registration, ...]] = MappingProxyType(
            {service: tuple(entries) for service, entries in grouped.items()}
        )

    @property
    def registrations(self) -> Tuple[Registration, ...]:
        return self._registrations

    @property
    def next_id(self) -> int:
        """First registration id not used by any indexed registration."""
        return max((r.registration_id for r in self._registrations), default=-1) + 1

    def lookup(self, service: ServiceKey) -> Tuple[Registration, ...]:
        return self._entries.get(service, ())

    def last(self, service: ServiceKey) -> Optional[Registration]:
        """Most recently added registration for a key; the one single resolution uses."""
        entries = self._entries.get(service)
        return entries[-1] if entries else None

    def contains(self, contract: Any, key: Optional[str] = None) -> bool:
        return ServiceKey(contract=contract, key=key) in self._entries

    def services(self) -> Iterator[ServiceKey]:
        return iter(self._entries)

    def __contains__(self, service: object) -> bool:
        return service in self._entries

    def __len__(self) -> int:
        return len(self._registrations)

    def __repr__(self) -> str:
        return f"RegistrationIndex({len(self._registrations)} registrations, {len(self._entries)} services)"
