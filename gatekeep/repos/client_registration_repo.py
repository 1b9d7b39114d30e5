from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol

from gatekeep.models.client_registration import ClientRegistration


class ClientRegistrationRepo(Protocol):
    def find_by_registration_id(self, registration_id: str) -> ClientRegistration | None: ...


class InMemoryClientRegistrationRepo:
    def __init__(self, *registrations: ClientRegistration) -> None:
        self._by_registration_id: dict[str, ClientRegistration] = {}
        for registration in registrations:
            self.register(registration)

    def find_by_registration_id(self, registration_id: str) -> ClientRegistration | None:
        return self._by_registration_id.get(registration_id)

    def register(self, registration: ClientRegistration) -> None:
        if registration.registration_id in self._by_registration_id:
            raise ValueError(
                f"Duplicate registration_id {registration.registration_id!r}"
            )
        self._by_registration_id[registration.registration_id] = registration

    def __iter__(self) -> Iterator[ClientRegistration]:
        return iter(self._by_registration_id.values())
