"""Workspace: the repositories of every resource plus cross-resource lookups.

Resource pages resolve references through it (owner name of a bus, plates
of a reservation, payment state of a booking).
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from fleetdesk.core.entities import Bus, PaymentState, Payment, Person, Reservation, Staff
from fleetdesk.core.repository import InMemoryRepository

_log = logging.getLogger(__name__)

MISSING = "—"


class Workspace:
    """In-memory data for one dashboard session."""

    def __init__(self) -> None:
        self.people: InMemoryRepository[Person] = InMemoryRepository()
        self.staff: InMemoryRepository[Staff] = InMemoryRepository()
        self.buses: InMemoryRepository[Bus] = InMemoryRepository()
        self.reservations: InMemoryRepository[Reservation] = InMemoryRepository()
        self.payments: InMemoryRepository[Payment] = InMemoryRepository()

    def repository(self, resource_id: str) -> InMemoryRepository:
        repo = getattr(self, resource_id, None)
        if not isinstance(repo, InMemoryRepository):
            raise KeyError(resource_id)
        return repo

    # ------------------------------------------------------------------
    # Seed data
    # ------------------------------------------------------------------

    @classmethod
    def from_seed(cls, path: str | Path) -> "Workspace":
        """Load a YAML seed file with top-level lists per resource."""
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
        ws = cls()
        ws.people.replace_all(Person.from_dict(d) for d in data.get("people", []))
        ws.staff.replace_all(Staff.from_dict(d) for d in data.get("staff", []))
        ws.buses.replace_all(Bus.from_dict(d) for d in data.get("buses", []))
        ws.reservations.replace_all(
            Reservation.from_dict(d) for d in data.get("reservations", [])
        )
        ws.payments.replace_all(Payment.from_dict(d) for d in data.get("payments", []))
        _log.info(
            "Seed loaded from %s: %d people, %d staff, %d buses, %d reservations",
            path,
            len(ws.people.list()),
            len(ws.staff.list()),
            len(ws.buses.list()),
            len(ws.reservations.list()),
        )
        return ws

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def person_name(self, person_id: str | None) -> str:
        if not person_id:
            return MISSING
        person = self.people.get(person_id)
        return person.name if person is not None else MISSING

    def resolve_person(self, value: str | None) -> str | None:
        """Accept a person id or a (case-insensitive) name; return the id."""
        if not value:
            return None
        text = str(value).strip()
        if self.people.get(text) is not None:
            return text
        wanted = text.lower()
        for person in self.people.list():
            if (person.name or "").strip().lower() == wanted:
                return person.id
        return None

    def bus_plate(self, bus_id: str) -> str:
        bus = self.buses.get(bus_id)
        return bus.plate if bus is not None and bus.plate else bus_id

    def payment_state(self, reservation_id: str) -> str:
        """Best payment state of a booking: paid > pending > failed > none."""
        states = {p.status for p in self.payments.list() if p.booking_id == reservation_id}
        for state in (PaymentState.PAID, PaymentState.PENDING, PaymentState.FAILED):
            if state.value in states:
                return state.value
        return PaymentState.NONE.value
