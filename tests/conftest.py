"""Pytest fixtures shared across all tests."""

from __future__ import annotations

import pytest

import fleetdesk.core.resources  # noqa: F401  (registers the resource specs)
from fleetdesk.core.entities import Bus, Passenger, Payment, Person, Reservation, Route
from fleetdesk.core.workspace import Workspace


class FakeClock:
    """Manually advanced monotonic clock for debounce tests."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def vehicles() -> list[dict]:
    """A small heterogeneous row set (plain dicts) for table tests."""
    return [
        {"id": "b1", "plate": "BZV-001", "model": "Yutong", "status": "active", "capacity": 70},
        {"id": "b2", "plate": "BZV-002", "model": "King Long", "status": "maintenance", "capacity": 55},
        {"id": "b3", "plate": "PNR-003", "model": "Yutong", "status": "inactive", "capacity": 30},
        {"id": "b4", "plate": "PNR-004", "model": "Toyota Coaster", "status": "active", "capacity": None},
        {"id": "b5", "plate": "DOL-005", "model": "Yutong", "status": "active", "capacity": 45},
        {"id": "b6", "plate": "DOL-006", "model": "Hiace", "status": "inactive", "capacity": 15},
    ]


@pytest.fixture
def workspace() -> Workspace:
    """Workspace with two people, one bus, one reservation and a payment."""
    ws = Workspace()
    ws.people.replace_all(
        [
            Person(id="p1", name="Jean Mabiala", phone="061", role="driver"),
            Person(id="p2", name="Grâce Nkounkou", phone="052", role="owner"),
        ]
    )
    ws.buses.replace_all(
        [Bus(id="b1", plate="BZV-1024-AB", capacity=70, status="active", operator_id="p2")]
    )
    ws.reservations.replace_all(
        [
            Reservation(
                id="r1",
                code="BZV-000001",
                trip_date="2025-01-14",
                route=Route("Brazzaville", "Pointe-Noire"),
                passenger=Passenger("Chancel Ngoma", "065"),
                seats=2,
                bus_ids=["b1"],
                price_total=30000,
                status="confirmed",
            )
        ]
    )
    ws.payments.replace_all(
        [Payment(id="pay1", booking_id="r1", amount=30000, method="momo", status="paid")]
    )
    return ws
