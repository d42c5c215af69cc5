"""Domain rows shown by the resource pages.

Plain dataclasses; ``from_dict`` accepts the camelCase keys used by the seed
file and the REST payloads.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class BusStatus(str, Enum):
    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    INACTIVE = "inactive"


class PersonRole(str, Enum):
    DRIVER = "driver"
    OWNER = "owner"
    CONDUCTOR = "conductor"
    ADMIN = "admin"


class StaffRole(str, Enum):
    AGENT = "agent"
    ADMIN = "admin"


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentState(str, Enum):
    PAID = "paid"
    PENDING = "pending"
    FAILED = "failed"
    NONE = "none"


def _from_dict(cls: type, data: dict[str, Any]) -> Any:
    names = {f.name for f in dataclasses.fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in names})


@dataclass
class Person:
    id: str
    name: str
    phone: str
    role: str = PersonRole.DRIVER.value
    email: str | None = None
    license_no: str | None = None
    avatar: str | None = None
    created_at: str | None = None

    @classmethod
    def from_dict(cls, d: dict) -> "Person":
        d = dict(d)
        if "licenseNo" in d:
            d["license_no"] = d.pop("licenseNo")
        if "createdAt" in d:
            d["created_at"] = d.pop("createdAt")
        return _from_dict(cls, d)


@dataclass
class Staff:
    id: str
    name: str
    phone: str
    role: str = StaffRole.AGENT.value
    email: str | None = None
    avatar: str | None = None
    created_at: str | None = None

    @classmethod
    def from_dict(cls, d: dict) -> "Staff":
        d = dict(d)
        if "createdAt" in d:
            d["created_at"] = d.pop("createdAt")
        return _from_dict(cls, d)


@dataclass
class Bus:
    id: str
    plate: str
    capacity: int = 0
    status: str = BusStatus.INACTIVE.value
    model: str | None = None
    year: int | None = None
    operator_id: str | None = None  # Person (owner)
    assigned_driver_id: str | None = None  # Person (driver)

    @classmethod
    def from_dict(cls, d: dict) -> "Bus":
        d = dict(d)
        if "operatorId" in d:
            d["operator_id"] = d.pop("operatorId")
        if "assignedDriverId" in d:
            d["assigned_driver_id"] = d.pop("assignedDriverId")
        return _from_dict(cls, d)


@dataclass
class Route:
    origin: str
    destination: str


@dataclass
class Passenger:
    name: str
    phone: str
    email: str | None = None


@dataclass
class Reservation:
    id: str
    code: str
    trip_date: str  # YYYY-MM-DD
    route: Route
    passenger: Passenger
    seats: int = 1
    bus_ids: list[str] = field(default_factory=list)
    price_total: float = 0.0  # XAF
    status: str = ReservationStatus.PENDING.value
    trip_id: str | None = None
    created_at: str | None = None

    @classmethod
    def from_dict(cls, d: dict) -> "Reservation":
        route = d.get("route") or {}
        passenger = d.get("passenger") or {}
        return cls(
            id=d["id"],
            code=d.get("code", ""),
            trip_date=d.get("tripDate", d.get("trip_date", "")),
            route=Route(origin=route.get("from", ""), destination=route.get("to", "")),
            passenger=Passenger(
                name=passenger.get("name", ""),
                phone=passenger.get("phone", ""),
                email=passenger.get("email"),
            ),
            seats=int(d.get("seats", 1)),
            bus_ids=list(d.get("busIds", d.get("bus_ids", [])) or []),
            price_total=float(d.get("priceTotal", d.get("price_total", 0)) or 0),
            status=d.get("status", ReservationStatus.PENDING.value),
            trip_id=d.get("tripId", d.get("trip_id")),
            created_at=d.get("createdAt", d.get("created_at")),
        )


@dataclass
class Payment:
    id: str
    booking_id: str
    amount: float
    method: str  # cash | mpesa | card | momo
    status: str  # pending | paid | failed | refunded

    @classmethod
    def from_dict(cls, d: dict) -> "Payment":
        d = dict(d)
        if "bookingId" in d:
            d["booking_id"] = d.pop("bookingId")
        return _from_dict(cls, d)
