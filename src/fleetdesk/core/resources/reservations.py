"""Reservations page: bookings with passenger, route, buses and payment state."""

from __future__ import annotations

import dataclasses
import random
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from fleetdesk.core.entities import Passenger, PaymentState, Reservation, ReservationStatus, Route
from fleetdesk.core.models import (
    ColumnDescriptor,
    DrawerDescriptor,
    FieldDescriptor,
    FilterDescriptor,
    FilterOption,
    RowAction,
    SearchDescriptor,
    field_getter,
    make_drawer_column,
)
from fleetdesk.core.resources.base import ResourceSpec, RowOperations, registry
from fleetdesk.core.text_utils import clean, to_int, to_number

if TYPE_CHECKING:
    from fleetdesk.core.workspace import Workspace

CODE_PREFIX = "BZV-"

_STATUS_LABELS = {
    ReservationStatus.PENDING.value: "En attente",
    ReservationStatus.CONFIRMED.value: "Confirmée",
    ReservationStatus.CANCELLED.value: "Annulée",
    ReservationStatus.COMPLETED.value: "Terminée",
}

_PAYMENT_LABELS = {
    PaymentState.PAID.value: "Payé",
    PaymentState.PENDING.value: "En attente",
    PaymentState.FAILED.value: "Échoué",
    PaymentState.NONE.value: "Aucun",
}


def format_money(amount: float | None) -> str:
    """XAF amount with French digit grouping: ``12 500 FCFA``."""
    if amount is None:
        return "—"
    return f"{amount:,.0f} FCFA".replace(",", "\u202f")


def generate_code() -> str:
    return f"{CODE_PREFIX}{random.randint(0, 999_999):06d}"


@registry.register
class ReservationsSpec(ResourceSpec[Reservation]):
    resource_id = "reservations"
    title = "Réservations"
    description = "Suivez les réservations, leur statut et leur paiement."
    import_title = "Importer des réservations"
    import_description = "Chargez un CSV/Excel, mappez les colonnes, puis validez l'import."
    import_fields = (
        FieldDescriptor("code", "Code"),
        FieldDescriptor(
            "tripDate",
            "Date du trajet (YYYY-MM-DD)",
            required=True,
            aliases=("date",),
        ),
        FieldDescriptor("route.from", "Départ", required=True, aliases=("from", "origine")),
        FieldDescriptor("route.to", "Arrivée", required=True, aliases=("arrivee", "destination")),
        FieldDescriptor(
            "passenger.name",
            "Passager · Nom",
            required=True,
            aliases=("passenger name", "passager"),
        ),
        FieldDescriptor(
            "passenger.phone",
            "Passager · Téléphone",
            required=True,
            aliases=("passenger phone", "téléphone", "telephone"),
        ),
        FieldDescriptor("passenger.email", "Passager · Email", aliases=("passenger email", "email")),
        FieldDescriptor("seats", "Sièges", required=True, aliases=("places",)),
        FieldDescriptor("busIds", "Bus IDs (b1,b3,…)", hint="Séparés par des virgules"),
        FieldDescriptor("priceTotal", "Total (FCFA)", aliases=("total", "prix")),
        FieldDescriptor("status", "Statut (pending/confirmed/cancelled)", aliases=("statut",)),
        FieldDescriptor("tripId", "Voyage ID (optionnel)", aliases=("voyage",)),
    )

    def _drawer(self, ws: "Workspace") -> DrawerDescriptor[Reservation]:
        def body(r: Reservation) -> list[tuple[str, str]]:
            plates = [ws.bus_plate(bus_id) for bus_id in r.bus_ids]
            trip = r.trip_date or "—"
            if r.trip_id:
                trip = f"{trip} · Voyage #{r.trip_id}"
            return [
                ("Statut", _STATUS_LABELS.get(r.status, r.status)),
                ("Passager", r.passenger.name or "—"),
                ("Tél.", r.passenger.phone or "—"),
                ("Email", r.passenger.email or "—"),
                ("Trajet", f"{r.route.origin or '—'} → {r.route.destination or '—'}"),
                ("Date", trip),
                ("Sièges", str(r.seats)),
                ("Total", format_money(r.price_total)),
                ("Bus", ", ".join(plates) if plates else "—"),
                ("Paiement", _PAYMENT_LABELS[ws.payment_state(r.id)]),
                ("Créée le", r.created_at or "—"),
            ]

        return DrawerDescriptor(title=lambda r: r.code, trigger=lambda r: r.code, body=body)

    def columns(self, ws: "Workspace") -> list[ColumnDescriptor[Reservation]]:
        return [
            make_drawer_column("code", self._drawer(ws), header="Code"),
            ColumnDescriptor(
                "passenger",
                "Passager",
                cell=lambda r: f"{r.passenger.name or '—'}\n{r.passenger.phone or '—'}",
                sortable=False,
            ),
            ColumnDescriptor(
                "route",
                "Itinéraire",
                cell=lambda r: f"{r.route.origin or '—'} → {r.route.destination or '—'}",
                sortable=False,
            ),
            ColumnDescriptor(
                "seats", "Sièges", cell=lambda r: str(r.seats), sort_key=lambda r: r.seats, align="right"
            ),
            ColumnDescriptor(
                "buses",
                "Bus",
                cell=lambda r: ", ".join(ws.bus_plate(b) for b in r.bus_ids) or "—",
                sortable=False,
                align="right",
            ),
            ColumnDescriptor(
                "total",
                "Total",
                cell=lambda r: format_money(r.price_total),
                sort_key=lambda r: r.price_total,
                align="right",
            ),
            ColumnDescriptor(
                "status",
                "Statut",
                cell=lambda r: _STATUS_LABELS.get(r.status, r.status),
                sort_key=lambda r: r.status,
            ),
            ColumnDescriptor(
                "payment",
                "Paiement",
                cell=lambda r: _PAYMENT_LABELS[ws.payment_state(r.id)],
                sort_key=lambda r: ws.payment_state(r.id),
            ),
        ]

    def search(self) -> SearchDescriptor[Reservation]:
        return SearchDescriptor(
            fields=(
                field_getter("code"),
                field_getter("passenger.name"),
                field_getter("passenger.phone"),
                field_getter("route.origin"),
                field_getter("route.destination"),
            ),
            placeholder="Rechercher code, passager, téléphone, départ, arrivée…",
        )

    def filters(self, ws: "Workspace") -> list[FilterDescriptor[Reservation]]:
        return [
            FilterDescriptor(
                id="status",
                label="Statut réservation",
                options=tuple(FilterOption(label, value) for value, label in _STATUS_LABELS.items()),
                accessor=lambda r: r.status or "",
            ),
            FilterDescriptor(
                id="payment",
                label="Paiement",
                options=tuple(FilterOption(label, value) for value, label in _PAYMENT_LABELS.items()),
                accessor=lambda r: ws.payment_state(r.id),
            ),
        ]

    def transform(self, raw: dict[str, Any], ws: "Workspace") -> Reservation | None:
        trip_date = clean(raw.get("tripDate"))
        origin = clean(raw.get("route.from"))
        destination = clean(raw.get("route.to"))
        name = clean(raw.get("passenger.name"))
        phone = clean(raw.get("passenger.phone"))
        if not (trip_date and origin and destination and name and phone):
            return None

        status = clean(raw.get("status")).lower() or ReservationStatus.PENDING.value
        if status not in _STATUS_LABELS:
            status = ReservationStatus.PENDING.value
        bus_ids = [b.strip() for b in clean(raw.get("busIds")).split(",") if b.strip()]

        return Reservation(
            id=str(uuid.uuid4()),
            code=clean(raw.get("code")) or generate_code(),
            trip_date=trip_date,
            route=Route(origin=origin, destination=destination),
            passenger=Passenger(name=name, phone=phone, email=clean(raw.get("passenger.email")) or None),
            seats=to_int(raw.get("seats"), 1),
            bus_ids=bus_ids,
            price_total=to_number(raw.get("priceTotal"), 0.0),
            status=status,
            trip_id=clean(raw.get("tripId")) or None,
            created_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        )

    def dedupe_key(self, row: Reservation) -> str:
        if row.code:
            return f"code:{row.code}"
        return f"npd:{row.passenger.name.lower()}|{row.passenger.phone}|{row.trip_date}"

    def row_actions(self, row: Reservation, ops: RowOperations[Reservation]) -> list[RowAction]:
        actions: list[RowAction] = []
        if row.status != ReservationStatus.CANCELLED.value:
            cancelled = dataclasses.replace(row, status=ReservationStatus.CANCELLED.value)
            actions.append(RowAction("Annuler", lambda: ops.update_row(cancelled)))
        return actions + super().row_actions(row, ops)
