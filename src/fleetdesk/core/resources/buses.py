"""Buses page: fleet vehicles, their owner and assigned driver."""

from __future__ import annotations

import dataclasses
import uuid
from typing import TYPE_CHECKING, Any

from fleetdesk.core.entities import Bus, BusStatus
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
from fleetdesk.core.text_utils import clean, to_int

if TYPE_CHECKING:
    from fleetdesk.core.workspace import Workspace

_STATUS_LABELS = {
    BusStatus.ACTIVE.value: "Actif",
    BusStatus.INACTIVE.value: "Inactif",
    BusStatus.MAINTENANCE.value: "Maintenance",
}


@registry.register
class BusesSpec(ResourceSpec[Bus]):
    resource_id = "buses"
    title = "Bus"
    description = "Gérez la flotte : immatriculation, capacité, propriétaire et chauffeur."
    import_title = "Importer des bus"
    import_description = "Chargez un CSV/Excel, mappez les colonnes, puis validez l'import."
    import_fields = (
        FieldDescriptor("plate", "Immatriculation", required=True, aliases=("plaque",)),
        FieldDescriptor("model", "Modèle"),
        FieldDescriptor("capacity", "Capacité", aliases=("places",)),
        FieldDescriptor("year", "Année"),
        FieldDescriptor("status", "Statut"),
        FieldDescriptor(
            "operatorId",
            "Propriétaire (nom ou ID)",
            hint="Nom ou identifiant d'une personne existante",
            aliases=("owner", "propriétaire", "proprietaire"),
        ),
        FieldDescriptor(
            "assignedDriverId",
            "Chauffeur (nom ou ID)",
            hint="Nom ou identifiant d'une personne existante",
            aliases=("driver", "chauffeur"),
        ),
    )

    def _drawer(self, ws: "Workspace") -> DrawerDescriptor[Bus]:
        def body(b: Bus) -> list[tuple[str, str]]:
            return [
                ("Capacité", str(b.capacity)),
                ("Propriétaire", ws.person_name(b.operator_id)),
                ("Chauffeur", ws.person_name(b.assigned_driver_id)),
                ("Modèle", b.model or "—"),
                ("Année", str(b.year) if b.year else "—"),
                ("Statut", _STATUS_LABELS.get(b.status, b.status or "—")),
            ]

        return DrawerDescriptor(
            title=lambda b: f"Bus {b.plate}",
            trigger=lambda b: b.plate,
            body=body,
        )

    def columns(self, ws: "Workspace") -> list[ColumnDescriptor[Bus]]:
        return [
            make_drawer_column("plate", self._drawer(ws), header="Immatriculation"),
            ColumnDescriptor(
                "capacity",
                "Capacité",
                cell=lambda b: str(b.capacity),
                sort_key=lambda b: b.capacity,
                align="right",
            ),
            ColumnDescriptor(
                "operator",
                "Propriétaire",
                cell=lambda b: ws.person_name(b.operator_id),
                sort_key=lambda b: ws.person_name(b.operator_id).lower(),
            ),
            ColumnDescriptor(
                "driver",
                "Chauffeur",
                cell=lambda b: ws.person_name(b.assigned_driver_id),
                sort_key=lambda b: ws.person_name(b.assigned_driver_id).lower(),
            ),
            ColumnDescriptor(
                "status",
                "Statut",
                cell=lambda b: _STATUS_LABELS.get(b.status, b.status or "—"),
                sort_key=lambda b: b.status,
            ),
        ]

    def search(self) -> SearchDescriptor[Bus]:
        return SearchDescriptor(
            fields=(field_getter("plate"), field_getter("model")),
            placeholder="Rechercher immatriculation, modèle…",
        )

    def filters(self, ws: "Workspace") -> list[FilterDescriptor[Bus]]:
        return [
            FilterDescriptor(
                id="status",
                label="Statut",
                options=tuple(FilterOption(label, value) for value, label in _STATUS_LABELS.items()),
                accessor=lambda b: b.status or "",
            )
        ]

    def transform(self, raw: dict[str, Any], ws: "Workspace") -> Bus | None:
        plate = clean(raw.get("plate")).upper()
        if not plate:
            return None
        status = clean(raw.get("status")).lower()
        if status not in _STATUS_LABELS:
            status = BusStatus.INACTIVE.value
        return Bus(
            id=str(uuid.uuid4()),
            plate=plate,
            model=clean(raw.get("model")) or None,
            capacity=to_int(raw.get("capacity"), 0),
            year=to_int(raw.get("year")) or None,
            status=status,
            operator_id=ws.resolve_person(clean(raw.get("operatorId"))),
            assigned_driver_id=ws.resolve_person(clean(raw.get("assignedDriverId"))),
        )

    def dedupe_key(self, row: Bus) -> str:
        return row.plate

    def row_actions(self, row: Bus, ops: RowOperations[Bus]) -> list[RowAction]:
        active = row.status == BusStatus.ACTIVE.value
        toggled = dataclasses.replace(
            row,
            status=BusStatus.INACTIVE.value if active else BusStatus.ACTIVE.value,
        )
        return [
            RowAction("Désactiver" if active else "Activer", lambda: ops.update_row(toggled)),
            *super().row_actions(row, ops),
        ]
