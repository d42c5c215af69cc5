"""Staff page: back-office agents and admins."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from fleetdesk.core.entities import Staff, StaffRole
from fleetdesk.core.models import (
    ColumnDescriptor,
    DrawerDescriptor,
    FieldDescriptor,
    FilterDescriptor,
    FilterOption,
    SearchDescriptor,
    field_getter,
    make_drawer_column,
)
from fleetdesk.core.resources.base import ResourceSpec, registry
from fleetdesk.core.text_utils import clean

if TYPE_CHECKING:
    from fleetdesk.core.workspace import Workspace

_ROLE_LABELS = {StaffRole.AGENT.value: "Agent", StaffRole.ADMIN.value: "Admin"}


@registry.register
class StaffSpec(ResourceSpec[Staff]):
    resource_id = "staff"
    title = "Staff"
    description = "Agents et administrateurs du tableau de bord."
    import_title = "Importer le staff"
    import_description = (
        "Chargez un CSV/Excel, mappez les colonnes (avatar facultatif), puis validez l'import."
    )
    import_fields = (
        FieldDescriptor("name", "Nom", required=True),
        FieldDescriptor("role", "Rôle", required=True),
        FieldDescriptor("phone", "Téléphone", required=True, aliases=("tel", "tél")),
        FieldDescriptor("email", "Email", aliases=("mail",)),
        FieldDescriptor("avatar", "Avatar (URL ou data:…)"),
    )

    def columns(self, ws: "Workspace") -> list[ColumnDescriptor[Staff]]:
        drawer = DrawerDescriptor(
            title=lambda s: s.name,
            trigger=lambda s: s.name,
            body=lambda s: [
                ("Rôle", _ROLE_LABELS.get(s.role, s.role)),
                ("Téléphone", s.phone or "—"),
                ("Email", s.email or "—"),
                ("Créé le", s.created_at or "—"),
            ],
        )
        return [
            make_drawer_column("name", drawer, header="Nom"),
            ColumnDescriptor(
                "role",
                "Rôle",
                cell=lambda s: _ROLE_LABELS.get(s.role, s.role),
                sort_key=lambda s: s.role,
            ),
            ColumnDescriptor("phone", "Téléphone", cell=lambda s: s.phone, align="right"),
            ColumnDescriptor("email", "Email", cell=lambda s: s.email or "—", sort_key=lambda s: s.email),
        ]

    def search(self) -> SearchDescriptor[Staff]:
        return SearchDescriptor(
            fields=(field_getter("name"), field_getter("phone"), field_getter("email")),
            placeholder="Rechercher nom, téléphone, email…",
        )

    def filters(self, ws: "Workspace") -> list[FilterDescriptor[Staff]]:
        return [
            FilterDescriptor(
                id="role",
                label="Rôle",
                options=tuple(FilterOption(label, value) for value, label in _ROLE_LABELS.items()),
                accessor=lambda s: s.role or "",
            )
        ]

    def transform(self, raw: dict[str, Any], ws: "Workspace") -> Staff | None:
        name = clean(raw.get("name"))
        phone = clean(raw.get("phone"))
        if not name or not phone:
            return None
        role = clean(raw.get("role")).lower()
        return Staff(
            id=str(uuid.uuid4()),
            name=name,
            phone=phone,
            role=StaffRole.ADMIN.value if role == StaffRole.ADMIN.value else StaffRole.AGENT.value,
            email=clean(raw.get("email")) or None,
            avatar=clean(raw.get("avatar")) or None,
        )

    def dedupe_key(self, row: Staff) -> str:
        return f"{row.name.lower()}|{row.phone}"
