"""People page: drivers, owners, conductors and admins."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from fleetdesk.core.entities import Person, PersonRole
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

ROLE_LABELS = {
    PersonRole.DRIVER.value: "Chauffeur",
    PersonRole.OWNER.value: "Propriétaire",
    PersonRole.CONDUCTOR.value: "Receveur",
    PersonRole.ADMIN.value: "Admin",
}


@registry.register
class PeopleSpec(ResourceSpec[Person]):
    resource_id = "people"
    title = "Personnes"
    description = "Chauffeurs, propriétaires et receveurs."
    import_title = "Importer des personnes"
    import_description = (
        "Chargez un CSV/Excel, mappez les colonnes (avatar facultatif), puis validez l'import."
    )
    import_fields = (
        FieldDescriptor("name", "Nom", required=True),
        FieldDescriptor("role", "Rôle", required=True),
        FieldDescriptor("phone", "Téléphone", required=True, aliases=("tel", "tél")),
        FieldDescriptor("email", "Email", aliases=("mail",)),
        FieldDescriptor("licenseNo", "N° de permis (chauffeurs)", aliases=("permis", "license")),
        FieldDescriptor("avatar", "Avatar (URL ou data:…)"),
    )

    def columns(self, ws: "Workspace") -> list[ColumnDescriptor[Person]]:
        drawer = DrawerDescriptor(
            title=lambda p: p.name,
            trigger=lambda p: p.name,
            body=lambda p: [
                ("Rôle", ROLE_LABELS.get(p.role, p.role)),
                ("Téléphone", p.phone or "—"),
                ("Email", p.email or "—"),
                ("Permis", p.license_no or "—"),
            ],
        )
        return [
            make_drawer_column("name", drawer, header="Nom"),
            ColumnDescriptor(
                "role",
                "Rôle",
                cell=lambda p: ROLE_LABELS.get(p.role, p.role),
                sort_key=lambda p: p.role,
            ),
            ColumnDescriptor(
                "phone",
                "Téléphone",
                cell=lambda p: p.phone,
                sort_key=None,
                align="right",
            ),
            ColumnDescriptor("email", "Email", cell=lambda p: p.email or "—", sort_key=lambda p: p.email),
            ColumnDescriptor(
                "license",
                "Permis",
                cell=lambda p: p.license_no or "—",
                sort_key=lambda p: p.license_no,
            ),
        ]

    def search(self) -> SearchDescriptor[Person]:
        return SearchDescriptor(
            fields=(field_getter("name"), field_getter("phone"), field_getter("email")),
            placeholder="Rechercher nom, téléphone, email…",
        )

    def filters(self, ws: "Workspace") -> list[FilterDescriptor[Person]]:
        return [
            FilterDescriptor(
                id="role",
                label="Rôle",
                options=tuple(FilterOption(label, value) for value, label in ROLE_LABELS.items()),
                accessor=lambda p: p.role or "",
            )
        ]

    def transform(self, raw: dict[str, Any], ws: "Workspace") -> Person | None:
        name = clean(raw.get("name"))
        phone = clean(raw.get("phone"))
        if not name or not phone:
            return None
        role = clean(raw.get("role")).lower()
        if role not in ROLE_LABELS:
            role = PersonRole.DRIVER.value
        return Person(
            id=str(uuid.uuid4()),
            name=name,
            phone=phone,
            role=role,
            email=clean(raw.get("email")) or None,
            license_no=clean(raw.get("licenseNo")) or None,
            avatar=clean(raw.get("avatar")) or None,
        )

    def dedupe_key(self, row: Person) -> str:
        return f"{row.name.lower()}|{row.phone}"
