"""ResourceSpec base class and ResourceRegistry singleton.

A ResourceSpec is the non-UI half of a resource page: which columns, search
fields and filters its table shows, which fields its import wizard maps and
how an imported record becomes a row.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, Protocol

from fleetdesk.core.models import (
    ColumnDescriptor,
    FieldDescriptor,
    FilterDescriptor,
    RowAction,
    SearchDescriptor,
    T,
)

if TYPE_CHECKING:
    from fleetdesk.core.workspace import Workspace


class RowOperations(Protocol[T]):
    """What a page offers its row actions (implemented by the controller)."""

    def update_row(self, row: T) -> Any: ...

    def delete_rows(self, rows: list[T]) -> Any: ...


class ResourceSpec(ABC, Generic[T]):
    """Abstract base for all resource pages."""

    #: Stable identifier, also the Workspace attribute name ("buses")
    resource_id: str

    #: Page title and subtitle shown above the table
    title: str = ""
    description: str = ""

    #: Import dialog copy
    import_title: str = "Importer des données"
    import_description: str = (
        "Importez un fichier CSV ou Excel, mappez les colonnes, puis validez."
    )

    #: Mappable fields. sample_headers are candidates shared by every field;
    #: per-field hints belong in FieldDescriptor.aliases
    import_fields: tuple[FieldDescriptor, ...] = ()
    sample_headers: tuple[str, ...] = ()

    def row_id(self, row: T) -> str:
        return getattr(row, "id")

    @abstractmethod
    def columns(self, ws: "Workspace") -> list[ColumnDescriptor[T]]:
        """Table columns; the first one usually opens the detail drawer."""

    @abstractmethod
    def search(self) -> SearchDescriptor[T]:
        """Search box placeholder and searched fields."""

    def filters(self, ws: "Workspace") -> list[FilterDescriptor[T]]:
        return []

    @abstractmethod
    def transform(self, raw: dict[str, Any], ws: "Workspace") -> T | None:
        """Turn a field-keyed import record into a row, or None to skip it."""

    @abstractmethod
    def dedupe_key(self, row: T) -> str:
        """Key used to merge imported rows into existing ones."""

    def row_actions(self, row: T, ops: RowOperations[T]) -> list[RowAction]:
        return [
            RowAction(
                "Supprimer",
                lambda: ops.delete_rows([row]),
                destructive=True,
                separator_before=True,
            )
        ]


class ResourceRegistry:
    """Singleton registry mapping resource_id → ResourceSpec class."""

    _instance: "ResourceRegistry | None" = None
    _specs: dict[str, type[ResourceSpec]]

    def __new__(cls) -> "ResourceRegistry":
        if cls._instance is None:
            inst = super().__new__(cls)
            inst._specs = {}
            cls._instance = inst
        return cls._instance

    def register(self, cls: type[ResourceSpec]) -> type[ResourceSpec]:
        """Register a ResourceSpec class. Can be used as a decorator."""
        self._specs[cls.resource_id] = cls
        return cls

    def get(self, resource_id: str) -> type[ResourceSpec] | None:
        return self._specs.get(resource_id)

    def all_ids(self) -> list[str]:
        return list(self._specs.keys())

    def all_specs(self) -> list[type[ResourceSpec]]:
        return list(self._specs.values())


# Module-level convenience instance
registry = ResourceRegistry()
