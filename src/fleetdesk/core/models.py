"""Core data model dataclasses.

All other modules import from here. Keep this module free of side-effects and
Qt imports so it can be used in tests and CLI contexts without a display.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from operator import attrgetter
from typing import Any, Callable, Generic, Mapping, TypeVar

T = TypeVar("T")

# Select controls cannot carry an empty value, so "all" gets its own token.
ALL_TOKEN = "__ALL__"

# Mapping dropdown entry meaning "leave this field unmapped".
IGNORE = "__IGNORE__"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ImportStep(str, Enum):
    UPLOAD = "upload"
    MAP = "map"
    PREVIEW = "preview"


# ---------------------------------------------------------------------------
# Data table descriptors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FilterOption:
    label: str
    value: str


@dataclass(frozen=True)
class FilterDescriptor(Generic[T]):
    """One faceted filter.

    ``accessor`` must return one of ``options[].value`` or "" (unfiltered).
    Values outside the options are not validated; they just never show up in
    the option counts.
    """

    id: str
    label: str
    options: tuple[FilterOption, ...]
    accessor: Callable[[T], str]
    default_value: str = ""


@dataclass(frozen=True)
class SearchDescriptor(Generic[T]):
    """Case-insensitive substring search, OR-combined across ``fields``."""

    fields: tuple[Callable[[T], Any], ...]
    placeholder: str = ""


@dataclass(frozen=True)
class DrawerDescriptor(Generic[T]):
    """Row detail drawer.

    ``body`` returns (label, value) lines; ``footer`` returns extra actions
    shown next to the close button.
    """

    title: Callable[[T], str] | None = None
    trigger: Callable[[T], str] | None = None
    body: Callable[[T], list[tuple[str, str]]] | None = None
    footer: Callable[[T], list["RowAction"]] | None = None


@dataclass(frozen=True)
class ColumnDescriptor(Generic[T]):
    id: str
    header: str
    cell: Callable[[T], str]
    sort_key: Callable[[T], Any] | None = None
    sortable: bool = True
    align: str = "left"  # "left" | "right" | "center"
    drawer: DrawerDescriptor[T] | None = None

    @property
    def can_sort(self) -> bool:
        return self.sortable and self.sort_key is not None


@dataclass(frozen=True)
class RowAction:
    label: str
    callback: Callable[[], Any]
    destructive: bool = False
    separator_before: bool = False


# ---------------------------------------------------------------------------
# Data table state
# ---------------------------------------------------------------------------


@dataclass
class PaginationState:
    page_index: int = 0  # 0-based
    page_size: int = 10


@dataclass(frozen=True)
class SortState:
    column_id: str
    descending: bool = False


@dataclass(frozen=True)
class SelectionSummary:
    selected: int
    total: int


# ---------------------------------------------------------------------------
# Import pipeline
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldDescriptor:
    key: str
    label: str
    hint: str | None = None
    required: bool = False
    aliases: tuple[str, ...] = ()  # extra header names for this field only


@dataclass
class ParsedSheet:
    headers: list[str]
    rows: list[dict[str, Any]]
    source: str = ""
    encoding: str | None = None  # None for XLSX
    delimiter: str | None = None  # None for XLSX
    sheet_name: str | None = None  # None for CSV

    @property
    def is_empty(self) -> bool:
        return not self.headers or not self.rows


@dataclass(frozen=True)
class SkippedRow:
    """A raw file row that did not make it into the import result."""

    index: int  # 0-based data row index (header excluded)
    reason: str
    raw: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Accessor helpers
# ---------------------------------------------------------------------------


def field_getter(path: str) -> Callable[[Any], Any]:
    """Return an accessor for a dotted path over attributes or mapping keys.

    ``field_getter("passenger.name")`` works for both dataclass rows and
    plain dicts. Missing segments yield ``None``.
    """
    parts = path.split(".")

    def _get(row: Any) -> Any:
        value = row
        for part in parts:
            if value is None:
                return None
            if isinstance(value, Mapping):
                value = value.get(part)
            else:
                try:
                    value = attrgetter(part)(value)
                except AttributeError:
                    return None
        return value

    return _get


def make_drawer_column(
    field_path: str,
    drawer: DrawerDescriptor[T],
    header: str | None = None,
) -> ColumnDescriptor[T]:
    """Build the clickable first column that opens the row detail drawer."""
    getter = field_getter(field_path)

    def _cell(row: T) -> str:
        if drawer.trigger is not None:
            return drawer.trigger(row)
        value = getter(row)
        return "" if value is None else str(value)

    return ColumnDescriptor(
        id=field_path,
        header=header or field_path,
        cell=_cell,
        sort_key=lambda row: str(getter(row) or "").lower(),
        drawer=drawer,
    )
