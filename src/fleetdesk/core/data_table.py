"""DataTableState: the view state behind every resource table.

Owns the local row snapshot plus search, faceted filters, sorting,
pagination, multi-select and the bulk-delete confirmation flow. It knows
nothing about the row type beyond the accessor functions it is given and
never performs I/O; persistence goes back to the caller through callbacks.

Critical design rules:
- Everything shown (rows, counts, pages) derives from the post-search,
  post-filter row set, never from the raw snapshot.
- Search and filter changes reset the page index to 0.
- The visible search text updates immediately; the applied search text
  goes through a Debouncer.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Any, Callable, Generic, Iterable, Sequence

from fleetdesk.core.debounce import Debouncer
from fleetdesk.core.models import (
    ALL_TOKEN,
    ColumnDescriptor,
    DrawerDescriptor,
    FilterDescriptor,
    PaginationState,
    RowAction,
    SearchDescriptor,
    SelectionSummary,
    SortState,
    T,
)
from fleetdesk.core.text_utils import to_text

_log = logging.getLogger(__name__)

DEFAULT_PAGE_SIZES = (10, 20, 30, 40, 50)


class DataTableState(Generic[T]):
    """Filterable, searchable, sortable, paginated, multi-select row set.

    Usage::

        state = DataTableState(
            buses,
            columns,
            get_row_id=lambda bus, _i: bus.id,
            search=SearchDescriptor(fields=(field_getter("plate"),)),
            filters=[status_filter],
            on_delete_selected=repo.delete_rows,
        )
        state.set_search_input("ab-1")
        state.flush_search()
        for row_id, bus in state.page_rows():
            ...
    """

    def __init__(
        self,
        rows: Iterable[T],
        columns: Sequence[ColumnDescriptor[T]],
        *,
        get_row_id: Callable[[T, int], str] | None = None,
        search: SearchDescriptor[T] | None = None,
        filters: Sequence[FilterDescriptor[T]] = (),
        page_size_options: Sequence[int] = DEFAULT_PAGE_SIZES,
        page_size: int | None = None,
        row_actions: Callable[[T], list[RowAction]] | None = None,
        on_add: Callable[[], Any] | None = None,
        add_label: str = "Ajouter",
        on_import: Callable[[], Any] | None = None,
        import_label: str = "Importer",
        on_delete_selected: Callable[[list[T]], Any] | None = None,
        debounce_ms: int = 180,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not page_size_options:
            raise ValueError("page_size_options must not be empty")
        self._columns = list(columns)
        self._get_row_id = get_row_id
        self._search = search
        self._filters = list(filters)
        self._page_size_options = list(page_size_options)
        self._row_actions = row_actions
        self._on_add = on_add
        self._on_import = on_import
        self._on_delete_selected = on_delete_selected
        self.add_label = add_label
        self.import_label = import_label

        self._rows: list[T] = []
        self._ids: list[str] = []
        self._warned_positional = False

        self._search_input = ""
        self._search_text = ""
        self._debouncer: Debouncer[str] = Debouncer(debounce_ms / 1000.0, clock)

        self._filter_values: dict[str, str] = {
            f.id: f.default_value for f in self._filters if f.default_value
        }
        self._sort: SortState | None = None
        self._pagination = PaginationState(
            page_index=0,
            page_size=page_size if page_size is not None else self._page_size_options[0],
        )
        self._selection: set[str] = set()
        self._delete_dialog_open = False

        self._listeners: list[Callable[[], None]] = []
        self.set_data(rows)

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, listener: Callable[[], None]) -> None:
        """Register a callable invoked after every state change."""
        self._listeners.append(listener)

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener()

    # ------------------------------------------------------------------
    # Data snapshot
    # ------------------------------------------------------------------

    def set_data(self, rows: Iterable[T]) -> None:
        """Replace the local snapshot (external update from the page)."""
        self._rows = list(rows)
        self._ids = [self.row_id(row, i) for i, row in enumerate(self._rows)]
        # Drop ids no longer in the snapshot
        self._selection &= set(self._ids)
        self._clamp_page()
        self._changed()

    @property
    def rows(self) -> list[T]:
        return list(self._rows)

    @property
    def columns(self) -> list[ColumnDescriptor[T]]:
        return list(self._columns)

    @property
    def filters(self) -> list[FilterDescriptor[T]]:
        return list(self._filters)

    @property
    def search(self) -> SearchDescriptor[T] | None:
        return self._search

    def row_id(self, row: T, index: int) -> str:
        """Caller-supplied id, or the positional index as a degraded fallback."""
        if self._get_row_id is not None:
            return str(self._get_row_id(row, index))
        if not self._warned_positional:
            _log.warning(
                "No get_row_id given: selection is keyed by row position and "
                "will drift if the rows are reordered"
            )
            self._warned_positional = True
        return str(index)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    @property
    def search_input(self) -> str:
        """The text as typed (what the search box shows)."""
        return self._search_input

    @property
    def search_text(self) -> str:
        """The applied (debounced) search text."""
        return self._search_text

    @property
    def search_pending(self) -> bool:
        return self._debouncer.pending

    def search_remaining(self) -> float:
        """Seconds until the pending search text gets applied."""
        return self._debouncer.remaining()

    def set_search_input(self, text: str) -> None:
        self._search_input = text
        self._debouncer.push(text)
        self._changed()

    def poll(self) -> bool:
        """Apply the pending search text if its quiet period elapsed."""
        due, text = self._debouncer.poll()
        if due:
            self._apply_search(text or "")
        return due

    def flush_search(self) -> bool:
        """Apply the pending search text now."""
        due, text = self._debouncer.flush()
        if due:
            self._apply_search(text or "")
        return due

    def _apply_search(self, text: str) -> None:
        if text == self._search_text:
            return
        self._search_text = text
        self._pagination.page_index = 0
        self._changed()

    def _matches_search(self, row: T, query: str) -> bool:
        if self._search is None or not query:
            return True
        return any(query in to_text(accessor(row)).lower() for accessor in self._search.fields)

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def filter_value(self, filter_id: str) -> str:
        """Current selection for a filter ("" = unfiltered)."""
        if filter_id in self._filter_values:
            return self._filter_values[filter_id]
        for f in self._filters:
            if f.id == filter_id:
                return f.default_value or ""
        raise KeyError(filter_id)

    def set_filter(self, filter_id: str, value: str) -> None:
        """Select a filter value; ``ALL_TOKEN`` or "" clears the filter."""
        if not any(f.id == filter_id for f in self._filters):
            raise KeyError(filter_id)
        self._filter_values[filter_id] = "" if value == ALL_TOKEN else (value or "")
        self._pagination.page_index = 0
        self._changed()

    def clear_filters(self) -> None:
        self._filter_values = {f.id: "" for f in self._filters}
        self._pagination.page_index = 0
        self._changed()

    def _passes_filters(self, row: T, skip_id: str | None = None) -> bool:
        for f in self._filters:
            if f.id == skip_id:
                continue
            selected = self.filter_value(f.id)
            if selected and f.accessor(row) != selected:
                return False
        return True

    def _searched(self) -> list[tuple[str, T]]:
        query = self._search_text.strip().lower()
        return [
            (row_id, row)
            for row_id, row in zip(self._ids, self._rows)
            if self._matches_search(row, query)
        ]

    def facet_counts(self) -> dict[str, dict[str, int]]:
        """Per filter, how many rows each value would yield.

        Each filter's counts honour the search and every *other* filter, but
        ignore its own selection.
        """
        if not self._filters:
            return {}
        after_search = self._searched()
        counts: dict[str, dict[str, int]] = {}
        for f in self._filters:
            counter: dict[str, int] = {}
            for _, row in after_search:
                if not self._passes_filters(row, skip_id=f.id):
                    continue
                value = f.accessor(row) or ""
                counter[value] = counter.get(value, 0) + 1
            counts[f.id] = counter
        return counts

    def filter_choices(self, filter_id: str) -> list[tuple[str, str, int]]:
        """``(value, label, count)`` entries for a filter control.

        The first entry is ``(ALL_TOKEN, "", total)`` where total is the
        current filtered row count.
        """
        f = next((f for f in self._filters if f.id == filter_id), None)
        if f is None:
            raise KeyError(filter_id)
        counts = self.facet_counts().get(filter_id, {})
        choices = [(ALL_TOKEN, "", len(self.filtered_rows()))]
        choices.extend((o.value, o.label, counts.get(o.value, 0)) for o in f.options)
        return choices

    def filtered_rows(self) -> list[tuple[str, T]]:
        """``(row_id, row)`` pairs passing the search and all filters."""
        return [(row_id, row) for row_id, row in self._searched() if self._passes_filters(row)]

    # ------------------------------------------------------------------
    # Sorting
    # ------------------------------------------------------------------

    @property
    def sort(self) -> SortState | None:
        return self._sort

    def _column(self, column_id: str) -> ColumnDescriptor[T]:
        for col in self._columns:
            if col.id == column_id:
                return col
        raise KeyError(column_id)

    def toggle_sort(self, column_id: str) -> None:
        """Cycle a column through ascending → descending → unsorted."""
        col = self._column(column_id)
        if not col.can_sort:
            return
        if self._sort is None or self._sort.column_id != column_id:
            self._sort = SortState(column_id, descending=False)
        elif not self._sort.descending:
            self._sort = SortState(column_id, descending=True)
        else:
            self._sort = None
        self._changed()

    def set_sort(self, column_id: str, descending: bool = False) -> None:
        col = self._column(column_id)
        if not col.can_sort:
            raise ValueError(f"Column {column_id!r} is not sortable")
        self._sort = SortState(column_id, descending)
        self._changed()

    def clear_sort(self) -> None:
        self._sort = None
        self._changed()

    def sorted_rows(self) -> list[tuple[str, T]]:
        rows = self.filtered_rows()
        if self._sort is None:
            return rows
        key = self._column(self._sort.column_id).sort_key
        assert key is not None

        # Rows without a sort value go last in both directions
        keyed = [(key(pair[1]), pair) for pair in rows]
        present = [(k, pair) for k, pair in keyed if k is not None]
        missing = [pair for k, pair in keyed if k is None]
        present.sort(key=lambda item: item[0], reverse=self._sort.descending)
        return [pair for _, pair in present] + missing

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    @property
    def pagination(self) -> PaginationState:
        return PaginationState(self._pagination.page_index, self._pagination.page_size)

    @property
    def page_size_options(self) -> list[int]:
        return list(self._page_size_options)

    @property
    def row_count(self) -> int:
        return len(self.filtered_rows())

    @property
    def page_count(self) -> int:
        return max(1, math.ceil(self.row_count / self._pagination.page_size))

    @property
    def can_previous_page(self) -> bool:
        return self._pagination.page_index > 0

    @property
    def can_next_page(self) -> bool:
        return self._pagination.page_index < self.page_count - 1

    def set_page_index(self, index: int) -> None:
        self._pagination.page_index = max(0, min(index, self.page_count - 1))
        self._changed()

    def first_page(self) -> None:
        self.set_page_index(0)

    def last_page(self) -> None:
        self.set_page_index(self.page_count - 1)

    def next_page(self) -> None:
        if self.can_next_page:
            self.set_page_index(self._pagination.page_index + 1)

    def previous_page(self) -> None:
        if self.can_previous_page:
            self.set_page_index(self._pagination.page_index - 1)

    def set_page_size(self, size: int) -> None:
        if size <= 0:
            raise ValueError("page size must be > 0")
        # Keep the first visible row on screen
        first_row = self._pagination.page_index * self._pagination.page_size
        self._pagination.page_size = size
        self._pagination.page_index = first_row // size
        self._clamp_page()
        self._changed()

    def _clamp_page(self) -> None:
        last = self.page_count - 1
        if self._pagination.page_index > last:
            self._pagination.page_index = last

    def page_rows(self) -> list[tuple[str, T]]:
        """``(row_id, row)`` pairs of the current page."""
        start = self._pagination.page_index * self._pagination.page_size
        return self.sorted_rows()[start : start + self._pagination.page_size]

    @property
    def is_empty(self) -> bool:
        """True when nothing passes search + filters (render "no results")."""
        return self.row_count == 0

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def is_selected(self, row_id: str) -> bool:
        return row_id in self._selection and row_id in self._ids

    def select(self, row_id: str, selected: bool = True) -> None:
        if selected:
            self._selection.add(row_id)
        else:
            self._selection.discard(row_id)
        self._changed()

    def toggle(self, row_id: str) -> None:
        self.select(row_id, not self.is_selected(row_id))

    def toggle_all_page_rows(self, selected: bool) -> None:
        for row_id, _ in self.page_rows():
            if selected:
                self._selection.add(row_id)
            else:
                self._selection.discard(row_id)
        self._changed()

    def all_page_rows_selected(self) -> bool:
        page = self.page_rows()
        return bool(page) and all(row_id in self._selection for row_id, _ in page)

    def some_page_rows_selected(self) -> bool:
        page = self.page_rows()
        hits = sum(1 for row_id, _ in page if row_id in self._selection)
        return 0 < hits < len(page)

    def selected_rows(self) -> list[T]:
        """Selected rows among the current filtered set; stale ids are ignored."""
        return [row for row_id, row in self.filtered_rows() if row_id in self._selection]

    def reset_selection(self) -> None:
        self._selection.clear()
        self._changed()

    def selection_summary(self) -> SelectionSummary:
        filtered = self.filtered_rows()
        selected = sum(1 for row_id, _ in filtered if row_id in self._selection)
        return SelectionSummary(selected=selected, total=len(filtered))

    # ------------------------------------------------------------------
    # Toolbar delegation
    # ------------------------------------------------------------------

    @property
    def can_add(self) -> bool:
        return self._on_add is not None

    @property
    def can_import(self) -> bool:
        return self._on_import is not None

    @property
    def can_delete(self) -> bool:
        """Whether the bulk delete button should be shown."""
        return self._on_delete_selected is not None and self.selection_summary().selected > 0

    def trigger_add(self) -> None:
        if self._on_add is not None:
            self._on_add()

    def trigger_import(self) -> None:
        if self._on_import is not None:
            self._on_import()

    def row_actions(self, row: T) -> list[RowAction]:
        return self._row_actions(row) if self._row_actions is not None else []

    def drawer_for(self, column_id: str) -> DrawerDescriptor[T] | None:
        return self._column(column_id).drawer

    # ------------------------------------------------------------------
    # Bulk delete
    # ------------------------------------------------------------------

    @property
    def delete_dialog_open(self) -> bool:
        return self._delete_dialog_open

    def request_delete(self) -> bool:
        """Open the confirmation step. Returns False if nothing to delete."""
        if not self.can_delete:
            return False
        self._delete_dialog_open = True
        self._changed()
        return True

    def cancel_delete(self) -> None:
        self._delete_dialog_open = False
        self._changed()

    def confirm_delete(self) -> list[T]:
        """Hand the selected rows to the delete callback, then clear the selection.

        The selection is cleared even if the callback raises; the exception
        still propagates so the page can report it.
        """
        rows = self.selected_rows()
        self._delete_dialog_open = False
        try:
            if self._on_delete_selected is not None and rows:
                self._on_delete_selected(rows)
        finally:
            self._selection.clear()
            self._changed()
        return rows
