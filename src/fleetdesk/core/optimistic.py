"""Optimistic updates: show a change at once, undo it if the remote call fails.

Pattern::

    store = RowStore(buses)
    with_optimistic_update(
        store,
        lambda rows: [b for b in rows if b.id != bus.id],
        lambda: client.delete_bus(bus.id),
    )

The snapshot is taken before the optimistic state is applied and restored
verbatim on failure, so concurrent edits made by the same operation are
rolled back too.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, Iterable, TypeVar, Union

from fleetdesk.core.errors import OptimisticUpdateError
from fleetdesk.core.models import T

_log = logging.getLogger(__name__)

R = TypeVar("R")

NextRows = Union[Iterable[T], Callable[[list[T]], Iterable[T]]]


class RowStore(Generic[T]):
    """Single-writer holder for a page's rows, with change listeners."""

    def __init__(self, rows: Iterable[T] = ()) -> None:
        self._rows: list[T] = list(rows)
        self._listeners: list[Callable[[list[T]], None]] = []

    @property
    def rows(self) -> list[T]:
        return list(self._rows)

    def set_rows(self, rows: Iterable[T]) -> None:
        self._rows = list(rows)
        for listener in list(self._listeners):
            listener(self.rows)

    def subscribe(self, listener: Callable[[list[T]], None]) -> None:
        self._listeners.append(listener)


def _resolve(store: RowStore[T], optimistic_next: NextRows) -> list[T]:
    if callable(optimistic_next):
        return list(optimistic_next(store.rows))
    return list(optimistic_next)


def with_optimistic_update(
    store: RowStore[T],
    optimistic_next: NextRows,
    operation: Callable[[], R],
) -> R:
    """Apply *optimistic_next* to *store*, then run *operation*.

    Raises:
        OptimisticUpdateError: *operation* raised; the store is back to its
            previous rows and the original exception is chained.
    """
    snapshot = store.rows
    store.set_rows(_resolve(store, optimistic_next))
    try:
        return operation()
    except Exception as exc:
        _log.warning("Operation failed, rolling back optimistic update: %s", exc)
        store.set_rows(snapshot)
        raise OptimisticUpdateError(str(exc)) from exc

