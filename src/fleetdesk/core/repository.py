"""InMemoryRepository: local stand-in for the REST backend of one resource.

The real dashboard talks to a remote API; this store offers the same
operations (list / upsert / delete / bulk import) so the pages can run and be
tested without a server.
"""

from __future__ import annotations

import copy
import dataclasses
import logging
from typing import Any, Callable, Generic, Iterable

from fleetdesk.core.models import T

_log = logging.getLogger(__name__)


def merge_row(existing: T, incoming: T) -> T:
    """Shallow merge: non-empty fields of *incoming* win; *existing* keeps its id."""
    if dataclasses.is_dataclass(existing) and dataclasses.is_dataclass(incoming):
        changes = {
            f.name: getattr(incoming, f.name)
            for f in dataclasses.fields(incoming)
            if f.name != "id" and getattr(incoming, f.name) not in (None, "", [])
        }
        return dataclasses.replace(existing, **changes)
    if isinstance(existing, dict) and isinstance(incoming, dict):
        merged = dict(existing)
        merged.update({k: v for k, v in incoming.items() if k != "id" and v not in (None, "", [])})
        return merged  # type: ignore[return-value]
    return incoming


def merge_imported(
    rows: Iterable[T],
    imported: Iterable[T],
    key: Callable[[T], str],
) -> tuple[list[T], int, int]:
    """Merge an import into *rows*, de-duplicating on *key*.

    Rows whose key already exists are merged in place. New rows are
    prepended one by one, so the last new row of the import ends up first.

    Returns:
        ``(merged_rows, created, updated)``
    """
    merged = list(rows)
    existing = {key(row): i for i, row in enumerate(merged)}
    fresh: list[T] = []
    fresh_index: dict[str, int] = {}
    updated = 0
    for row in imported:
        k = key(row)
        if k in existing:
            merged[existing[k]] = merge_row(merged[existing[k]], row)
            updated += 1
        elif k in fresh_index:
            # duplicate inside the file: fold into the first occurrence
            fresh[fresh_index[k]] = merge_row(fresh[fresh_index[k]], row)
            updated += 1
        else:
            fresh_index[k] = len(fresh)
            fresh.append(row)
    return list(reversed(fresh)) + merged, len(fresh), updated


class InMemoryRepository(Generic[T]):
    """Rows of one resource, keyed by ``id_of(row)``."""

    def __init__(
        self,
        rows: Iterable[T] = (),
        id_of: Callable[[T], str] = lambda row: getattr(row, "id"),
    ) -> None:
        self._id_of = id_of
        self._rows: list[T] = [copy.copy(r) for r in rows]

    def list(self) -> list[T]:
        return list(self._rows)

    def get(self, row_id: str) -> T | None:
        return next((r for r in self._rows if self._id_of(r) == row_id), None)

    def upsert(self, row: T) -> T:
        """Insert at the top, or replace the row with the same id."""
        row_id = self._id_of(row)
        for i, existing in enumerate(self._rows):
            if self._id_of(existing) == row_id:
                self._rows[i] = row
                return row
        self._rows.insert(0, row)
        return row

    def delete_many(self, row_ids: Iterable[str]) -> int:
        targets = set(row_ids)
        before = len(self._rows)
        self._rows = [r for r in self._rows if self._id_of(r) not in targets]
        deleted = before - len(self._rows)
        _log.info("Deleted %d row(s)", deleted)
        return deleted

    def import_rows(self, rows: Iterable[T], key: Callable[[T], str]) -> dict[str, Any]:
        merged, created, updated = merge_imported(self._rows, rows, key)
        self._rows = merged
        _log.info("Imported rows: %d created, %d updated", created, updated)
        return {"created": created, "updated": updated}

    def replace_all(self, rows: Iterable[T]) -> None:
        self._rows = list(rows)
