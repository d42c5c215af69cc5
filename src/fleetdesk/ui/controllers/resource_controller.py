"""ResourceController: wires one ResourceSpec to its table, import wizard and repository."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from PySide6.QtWidgets import QMessageBox, QWidget

from fleetdesk.core.data_table import DataTableState
from fleetdesk.core.errors import OptimisticUpdateError
from fleetdesk.core.import_session import ImportSession
from fleetdesk.core.optimistic import RowStore, with_optimistic_update
from fleetdesk.core.repository import merge_imported
from fleetdesk.ui.dialogs.import_dialog import ImportDialog
from fleetdesk.ui.i18n import t

if TYPE_CHECKING:
    from fleetdesk.core.config import Settings
    from fleetdesk.core.resources.base import ResourceSpec
    from fleetdesk.core.workspace import Workspace
    from fleetdesk.ui.signals import AppSignals

_log = logging.getLogger(__name__)


class ResourceController:
    """Single writer of a page's rows.

    Every mutation is applied to the RowStore first and then sent to the
    repository; a repository failure rolls the store back and is reported.
    """

    def __init__(
        self,
        spec: "ResourceSpec",
        workspace: "Workspace",
        settings: "Settings",
        signals: "AppSignals",
        parent_widget: QWidget,
    ) -> None:
        self._spec = spec
        self._signals = signals
        self._parent = parent_widget
        self._repo = workspace.repository(spec.resource_id)
        self._store: RowStore[Any] = RowStore(self._repo.list())

        columns = spec.columns(workspace)
        self.state: DataTableState[Any] = DataTableState(
            self._store.rows,
            columns,
            get_row_id=lambda row, _index: spec.row_id(row),
            search=spec.search(),
            filters=spec.filters(workspace),
            page_size_options=settings.page_size_options,
            page_size=settings.page_size,
            row_actions=lambda row: spec.row_actions(row, self),
            on_import=self.open_import_dialog,
            on_delete_selected=self.delete_rows,
            debounce_ms=settings.search_debounce_ms,
        )
        self._store.subscribe(self._on_store_changed)

        self.session: ImportSession[Any] = ImportSession(
            spec.import_fields,
            sample_headers=spec.sample_headers,
            transform=lambda raw: spec.transform(raw, workspace),
            on_confirm=self.import_rows,
            preview_limit=settings.import_preview_limit,
        )
        self._import_dialog: ImportDialog | None = None
        self._preview_columns = columns

    @property
    def spec(self) -> "ResourceSpec":
        return self._spec

    def _on_store_changed(self, rows: list[Any]) -> None:
        self.state.set_data(rows)
        self._signals.rows_changed.emit(self._spec.resource_id)

    def refresh(self) -> None:
        """Repaint after another page changed rows this page looks up."""
        self.state.set_data(self._store.rows)

    def find_row(self, row_id: str) -> Any | None:
        return next((r for r in self._store.rows if self._spec.row_id(r) == row_id), None)

    def _report_failure(self, exc: OptimisticUpdateError) -> None:
        QMessageBox.warning(self._parent, t("ops.error.title"), t("ops.error.body", detail=exc))

    # ------------------------------------------------------------------
    # RowOperations
    # ------------------------------------------------------------------

    def update_row(self, row: Any) -> bool:
        row_id = self._spec.row_id(row)
        try:
            with_optimistic_update(
                self._store,
                lambda rows: [row if self._spec.row_id(r) == row_id else r for r in rows],
                lambda: self._repo.upsert(row),
            )
        except OptimisticUpdateError as exc:
            self._report_failure(exc)
            return False
        self._signals.status_message.emit(t("ops.updated"))
        return True

    def delete_rows(self, rows: list[Any]) -> bool:
        ids = {self._spec.row_id(r) for r in rows}
        try:
            count = with_optimistic_update(
                self._store,
                lambda current: [r for r in current if self._spec.row_id(r) not in ids],
                lambda: self._repo.delete_many(ids),
            )
        except OptimisticUpdateError as exc:
            self._report_failure(exc)
            return False
        self._signals.status_message.emit(t("delete.done", count=count))
        return True

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def open_import_dialog(self) -> None:
        if self._import_dialog is None:
            self._import_dialog = ImportDialog(
                self.session,
                self._spec.import_title,
                self._spec.import_description,
                self._preview_columns,
                self._parent,
            )
        self._import_dialog.exec()

    def import_rows(self, rows: list[Any]) -> bool:
        """Confirm handler of the import wizard: dedupe-merge into the page."""
        key = self._spec.dedupe_key
        merged, created, updated = merge_imported(self._store.rows, rows, key)
        try:
            with_optimistic_update(
                self._store,
                merged,
                lambda: self._repo.import_rows(rows, key),
            )
        except OptimisticUpdateError as exc:
            self._report_failure(exc)
            return False
        _log.info(
            "%s: imported %d row(s) (%d created, %d updated)",
            self._spec.resource_id,
            len(rows),
            created,
            updated,
        )
        self._signals.status_message.emit(
            f"{t('import.success', count=len(rows))} "
            f"{t('import.merge_result', created=created, updated=updated)}"
        )
        return True
