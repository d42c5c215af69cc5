"""DataTableWidget: toolbar + table + pagination bar around a DataTableState.

The widget holds no table logic of its own; every control writes to the
state and every repaint reads from it.
"""

from __future__ import annotations

from PySide6.QtCore import QTimer, Signal
from PySide6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from fleetdesk.core.data_table import DataTableState
from fleetdesk.core.models import ALL_TOKEN
from fleetdesk.ui.i18n import t
from fleetdesk.ui.table.table_model import ResourceTableModel
from fleetdesk.ui.table.table_view import ResourceTableView


class DataTableWidget(QWidget):
    """Generic table page body for any resource."""

    # (column_id, row_id)
    drawer_requested = Signal(str, str)

    def __init__(self, state: DataTableState, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._state = state
        self._filter_combos: dict[str, QComboBox] = {}

        self._search_timer = QTimer(self)
        self._search_timer.setSingleShot(True)
        self._search_timer.timeout.connect(self._on_search_timer)

        self._build_ui()
        state.subscribe(self._sync_controls)
        self._sync_controls()

    @property
    def state(self) -> DataTableState:
        return self._state

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(8)

        toolbar = QHBoxLayout()
        toolbar.setSpacing(6)
        for f in self._state.filters:
            combo = QComboBox()
            combo.setToolTip(f.label)
            combo.setMinimumWidth(150)
            combo.currentIndexChanged.connect(
                lambda _i, fid=f.id: self._on_filter_changed(fid)
            )
            self._filter_combos[f.id] = combo
            toolbar.addWidget(combo)

        self._search_edit = QLineEdit()
        search = self._state.search
        self._search_edit.setPlaceholderText(
            search.placeholder if search is not None and search.placeholder
            else t("table.search.placeholder")
        )
        self._search_edit.setClearButtonEnabled(True)
        self._search_edit.setVisible(search is not None)
        self._search_edit.textEdited.connect(self._on_search_edited)
        self._search_edit.returnPressed.connect(self._on_search_submit)
        toolbar.addWidget(self._search_edit, 1)

        self._delete_btn = QPushButton()
        self._delete_btn.setObjectName("DestructiveButton")
        self._delete_btn.clicked.connect(self._on_delete_clicked)
        toolbar.addWidget(self._delete_btn)

        self._import_btn = QPushButton(self._state.import_label)
        self._import_btn.setVisible(self._state.can_import)
        self._import_btn.clicked.connect(self._state.trigger_import)
        toolbar.addWidget(self._import_btn)

        self._add_btn = QPushButton(self._state.add_label)
        self._add_btn.setObjectName("PrimaryButton")
        self._add_btn.setVisible(self._state.can_add)
        self._add_btn.clicked.connect(self._state.trigger_add)
        toolbar.addWidget(self._add_btn)

        layout.addLayout(toolbar)

        self._model = ResourceTableModel(self._state, self)
        self._view = ResourceTableView()
        self._view.setModel(self._model)
        self._view.drawer_requested.connect(self.drawer_requested.emit)
        self._model.modelReset.connect(self._view.refresh_layout)
        self._view.refresh_layout()
        layout.addWidget(self._view, 1)

        footer = QHBoxLayout()
        self._selection_label = QLabel()
        footer.addWidget(self._selection_label, 1)

        footer.addWidget(QLabel(t("table.page_size")))
        self._page_size_combo = QComboBox()
        for size in self._state.page_size_options:
            self._page_size_combo.addItem(str(size), size)
        self._page_size_combo.currentIndexChanged.connect(self._on_page_size_changed)
        footer.addWidget(self._page_size_combo)

        self._page_label = QLabel()
        footer.addWidget(self._page_label)

        self._first_btn = self._nav_button(t("table.first_page"), self._state.first_page)
        self._prev_btn = self._nav_button(t("table.previous_page"), self._state.previous_page)
        self._next_btn = self._nav_button(t("table.next_page"), self._state.next_page)
        self._last_btn = self._nav_button(t("table.last_page"), self._state.last_page)
        for btn in (self._first_btn, self._prev_btn, self._next_btn, self._last_btn):
            footer.addWidget(btn)
        layout.addLayout(footer)

    def _nav_button(self, text: str, slot) -> QToolButton:
        btn = QToolButton()
        btn.setText(text)
        btn.setAutoRaise(True)
        btn.clicked.connect(lambda _checked=False: slot())
        return btn

    # ------------------------------------------------------------------
    # State → controls
    # ------------------------------------------------------------------

    def _sync_controls(self) -> None:
        state = self._state
        for f in state.filters:
            combo = self._filter_combos[f.id]
            combo.blockSignals(True)
            combo.clear()
            for value, label, count in state.filter_choices(f.id):
                if value == ALL_TOKEN:
                    text = t("table.filter.option", label=f"{f.label} : {t('table.filter.all')}", count=count)
                else:
                    text = t("table.filter.option", label=label, count=count)
                combo.addItem(text, value)
            current = state.filter_value(f.id) or ALL_TOKEN
            combo.setCurrentIndex(max(0, combo.findData(current)))
            combo.blockSignals(False)

        if self._search_edit.text() != state.search_input:
            self._search_edit.setText(state.search_input)

        summary = state.selection_summary()
        self._delete_btn.setText(t("table.delete_selected", count=summary.selected))
        self._delete_btn.setVisible(state.can_delete)
        self._selection_label.setText(
            t("table.selection", selected=summary.selected, total=summary.total)
        )

        pagination = state.pagination
        self._page_size_combo.blockSignals(True)
        index = self._page_size_combo.findData(pagination.page_size)
        if index < 0:
            self._page_size_combo.addItem(str(pagination.page_size), pagination.page_size)
            index = self._page_size_combo.count() - 1
        self._page_size_combo.setCurrentIndex(index)
        self._page_size_combo.blockSignals(False)

        self._page_label.setText(
            t("table.page", page=pagination.page_index + 1, pages=state.page_count)
        )
        self._first_btn.setEnabled(state.can_previous_page)
        self._prev_btn.setEnabled(state.can_previous_page)
        self._next_btn.setEnabled(state.can_next_page)
        self._last_btn.setEnabled(state.can_next_page)

    # ------------------------------------------------------------------
    # Controls → state
    # ------------------------------------------------------------------

    def _on_filter_changed(self, filter_id: str) -> None:
        value = self._filter_combos[filter_id].currentData()
        self._state.set_filter(filter_id, value or ALL_TOKEN)

    def _on_search_edited(self, text: str) -> None:
        self._state.set_search_input(text)
        self._schedule_search()

    def _schedule_search(self) -> None:
        self._search_timer.start(max(0, int(self._state.search_remaining() * 1000)) + 1)

    def _on_search_timer(self) -> None:
        if not self._state.poll() and self._state.search_pending:
            self._schedule_search()

    def _on_search_submit(self) -> None:
        self._search_timer.stop()
        self._state.flush_search()

    def _on_page_size_changed(self, index: int) -> None:
        size = self._page_size_combo.itemData(index)
        if size:
            self._state.set_page_size(int(size))

    def _on_delete_clicked(self) -> None:
        if not self._state.request_delete():
            return
        count = self._state.selection_summary().selected
        box = QMessageBox(self)
        box.setIcon(QMessageBox.Icon.Warning)
        box.setWindowTitle(t("delete.title"))
        box.setText(t("delete.body", count=count))
        confirm = box.addButton(t("delete.confirm"), QMessageBox.ButtonRole.DestructiveRole)
        box.addButton(t("delete.cancel"), QMessageBox.ButtonRole.RejectRole)
        box.exec()
        if box.clickedButton() is confirm:
            self._state.confirm_delete()
        else:
            self._state.cancel_delete()
