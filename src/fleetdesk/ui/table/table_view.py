"""ResourceTableView: QTableView wired to a ResourceTableModel."""

from __future__ import annotations

from PySide6.QtCore import QModelIndex, QPoint, Qt, Signal
from PySide6.QtWidgets import QAbstractItemView, QHeaderView, QMenu, QTableView

from fleetdesk.ui.table.table_model import ResourceTableModel


class ResourceTableView(QTableView):
    """Table view: header click sorts, first-column click opens the drawer."""

    # (column_id, row_id) of a clicked drawer cell
    drawer_requested = Signal(str, str)

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._setup_ui()

    def _setup_ui(self) -> None:
        self.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.setSelectionMode(QAbstractItemView.SelectionMode.NoSelection)
        self.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)

        h_header = self.horizontalHeader()
        h_header.setSectionResizeMode(QHeaderView.ResizeMode.Interactive)
        h_header.setStretchLastSection(False)
        h_header.setHighlightSections(False)
        h_header.setDefaultSectionSize(160)
        h_header.setSectionsClickable(True)
        h_header.sectionClicked.connect(self._on_header_clicked)

        v_header = self.verticalHeader()
        v_header.setVisible(False)
        v_header.setDefaultSectionSize(32)

        self.setShowGrid(False)
        self.setAlternatingRowColors(True)
        self.setWordWrap(True)
        self.setTextElideMode(Qt.TextElideMode.ElideRight)
        self.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.customContextMenuRequested.connect(self._on_context_menu)
        self.clicked.connect(self._on_clicked)

    def table_model(self) -> ResourceTableModel | None:
        model = self.model()
        return model if isinstance(model, ResourceTableModel) else None

    def refresh_layout(self) -> None:
        """Fix column widths and the placeholder span after a model reset."""
        model = self.table_model()
        if model is None:
            return
        self.clearSpans()
        h_header = self.horizontalHeader()
        h_header.setSectionResizeMode(0, QHeaderView.ResizeMode.Fixed)
        h_header.resizeSection(0, 36)
        h_header.setSectionResizeMode(model.actions_column, QHeaderView.ResizeMode.Fixed)
        h_header.resizeSection(model.actions_column, 44)
        if model.is_placeholder():
            self.setSpan(0, 1, 1, model.columnCount() - 2)
        self.resizeRowsToContents()

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def _on_header_clicked(self, section: int) -> None:
        model = self.table_model()
        if model is None:
            return
        state = model.state
        if section == 0:
            state.toggle_all_page_rows(not state.all_page_rows_selected())
            return
        column_id = model.column_id(section)
        if column_id is not None:
            state.toggle_sort(column_id)

    def _on_clicked(self, index: QModelIndex) -> None:
        model = self.table_model()
        if model is None or model.is_placeholder():
            return
        if index.column() == model.actions_column:
            self._show_row_menu(index.row(), self.visualRect(index).bottomLeft())
            return
        column_id = model.column_id(index.column())
        entry = model.row_at(index.row())
        if column_id is None or entry is None:
            return
        if model.state.drawer_for(column_id) is not None:
            self.drawer_requested.emit(column_id, entry[0])

    def _on_context_menu(self, pos: QPoint) -> None:
        index = self.indexAt(pos)
        if index.isValid():
            self._show_row_menu(index.row(), pos)

    def _show_row_menu(self, row: int, pos: QPoint) -> None:
        model = self.table_model()
        if model is None:
            return
        entry = model.row_at(row)
        if entry is None:
            return
        actions = model.state.row_actions(entry[1])
        if not actions:
            return
        menu = QMenu(self)
        for action in actions:
            if action.separator_before:
                menu.addSeparator()
            qaction = menu.addAction(action.label)
            if action.destructive:
                font = qaction.font()
                font.setBold(True)
                qaction.setFont(font)
            qaction.triggered.connect(lambda _checked=False, cb=action.callback: cb())
        menu.exec(self.viewport().mapToGlobal(pos))
