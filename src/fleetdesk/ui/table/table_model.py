"""ResourceTableModel: QAbstractTableModel over the current page of a DataTableState.

Critical design rules:
- Holds a reference to the DataTableState; never copies rows.
- Column 0 is the selection checkbox, the last column opens the row actions.
- Checking a box goes through DataTableState.select(); the state notifies
  the model back through its listener and the model resets.
- An empty result set renders one placeholder row ("Aucun résultat.").
"""

from __future__ import annotations

from typing import Any

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt
from PySide6.QtGui import QFont

from fleetdesk.core.data_table import DataTableState
from fleetdesk.ui.i18n import t

_ALIGN = {
    "left": Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter,
    "right": Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter,
    "center": Qt.AlignmentFlag.AlignCenter,
}

ROW_ID_ROLE = Qt.ItemDataRole.UserRole + 1


class ResourceTableModel(QAbstractTableModel):
    """Thin Qt model: reads the page from the state on every paint."""

    def __init__(self, state: DataTableState, parent=None) -> None:
        super().__init__(parent)
        self._state = state
        self._page: list[tuple[str, Any]] = state.page_rows()
        state.subscribe(self.reload)

    # ------------------------------------------------------------------
    # Layout helpers
    # ------------------------------------------------------------------

    @property
    def state(self) -> DataTableState:
        return self._state

    @property
    def actions_column(self) -> int:
        return len(self._state.columns) + 1

    def is_placeholder(self) -> bool:
        return not self._page

    def row_at(self, row: int) -> tuple[str, Any] | None:
        if 0 <= row < len(self._page):
            return self._page[row]
        return None

    def column_id(self, section: int) -> str | None:
        columns = self._state.columns
        if 1 <= section <= len(columns):
            return columns[section - 1].id
        return None

    # ------------------------------------------------------------------
    # Qt required overrides
    # ------------------------------------------------------------------

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return max(1, len(self._page))

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:
        return 0 if parent.isValid() else len(self._state.columns) + 2

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:
        if not index.isValid():
            return None
        row, col = index.row(), index.column()

        if self.is_placeholder():
            if col == 1 and role == Qt.ItemDataRole.DisplayRole:
                return t("table.empty")
            if role == Qt.ItemDataRole.TextAlignmentRole:
                return Qt.AlignmentFlag.AlignCenter
            return None

        entry = self.row_at(row)
        if entry is None:
            return None
        row_id, item = entry

        if role == ROW_ID_ROLE:
            return row_id

        if col == 0:
            if role == Qt.ItemDataRole.CheckStateRole:
                selected = self._state.is_selected(row_id)
                return Qt.CheckState.Checked if selected else Qt.CheckState.Unchecked
            return None

        if col == self.actions_column:
            if role == Qt.ItemDataRole.DisplayRole:
                return "⋯"
            if role == Qt.ItemDataRole.ToolTipRole:
                return t("table.actions.tooltip")
            if role == Qt.ItemDataRole.TextAlignmentRole:
                return Qt.AlignmentFlag.AlignCenter
            return None

        column = self._state.columns[col - 1]
        if role == Qt.ItemDataRole.DisplayRole:
            return column.cell(item)
        if role == Qt.ItemDataRole.TextAlignmentRole:
            return _ALIGN.get(column.align, _ALIGN["left"])
        if role == Qt.ItemDataRole.FontRole and column.drawer is not None:
            font = QFont()
            font.setUnderline(True)
            return font
        return None

    def headerData(
        self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole
    ) -> Any:
        if orientation != Qt.Orientation.Horizontal:
            return None
        if role == Qt.ItemDataRole.ToolTipRole and section == 0:
            return t("table.select_all")
        if role != Qt.ItemDataRole.DisplayRole:
            return None
        if section == 0:
            if self._state.all_page_rows_selected():
                return "☑"
            if self._state.some_page_rows_selected():
                return "▣"
            return "☐"
        if section == self.actions_column:
            return ""
        column = self._state.columns[section - 1]
        sort = self._state.sort
        if sort is not None and sort.column_id == column.id:
            return f"{column.header} {'▼' if sort.descending else '▲'}"
        return column.header

    def flags(self, index: QModelIndex) -> Qt.ItemFlag:
        if not index.isValid():
            return Qt.ItemFlag.NoItemFlags
        if self.is_placeholder():
            return Qt.ItemFlag.ItemIsEnabled
        if index.column() == 0:
            return Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsUserCheckable
        return Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsSelectable

    def setData(self, index: QModelIndex, value: Any, role: int = Qt.ItemDataRole.EditRole) -> bool:
        """Route checkbox clicks to the state's selection."""
        if not index.isValid() or index.column() != 0 or role != Qt.ItemDataRole.CheckStateRole:
            return False
        entry = self.row_at(index.row())
        if entry is None:
            return False
        checked = Qt.CheckState(value) == Qt.CheckState.Checked
        self._state.select(entry[0], checked)
        return True

    # ------------------------------------------------------------------
    # Model refresh
    # ------------------------------------------------------------------

    def reload(self) -> None:
        """Re-read the page from the state (state listener)."""
        self.beginResetModel()
        self._page = self._state.page_rows()
        self.endResetModel()
