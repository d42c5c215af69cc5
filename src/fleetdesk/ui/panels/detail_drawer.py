"""DetailDrawer: side panel showing one row's detail lines."""

from __future__ import annotations

from typing import Any

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from fleetdesk.core.models import DrawerDescriptor
from fleetdesk.ui.i18n import t


class DetailDrawer(QWidget):
    """Renders a DrawerDescriptor for a single row (typically in a QDockWidget)."""

    close_requested = Signal()

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(10)

        self._title = QLabel(t("drawer.title"))
        font = QFont()
        font.setPointSize(font.pointSize() + 3)
        font.setBold(True)
        self._title.setFont(font)
        self._title.setWordWrap(True)
        layout.addWidget(self._title)

        self._body = QWidget()
        self._form = QFormLayout(self._body)
        self._form.setLabelAlignment(Qt.AlignmentFlag.AlignLeft)
        self._form.setSpacing(6)
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(self._body)
        layout.addWidget(scroll, 1)

        self._footer = QHBoxLayout()
        self._footer.addStretch(1)
        layout.addLayout(self._footer)

    def _clear(self) -> None:
        while self._form.rowCount():
            self._form.removeRow(0)
        while self._footer.count() > 1:
            item = self._footer.takeAt(1)
            if item.widget() is not None:
                item.widget().deleteLater()

    def show_row(self, drawer: DrawerDescriptor, row: Any, fallback_title: str = "") -> None:
        self._clear()
        title = drawer.title(row) if drawer.title is not None else fallback_title
        self._title.setText(title or t("drawer.title"))

        lines = drawer.body(row) if drawer.body is not None else []
        for label, value in lines:
            value_label = QLabel(value)
            value_label.setWordWrap(True)
            value_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
            self._form.addRow(f"{label} :", value_label)

        for action in drawer.footer(row) if drawer.footer is not None else []:
            btn = QPushButton(action.label)
            btn.clicked.connect(lambda _checked=False, cb=action.callback: cb())
            self._footer.addWidget(btn)

        close_btn = QPushButton(t("drawer.close"))
        close_btn.clicked.connect(self.close_requested.emit)
        self._footer.addWidget(close_btn)
