"""MainWindow: top-level Qt window with sidebar navigation over resource pages."""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QDockWidget,
    QLabel,
    QListWidget,
    QMainWindow,
    QSplitter,
    QStackedWidget,
    QStatusBar,
    QVBoxLayout,
    QWidget,
)

from fleetdesk.core.config import Settings
from fleetdesk.core.resources.base import registry
from fleetdesk.core.workspace import Workspace
from fleetdesk.ui.controllers.resource_controller import ResourceController
from fleetdesk.ui.i18n import t
from fleetdesk.ui.panels.detail_drawer import DetailDrawer
from fleetdesk.ui.signals import AppSignals
from fleetdesk.ui.table.data_table_widget import DataTableWidget


class MainWindow(QMainWindow):
    """Application main window."""

    def __init__(self, signals: AppSignals, workspace: Workspace, settings: Settings) -> None:
        super().__init__()
        self._signals = signals
        self._workspace = workspace
        self._settings = settings
        self.setWindowTitle(t("app.title"))
        self.setMinimumSize(1100, 700)
        self.resize(1400, 850)

        # One controller per registered resource, in registration order
        self._controllers: dict[str, ResourceController] = {
            spec_cls.resource_id: ResourceController(spec_cls(), workspace, settings, signals, self)
            for spec_cls in registry.all_specs()
        }

        self._build_ui()
        self._connect_signals()

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        self._nav = QListWidget()
        self._nav.setObjectName("Sidebar")
        self._nav.setMaximumWidth(220)
        self._pages = QStackedWidget()

        for ctrl in self._controllers.values():
            self._nav.addItem(ctrl.spec.title)
            self._pages.addWidget(self._build_page(ctrl))

        self._nav.currentRowChanged.connect(self._pages.setCurrentIndex)
        self._nav.setCurrentRow(0)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.addWidget(self._nav)
        splitter.addWidget(self._pages)
        splitter.setStretchFactor(1, 1)
        self.setCentralWidget(splitter)

        # Row detail drawer (right)
        self._drawer = DetailDrawer(self)
        drawer_dock = QDockWidget(t("drawer.title"), self)
        drawer_dock.setObjectName("DetailDock")
        drawer_dock.setWidget(self._drawer)
        drawer_dock.setAllowedAreas(Qt.DockWidgetArea.RightDockWidgetArea)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, drawer_dock)
        drawer_dock.hide()
        self._drawer_dock = drawer_dock
        self._drawer.close_requested.connect(drawer_dock.hide)

        self._status_bar = QStatusBar()
        self._status_label = QLabel(t("app.ready"))
        self._status_bar.addWidget(self._status_label, 1)
        self.setStatusBar(self._status_bar)

    def _build_page(self, ctrl: ResourceController) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setContentsMargins(16, 12, 16, 12)

        title = QLabel(ctrl.spec.title)
        font = QFont()
        font.setPointSize(font.pointSize() + 6)
        font.setBold(True)
        title.setFont(font)
        layout.addWidget(title)

        if ctrl.spec.description:
            subtitle = QLabel(ctrl.spec.description)
            subtitle.setObjectName("PageDescription")
            layout.addWidget(subtitle)

        table = DataTableWidget(ctrl.state, page)
        table.drawer_requested.connect(
            lambda column_id, row_id, c=ctrl: self._open_drawer(c, column_id, row_id)
        )
        layout.addWidget(table, 1)
        return page

    def _connect_signals(self) -> None:
        self._signals.status_message.connect(self._status_label.setText)
        self._signals.rows_changed.connect(self._on_rows_changed)

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------

    def _on_rows_changed(self, resource_id: str) -> None:
        # Other pages display names/plates looked up from this resource
        for other_id, ctrl in self._controllers.items():
            if other_id != resource_id:
                ctrl.refresh()
        if self._drawer_dock.isVisible():
            self._drawer_dock.hide()

    def _open_drawer(self, ctrl: ResourceController, column_id: str, row_id: str) -> None:
        drawer = ctrl.state.drawer_for(column_id)
        row = ctrl.find_row(row_id)
        if drawer is None or row is None:
            return
        self._drawer.show_row(drawer, row, fallback_title=row_id)
        self._drawer_dock.show()
        self._drawer_dock.raise_()

    @property
    def controllers(self) -> dict[str, ResourceController]:
        return dict(self._controllers)
