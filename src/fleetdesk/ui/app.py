"""QApplication factory and theme setup."""

from __future__ import annotations

import logging
import sys

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QApplication

import fleetdesk.core.resources  # noqa: F401  (registers the resource pages)
from fleetdesk.core.config import Settings, load_settings
from fleetdesk.core.workspace import Workspace
from fleetdesk.ui.signals import get_signals

_log = logging.getLogger(__name__)


def create_app(argv: list[str] | None = None, settings: Settings | None = None) -> tuple:
    """Create and configure the QApplication and MainWindow.

    Returns:
        (app, window) tuple.
    """
    if argv is None:
        argv = sys.argv
    if settings is None:
        settings = load_settings()

    # Must be created before any other Qt objects
    app = QApplication.instance()
    if app is None:
        app = QApplication(argv)

    app.setApplicationName("FleetDesk")
    app.setOrganizationName("FleetDesk")
    app.setApplicationDisplayName("FleetDesk")

    # Respect the system color scheme
    app.styleHints().setColorScheme(Qt.ColorScheme.Unknown)
    app.setStyleSheet(_STYLESHEET)

    seed = settings.resolved_seed_path()
    workspace = Workspace.from_seed(seed) if seed.exists() else Workspace()
    if not seed.exists():
        _log.warning("Seed file %s not found, starting empty", seed)

    signals = get_signals()

    # Import here to avoid circular imports at module level
    from fleetdesk.ui.main_window import MainWindow

    window = MainWindow(signals, workspace, settings)
    return app, window


_STYLESHEET = """
QMainWindow {
    background-color: palette(window);
}

QListWidget#Sidebar {
    font-size: 14px;
    border: none;
    border-right: 1px solid palette(mid);
    padding-top: 8px;
}

QListWidget#Sidebar::item {
    padding: 6px 12px;
}

QLabel#PageDescription {
    color: palette(dark);
}

QTableView {
    font-size: 13px;
    selection-background-color: palette(highlight);
    selection-color: palette(highlighted-text);
}

QHeaderView::section {
    background-color: palette(button);
    padding: 4px 8px;
    border: none;
    border-bottom: 1px solid palette(mid);
    font-weight: 600;
}

QPushButton#PrimaryButton {
    font-weight: 600;
}

QPushButton#DestructiveButton {
    color: #b42318;
}

QDockWidget::title {
    background: palette(button);
    padding: 4px 8px;
    font-weight: 600;
}

QStatusBar {
    font-size: 12px;
}
"""
