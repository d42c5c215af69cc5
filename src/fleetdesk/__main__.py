"""Entry point: python -m fleetdesk"""

from __future__ import annotations

import logging
import os
import sys


def _apply_platform_fixes() -> None:
    """Set platform-specific env vars BEFORE any Qt import."""
    import platform
    # Reduce Qt log noise
    os.environ.setdefault("QT_LOGGING_RULES", "qt.qpa.drawing=false;qt.qpa.*=false")
    if platform.system() == "Darwin":
        os.environ.setdefault("QT_MAC_WANTS_LAYER", "1")


def _print_diagnostics() -> None:
    """Print startup diagnostics to stderr for debugging."""
    import platform

    from PySide6 import __version__ as pyside_version
    from PySide6.QtCore import qVersion

    print(
        f"[FleetDesk] Python {sys.version.split()[0]} | "
        f"PySide6 {pyside_version} | Qt {qVersion()} | "
        f"{platform.system()} {platform.machine()}",
        file=sys.stderr,
    )


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _show_startup_error(tb: str) -> None:
    """Show *tb* in a critical dialog if Qt can still open one."""
    try:
        from PySide6.QtWidgets import QApplication, QMessageBox

        from fleetdesk.ui.i18n import t

        title = t("app.startup_error.title")
        body = t("app.startup_error.body", tb=tb)
        _app = QApplication.instance() or QApplication(sys.argv)
        QMessageBox.critical(None, title, body)
    except Exception as exc:
        print(f"[FleetDesk] Could not show the startup error dialog: {exc}", file=sys.stderr)


def main() -> None:
    _apply_platform_fixes()

    try:
        from fleetdesk.core.config import load_settings

        settings = load_settings()
        _configure_logging(settings.log_level)
        _print_diagnostics()

        from fleetdesk.ui.app import create_app

        app, window = create_app(sys.argv, settings)
        window.show()
        sys.exit(app.exec())
    except Exception:
        import traceback
        tb = traceback.format_exc()
        print(f"[FleetDesk] Fatal startup error:\n{tb}", file=sys.stderr)
        _show_startup_error(tb)
        sys.exit(1)


if __name__ == "__main__":
    main()
