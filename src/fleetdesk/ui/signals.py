"""AppSignals: global Qt signal bus.

Pages, dialogs and controllers talk through these signals so that they
remain loosely coupled.
"""

from __future__ import annotations

from PySide6.QtCore import QObject, Signal


class AppSignals(QObject):
    """Singleton signal hub."""

    # Rows of a resource changed (resource_id)
    rows_changed = Signal(str)

    # Status bar messages
    status_message = Signal(str)


_instance: AppSignals | None = None


def get_signals() -> AppSignals:
    """Return the singleton AppSignals instance."""
    global _instance
    if _instance is None:
        _instance = AppSignals()
    return _instance
