"""Tests for the startup failure path of ``python -m fleetdesk``."""

from __future__ import annotations

import pytest

pytest.importorskip("PySide6.QtWidgets")

import fleetdesk.__main__ as entry  # noqa: E402
import fleetdesk.core.config  # noqa: E402
import fleetdesk.ui.i18n  # noqa: E402


def _raise(*args, **kwargs):
    raise RuntimeError("no display")


class TestStartupFailure:
    def test_dialog_failure_is_reported_not_raised(self, monkeypatch, capsys):
        monkeypatch.setattr(fleetdesk.ui.i18n, "t", _raise)
        entry._show_startup_error("Traceback ...")
        assert "Could not show the startup error dialog: no display" in capsys.readouterr().err

    def test_main_exits_with_status_1(self, monkeypatch, capsys):
        monkeypatch.setattr(entry, "_apply_platform_fixes", lambda: None)
        monkeypatch.setattr(fleetdesk.core.config, "load_settings", _raise)
        monkeypatch.setattr(fleetdesk.ui.i18n, "t", _raise)
        with pytest.raises(SystemExit) as info:
            entry.main()
        assert info.value.code == 1
        err = capsys.readouterr().err
        assert "Fatal startup error" in err
        assert "Could not show the startup error dialog" in err
