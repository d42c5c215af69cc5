"""Tests for Settings loading and merging."""

from __future__ import annotations

import pytest

from fleetdesk.core.config import Settings, deep_merge, load_settings


@pytest.fixture(autouse=True)
def _isolated_config_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("APPDATA", str(tmp_path / "appdata"))


class TestDeepMerge:
    def test_nested_dicts_merged(self):
        base = {"table": {"page_size": 10, "search_debounce_ms": 180}}
        merged = deep_merge(base, {"table": {"page_size": 20}})
        assert merged == {"table": {"page_size": 20, "search_debounce_ms": 180}}
        assert base["table"]["page_size"] == 10

    def test_lists_replaced(self):
        merged = deep_merge({"opts": [1, 2, 3]}, {"opts": [5]})
        assert merged["opts"] == [5]


class TestLoadSettings:
    def test_bundled_defaults(self):
        settings = load_settings(environ={})
        assert settings.page_size == 10
        assert settings.page_size_options == [10, 20, 30, 40, 50]
        assert settings.search_debounce_ms == 180
        assert settings.import_preview_limit == 50
        assert settings.seed_path is None
        assert settings.resolved_seed_path().name == "seed.yml"
        assert settings.resolved_seed_path().exists()

    def test_user_file_overrides_defaults(self, tmp_path):
        user = tmp_path / "settings.yml"
        user.write_text(
            "table:\n  page_size: 20\nimport:\n  preview_limit: 5\nlog_level: debug\n",
            encoding="utf-8",
        )
        settings = load_settings(user, environ={})
        assert settings.page_size == 20
        assert settings.page_size_options == [10, 20, 30, 40, 50]
        assert settings.import_preview_limit == 5
        assert settings.log_level == "DEBUG"

    def test_config_env_variable_points_at_file(self, tmp_path):
        user = tmp_path / "custom.yml"
        user.write_text("table:\n  search_debounce_ms: 0\n", encoding="utf-8")
        settings = load_settings(environ={"FLEETDESK_CONFIG": str(user)})
        assert settings.search_debounce_ms == 0

    def test_env_overrides_win_over_file(self, tmp_path):
        user = tmp_path / "settings.yml"
        user.write_text("table:\n  page_size: 20\n", encoding="utf-8")
        seed = tmp_path / "seed.yml"
        settings = load_settings(
            user,
            environ={
                "FLEETDESK_PAGE_SIZE": "30",
                "FLEETDESK_DEBOUNCE_MS": "50",
                "FLEETDESK_SEED": str(seed),
            },
        )
        assert settings.page_size == 30
        assert settings.search_debounce_ms == 50
        assert settings.resolved_seed_path() == seed

    def test_missing_explicit_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "absent.yml", environ={})

    def test_page_size_must_be_an_option(self):
        with pytest.raises(ValueError):
            load_settings(environ={"FLEETDESK_PAGE_SIZE": "15"})

    def test_non_numeric_env_value_rejected(self):
        with pytest.raises(ValueError):
            load_settings(environ={"FLEETDESK_DEBOUNCE_MS": "fast"})

    def test_top_level_must_be_a_mapping(self, tmp_path):
        user = tmp_path / "settings.yml"
        user.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_settings(user, environ={})


class TestSettingsFromDict:
    def test_empty_sections_use_defaults(self):
        settings = Settings.from_dict({"table": None, "import": None})
        assert settings.page_size == 10
        assert settings.import_preview_limit == 50

    def test_invalid_preview_limit(self):
        with pytest.raises(ValueError):
            Settings.from_dict({"import": {"preview_limit": 0}})

    def test_unknown_keys_are_ignored(self):
        settings = Settings.from_dict({"language": "en", "table": {"page_size": 20}})
        assert settings == Settings(page_size=20)
