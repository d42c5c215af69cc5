"""Settings: application configuration.

Resolution order (last wins):

1. bundled ``fleetdesk/data/defaults.yml``
2. the user file: ``$FLEETDESK_CONFIG`` or ``<user config dir>/settings.yml``
3. ``FLEETDESK_*`` environment variables

The YAML files are deep-merged; lists are replaced, not concatenated.
"""

from __future__ import annotations

import logging
import os
import platform
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from fleetdesk.core.package_data import get_data_path

_log = logging.getLogger(__name__)

_ENV_PREFIX = "FLEETDESK_"


def deep_merge(base: dict, overlay: dict) -> dict:
    """Merge overlay into base. Overlay wins on scalar conflicts.

    Dicts are merged recursively. Lists are replaced (not concatenated).
    """
    result = deepcopy(base)
    for key, val in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = deep_merge(result[key], val)
        else:
            result[key] = deepcopy(val)
    return result


def user_config_dir() -> Path:
    """Return the per-user configuration directory (platform-specific)."""
    system = platform.system()
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "FleetDesk"
    if system == "Windows":
        return Path(os.environ.get("APPDATA", str(Path.home()))) / "FleetDesk"
    xdg = Path(os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config")))
    return xdg / "FleetDesk"


@dataclass
class Settings:
    page_size_options: list[int] = field(default_factory=lambda: [10, 20, 30, 40, 50])
    page_size: int = 10
    search_debounce_ms: int = 180
    import_preview_limit: int = 50
    seed_path: str | None = None
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        table = data.get("table", {}) or {}
        imports = data.get("import", {}) or {}
        settings = cls(
            page_size_options=[int(v) for v in table.get("page_size_options", [10, 20, 30, 40, 50])],
            page_size=int(table.get("page_size", 10)),
            search_debounce_ms=int(table.get("search_debounce_ms", 180)),
            import_preview_limit=int(imports.get("preview_limit", 50)),
            seed_path=data.get("seed_path") or None,
            log_level=str(data.get("log_level", "INFO")).upper(),
        )
        settings._check()
        return settings

    def resolved_seed_path(self) -> Path:
        """Configured seed file, or the bundled sample seed."""
        return Path(self.seed_path) if self.seed_path else get_data_path("seed.yml")

    def _check(self) -> None:
        if not self.page_size_options or any(v <= 0 for v in self.page_size_options):
            raise ValueError("table.page_size_options must be a non-empty list of positive integers")
        if self.page_size not in self.page_size_options:
            raise ValueError(
                f"table.page_size={self.page_size} is not one of {self.page_size_options}"
            )
        if self.search_debounce_ms < 0:
            raise ValueError("table.search_debounce_ms must be >= 0")
        if self.import_preview_limit <= 0:
            raise ValueError("import.preview_limit must be > 0")


def _read_yaml(path: Path) -> dict:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data


def _env_overrides(environ: dict[str, str]) -> dict:
    overrides: dict = {}
    if f"{_ENV_PREFIX}PAGE_SIZE" in environ:
        overrides.setdefault("table", {})["page_size"] = int(environ[f"{_ENV_PREFIX}PAGE_SIZE"])
    if f"{_ENV_PREFIX}DEBOUNCE_MS" in environ:
        overrides.setdefault("table", {})["search_debounce_ms"] = int(
            environ[f"{_ENV_PREFIX}DEBOUNCE_MS"]
        )
    if f"{_ENV_PREFIX}PREVIEW_LIMIT" in environ:
        overrides.setdefault("import", {})["preview_limit"] = int(
            environ[f"{_ENV_PREFIX}PREVIEW_LIMIT"]
        )
    if environ.get(f"{_ENV_PREFIX}SEED"):
        overrides["seed_path"] = environ[f"{_ENV_PREFIX}SEED"]
    if environ.get(f"{_ENV_PREFIX}LOG_LEVEL"):
        overrides["log_level"] = environ[f"{_ENV_PREFIX}LOG_LEVEL"]
    return overrides


def load_settings(
    path: str | Path | None = None,
    environ: dict[str, str] | None = None,
) -> Settings:
    """Build the effective Settings.

    Args:
        path: Explicit user settings file. Defaults to ``$FLEETDESK_CONFIG``
            or ``settings.yml`` in the user config directory; a missing
            default file is not an error.
        environ: Environment mapping (defaults to ``os.environ``).
    """
    environ = dict(os.environ if environ is None else environ)
    config = _read_yaml(get_data_path("defaults.yml"))

    explicit = path or environ.get(f"{_ENV_PREFIX}CONFIG")
    user_path = Path(explicit) if explicit else user_config_dir() / "settings.yml"
    if user_path.exists():
        _log.debug("Loading settings from %s", user_path)
        config = deep_merge(config, _read_yaml(user_path))
    elif explicit:
        raise FileNotFoundError(f"Settings file not found: {user_path}")

    config = deep_merge(config, _env_overrides(environ))
    return Settings.from_dict(config)
