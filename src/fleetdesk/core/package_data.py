"""importlib.resources helpers for accessing files shipped in fleetdesk/data.

Works both in development (editable install) and in a packaged wheel.
"""

from __future__ import annotations

from pathlib import Path


def _data_dir() -> Path:
    import importlib.resources as _ir

    ref = _ir.files("fleetdesk.data")
    # hatchling ships data files as plain files, so this is a real directory.
    return Path(str(ref))


def get_data_path(name: str) -> Path:
    """Return the absolute Path to a bundled data file.

    Args:
        name: File name inside ``fleetdesk/data`` (e.g. ``"defaults.yml"``).
    """
    return _data_dir() / name
