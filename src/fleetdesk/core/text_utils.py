"""Shared text-processing helpers.

Used by the search matcher (core/data_table.py), the mapping auto-guess
(core/import_session.py) and the resource transforms so that every place
compares strings the same way.
"""

from __future__ import annotations

import math
import re
from typing import Any

_WS_RE = re.compile(r"\s+")
_SEP_RE = re.compile(r"[_-]+")


def to_text(value: Any) -> str:
    """String coercion used for display and search. None / NaN → ""."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(to_text(v) for v in value)
    return str(value)


def normalize_header(value: str) -> str:
    """Lowercase, trim, collapse whitespace, underscores/hyphens → spaces."""
    text = _WS_RE.sub(" ", str(value).lower().strip())
    return _SEP_RE.sub(" ", text)


def clean(value: Any) -> str:
    """Trimmed text of a raw import cell."""
    return to_text(value).strip()


def to_number(value: Any, default: float | None = None) -> float | None:
    """Parse a raw cell as a number; "" / garbage → *default*.

    Accepts French decimal commas and thin/normal spaces as thousands
    separators ("1 250,5").
    """
    text = clean(value)
    for space in ("\u00a0", "\u202f", " "):
        text = text.replace(space, "")
    if not text:
        return default
    text = text.replace(",", ".")
    try:
        number = float(text)
    except ValueError:
        return default
    if math.isnan(number):
        return default
    return number


def to_int(value: Any, default: int | None = None) -> int | None:
    number = to_number(value)
    if number is None:
        return default
    return int(number)
