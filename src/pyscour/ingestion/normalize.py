"""Lenient scalar coercion for registry payload values.

Registry fields arrive as numbers, numeric strings or placeholder text
depending on the jurisdiction feeding the record. These helpers never
raise; unusable input becomes ``None`` (or ``False``).
"""

from __future__ import annotations

import math
from typing import Any

_TRUE_STRINGS = frozenset({"1", "true", "yes", "y"})


def safe_float(value: Any) -> float | None:
    """Finite float from a number or numeric string, else ``None``."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def safe_int(value: Any) -> int | None:
    number = safe_float(value)
    return None if number is None else int(number)


def safe_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    if isinstance(value, (bool, int, float)):
        return bool(value)
    return False


def join_nonempty(*parts: str | None, sep: str = " ") -> str:
    """Join the non-empty, stripped *parts* with *sep*."""
    return sep.join(p.strip() for p in parts if p and p.strip())
