"""Normalization helpers.

Centralizes defensive parsing and placeholder handling for dataset records.
"""

from __future__ import annotations

import math
import re
from typing import Any

from pyspeedtrap._constants import MPH_TO_KPH
from pyspeedtrap.models.trap import SpeedUnit

# "60", "60.0", "60 km/h", "45mph", "限速60"
_LIMIT_RE = re.compile(r"(\d+(?:\.\d+)?)")


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--":
        return None
    if isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        # OverflowError: JSON integers too large for a float.
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def is_blank(value: Any) -> bool:
    """Return True for missing limits (as opposed to unparseable ones)."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() in {"", "--"}
    return isinstance(value, float) and math.isnan(value)


def parse_speed_limit(value: Any) -> float | None:
    """Parse a limit as published by a dataset.

    Accepts plain numbers and text with a unit suffix or prefix. Returns
    ``0.0`` for a missing limit and ``None`` when a value is present but
    cannot be read as a non-negative number.
    """
    if is_blank(value):
        return 0.0
    parsed = safe_float(value)
    if parsed is None and isinstance(value, str):
        match = _LIMIT_RE.search(value)
        if match is not None:
            parsed = safe_float(match.group(1))
    if parsed is None or parsed < 0:
        return None
    return parsed


def to_kph(value: float, unit: SpeedUnit) -> float:
    if unit == SpeedUnit.MPH:
        return value * MPH_TO_KPH
    return value


def format_speed_limit(value: float, unit: SpeedUnit) -> str:
    """Render a limit in its original unit, dropping a trailing ``.0``."""
    if value <= 0:
        return ""
    number = str(int(value)) if value.is_integer() else f"{value:g}"
    return f"{number} {unit.value}"


def display_speed_limit(raw: Any, value: float, unit: SpeedUnit) -> str:
    """Presentation text for a limit as the dataset published it.

    Text that already says more than a number (``"限速60"``, ``"45 mph"``)
    is kept verbatim. A bare number keeps its original spelling and gets the
    dataset unit appended (``"50.0"`` -> ``"50.0 km/h"``). Unknown limits
    render as ``""``.
    """
    if value <= 0:
        return ""
    if isinstance(raw, str):
        text = raw.strip()
        if safe_float(text) is None:
            return text
        return f"{text} {unit.value}"
    return format_speed_limit(value, unit)
