"""Dimension unit handling.

Dimensions arrive in millimetres, centimetres or metres and are always
normalised to metres before any area or edge-length arithmetic. A missing
unit means centimetres.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from glass_pricing.services.exceptions import InvalidDimensionError


class DimensionUnit(str, Enum):
    MM = "MM"
    CM = "CM"
    M = "M"


DEFAULT_UNIT = DimensionUnit.CM

# Division keeps whole-number inputs exact (200 cm -> 2.0 m).
_DIVISORS = {
    DimensionUnit.MM: 1000.0,
    DimensionUnit.CM: 100.0,
    DimensionUnit.M: 1.0,
}


def parse_unit(unit: Union[DimensionUnit, str, None]) -> DimensionUnit:
    if unit is None or unit == "":
        return DEFAULT_UNIT
    if isinstance(unit, DimensionUnit):
        return unit
    try:
        return DimensionUnit(str(unit).strip().upper())
    except ValueError as exc:
        raise InvalidDimensionError(f"Unknown dimension unit: {unit!r}", cause=exc) from exc


def to_meters(value: Optional[float], unit: Union[DimensionUnit, str, None] = None) -> float:
    """Convert ``value`` to metres. Zero or missing values convert to ``0.0``."""
    if not value:
        return 0.0
    return float(value) / _DIVISORS[parse_unit(unit)]

