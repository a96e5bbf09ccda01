"""Edge-length formulas for beveling (SHATAF) operations.

Every formula receives the piece's length and width in metres and returns the
number of linear metres of edge that get beveled. ``STRAIGHT`` is the plain
perimeter; the frame variants bevel some edges more than once.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

from glass_pricing.services.exceptions import InvalidOperationError

STRAIGHT = "STRAIGHT"
CIRCLE = "CIRCLE"
MANUAL_METHODS = frozenset({"CURVE_ARCH", "PANELS"})

# Edge styles priced per square metre instead of per edge metre.
AREA_BASED_STYLES = frozenset({"SANDING"})

# Edge styles with no formula; the operator must enter the price.
MANUAL_PRICE_STYLES = frozenset({"LASER", "ROTATION", "TABLEAUX"})

_FORMULAS: Dict[str, Callable[[float, float], float]] = {
    STRAIGHT: lambda length, width: 2 * (length + width),
    "FRAME_HEAD": lambda length, width: (length * 2) + (width * 3),
    "2_FRAME_HEADS": lambda length, width: (length * 2) + (width * 4),
    "FRAME_SIDE": lambda length, width: (length * 3) + (width * 2),
    "2_FRAME_SIDES": lambda length, width: (length * 4) + (width * 2),
    "FRAME_HEAD_SIDE": lambda length, width: 3 * (length + width),
    "2_FRAME_HEADS_SIDE": lambda length, width: (length * 3) + (width * 4),
    "2_FRAME_SIDES_HEAD": lambda length, width: (length * 4) + (width * 3),
    "FULL_FRAME": lambda length, width: 4 * (length + width),
}

CALCULATION_METHODS = frozenset(_FORMULAS) | {CIRCLE} | MANUAL_METHODS


def normalize_method(method: Optional[str]) -> str:
    if not method:
        return STRAIGHT
    code = method.strip().upper()
    if code not in CALCULATION_METHODS:
        raise InvalidOperationError(f"Unknown beveling calculation method: {method}")
    return code


def compute_beveling_meters(
    method: Optional[str],
    length_m: float,
    width_m: float,
    *,
    diameter_m: Optional[float] = None,
    manual_meters: Optional[float] = None,
) -> float:
    code = normalize_method(method)

    if code == CIRCLE:
        if diameter_m is None or diameter_m <= 0:
            raise InvalidOperationError("CIRCLE beveling requires a positive diameter")
        return 6 * diameter_m

    if code in MANUAL_METHODS:
        if manual_meters is None or manual_meters < 0:
            raise InvalidOperationError(f"{code} beveling requires the edge length in metres")
        return float(manual_meters)

    return _FORMULAS[code](length_m, width_m)
