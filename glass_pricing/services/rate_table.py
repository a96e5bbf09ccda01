"""Thickness-banded beveling rates.

A rate table is a plain list of :class:`CuttingRate` rows. Bands of the same
cutting type must not overlap. The default table carries ``SHATF`` bands for
edge beveling and ``SANDING`` bands (per square metre) over the same
thickness ranges.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from glass_pricing.schemas.catalog import CuttingRate
from glass_pricing.services.exceptions import RateTableError

logger = logging.getLogger(__name__)

BEVELING_CUTTING_TYPE = "SHATF"
SANDING_CUTTING_TYPE = "SANDING"

DEFAULT_SHATAF_BANDS = (
    (0.0, 3.0, 5.0),
    (3.1, 4.0, 7.0),
    (4.1, 5.0, 9.0),
    (5.1, 6.0, 11.0),
    (6.1, 8.0, 13.0),
    (8.1, 10.0, 15.0),
    (10.1, 12.0, 18.0),
    (12.1, 50.0, 18.0),
)


# Sanding is priced per square metre, flat across the same thickness ranges.
DEFAULT_SANDING_RATE = 20.0


def _bands(cutting_type: str, bands) -> List[CuttingRate]:
    return [
        CuttingRate(
            cutting_type=cutting_type,
            min_thickness=low,
            max_thickness=high,
            rate_per_meter=rate,
        )
        for low, high, rate in bands
    ]


def default_rate_table() -> List[CuttingRate]:
    """Eight SHATF bands followed by eight SANDING bands."""
    sanding = [(low, high, DEFAULT_SANDING_RATE) for low, high, _ in DEFAULT_SHATAF_BANDS]
    return _bands(BEVELING_CUTTING_TYPE, DEFAULT_SHATAF_BANDS) + _bands(
        SANDING_CUTTING_TYPE, sanding
    )


def band_label(band: CuttingRate) -> str:
    return f"{band.min_thickness:g}-{band.max_thickness:g}"


def _overlaps(first: CuttingRate, second: CuttingRate) -> bool:
    return not (
        first.max_thickness < second.min_thickness
        or first.min_thickness > second.max_thickness
    )


def _check_band(band: CuttingRate) -> None:
    if band.min_thickness < 0:
        raise RateTableError(f"Band {band_label(band)} starts below zero")
    if band.min_thickness >= band.max_thickness:
        raise RateTableError(
            f"Band {band_label(band)}: minimum thickness must be below the maximum"
        )
    if band.rate_per_meter < 0:
        raise RateTableError(f"Band {band_label(band)}: rate cannot be negative")


def validate_rate_table(rates: Sequence[CuttingRate]) -> None:
    """Raise :class:`RateTableError` for malformed or overlapping active bands."""
    active: List[CuttingRate] = []
    for band in rates:
        _check_band(band)
        if not band.active:
            continue
        for other in active:
            if other.cutting_type == band.cutting_type and _overlaps(other, band):
                raise RateTableError(
                    f"{band.cutting_type} band {band_label(band)} overlaps {band_label(other)}"
                )
        active.append(band)


def add_rate_band(rates: Iterable[CuttingRate], band: CuttingRate) -> List[CuttingRate]:
    """Return a new table with ``band`` appended, refusing overlaps."""
    updated = list(rates) + [band]
    validate_rate_table(updated)
    logger.info(
        "Added %s band %s at %.2f/m", band.cutting_type, band_label(band), band.rate_per_meter
    )
    return updated
