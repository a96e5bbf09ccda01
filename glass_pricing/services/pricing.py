"""Glass line pricing engine.

All functions here are synchronous and side-effect free. Rate tables and
operation-price catalogs are passed in as snapshots; nothing is fetched or
cached, so the same inputs always price to the same totals.

Quantity rule: every operation cost is computed for one physical piece and
multiplied by the line quantity, exactly like the glass price. A beveled
line of three pieces pays for three perimeters.

Rounding is left to the presentation layer (see ``formatting``).
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Union

from glass_pricing.schemas.catalog import CuttingRate, OperationPrice
from glass_pricing.schemas.pricing import (
    GlassLine,
    InvoiceTotals,
    LineTotals,
    OperationCost,
    OperationRequest,
)
from glass_pricing.services.beveling import (
    AREA_BASED_STYLES,
    MANUAL_PRICE_STYLES,
    STRAIGHT,
    compute_beveling_meters,
    normalize_method,
)
from glass_pricing.services.exceptions import (
    InvalidDimensionError,
    InvalidOperationError,
    PriceCatalogMissError,
    PricingError,
    RateNotFoundError,
)
from glass_pricing.services.rate_table import (
    BEVELING_CUTTING_TYPE,
    SANDING_CUTTING_TYPE,
    band_label,
)
from glass_pricing.services.units import DimensionUnit, parse_unit, to_meters

logger = logging.getLogger(__name__)

Unit = Union[DimensionUnit, str, None]

MIN_DIMENSION_M = 0.001
PAID_TOLERANCE = 0.01


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

def compute_area(width: Optional[float], height: Optional[float], unit: Unit = None) -> float:
    """Area in m². Zero or missing dimensions give ``0.0``."""
    return to_meters(width, unit) * to_meters(height, unit)


def compute_perimeter(width: Optional[float], height: Optional[float], unit: Unit = None) -> float:
    return 2 * (to_meters(width, unit) + to_meters(height, unit))


def compute_length(width: Optional[float], height: Optional[float], unit: Unit = None) -> float:
    """Longest side in metres, used by glass types priced per linear metre."""
    return max(to_meters(width, unit), to_meters(height, unit))


def validate_dimensions(
    width: Optional[float],
    height: Optional[float],
    unit: Unit = None,
    *,
    max_width_m: Optional[float] = None,
    max_height_m: Optional[float] = None,
) -> None:
    parse_unit(unit)
    for label, value in (("width", width), ("height", height)):
        if value is None:
            raise InvalidDimensionError(f"{label} is required")
        if value <= 0:
            raise InvalidDimensionError(f"{label} must be greater than zero, got {value}")
        if to_meters(value, unit) < MIN_DIMENSION_M:
            raise InvalidDimensionError(f"{label} {value} is below 1 mm")

    if max_width_m is not None and to_meters(width, unit) > max_width_m:
        raise InvalidDimensionError(f"width must not exceed {max_width_m:g} m")
    if max_height_m is not None and to_meters(height, unit) > max_height_m:
        raise InvalidDimensionError(f"height must not exceed {max_height_m:g} m")


# ---------------------------------------------------------------------------
# Rates
# ---------------------------------------------------------------------------

def resolve_rate_band(
    rate_table: Sequence[CuttingRate], cutting_type: str, thickness_mm: Optional[float]
) -> CuttingRate:
    """Return the active band of ``cutting_type`` covering ``thickness_mm``.

    Bands are inclusive at both ends and scanned in table order. A thickness
    that falls in the gap between two bands (4.05 mm between 3.1-4 and 4.1-5)
    takes the upper band, and one above every band takes the band with the
    highest maximum. Non-positive thickness, thickness below the lowest band or
    an empty table raises :class:`RateNotFoundError`.
    """
    cutting_type = cutting_type.upper()
    if thickness_mm is None or thickness_mm <= 0:
        raise RateNotFoundError(cutting_type, thickness_mm)

    bands = [
        band
        for band in rate_table
        if band.active and band.cutting_type == cutting_type
    ]
    for band in bands:
        if band.min_thickness <= thickness_mm <= band.max_thickness:
            return band

    if not bands:
        raise RateNotFoundError(cutting_type, thickness_mm)

    ordered = sorted(bands, key=lambda band: band.min_thickness)
    if thickness_mm < ordered[0].min_thickness:
        raise RateNotFoundError(cutting_type, thickness_mm)
    for band in ordered:
        if band.min_thickness > thickness_mm:
            return band

    # Thicker than every band: the top band is the catch-all.
    return max(bands, key=lambda band: band.max_thickness)


def lookup_rate(
    rate_table: Sequence[CuttingRate], cutting_type: str, thickness_mm: Optional[float]
) -> float:
    band = resolve_rate_band(rate_table, cutting_type, thickness_mm)
    logger.debug(
        "%s rate for %s mm resolved to band %s at %s/m",
        cutting_type,
        thickness_mm,
        band_label(band),
        band.rate_per_meter,
    )
    return band.rate_per_meter


def compute_beveling_cost(
    width: Optional[float],
    height: Optional[float],
    unit: Unit,
    thickness_mm: Optional[float],
    rate_table: Sequence[CuttingRate],
) -> float:
    """Straight beveling of one piece: perimeter x thickness-band rate."""
    return compute_perimeter(width, height, unit) * lookup_rate(
        rate_table, BEVELING_CUTTING_TYPE, thickness_mm
    )


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def find_catalog_price(
    price_catalog: Sequence[OperationPrice], operation_type: str, subtype: Optional[str]
) -> Optional[OperationPrice]:
    key = (subtype or "").strip().upper()
    for entry in price_catalog:
        if not entry.active:
            continue
        if entry.operation_type == operation_type and entry.subtype.strip().upper() == key:
            return entry
    return None


def _price_shataf(
    operation: OperationRequest,
    line: GlassLine,
    rate_table: Sequence[CuttingRate],
) -> OperationCost:
    unit = line.dimension_unit
    style = (operation.shataf_type or "").upper()

    if style in MANUAL_PRICE_STYLES:
        raise InvalidOperationError(f"{style} edges need a manual price")

    if style in AREA_BASED_STYLES:
        area = compute_area(line.width, line.height, unit)
        rate = lookup_rate(rate_table, SANDING_CUTTING_TYPE, line.thickness)
        return OperationCost(
            operation_type=operation.operation_type,
            shataf_type=operation.shataf_type,
            unit_price=area * rate,
            operation_price=0.0,
            rate_per_meter=rate,
        )

    method = normalize_method(operation.calculation_method)
    if method == STRAIGHT:
        meters = compute_perimeter(line.width, line.height, unit)
    else:
        meters = compute_beveling_meters(
            method,
            to_meters(line.width, unit),
            to_meters(line.height, unit),
            diameter_m=to_meters(line.diameter, unit) if line.diameter else None,
            manual_meters=operation.manual_meters,
        )
    rate = lookup_rate(rate_table, BEVELING_CUTTING_TYPE, line.thickness)
    return OperationCost(
        operation_type=operation.operation_type,
        shataf_type=operation.shataf_type,
        calculation_method=method,
        unit_price=meters * rate,
        operation_price=0.0,
        beveling_meters=meters,
        rate_per_meter=rate,
    )


def price_operation(
    operation: OperationRequest,
    line: Optional[GlassLine],
    rate_table: Sequence[CuttingRate],
    price_catalog: Sequence[OperationPrice],
    *,
    strict: bool = True,
) -> OperationCost:
    """Price one operation for a single piece.

    ``operation_price`` on the result is left at the per-piece value; the
    line aggregation scales it by quantity.
    """
    if operation.manual_price is not None:
        if operation.manual_price < 0:
            raise InvalidOperationError("Manual price cannot be negative")
        return OperationCost(
            operation_type=operation.operation_type,
            shataf_type=operation.shataf_type,
            calculation_method=operation.calculation_method,
            subtype=operation.subtype,
            unit_price=float(operation.manual_price),
            operation_price=float(operation.manual_price),
            manual=True,
        )

    if operation.operation_type in ("LASER", "FARMA"):
        entry = find_catalog_price(price_catalog, operation.operation_type, operation.subtype)
        if entry is None:
            if strict:
                raise PriceCatalogMissError(operation.operation_type, operation.subtype)
            warning = f"No active catalog price for {operation.operation_type}/{operation.subtype or '-'}"
            logger.warning("%s; pricing operation at 0", warning)
            return OperationCost(
                operation_type=operation.operation_type,
                subtype=operation.subtype,
                unit_price=0.0,
                operation_price=0.0,
                warning=warning,
            )
        return OperationCost(
            operation_type=operation.operation_type,
            subtype=entry.subtype,
            unit_price=entry.base_price,
            operation_price=entry.base_price,
        )

    if line is None:
        raise InvalidOperationError("Beveling needs the glass line dimensions")
    cost = _price_shataf(operation, line, rate_table)
    cost.operation_price = cost.unit_price
    return cost


def compute_operation_cost(
    operation: OperationRequest,
    price_catalog: Sequence[OperationPrice],
    *,
    line: Optional[GlassLine] = None,
    rate_table: Sequence[CuttingRate] = (),
    strict: bool = True,
) -> float:
    """Final per-piece cost of ``operation``; manual price always wins."""
    return price_operation(operation, line, rate_table, price_catalog, strict=strict).unit_price


# ---------------------------------------------------------------------------
# Lines, invoices, payments
# ---------------------------------------------------------------------------

def compute_line_totals(
    line: GlassLine,
    rate_table: Sequence[CuttingRate],
    price_catalog: Sequence[OperationPrice],
    glass_price_per_meter: float,
    *,
    pricing_method: str = "AREA",
    strict: bool = True,
    max_width_m: Optional[float] = None,
    max_height_m: Optional[float] = None,
) -> LineTotals:
    validate_dimensions(
        line.width,
        line.height,
        line.dimension_unit,
        max_width_m=max_width_m,
        max_height_m=max_height_m,
    )
    if line.quantity < 1:
        raise PricingError(f"Quantity must be at least 1, got {line.quantity}")

    unit = line.dimension_unit
    quantity = line.quantity
    area_m2 = compute_area(line.width, line.height, unit)
    perimeter_m = compute_perimeter(line.width, line.height, unit)

    if pricing_method == "LENGTH":
        priced_measure = compute_length(line.width, line.height, unit)
    elif pricing_method == "AREA":
        priced_measure = area_m2
    else:
        raise PricingError(f"Unknown glass pricing method: {pricing_method}")
    glass_price = glass_price_per_meter * priced_measure * quantity

    costs: List[OperationCost] = []
    for operation in line.operations:
        cost = price_operation(operation, line, rate_table, price_catalog, strict=strict)
        cost.operation_price = cost.unit_price * quantity
        costs.append(cost)

    cutting_price = sum(cost.unit_price for cost in costs) * quantity
    return LineTotals(
        area_m2=area_m2,
        perimeter_m=perimeter_m,
        quantity=quantity,
        glass_price=glass_price,
        cutting_price=cutting_price,
        line_total=glass_price + cutting_price,
        operations=costs,
        warnings=[cost.warning for cost in costs if cost.warning],
    )


def compute_invoice_totals(lines: Iterable[Union[LineTotals, float]]) -> InvoiceTotals:
    """Sum line totals. Tax is never charged."""
    total = 0.0
    count = 0
    for line in lines:
        total += line.line_total if isinstance(line, LineTotals) else float(line)
        count += 1
    return InvoiceTotals(total_price=total, line_count=count, tax=0.0)


def compute_remaining_balance(total_price: float, amount_paid_now: float) -> float:
    """Raw subtraction; overpayment shows as a negative balance."""
    return total_price - amount_paid_now


def derive_payment_status(
    total_price: float, amount_paid: float, *, tolerance: float = PAID_TOLERANCE
) -> str:
    remaining = compute_remaining_balance(total_price, amount_paid)
    if remaining <= tolerance:
        return "PAID"
    if amount_paid > 0:
        return "PARTIALLY_PAID"
    return "PENDING"
