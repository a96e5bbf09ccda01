from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from glass_pricing.schemas.catalog import CuttingRate, OperationPrice, OperationType
from glass_pricing.services.units import DimensionUnit

GlassPricingMethod = Literal["AREA", "LENGTH"]
InvoiceStatus = Literal["PENDING", "PARTIALLY_PAID", "PAID", "CANCELLED"]


class OperationRequest(BaseModel):
    operation_type: OperationType
    shataf_type: Optional[str] = None          # edge style, e.g. KHARZAN, SANDING
    calculation_method: Optional[str] = None   # perimeter formula, STRAIGHT when omitted
    subtype: Optional[str] = None              # catalog key for LASER / FARMA
    manual_price: Optional[float] = None
    manual_meters: Optional[float] = None      # CURVE_ARCH / PANELS edge length
    notes: Optional[str] = None

    @field_validator("operation_type", "shataf_type", "calculation_method", mode="before")
    def _upper_codes(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value


class GlassLine(BaseModel):
    width: Optional[float] = None
    height: Optional[float] = None
    dimension_unit: Optional[DimensionUnit] = None
    thickness: Optional[float] = None         # mm; required once a SHATAF operation is present
    quantity: int = 1
    diameter: Optional[float] = None           # same unit as width/height
    operations: List[OperationRequest] = Field(default_factory=list)
    description: Optional[str] = None

    @field_validator("dimension_unit", mode="before")
    def _upper_unit(cls, value):
        if isinstance(value, str):
            return value.strip().upper() or None
        return value


class OperationCost(BaseModel):
    operation_type: OperationType
    shataf_type: Optional[str] = None
    calculation_method: Optional[str] = None
    subtype: Optional[str] = None
    unit_price: float                          # one piece
    operation_price: float                     # unit_price x quantity
    beveling_meters: Optional[float] = None
    rate_per_meter: Optional[float] = None
    manual: bool = False
    warning: Optional[str] = None


class LineTotals(BaseModel):
    area_m2: float
    perimeter_m: float
    quantity: int
    glass_price: float
    cutting_price: float
    line_total: float
    operations: List[OperationCost] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class InvoiceTotals(BaseModel):
    total_price: float
    line_count: int
    tax: float = 0.0


class PricedLine(BaseModel):
    glass_line: GlassLine
    price_per_meter: float = 0.0
    pricing_method: GlassPricingMethod = "AREA"


class LinePricingRequest(PricedLine):
    tenant_id: Optional[str] = None
    rates: Optional[List[CuttingRate]] = None
    operation_prices: Optional[List[OperationPrice]] = None


class LinePricingResponse(BaseModel):
    totals: LineTotals
    display: Dict[str, str]


class InvoicePricingRequest(BaseModel):
    tenant_id: Optional[str] = None
    lines: List[PricedLine]
    amount_paid_now: float = 0.0
    rates: Optional[List[CuttingRate]] = None
    operation_prices: Optional[List[OperationPrice]] = None


class InvoicePricingResponse(BaseModel):
    lines: List[LineTotals]
    total_price: float
    line_count: int
    tax: float = 0.0
    amount_paid_now: float
    remaining_balance: float
    status: InvoiceStatus
    display: Dict[str, str]


class RemainingBalanceRequest(BaseModel):
    total_price: float
    amount_paid_now: float = 0.0


class RemainingBalanceResponse(BaseModel):
    total_price: float
    amount_paid_now: float
    remaining_balance: float
    status: InvoiceStatus


class PaymentRequest(BaseModel):
    total_price: float
    amount_paid: float = 0.0
    amount: float
    status: InvoiceStatus = "PENDING"


class PaymentResponse(BaseModel):
    total_price: float
    amount_paid: float
    remaining_balance: float
    status: InvoiceStatus
