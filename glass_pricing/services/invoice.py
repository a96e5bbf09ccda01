from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from glass_pricing.config import Settings
from glass_pricing.schemas.catalog import CuttingRate, OperationPrice
from glass_pricing.schemas.pricing import (
    GlassLine,
    InvoicePricingRequest,
    InvoicePricingResponse,
    LinePricingRequest,
    LinePricingResponse,
    LineTotals,
    PaymentRequest,
    PaymentResponse,
    PricedLine,
    RemainingBalanceRequest,
    RemainingBalanceResponse,
)
from glass_pricing.services.catalog import CatalogService
from glass_pricing.services.exceptions import PricingError
from glass_pricing.services.formatting import (
    TAX_DISPLAY,
    format_area,
    format_currency,
    format_dimension,
)
from glass_pricing.services.payments import apply_payment, reverse_payment
from glass_pricing.services.pricing import (
    compute_invoice_totals,
    compute_line_totals,
    compute_remaining_balance,
    derive_payment_status,
)

logger = logging.getLogger(__name__)

DEFAULT_TENANT = "default"


class InvoicePricingService:
    """Prices invoice drafts against one catalog snapshot per request."""

    def __init__(self, catalog: CatalogService, settings: Settings) -> None:
        self._catalog = catalog
        self._settings = settings

    async def _resolve_snapshot(
        self,
        tenant_id: Optional[str],
        rates: Optional[List[CuttingRate]],
        operation_prices: Optional[List[OperationPrice]],
    ) -> Tuple[List[CuttingRate], List[OperationPrice]]:
        if rates is not None and operation_prices is not None:
            return rates, operation_prices
        snapshot = await self._catalog.get_snapshot(tenant_id or DEFAULT_TENANT)
        return (
            rates if rates is not None else snapshot.rates,
            operation_prices if operation_prices is not None else snapshot.operation_prices,
        )

    def _price(
        self,
        priced: PricedLine,
        rates: Sequence[CuttingRate],
        operation_prices: Sequence[OperationPrice],
    ) -> LineTotals:
        line = priced.glass_line
        if line.dimension_unit is None:
            line = line.model_copy(update={"dimension_unit": self._settings.default_dimension_unit})
        return compute_line_totals(
            line,
            rates,
            operation_prices,
            priced.price_per_meter,
            pricing_method=priced.pricing_method,
            strict=self._settings.strict_catalog,
            max_width_m=self._settings.max_width_m,
            max_height_m=self._settings.max_height_m,
        )

    def _line_display(self, line: GlassLine, totals: LineTotals) -> Dict[str, str]:
        label = self._settings.currency_label
        unit = (line.dimension_unit or self._settings.default_dimension_unit).lower()
        return {
            "dimensions": f"{format_dimension(line.width)} x {format_dimension(line.height)} {unit}",
            "area_m2": format_area(totals.area_m2),
            "glass_price": format_currency(totals.glass_price, label),
            "cutting_price": format_currency(totals.cutting_price, label),
            "line_total": format_currency(totals.line_total, label),
        }

    async def price_line(self, request: LinePricingRequest) -> LinePricingResponse:
        rates, prices = await self._resolve_snapshot(
            request.tenant_id, request.rates, request.operation_prices
        )
        totals = self._price(request, rates, prices)
        logger.debug("Priced line: %s", totals.model_dump())
        return LinePricingResponse(
            totals=totals, display=self._line_display(request.glass_line, totals)
        )

    async def price_invoice(self, request: InvoicePricingRequest) -> InvoicePricingResponse:
        if not request.lines:
            raise PricingError("An invoice needs at least one line")

        rates, prices = await self._resolve_snapshot(
            request.tenant_id, request.rates, request.operation_prices
        )
        priced_lines: List[LineTotals] = []
        for index, priced in enumerate(request.lines):
            try:
                priced_lines.append(self._price(priced, rates, prices))
            except PricingError as exc:
                exc.line_index = index
                logger.warning("Line %d could not be priced: %s", index + 1, exc)
                raise

        totals = compute_invoice_totals(priced_lines)
        remaining = compute_remaining_balance(totals.total_price, request.amount_paid_now)
        status = derive_payment_status(
            totals.total_price,
            request.amount_paid_now,
            tolerance=self._settings.paid_tolerance,
        )
        label = self._settings.currency_label
        logger.info(
            "Priced invoice with %d lines: total %.2f, paid %.2f, status %s",
            totals.line_count,
            totals.total_price,
            request.amount_paid_now,
            status,
        )
        return InvoicePricingResponse(
            lines=priced_lines,
            total_price=totals.total_price,
            line_count=totals.line_count,
            tax=totals.tax,
            amount_paid_now=request.amount_paid_now,
            remaining_balance=remaining,
            status=status,
            display={
                "total_price": format_currency(totals.total_price, label),
                "tax": TAX_DISPLAY,
                "amount_paid_now": format_currency(request.amount_paid_now, label),
                "remaining_balance": format_currency(remaining, label),
            },
        )

    def remaining_balance(self, request: RemainingBalanceRequest) -> RemainingBalanceResponse:
        return RemainingBalanceResponse(
            total_price=request.total_price,
            amount_paid_now=request.amount_paid_now,
            remaining_balance=compute_remaining_balance(
                request.total_price, request.amount_paid_now
            ),
            status=derive_payment_status(
                request.total_price,
                request.amount_paid_now,
                tolerance=self._settings.paid_tolerance,
            ),
        )

    def record_payment(self, request: PaymentRequest) -> PaymentResponse:
        return apply_payment(
            request.total_price,
            request.amount_paid,
            request.amount,
            status=request.status,
            tolerance=self._settings.paid_tolerance,
        )

    def reverse_payment(self, request: PaymentRequest) -> PaymentResponse:
        return reverse_payment(
            request.total_price,
            request.amount_paid,
            request.amount,
            status=request.status,
            tolerance=self._settings.paid_tolerance,
        )
