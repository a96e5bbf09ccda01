# glass_pricing/mcp_server.py
from __future__ import annotations

import logging

from mcp.server.fastmcp import Context, FastMCP

from glass_pricing.config import get_settings
from glass_pricing.dependencies.services import get_backend_client_cached
from glass_pricing.schemas.pricing import (
    InvoicePricingRequest,
    InvoicePricingResponse,
    LinePricingRequest,
    LinePricingResponse,
    PaymentRequest,
    PaymentResponse,
    RemainingBalanceRequest,
    RemainingBalanceResponse,
)
from glass_pricing.services import CatalogService, InvoicePricingService

log = logging.getLogger("glass_pricing.mcp")

mcp = FastMCP("glass_pricing")


def _service() -> InvoicePricingService:
    return InvoicePricingService(CatalogService(get_backend_client_cached()), get_settings())


@mcp.tool(name="pricing_line", description="Price one glass line: glass, beveling, laser and farma costs")
async def pricing_line(input: LinePricingRequest, ctx: Context) -> LinePricingResponse:
    log.debug("pricing_line input=%s", input.model_dump())
    out = await _service().price_line(input)
    log.debug("pricing_line output=%s", out.model_dump())
    return out


@mcp.tool(name="pricing_invoice", description="Price a full invoice draft and derive its payment status")
async def pricing_invoice(input: InvoicePricingRequest, ctx: Context) -> InvoicePricingResponse:
    log.debug("pricing_invoice input=%s", input.model_dump())
    out = await _service().price_invoice(input)
    log.debug("pricing_invoice output=%s", out.model_dump())
    return out


@mcp.tool(name="remaining_balance", description="Remaining balance and status for a total and an amount paid")
async def remaining_balance(input: RemainingBalanceRequest, ctx: Context) -> RemainingBalanceResponse:
    log.debug("remaining_balance input=%s", input.model_dump())
    return _service().remaining_balance(input)


@mcp.tool(name="payment_apply", description="Record a payment against an invoice total")
async def payment_apply(input: PaymentRequest, ctx: Context) -> PaymentResponse:
    log.debug("payment_apply input=%s", input.model_dump())
    out = _service().record_payment(input)
    log.debug("payment_apply output=%s", out.model_dump())
    return out
