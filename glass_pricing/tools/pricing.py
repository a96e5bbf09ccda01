from fastapi import APIRouter, Depends

from glass_pricing.dependencies.services import get_invoice_pricing_service
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
from glass_pricing.services import InvoicePricingService
from glass_pricing.services.exceptions import ServiceError
from glass_pricing.tools.errors import http_error

router = APIRouter()


@router.post("/line", response_model=LinePricingResponse)
async def price_line(
    req: LinePricingRequest,
    service: InvoicePricingService = Depends(get_invoice_pricing_service),
):
    try:
        return await service.price_line(req)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.post("/invoice", response_model=InvoicePricingResponse)
async def price_invoice(
    req: InvoicePricingRequest,
    service: InvoicePricingService = Depends(get_invoice_pricing_service),
):
    try:
        return await service.price_invoice(req)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.post("/remaining-balance", response_model=RemainingBalanceResponse)
async def remaining_balance(
    req: RemainingBalanceRequest,
    service: InvoicePricingService = Depends(get_invoice_pricing_service),
):
    return service.remaining_balance(req)


@router.post("/payment", response_model=PaymentResponse)
async def record_payment(
    req: PaymentRequest,
    service: InvoicePricingService = Depends(get_invoice_pricing_service),
):
    try:
        return service.record_payment(req)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.post("/payment/reverse", response_model=PaymentResponse)
async def reverse_payment(
    req: PaymentRequest,
    service: InvoicePricingService = Depends(get_invoice_pricing_service),
):
    try:
        return service.reverse_payment(req)
    except ServiceError as exc:
        raise http_error(exc) from exc
