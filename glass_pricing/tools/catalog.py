from fastapi import APIRouter, Depends

from glass_pricing.dependencies.services import get_catalog_service
from glass_pricing.schemas.catalog import (
    OperationPrice,
    OperationPriceActiveRequest,
    OperationPriceCreateRequest,
    OperationPriceListResponse,
    RateCreateRequest,
    RateListResponse,
)
from glass_pricing.services import CatalogService
from glass_pricing.services.exceptions import ServiceError
from glass_pricing.tools.errors import http_error

router = APIRouter()


@router.get("/rates", response_model=RateListResponse)
async def list_rates(
    tenant_id: str,
    service: CatalogService = Depends(get_catalog_service),
):
    try:
        return await service.list_rates(tenant_id)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.post("/rates", response_model=RateListResponse)
async def add_rate(
    req: RateCreateRequest,
    service: CatalogService = Depends(get_catalog_service),
):
    try:
        return await service.add_rate(req)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.get("/operation-prices", response_model=OperationPriceListResponse)
async def list_operation_prices(
    tenant_id: str,
    service: CatalogService = Depends(get_catalog_service),
):
    try:
        return await service.list_operation_prices(tenant_id)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.post("/operation-prices", response_model=OperationPrice)
async def create_operation_price(
    req: OperationPriceCreateRequest,
    service: CatalogService = Depends(get_catalog_service),
):
    try:
        return await service.create_operation_price(req)
    except ServiceError as exc:
        raise http_error(exc) from exc


@router.post("/operation-prices/active", response_model=OperationPrice)
async def set_operation_price_active(
    req: OperationPriceActiveRequest,
    service: CatalogService = Depends(get_catalog_service),
):
    try:
        return await service.set_operation_price_active(req)
    except ServiceError as exc:
        raise http_error(exc) from exc
