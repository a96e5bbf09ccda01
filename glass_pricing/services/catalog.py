from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, List

from pydantic import ValidationError

from glass_pricing.clients.backend import BackendClient
from glass_pricing.schemas.catalog import (
    CatalogSnapshot,
    CuttingRate,
    OperationPrice,
    OperationPriceActiveRequest,
    OperationPriceCreateRequest,
    OperationPriceListResponse,
    RateCreateRequest,
    RateListResponse,
)
from glass_pricing.services.catalog_store import CatalogStore, get_catalog_store
from glass_pricing.services.exceptions import PriceCatalogMissError, ServiceError
from glass_pricing.services.rate_table import add_rate_band

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_rows(model, rows: Any, what: str) -> list:
    if isinstance(rows, dict):
        rows = rows.get("items", [])
    try:
        return [model.model_validate(row) for row in rows]
    except ValidationError as exc:
        raise ServiceError(f"Catalog backend returned malformed {what}", cause=exc) from exc


class CatalogService:
    """Reads and edits a tenant's rate table and operation-price catalog.

    Pricing calls take one :meth:`get_snapshot` per request and thread it
    through the engine, so edits made while an invoice is being priced do not
    leak into it.
    """

    def __init__(
        self,
        client: BackendClient,
        *,
        store: CatalogStore | None = None,
    ) -> None:
        self._client = client
        self._store = store
        if self._client.use_mock_data:
            self._store = store or get_catalog_store()

    async def get_snapshot(self, tenant_id: str) -> CatalogSnapshot:
        rates = await self._fetch_rates(tenant_id)
        prices = await self._fetch_operation_prices(tenant_id)
        logger.info(
            "Loaded catalog snapshot for tenant %s: %d rate bands, %d operation prices",
            tenant_id,
            len(rates),
            len(prices),
        )
        return CatalogSnapshot(
            tenant_id=tenant_id,
            rates=rates,
            operation_prices=prices,
            fetched_at=_utc_now_iso(),
        )

    async def _fetch_rates(self, tenant_id: str) -> List[CuttingRate]:
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            return await self._store.rates.list(tenant_id)
        data = await self._client.get("/cutting-rates", {"tenantId": tenant_id})
        return _parse_rows(CuttingRate, data, "cutting rates")

    async def _fetch_operation_prices(self, tenant_id: str) -> List[OperationPrice]:
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            return await self._store.operation_prices.list(tenant_id)
        data = await self._client.get("/operation-prices", {"tenantId": tenant_id})
        return _parse_rows(OperationPrice, data, "operation prices")

    async def list_rates(self, tenant_id: str) -> RateListResponse:
        rates = await self._fetch_rates(tenant_id)
        return RateListResponse(tenant_id=tenant_id, total=len(rates), items=rates)

    async def add_rate(self, request: RateCreateRequest) -> RateListResponse:
        band = CuttingRate(
            cutting_type=request.cutting_type,
            min_thickness=request.min_thickness,
            max_thickness=request.max_thickness,
            rate_per_meter=request.rate_per_meter,
        )
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            await self._store.rates.add(request.tenant_id, band)
            return await self.list_rates(request.tenant_id)

        # Overlap check runs here so a bad band never reaches the backend.
        add_rate_band(await self._fetch_rates(request.tenant_id), band)
        payload = {"tenantId": request.tenant_id, **band.model_dump(by_alias=False)}
        await self._client.post("/cutting-rates", payload)
        return await self.list_rates(request.tenant_id)

    async def list_operation_prices(self, tenant_id: str) -> OperationPriceListResponse:
        prices = await self._fetch_operation_prices(tenant_id)
        return OperationPriceListResponse(tenant_id=tenant_id, total=len(prices), items=prices)

    async def create_operation_price(self, request: OperationPriceCreateRequest) -> OperationPrice:
        price = OperationPrice(
            operation_type=request.operation_type,
            subtype=request.subtype,
            base_price=request.base_price,
            unit=request.unit,
            name=request.name,
            display_order=request.display_order,
        )
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            return await self._store.operation_prices.create(request.tenant_id, price)

        data = await self._client.post(
            "/operation-prices", {"tenantId": request.tenant_id, **price.model_dump()}
        )
        return OperationPrice.model_validate(data)

    async def set_operation_price_active(self, request: OperationPriceActiveRequest) -> OperationPrice:
        """Toggle a catalog row without deleting it; inactive rows stop pricing new lines."""
        if self._client.use_mock_data:
            await self._client.simulate_latency()
            updated = await self._store.operation_prices.set_active(
                request.tenant_id, request.operation_type, request.subtype, request.active
            )
            if updated is None:
                raise PriceCatalogMissError(request.operation_type, request.subtype)
            return updated

        data = await self._client.post("/operation-prices/active", request.model_dump())
        return OperationPrice.model_validate(data)
