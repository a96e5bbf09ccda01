from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from glass_pricing.schemas.catalog import CuttingRate, OperationPrice
from glass_pricing.services.exceptions import CatalogConflictError
from glass_pricing.services.rate_table import add_rate_band, default_rate_table


class RateRepository:
    """Tenant-scoped rate tables. Unknown tenants start from the default table."""

    def __init__(self) -> None:
        self._tables: Dict[str, List[CuttingRate]] = {}

    def _table(self, tenant_id: str) -> List[CuttingRate]:
        if tenant_id not in self._tables:
            self._tables[tenant_id] = default_rate_table()
        return self._tables[tenant_id]

    async def list(self, tenant_id: str) -> List[CuttingRate]:
        return [band.model_copy() for band in self._table(tenant_id)]

    async def add(self, tenant_id: str, band: CuttingRate) -> CuttingRate:
        self._tables[tenant_id] = add_rate_band(self._table(tenant_id), band)
        return band.model_copy()


class OperationPriceRepository:
    def __init__(self) -> None:
        self._prices: Dict[str, List[OperationPrice]] = {}

    async def list(self, tenant_id: str) -> List[OperationPrice]:
        return [price.model_copy() for price in self._prices.get(tenant_id, [])]

    async def create(self, tenant_id: str, price: OperationPrice) -> OperationPrice:
        stored = price.model_copy(update={"subtype": price.subtype.strip().upper()})
        rows = self._prices.setdefault(tenant_id, [])
        if any(
            row.operation_type == stored.operation_type and row.subtype == stored.subtype
            for row in rows
        ):
            raise CatalogConflictError(
                f"{stored.operation_type}/{stored.subtype} already has a catalog price"
            )
        rows.append(stored)
        return stored.model_copy()

    async def set_active(
        self, tenant_id: str, operation_type: str, subtype: str, active: bool
    ) -> Optional[OperationPrice]:
        key = subtype.strip().upper()
        for price in self._prices.get(tenant_id, []):
            if price.operation_type == operation_type and price.subtype == key:
                price.active = active
                return price.model_copy()
        return None


@dataclass
class CatalogStore:
    rates: RateRepository
    operation_prices: OperationPriceRepository


_catalog_store: Optional[CatalogStore] = None


def get_catalog_store() -> CatalogStore:
    global _catalog_store
    if _catalog_store is None:
        _catalog_store = CatalogStore(
            rates=RateRepository(),
            operation_prices=OperationPriceRepository(),
        )
    return _catalog_store


def reset_catalog_store() -> None:
    global _catalog_store
    _catalog_store = None
