from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from glass_pricing.clients.backend import BackendClient
from glass_pricing.config import Settings, get_settings
from glass_pricing.services import CatalogService, InvoicePricingService


@lru_cache(maxsize=1)
def get_backend_client_cached() -> BackendClient:
    settings = get_settings()
    return BackendClient(
        settings.backend_base_url,
        timeout=settings.backend_timeout,
        use_mock_data=settings.use_mock_data,
        token=settings.backend_token,
    )


def get_backend_client(settings: Settings = Depends(get_settings)) -> BackendClient:
    return get_backend_client_cached()


def get_catalog_service(
    client: BackendClient = Depends(get_backend_client),
) -> CatalogService:
    return CatalogService(client)


def get_invoice_pricing_service(
    catalog: CatalogService = Depends(get_catalog_service),
    settings: Settings = Depends(get_settings),
) -> InvoicePricingService:
    return InvoicePricingService(catalog, settings)
