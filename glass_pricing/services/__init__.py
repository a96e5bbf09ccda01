"""Service package public API definitions.

Service classes are imported lazily so that ``glass_pricing.services.exceptions``
and the pure pricing modules can be imported by the HTTP client and the
schemas without pulling in every service implementation.
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__all__ = [
    "CatalogService",
    "InvoicePricingService",
]

_SERVICE_MODULES = {
    "CatalogService": "catalog",
    "InvoicePricingService": "invoice",
}


def __getattr__(name: str) -> Any:
    if name not in _SERVICE_MODULES:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module = import_module(f".{_SERVICE_MODULES[name]}", __name__)
    attr = getattr(module, name)
    globals()[name] = attr
    return attr


if TYPE_CHECKING:  # pragma: no cover - import for static analysis only
    from .catalog import CatalogService as CatalogService
    from .invoice import InvoicePricingService as InvoicePricingService
