from fastapi import HTTPException

from glass_pricing.services.exceptions import CatalogConflictError, PricingError, ServiceError


def http_error(exc: ServiceError) -> HTTPException:
    """Map a service failure to the HTTP error returned to the caller."""
    if isinstance(exc, PricingError):
        detail = {"error": type(exc).__name__, "message": str(exc)}
        if exc.line_index is not None:
            detail["line_index"] = exc.line_index
        return HTTPException(status_code=422, detail=detail)
    if isinstance(exc, CatalogConflictError):
        return HTTPException(status_code=409, detail=str(exc))
    return HTTPException(status_code=502, detail=str(exc))
