class ServiceError(Exception):
    """Base exception for service layer failures."""

    def __init__(self, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class DownstreamServiceError(ServiceError):
    """Raised when the catalog backend returns an error response."""

    def __init__(self, message: str, status_code: int | None = None, *, cause: Exception | None = None):
        super().__init__(message, cause=cause)
        self.status_code = status_code


class CatalogConflictError(ServiceError):
    """Raised when a catalog row would duplicate an existing one."""


class PricingError(ServiceError):
    """Raised when a glass line or one of its operations cannot be priced."""

    line_index: int | None = None


class InvalidDimensionError(PricingError):
    """Zero, negative, missing or out-of-range width/height, or an unknown unit."""


class RateNotFoundError(PricingError):
    def __init__(self, cutting_type: str, thickness: float | None):
        super().__init__(
            f"No {cutting_type} rate band covers thickness {thickness} mm"
        )
        self.cutting_type = cutting_type
        self.thickness = thickness


class PriceCatalogMissError(PricingError):
    def __init__(self, operation_type: str, subtype: str | None):
        super().__init__(
            f"No active catalog price for {operation_type}/{subtype or '-'}"
        )
        self.operation_type = operation_type
        self.subtype = subtype


class InvalidOperationError(PricingError):
    """Operation input is incomplete, e.g. CIRCLE without a diameter."""


class RateTableError(PricingError):
    """Rate bands are malformed or overlap."""


class InvalidPaymentError(PricingError):
    """Payment amount is not acceptable for the invoice."""
