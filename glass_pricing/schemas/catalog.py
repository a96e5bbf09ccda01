from typing import List, Literal, Optional

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

OperationType = Literal["SHATAF", "LASER", "FARMA"]

# Backend rows arrive camelCased; responses stay snake_case.
_CAMEL_INPUT = ConfigDict(
    alias_generator=AliasGenerator(validation_alias=to_camel), populate_by_name=True
)


class CuttingRate(BaseModel):
    model_config = _CAMEL_INPUT

    cutting_type: str = "SHATF"
    min_thickness: float            # mm, inclusive
    max_thickness: float            # mm, inclusive
    rate_per_meter: float
    active: bool = True

    @field_validator("cutting_type", mode="before")
    def _upper_cutting_type(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value


class OperationPrice(BaseModel):
    model_config = _CAMEL_INPUT

    operation_type: OperationType
    subtype: str
    base_price: float
    unit: Optional[str] = None      # e.g. "per piece"
    name: Optional[str] = None
    active: bool = True
    display_order: Optional[int] = None


class CatalogSnapshot(BaseModel):
    tenant_id: str
    rates: List[CuttingRate]
    operation_prices: List[OperationPrice]
    fetched_at: str


class RateListResponse(BaseModel):
    tenant_id: str
    total: int
    items: List[CuttingRate]


class RateCreateRequest(BaseModel):
    tenant_id: str
    cutting_type: str = "SHATF"
    min_thickness: float
    max_thickness: float
    rate_per_meter: float = Field(ge=0)


class OperationPriceListResponse(BaseModel):
    tenant_id: str
    total: int
    items: List[OperationPrice]


class OperationPriceCreateRequest(BaseModel):
    tenant_id: str
    operation_type: OperationType
    subtype: str
    base_price: float = Field(ge=0)
    unit: Optional[str] = None
    name: Optional[str] = None
    display_order: Optional[int] = None


class OperationPriceActiveRequest(BaseModel):
    tenant_id: str
    operation_type: OperationType
    subtype: str
    active: bool
