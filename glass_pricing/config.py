from functools import lru_cache
from typing import Annotated, List

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_name: str = Field(default="Glass Pricing Service")
    cors_origins: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    )
    backend_base_url: AnyHttpUrl | None = Field(
        default=None
    )
    backend_timeout: float = Field(
        default=10.0
    )
    backend_token: str | None = Field(
        default=None
    )
    use_mock_data: bool = Field(
        default=True
    )
    currency_label: str = Field(
        default="ج.م"
    )
    default_dimension_unit: str = Field(
        default="CM"
    )
    strict_catalog: bool = Field(
        default=True
    )
    paid_tolerance: float = Field(
        default=0.01
    )
    max_width_m: float | None = Field(
        default=5.0
    )
    max_height_m: float | None = Field(
        default=3.0
    )
    host: str = Field(
        default="127.0.0.1"
    )
    port: int = Field(
        default=8000
    )

    model_config = SettingsConfigDict(env_prefix="GLASS_", case_sensitive=False)

    @field_validator("cors_origins", mode="before")
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("default_dimension_unit", mode="before")
    def _upper_unit(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()
