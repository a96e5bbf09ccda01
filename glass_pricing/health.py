# glass_pricing/health.py
from fastapi import APIRouter, Depends

from glass_pricing.config import Settings, get_settings

router = APIRouter()


@router.get("/health")
def health(settings: Settings = Depends(get_settings)):
    return {
        "ok": True,
        "service": settings.app_name,
        "mock_data": settings.use_mock_data or settings.backend_base_url is None,
    }


@router.get("/mcp/info")
def mcp_info():
    return {
        "status": "ok",
        "transport": "streamable-http",
        "path": "/mcp",
        "tools": ["pricing_line", "pricing_invoice", "remaining_balance", "payment_apply"],
    }
