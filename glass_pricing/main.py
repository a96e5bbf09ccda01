from contextlib import asynccontextmanager
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.routing import Mount

from glass_pricing.config import get_settings
from glass_pricing.dependencies.services import get_backend_client_cached
from glass_pricing.health import router as health_router
from glass_pricing.mcp_server import mcp
from glass_pricing.tools.catalog import router as catalog_router
from glass_pricing.tools.pricing import router as pricing_router


def configure_logging() -> None:
    """Ensure application logs use the INFO level by default."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
    else:
        root_logger.setLevel(logging.INFO)


configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    settings_snapshot = settings.model_dump(exclude={"backend_token"})
    logger.info("Pricing service settings on startup: %s", settings_snapshot)

    has_mcp = any(isinstance(r, Mount) and r.path == "/mcp" for r in app.routes)
    logger.debug("MCP mount present: %s", has_mcp)

    client = get_backend_client_cached()
    logger.info(
        "Catalog source: %s",
        "in-memory store" if client.use_mock_data else settings.backend_base_url,
    )

    try:
        yield
    finally:
        logger.info("Closing catalog backend client.")
        await client.close()


settings = get_settings()
app = FastAPI(
    title=settings.app_name,
    lifespan=lifespan,
    redirect_slashes=False,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(pricing_router, prefix="/tools/pricing")
app.include_router(catalog_router, prefix="/tools/catalog")
app.include_router(health_router)

# Streamable HTTP MCP server
app.mount("/mcp", mcp.streamable_http_app())


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    settings = get_settings()
    uvicorn.run("glass_pricing.main:app", host=settings.host, port=settings.port)
