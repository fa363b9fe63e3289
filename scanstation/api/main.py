"""
Scan Station API - Main FastAPI Application.

Proxies the scan station SPA's calls to ParcelPerfect, Shopify and
PrintNode so that vendor credentials stay on the server.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scanstation import __version__
from scanstation.api.errors import register_error_handlers
from scanstation.api.middleware import (
    SlidingWindowRateLimiter,
    rate_limit_middleware,
    request_logging_middleware,
    security_headers_middleware,
    server_error_middleware,
)
from scanstation.api.routes import parcelperfect, printnode, shopify
from scanstation.config import SERVICE_NAME, Settings, get_settings
from scanstation.utils.logging import setup_logging

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# OpenAPI tag descriptions (shown in /docs and /openapi.json)
OPENAPI_TAGS = [
    {
        "name": "parcelperfect",
        "description": "ParcelPerfect quote, waybill and place lookup proxy",
    },
    {
        "name": "shopify",
        "description": "Shopify Admin API proxy for orders, customers and fulfillment",
    },
    {
        "name": "printnode",
        "description": "Label printing through PrintNode",
    },
    {
        "name": "system",
        "description": "System health and information endpoints",
    },
]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the proxy application.

    Args:
        settings: Settings to use instead of the environment (tests)
    """
    if settings is None:
        settings = get_settings()

    setup_logging(SERVICE_NAME, production=settings.is_production)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting Scan Station API on port {settings.port}")
        logger.info(f"   Environment: {settings.environment}")
        logger.info(f"   Allowed origins: {', '.join(settings.allowed_origins())}")
        logger.info(f"   PP_BASE_URL: {settings.pp_base_url or '(NOT SET)'}")
        logger.info(
            f"   Shopify: {settings.shopify_store if settings.shopify_configured else '(NOT SET)'}"
        )
        logger.info(
            f"   PrintNode: {'configured' if settings.printnode_configured else '(NOT SET)'}"
        )

        yield

        logger.info("Shutting down Scan Station API")

    app = FastAPI(
        title="Scan Station API",
        description=(
            "Backend proxy for the dispatch scan station.\n\n"
            "Forwards quote and waybill calls to ParcelPerfect, looks up and "
            "fulfills Shopify orders, creates draft orders, and prints labels "
            "through PrintNode."
        ),
        version=__version__,
        lifespan=lifespan,
        openapi_tags=OPENAPI_TAGS,
    )

    # Explicit settings win over the environment in every route
    app.dependency_overrides[get_settings] = lambda: settings

    register_error_handlers(app)

    # Registered innermost first
    app.middleware("http")(server_error_middleware)
    if settings.rate_limit_per_minute > 0:
        limiter = SlidingWindowRateLimiter(settings.rate_limit_per_minute)
        app.middleware("http")(rate_limit_middleware(limiter))
    app.middleware("http")(security_headers_middleware)
    app.middleware("http")(request_logging_middleware)

    # SPA and Shopify app proxy origins; no cookies are used
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins(),
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=86400,
    )

    @app.get("/", tags=["system"], operation_id="getServiceInfo")
    async def root():
        """Return basic information about the API service."""
        return {
            "service": "Scan Station API",
            "version": __version__,
            "status": "operational",
        }

    @app.get("/healthz", tags=["system"], operation_id="healthCheck")
    async def health_check():
        """Liveness check."""
        return {"ok": True}

    app.include_router(parcelperfect.router, tags=["parcelperfect"])
    app.include_router(shopify.router, tags=["shopify"])
    app.include_router(printnode.router, tags=["printnode"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
