# src/coinsms/main.py
"""Main entry point for the CoinSMS application."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from coinsms.api.error_handlers import register_error_handlers
from coinsms.api.v1 import accounts_router, admin_router, sms_router
from coinsms.core.settings import settings
from coinsms.services.gateway import get_gateway_client
from coinsms.utils.logging import configure_logging

configure_logging(level=settings.log_level, json_logs=settings.log_json)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Warn about a missing gateway key at startup and close the gateway client at shutdown."""
    gateway = get_gateway_client()
    if not gateway.configured:
        logger.warning("INNOVERIT_API_KEY is not set; SMS submissions will be refused")
    try:
        yield
    finally:
        await gateway.close()


# Initialize FastAPI app
app = FastAPI(
    title="CoinSMS API",
    description="Prepaid SMS sending paid with coins",
    version=settings.app_version,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

register_error_handlers(app)

# Include API routers
app.include_router(sms_router, prefix="/api/v1")
app.include_router(accounts_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "CoinSMS API",
        "version": settings.app_version,
        "description": "Prepaid SMS sending paid with coins",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("coinsms.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
