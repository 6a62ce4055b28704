"""FastAPI application setup for Hyperlook."""

from __future__ import annotations

from fastapi import FastAPI

from hyperlook import __version__
from hyperlook.api.dependencies import (
    get_app_settings,
    get_log_store_client,
    get_metrics_registry,
    get_poller,
)
from hyperlook.api.routes_admin import router as admin_router
from hyperlook.core.logging import configure_from_settings, get_logger

_settings = get_app_settings()
configure_from_settings(_settings)
logger = get_logger(__name__)

app = FastAPI(
    title="Hyperlook",
    version=__version__,
    docs_url="/docs",
    redoc_url=None,
)

app.include_router(admin_router, prefix="", tags=["admin"])


@app.on_event("startup")
def startup() -> None:
    """Wire the metrics aggregate and start polling."""
    settings = get_app_settings()
    get_metrics_registry()
    poller = get_poller()
    if settings.poll_enabled:
        poller.start()
    else:
        logger.info("Polling disabled; serving metrics only")


@app.on_event("shutdown")
def shutdown() -> None:
    get_poller().stop()
    get_log_store_client().close()
