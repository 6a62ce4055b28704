"""Administrative routes for Hyperlook."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from hyperlook.api.dependencies import get_metrics_registry, get_poller
from hyperlook.core.metrics import MetricsRegistry, metrics_response
from hyperlook.models.dto import HealthResponse, PollerStatusResponse
from hyperlook.poller import Poller

router = APIRouter()


@router.get("/metrics", summary="Prometheus metrics")
def get_metrics(metrics: MetricsRegistry = Depends(get_metrics_registry)):
    return metrics_response(metrics)


@router.get("/health", response_model=HealthResponse, summary="Liveness check")
def health() -> HealthResponse:
    return HealthResponse(ok=True)


@router.get("/status", response_model=PollerStatusResponse, summary="Poll loop state")
def poller_status(poller: Poller = Depends(get_poller)) -> PollerStatusResponse:
    return PollerStatusResponse(**poller.status())


__all__ = ["router"]
