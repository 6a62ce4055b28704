"""Shared FastAPI dependencies."""

from __future__ import annotations

from hyperlook.analysis.analyzer import LogAnalyzer
from hyperlook.analysis.dedupe import SeenWindow
from hyperlook.core.config import Settings, get_settings
from hyperlook.core.metrics import MetricsRegistry
from hyperlook.poller import Poller
from hyperlook.search.client import LogStoreClient

_SETTINGS: Settings | None = None
_METRICS: MetricsRegistry | None = None
_CLIENT: LogStoreClient | None = None
_POLLER: Poller | None = None


def get_app_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = get_settings()
    return _SETTINGS


def use_settings(settings: Settings) -> None:
    """Pin the settings used by every dependency (CLI flags, tests)."""
    global _SETTINGS
    _SETTINGS = settings


def get_metrics_registry() -> MetricsRegistry:
    global _METRICS
    if _METRICS is None:
        _METRICS = MetricsRegistry()
    return _METRICS


def get_log_store_client() -> LogStoreClient:
    global _CLIENT
    if _CLIENT is None:
        settings = get_app_settings()
        _CLIENT = LogStoreClient(timeout=settings.request_timeout, strict_status=settings.strict_status)
    return _CLIENT


def get_poller() -> Poller:
    global _POLLER
    if _POLLER is None:
        settings = get_app_settings()
        metrics = get_metrics_registry()
        _POLLER = Poller(
            settings=settings,
            client=get_log_store_client(),
            analyzer=LogAnalyzer(metrics, SeenWindow(settings.window_capacity)),
            sink=metrics,
        )
    return _POLLER


__all__ = [
    "get_app_settings",
    "use_settings",
    "get_metrics_registry",
    "get_log_store_client",
    "get_poller",
]
