"""Prometheus metric aggregate shared by the analyzer and the HTTP endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping, Protocol

from fastapi import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    GCCollector,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)

MetricKind = Literal["counter", "gauge", "histogram"]

NAMESPACE = "hyperlook"


@dataclass(frozen=True, slots=True)
class MetricSpec:
    name: str
    kind: MetricKind
    documentation: str
    labelnames: tuple[str, ...] = ()


METRIC_SPECS: tuple[MetricSpec, ...] = (
    MetricSpec(
        "records",
        "counter",
        "Log records analysed",
        ("namespace", "workload", "stream"),
    ),
    MetricSpec(
        "pattern_matches",
        "counter",
        "Log records matching a pattern marker",
        ("pattern", "phase", "namespace", "workload"),
    ),
    MetricSpec(
        "pattern_last_seen_timestamp_seconds",
        "gauge",
        "Log timestamp of the latest record matching a pattern marker",
        ("pattern", "namespace", "workload"),
    ),
    MetricSpec("duplicate_records", "counter", "Records skipped because an earlier poll already counted them"),
    MetricSpec("record_errors", "counter", "Records skipped because of missing fields", ("reason",)),
    MetricSpec("poll_cycles", "counter", "Completed poll cycles by outcome", ("outcome",)),
    MetricSpec("poll_duration_seconds", "histogram", "Duration of a full poll cycle"),
    MetricSpec("poll_hits", "gauge", "Hits returned by the most recent poll"),
    MetricSpec("poller_up", "gauge", "1 while the poll worker is running, 0 once it has stopped"),
)


class MetricsSink(Protocol):
    """Write side: accepts named observations."""

    def observe(self, name: str, labels: Mapping[str, str] | None = None, value: float = 1.0) -> None:
        ...


class MetricsSource(Protocol):
    """Read side: renders the aggregate for scraping."""

    content_type: str

    def snapshot(self) -> bytes:
        ...


class MetricsRegistry:
    """Explicit metric aggregate owned by the analysis stage.

    Counters are incremented by ``value``, gauges are set to ``value`` and
    histograms record ``value`` as one sample. Each metric child carries its
    own lock, so the single poll worker can write while any number of scrape
    requests read.
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, specs: tuple[MetricSpec, ...] = METRIC_SPECS, include_process: bool = True) -> None:
        self.registry = CollectorRegistry()
        if include_process:
            ProcessCollector(registry=self.registry)
            PlatformCollector(registry=self.registry)
            GCCollector(registry=self.registry)
        self._specs: dict[str, MetricSpec] = {}
        self._metrics: dict[str, Counter | Gauge | Histogram] = {}
        for spec in specs:
            self._register(spec)

    def _register(self, spec: MetricSpec) -> None:
        factory = {"counter": Counter, "gauge": Gauge, "histogram": Histogram}[spec.kind]
        self._metrics[spec.name] = factory(
            spec.name,
            spec.documentation,
            labelnames=spec.labelnames,
            namespace=NAMESPACE,
            registry=self.registry,
        )
        self._specs[spec.name] = spec

    def observe(self, name: str, labels: Mapping[str, str] | None = None, value: float = 1.0) -> None:
        spec = self._specs.get(name)
        if spec is None:
            raise KeyError(f"Unknown metric: {name}")
        metric = self._metrics[name]
        target = metric.labels(**labels) if spec.labelnames else metric
        if spec.kind == "counter":
            target.inc(value)
        elif spec.kind == "gauge":
            target.set(value)
        else:
            target.observe(value)

    def value(self, name: str, labels: Mapping[str, str] | None = None) -> float:
        """Current value of a metric (histograms report their sample count)."""
        spec = self._specs[name]
        sample = f"{NAMESPACE}_{name}"
        if spec.kind == "counter":
            sample += "_total"
        elif spec.kind == "histogram":
            sample += "_count"
        result = self.registry.get_sample_value(sample, dict(labels or {}))
        return result or 0.0

    def snapshot(self) -> bytes:
        return generate_latest(self.registry)


def metrics_response(source: MetricsSource) -> Response:
    """Return Prometheus metrics as an HTTP response."""
    return Response(content=source.snapshot(), media_type=source.content_type)


__all__ = [
    "METRIC_SPECS",
    "MetricSpec",
    "MetricsRegistry",
    "MetricsSink",
    "MetricsSource",
    "metrics_response",
]
