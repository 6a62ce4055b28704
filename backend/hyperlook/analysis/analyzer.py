"""Turn a batch of hits into metric observations."""

from __future__ import annotations

from typing import Sequence

from hyperlook.analysis.dedupe import SeenWindow, hit_key
from hyperlook.analysis.patterns import PATTERNS, Pattern, classify
from hyperlook.analysis.types import AnalysisStats, LogRecord
from hyperlook.core.errors import RecordError
from hyperlook.core.logging import get_logger
from hyperlook.core.metrics import MetricsSink
from hyperlook.search.models import Hit
from hyperlook.utils.time import parse_timestamp

logger = get_logger(__name__)

DEFAULT_WINDOW_CAPACITY = 800


def extract_record(hit: Hit, key: str | None = None) -> LogRecord:
    """Pull the labelled fields out of a hit or raise ``RecordError``."""
    source = hit.source
    if source is None:
        raise RecordError("missing_source", hit.id)
    kubernetes = source.kubernetes
    if kubernetes is None:
        raise RecordError("missing_kubernetes", hit.id)
    if not kubernetes.namespace_name:
        raise RecordError("missing_namespace", hit.id)
    if not kubernetes.container_name:
        raise RecordError("missing_container_name", hit.id)
    return LogRecord(
        key=key or hit_key(hit),
        namespace=kubernetes.namespace_name,
        workload=kubernetes.container_name,
        pod=kubernetes.pod_name,
        stream=source.stream,
        text=source.log,
        timestamp=parse_timestamp(source.timestamp),
    )


class LogAnalyzer:
    """Classify fresh hits against the pattern markers and feed the sink.

    Each poll re-reads the newest N records, so consecutive batches overlap.
    A bounded ``SeenWindow`` of hit keys keeps a record from being counted
    twice; records that fail extraction are remembered as well so they are
    reported once.
    """

    def __init__(
        self,
        sink: MetricsSink,
        window: SeenWindow | None = None,
        patterns: Sequence[Pattern] = PATTERNS,
    ) -> None:
        self.sink = sink
        self.window = window or SeenWindow(DEFAULT_WINDOW_CAPACITY)
        self.patterns = tuple(patterns)

    def analyze(self, hits: Sequence[Hit]) -> AnalysisStats:
        stats = AnalysisStats(received=len(hits))
        # hits arrive newest first; count oldest first so gauges end on the newest
        for hit in reversed(hits):
            key = hit_key(hit)
            if not self.window.add(key):
                stats.duplicates += 1
                continue
            try:
                record = extract_record(hit, key)
            except RecordError as exc:
                stats.skipped += 1
                logger.warning(
                    "Skipping log record: %s",
                    exc,
                    extra={"ctx_hit_id": exc.hit_id, "ctx_reason": exc.reason},
                )
                self.sink.observe("record_errors", {"reason": exc.reason})
                continue
            stats.processed += 1
            stats.matches += self._observe(record)

        if stats.duplicates:
            self.sink.observe("duplicate_records", value=stats.duplicates)
        logger.debug("Analysis finished: %s", stats.to_dict())
        return stats

    def _observe(self, record: LogRecord) -> int:
        self.sink.observe(
            "records",
            {"namespace": record.namespace, "workload": record.workload, "stream": record.stream},
        )
        matched = 0
        for pattern, phase in classify(record.text, self.patterns):
            matched += 1
            self.sink.observe(
                "pattern_matches",
                {
                    "pattern": pattern,
                    "phase": phase,
                    "namespace": record.namespace,
                    "workload": record.workload,
                },
            )
            if record.timestamp is not None:
                self.sink.observe(
                    "pattern_last_seen_timestamp_seconds",
                    {"pattern": pattern, "namespace": record.namespace, "workload": record.workload},
                    record.timestamp,
                )
        return matched


__all__ = ["LogAnalyzer", "extract_record"]
