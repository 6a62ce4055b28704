"""Background poll loop: query, extract, analyze, sleep."""

from __future__ import annotations

import threading
import time
from enum import Enum
from typing import Any

from hyperlook.analysis.analyzer import LogAnalyzer
from hyperlook.analysis.types import AnalysisStats
from hyperlook.core.config import Settings
from hyperlook.core.errors import BuildError, DecodeError, TransportError
from hyperlook.core.logging import get_logger
from hyperlook.core.metrics import MetricsSink
from hyperlook.search.client import LogStoreClient, search_url
from hyperlook.search.decode import extract_hits

logger = get_logger(__name__)


class PollState(str, Enum):
    IDLE = "idle"
    QUERYING = "querying"
    EXTRACTING = "extracting"
    ANALYZING = "analyzing"
    SLEEPING = "sleeping"
    STOPPED = "stopped"


class Poller:
    """Drives the poll cycle on a single worker thread.

    A ``BuildError`` stops the worker immediately since retrying cannot fix
    it. Transport and decode failures abort the cycle and are retried after
    ``retry_backoff_seconds * attempt``; after ``max_consecutive_failures``
    failed cycles in a row the worker stops. The metrics endpoint keeps
    serving the last observations either way.
    """

    def __init__(
        self,
        settings: Settings,
        client: LogStoreClient,
        analyzer: LogAnalyzer,
        sink: MetricsSink,
    ) -> None:
        self.settings = settings
        self.client = client
        self.analyzer = analyzer
        self.sink = sink
        self.url = search_url(settings.es_scheme, settings.es_host, settings.es_port, settings.es_size)
        self.state = PollState.IDLE
        self.cycles = 0
        self.consecutive_failures = 0
        self.last_error: str | None = None
        self.last_stats: AnalysisStats | None = None
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None

    def run_once(self) -> AnalysisStats:
        """Run one cycle; errors propagate to the caller."""
        started = time.perf_counter()
        self.state = PollState.QUERYING
        logger.info("Getting logs from log store: %s", self.url)
        try:
            raw = self.client.search(self.url, self.settings.namespace, self.settings.container_name)
            self.state = PollState.EXTRACTING
            hits = extract_hits(raw)
        except (BuildError, TransportError, DecodeError):
            self.sink.observe("poll_cycles", {"outcome": "error"})
            raise
        self.sink.observe("poll_hits", value=len(hits))

        self.state = PollState.ANALYZING
        logger.info("Start to analyse %s log records", len(hits))
        stats = self.analyzer.analyze(hits)

        self.sink.observe("poll_cycles", {"outcome": "ok"})
        self.sink.observe("poll_duration_seconds", value=time.perf_counter() - started)
        self.cycles += 1
        self.last_stats = stats
        logger.info(
            "Poll cycle %s finished",
            self.cycles,
            extra={f"ctx_{name}": value for name, value in stats.to_dict().items()},
        )
        return stats

    def run(self) -> None:
        """Loop until stopped or the failure budget is spent."""
        self.sink.observe("poller_up", value=1)
        try:
            while not self._stop.is_set():
                try:
                    self.run_once()
                except BuildError as exc:
                    self.last_error = str(exc)
                    logger.error("Cannot build log store query, stopping poller: %s", exc)
                    break
                except (TransportError, DecodeError) as exc:
                    self.consecutive_failures += 1
                    self.last_error = str(exc)
                    logger.error(
                        "Cannot query logs from log store (attempt %s/%s): %s",
                        self.consecutive_failures,
                        self.settings.max_consecutive_failures,
                        exc,
                    )
                    if self.consecutive_failures >= self.settings.max_consecutive_failures:
                        logger.error("Giving up on log store after %s failed polls", self.consecutive_failures)
                        break
                    delay = self.settings.retry_backoff_seconds * self.consecutive_failures
                except Exception:
                    logger.exception("Poller crashed")
                    raise
                else:
                    self.consecutive_failures = 0
                    self.last_error = None
                    delay = float(self.settings.interval)

                self.state = PollState.SLEEPING
                logger.info("Sleep for %s seconds", delay)
                if self._stop.wait(delay):
                    break
        finally:
            self.state = PollState.STOPPED
            self.sink.observe("poller_up", value=0)
            logger.info("Poller stopped")

    def start(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._stop.clear()
            self._thread = threading.Thread(target=self.run, name="hyperlook-poller", daemon=True)
            self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Cancel the sleep and refuse further cycles."""
        self._stop.set()
        with self._lock:
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def status(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "running": self.running,
            "url": self.url,
            "cycles": self.cycles,
            "consecutive_failures": self.consecutive_failures,
            "last_error": self.last_error,
            "last_stats": self.last_stats.to_dict() if self.last_stats else None,
        }


__all__ = ["PollState", "Poller"]
