"""Tests for the poll loop."""

from __future__ import annotations

import time
from typing import Callable

import pytest

from hyperlook.analysis.analyzer import LogAnalyzer
from hyperlook.analysis.dedupe import SeenWindow
from hyperlook.core.config import Settings
from hyperlook.core.errors import BuildError, ResponseDecodeError, SanitizationError, TransportError
from hyperlook.core.metrics import MetricsRegistry
from hyperlook.poller import Poller, PollState

from conftest import make_response


class ScriptedClient:
    """Plays back a list of responses/errors, then runs ``when_done``."""

    def __init__(self, steps: list[str | bytes | Exception], when_done: Callable[[], None] | None = None) -> None:
        self.steps = list(steps)
        self.when_done = when_done
        self.calls: list[tuple[str, str, str]] = []

    def search(self, url: str, namespace: str, container_name: str) -> str | bytes:
        self.calls.append((url, namespace, container_name))
        if not self.steps:
            if self.when_done is not None:
                self.when_done()
            return make_response([])
        step = self.steps.pop(0)
        if isinstance(step, Exception):
            raise step
        return step

    def close(self) -> None:
        pass


def _poller(client: ScriptedClient, metrics: MetricsRegistry, **overrides: object) -> Poller:
    settings = Settings(interval=0, retry_backoff_seconds=0, **overrides)
    return Poller(settings, client, LogAnalyzer(metrics, SeenWindow(settings.window_capacity)), metrics)


def test_run_once_queries_with_configured_filters(canned_response: str, metrics: MetricsRegistry) -> None:
    client = ScriptedClient([canned_response])
    poller = _poller(client, metrics, namespace="org1", container_name="peer0")

    stats = poller.run_once()

    assert client.calls == [("http://127.0.0.1:9200/_search?size=200&sort=@timestamp:desc", "org1", "peer0")]
    assert stats.matches == 2
    assert poller.cycles == 1
    assert metrics.value("poll_cycles", {"outcome": "ok"}) == 1
    assert metrics.value("poll_hits") == 3
    assert metrics.value("poll_duration_seconds") == 1


def test_decode_failure_aborts_cycle(metrics: MetricsRegistry) -> None:
    poller = _poller(ScriptedClient(["not json"]), metrics)
    with pytest.raises(ResponseDecodeError):
        poller.run_once()
    assert metrics.value("poll_cycles", {"outcome": "error"}) == 1
    assert poller.cycles == 0


def test_body_that_is_not_utf8_fails_the_cycle(metrics: MetricsRegistry) -> None:
    poller = _poller(ScriptedClient([b"\xff\xfe{\"hits\": {}}"]), metrics)
    with pytest.raises(SanitizationError):
        poller.run_once()
    assert metrics.value("poll_cycles", {"outcome": "error"}) == 1


def test_worker_stops_after_failure_budget(metrics: MetricsRegistry) -> None:
    client = ScriptedClient([TransportError("connection refused")] * 5)
    poller = _poller(client, metrics, max_consecutive_failures=2)

    poller.run()

    assert len(client.calls) == 2
    assert poller.state is PollState.STOPPED
    assert poller.consecutive_failures == 2
    assert "connection refused" in poller.last_error
    assert metrics.value("poller_up") == 0


def test_single_failure_budget_matches_stop_on_first_error(metrics: MetricsRegistry) -> None:
    client = ScriptedClient([TransportError("dns failure")])
    poller = _poller(client, metrics, max_consecutive_failures=1)
    poller.run()
    assert len(client.calls) == 1
    assert poller.state is PollState.STOPPED


def test_build_error_stops_immediately(metrics: MetricsRegistry) -> None:
    client = ScriptedClient([BuildError("bad query")])
    poller = _poller(client, metrics, max_consecutive_failures=5)
    poller.run()
    assert len(client.calls) == 1
    assert poller.last_error == "bad query"


def test_success_resets_failure_count(canned_response: str, metrics: MetricsRegistry) -> None:
    holder: dict[str, Poller] = {}
    client = ScriptedClient(
        [TransportError("timeout"), canned_response, TransportError("timeout")],
        when_done=lambda: holder["poller"].stop(),
    )
    poller = _poller(client, metrics, max_consecutive_failures=2)
    holder["poller"] = poller

    poller.run()

    assert len(client.calls) == 4
    assert poller.cycles == 2
    assert poller.consecutive_failures == 0
    assert poller.last_error is None
    assert poller.state is PollState.STOPPED


def test_stop_cancels_sleep(metrics: MetricsRegistry) -> None:
    settings = Settings(interval=3600)
    client = ScriptedClient([])
    poller = Poller(settings, client, LogAnalyzer(metrics, SeenWindow(settings.window_capacity)), metrics)

    poller.start()
    deadline = time.monotonic() + 5
    while poller.state is not PollState.SLEEPING and time.monotonic() < deadline:
        time.sleep(0.01)
    assert poller.state is PollState.SLEEPING
    assert metrics.value("poller_up") == 1

    started = time.monotonic()
    poller.stop(timeout=5)
    assert time.monotonic() - started < 5
    assert not poller.running
    assert poller.state is PollState.STOPPED
    assert poller.status()["cycles"] == 1
