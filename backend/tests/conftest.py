"""Test fixtures for Hyperlook."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import orjson
import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))


def _reset_dependencies() -> None:
    from hyperlook.api import dependencies as deps
    from hyperlook.core.config import get_settings

    if deps._POLLER is not None:
        deps._POLLER.stop(timeout=1.0)
    get_settings.cache_clear()
    deps._SETTINGS = None
    deps._METRICS = None
    deps._CLIENT = None
    deps._POLLER = None


@pytest.fixture(autouse=True)
def reset_state(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset global singletons and environment between tests."""
    monkeypatch.delenv("HYPERLOOK_CONFIG", raising=False)
    monkeypatch.setenv("HYPERLOOK_POLL_ENABLED", "false")
    _reset_dependencies()
    yield
    _reset_dependencies()


def make_hit(
    hit_id: str,
    log: str,
    namespace: str | None = "fabric-net",
    container: str = "peer",
    pod: str = "peer0-org1-7d9f",
    timestamp: str = "2019-05-22T08:31:12.123456789Z",
    stream: str = "stderr",
) -> dict[str, Any]:
    source: dict[str, Any] = {
        "log": log,
        "stream": stream,
        "docker": {"container_id": f"c-{hit_id}"},
        "@timestamp": timestamp,
        "tag": f"kubernetes.var.log.containers.{pod}",
    }
    if namespace is not None:
        source["kubernetes"] = {
            "container_name": container,
            "namespace_name": namespace,
            "pod_name": pod,
            "pod_id": f"pod-{hit_id}",
            "labels": {"app": "peer"},
            "host": "node-1",
            "master_url": "https://10.96.0.1:443/api",
            "namespace_id": "ns-1",
        }
    return {
        "_index": "logstash-2019.05.22",
        "_type": "flb_type",
        "_id": hit_id,
        "_score": None,
        "_source": source,
        "sort": [1558513872123],
    }


def make_response(hits: list[dict[str, Any]], **extra: Any) -> str:
    body: dict[str, Any] = {
        "took": 3,
        "timed_out": False,
        "_shards": {"total": 5, "successful": 5, "skipped": 0, "failed": 0},
        "hits": {"total": len(hits), "max_score": None, "hits": hits},
    }
    body.update(extra)
    return orjson.dumps(body).decode("utf-8")


PROPOSAL_ENTRY = "2019-05-22 08:31:12.123 UTC [endorser] ProcessProposal -> DEBU 0a3 Entry"
PROPOSAL_EXIT = "2019-05-22 08:31:12.456 UTC [endorser] ProcessProposal -> DEBU 0a9 Exit"
NEW_CCCC_LINE = "2019-05-22 08:31:13.001 UTC [ccprovider] NewCCCC -> DEBU 0b1 NewCCCC (chaincodePath=github.com/cc)"
DOCKERFILE_LINE = "2019-05-22 08:31:14.000 UTC [chaincode.platform.golang] generateDockerfile -> DEBU 0c2"
UNRELATED_LINE = "2019-05-22 08:31:15.000 UTC [gossip.state] commitBlock -> INFO 0d4 Channel [mychannel]: Committed block [7]"


@pytest.fixture
def canned_response() -> str:
    """Three hits, newest first: a proposal entry, a NewCCCC marker and noise."""
    return make_response(
        [
            make_hit("h3", PROPOSAL_ENTRY, timestamp="2019-05-22T08:31:15.000Z"),
            make_hit("h2", NEW_CCCC_LINE, timestamp="2019-05-22T08:31:13.001Z"),
            make_hit("h1", UNRELATED_LINE, timestamp="2019-05-22T08:31:12.000Z"),
        ]
    )


@pytest.fixture
def metrics():
    from hyperlook.core.metrics import MetricsRegistry

    return MetricsRegistry(include_process=False)
