"""Tests for the log store HTTP client."""

from __future__ import annotations

import logging
from typing import Any

import orjson
import pytest
import requests

from hyperlook.core.errors import BuildError, TransportError
from hyperlook.search.client import LogStoreClient, search_url


class FakeResponse:
    def __init__(self, status_code: int = 200, body: bytes = b"{}", read_error: Exception | None = None) -> None:
        self.status_code = status_code
        self.encoding = "utf-8"
        self._body = body
        self._read_error = read_error
        self.closed = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    @property
    def content(self) -> bytes:
        if self._read_error is not None:
            raise self._read_error
        return self._body

    def close(self) -> None:
        self.closed = True


class FakeSession:
    def __init__(self, response: FakeResponse | None = None, error: Exception | None = None) -> None:
        self.response = response or FakeResponse()
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response

    def close(self) -> None:
        pass


URL = search_url("http", "127.0.0.1", 9200, 200)


def test_search_url_shape() -> None:
    assert URL == "http://127.0.0.1:9200/_search?size=200&sort=@timestamp:desc"


def test_search_posts_json_query() -> None:
    session = FakeSession(FakeResponse(body=b'{"hits": {"hits": []}}'))
    client = LogStoreClient(timeout=2.5, session=session)

    body = client.search(URL, "fabric-net", "peer")

    assert body == b'{"hits": {"hits": []}}'
    call = session.calls[0]
    assert call["url"] == URL
    assert call["headers"] == {"Content-Type": "application/json"}
    assert call["timeout"] == 2.5
    document = orjson.loads(call["data"])
    assert len(document["query"]["bool"]["must"]) == 3
    assert session.response.closed


def test_search_reports_build_error_before_sending() -> None:
    session = FakeSession()
    client = LogStoreClient(session=session)
    with pytest.raises(BuildError):
        client.search(URL, "\udcff", "peer")
    assert session.calls == []


def test_non_2xx_body_is_returned_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    response = FakeResponse(status_code=503, body=b'{"error": "unavailable"}')
    client = LogStoreClient(session=FakeSession(response))

    with caplog.at_level(logging.WARNING, logger="hyperlook.search.client"):
        body = client.post_query(URL, b"{}")

    assert body == b'{"error": "unavailable"}'
    assert "HTTP 503" in caplog.text
    assert response.closed


def test_body_is_returned_undecoded() -> None:
    client = LogStoreClient(session=FakeSession(FakeResponse(body=b"\xff\xfe")))
    assert client.post_query(URL, b"{}") == b"\xff\xfe"


def test_strict_status_raises_on_non_2xx() -> None:
    response = FakeResponse(status_code=500)
    client = LogStoreClient(strict_status=True, session=FakeSession(response))
    with pytest.raises(TransportError, match="HTTP 500"):
        client.post_query(URL, b"{}")
    assert response.closed


@pytest.mark.parametrize(
    "error",
    [
        requests.exceptions.ConnectionError("connection refused"),
        requests.exceptions.Timeout("timed out"),
    ],
)
def test_network_failures_raise_transport_error(error: Exception) -> None:
    client = LogStoreClient(session=FakeSession(error=error))
    with pytest.raises(TransportError) as excinfo:
        client.post_query(URL, b"{}")
    assert excinfo.value.url == URL


def test_malformed_url_raises_transport_error() -> None:
    client = LogStoreClient(session=FakeSession(error=requests.exceptions.InvalidURL("bad url")))
    with pytest.raises(TransportError, match="Cannot construct request"):
        client.post_query("http://[::1:9200/_search", b"{}")


def test_body_read_failure_closes_response() -> None:
    response = FakeResponse(read_error=requests.exceptions.ChunkedEncodingError("truncated"))
    client = LogStoreClient(session=FakeSession(response))
    with pytest.raises(TransportError, match="Cannot read response"):
        client.post_query(URL, b"{}")
    assert response.closed


def test_real_session_rejects_missing_scheme() -> None:
    client = LogStoreClient(timeout=0.5)
    with pytest.raises(TransportError, match="Cannot construct request"):
        client.post_query("elasticsearch/_search", b"{}")
