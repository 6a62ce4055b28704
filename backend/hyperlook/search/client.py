"""HTTP client for the log store's ``_search`` endpoint."""

from __future__ import annotations

from dataclasses import dataclass, field

import requests

from hyperlook.core.errors import TransportError
from hyperlook.core.logging import get_logger
from hyperlook.search.query import build_query, serialize_query

logger = get_logger(__name__)


def search_url(scheme: str, host: str, port: int | str, size: int | str) -> str:
    """Newest-first search URL returning at most ``size`` hits."""
    return f"{scheme}://{host}:{port}/_search?size={size}&sort=@timestamp:desc"


@dataclass
class LogStoreClient:
    """
    Posts query documents to the log store and returns the raw body bytes.

    One request per call and no retries; the poll loop decides what to do
    with a failure. Non-2xx responses are handed back to the decoder unless
    ``strict_status`` is set.
    """

    timeout: float = 30.0
    strict_status: bool = False
    session: requests.Session = field(default_factory=requests.Session)

    def search(self, url: str, namespace: str, container_name: str) -> bytes:
        body = serialize_query(build_query(namespace, container_name))
        return self.post_query(url, body)

    def post_query(self, url: str, body: bytes) -> bytes:
        try:
            response = self.session.post(
                url,
                data=body,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
                stream=True,
            )
        except (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema, requests.exceptions.InvalidSchema) as exc:
            raise TransportError(f"Cannot construct request: {exc}", url=url) from exc
        except requests.exceptions.RequestException as exc:
            raise TransportError(f"Cannot post query to log store: {exc}", url=url) from exc

        try:
            if not response.ok:
                if self.strict_status:
                    raise TransportError(f"Log store answered HTTP {response.status_code}", url=url)
                logger.warning("Log store answered HTTP %s for %s", response.status_code, url)
            try:
                content = response.content
            except requests.exceptions.RequestException as exc:
                raise TransportError(f"Cannot read response from log store: {exc}", url=url) from exc
        finally:
            response.close()
        # undecoded; the decoder reports bodies that are not UTF-8
        return content

    def close(self) -> None:
        self.session.close()


__all__ = ["LogStoreClient", "search_url"]
