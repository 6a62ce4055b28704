"""Log store query, transport and response decoding."""

from .client import LogStoreClient, search_url
from .decode import decode_response, extract_hits, remove_non_printable
from .query import build_query, serialize_query

__all__ = [
    "LogStoreClient",
    "search_url",
    "build_query",
    "serialize_query",
    "decode_response",
    "extract_hits",
    "remove_non_printable",
]
