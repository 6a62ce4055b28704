"""Response sanitization and decoding."""

from __future__ import annotations

import re

import orjson
from pydantic import ValidationError

from hyperlook.core.errors import ResponseDecodeError, SanitizationError
from hyperlook.search.models import Hit, SearchResponse

# NUL, backspace, VT, FF and 0x0E-0x1F; tab, LF and CR are kept
NON_PRINTABLE_RE = re.compile("[\x00\x08\x0b\x0c\x0e-\x1f]")


def remove_non_printable(text: str | bytes) -> str:
    """Strip control characters that break JSON parsing of raw log payloads."""
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SanitizationError(f"Response is not valid UTF-8: {exc}") from exc
    if not isinstance(text, str):
        raise SanitizationError(f"Expected text, got {type(text).__name__}")
    return NON_PRINTABLE_RE.sub("", text)


def decode_response(raw: str | bytes) -> SearchResponse:
    clean = remove_non_printable(raw)
    try:
        payload = orjson.loads(clean)
    except orjson.JSONDecodeError as exc:
        raise ResponseDecodeError(f"Malformed JSON in search response: {exc}") from exc
    if not isinstance(payload, dict):
        raise ResponseDecodeError(f"Search response is a JSON {type(payload).__name__}, not an object")
    try:
        response = SearchResponse.model_validate(payload)
    except ValidationError as exc:
        raise ResponseDecodeError(f"Search response does not match schema: {exc}") from exc
    if response.error is not None:
        raise ResponseDecodeError(f"Log store reported an error: {_error_reason(response.error)}")
    return response


def extract_hits(raw: str | bytes) -> list[Hit]:
    """Return ``hits.hits`` in response order; absent or empty means no matches."""
    return list(decode_response(raw).hits.hits)


def _error_reason(error: object) -> str:
    if isinstance(error, dict):
        reason = error.get("reason") or error.get("type")
        if reason:
            return str(reason)
    return str(error)


__all__ = ["NON_PRINTABLE_RE", "remove_non_printable", "decode_response", "extract_hits"]
