"""Error taxonomy for the poll/extract/analyze pipeline."""

from __future__ import annotations


class HyperlookError(Exception):
    """Base class for pipeline failures."""


class BuildError(HyperlookError):
    """The query document could not be serialized."""


class TransportError(HyperlookError):
    """Request construction, network or body-read failure."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class DecodeError(HyperlookError):
    """The response could not be turned into a hit list."""


class SanitizationError(DecodeError):
    """Raw response text could not be cleaned of control characters."""


class ResponseDecodeError(DecodeError):
    """Malformed JSON, schema mismatch or a log-store error payload."""


class RecordError(HyperlookError):
    """A single hit lacks the fields analysis needs."""

    def __init__(self, reason: str, hit_id: str | None = None) -> None:
        super().__init__(f"{reason} (hit {hit_id or '?'})")
        self.reason = reason
        self.hit_id = hit_id


__all__ = [
    "HyperlookError",
    "BuildError",
    "TransportError",
    "DecodeError",
    "SanitizationError",
    "ResponseDecodeError",
    "RecordError",
]
