"""Common analysis data structures."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LogRecord:
    """Fields of a hit that analysis labels and classifies."""

    key: str
    namespace: str
    workload: str
    pod: str
    stream: str
    text: str
    timestamp: float | None


@dataclass(slots=True)
class AnalysisStats:
    """Aggregated outcome of one analysis pass."""

    received: int = 0
    processed: int = 0
    duplicates: int = 0
    skipped: int = 0
    matches: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "received": self.received,
            "processed": self.processed,
            "duplicates": self.duplicates,
            "skipped": self.skipped,
            "matches": self.matches,
        }


__all__ = ["LogRecord", "AnalysisStats"]
