"""Pattern analysis over polled log records."""

from .analyzer import LogAnalyzer, extract_record
from .dedupe import SeenWindow, hit_key
from .patterns import PATTERNS, classify
from .types import AnalysisStats, LogRecord

__all__ = [
    "LogAnalyzer",
    "extract_record",
    "SeenWindow",
    "hit_key",
    "PATTERNS",
    "classify",
    "AnalysisStats",
    "LogRecord",
]
