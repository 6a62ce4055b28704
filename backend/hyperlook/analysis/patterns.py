"""Pattern markers that classify log lines into operational signals."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Sequence


@dataclass(frozen=True, slots=True)
class Pattern:
    """A marker looked for in the log text.

    When ``regex`` has a capture group its lowercased value becomes the
    ``phase`` label; otherwise the phase is empty.
    """

    name: str
    regex: re.Pattern[str]

    def match(self, text: str) -> str | None:
        found = self.regex.search(text)
        if found is None:
            return None
        return found.group(1).lower() if found.re.groups else ""


# query_string matches analysed text without regard to case
PROCESS_PROPOSAL = Pattern(
    "process_proposal",
    re.compile(r"ProcessProposal\s*->\s*DEBU\b.*?\b(Entry|Exit)\b", re.IGNORECASE),
)
NEW_CCCC = Pattern("new_cccc", re.compile(r"NewCCCC", re.IGNORECASE))
GENERATE_DOCKERFILE = Pattern("generate_dockerfile", re.compile(r"generateDockerfile", re.IGNORECASE))

PATTERNS: tuple[Pattern, ...] = (PROCESS_PROPOSAL, NEW_CCCC, GENERATE_DOCKERFILE)


def classify(text: str, patterns: Sequence[Pattern] = PATTERNS) -> Iterator[tuple[str, str]]:
    """Yield ``(pattern, phase)`` for every pattern the text matches."""
    for pattern in patterns:
        phase = pattern.match(text)
        if phase is not None:
            yield pattern.name, phase


__all__ = ["Pattern", "PATTERNS", "PROCESS_PROPOSAL", "NEW_CCCC", "GENERATE_DOCKERFILE", "classify"]
