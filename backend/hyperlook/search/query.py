"""Query document construction for the log store's search API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

import orjson

from hyperlook.core.errors import BuildError

QUERY_EXPRESSION = '("ProcessProposal -> DEBU " AND (Entry OR Exit)) OR NewCCCC OR generateDockerfile'

NAMESPACE_FIELD = "kubernetes.namespace_name"
CONTAINER_FIELD = "kubernetes.container_name"


@dataclass(frozen=True, slots=True)
class FullText:
    """``query_string`` clause over the whole document."""

    query: str

    def to_dict(self) -> dict[str, Any]:
        return {"query_string": {"query": self.query}}


@dataclass(frozen=True, slots=True)
class MatchPhrase:
    field: str
    query: str

    def to_dict(self) -> dict[str, Any]:
        return {"match_phrase": {self.field: {"query": self.query}}}


@dataclass(frozen=True, slots=True)
class MatchPhrasePrefix:
    field: str
    query: str

    def to_dict(self) -> dict[str, Any]:
        return {"match_phrase_prefix": {self.field: {"query": self.query}}}


Clause = Union[FullText, MatchPhrase, MatchPhrasePrefix]


@dataclass(frozen=True, slots=True)
class BoolMust:
    """Boolean AND: every clause must match."""

    must: tuple[Clause, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"query": {"bool": {"must": [clause.to_dict() for clause in self.must]}}}


def build_query(namespace: str, container_name: str) -> BoolMust:
    """Build the fixed pattern query scoped to a namespace and container prefix.

    Inputs are embedded verbatim. Empty strings still produce their clause.
    """
    return BoolMust(
        must=(
            FullText(QUERY_EXPRESSION),
            MatchPhrase(NAMESPACE_FIELD, namespace),
            MatchPhrasePrefix(CONTAINER_FIELD, container_name),
        )
    )


def serialize_query(query: BoolMust) -> bytes:
    """Serialize to compact JSON; raises ``BuildError`` on unencodable input."""
    try:
        return orjson.dumps(query.to_dict())
    except orjson.JSONEncodeError as exc:
        raise BuildError(f"Cannot serialize query document: {exc}") from exc


__all__ = [
    "QUERY_EXPRESSION",
    "FullText",
    "MatchPhrase",
    "MatchPhrasePrefix",
    "BoolMust",
    "build_query",
    "serialize_query",
]
