"""Pydantic models for the log store's search response."""

from __future__ import annotations

from typing import Any, get_origin

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, ValidationInfo, field_validator

# explicit JSON null in a scalar member reads as the member's zero value
_NULL_AS_ZERO: dict[Any, Any] = {str: "", int: 0, bool: False}


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def _null_scalar(cls, value: Any, info: ValidationInfo) -> Any:
        if value is not None:
            return value
        annotation = cls.model_fields[info.field_name].annotation
        if get_origin(annotation) is list:
            return []
        return _NULL_AS_ZERO.get(annotation, value)


class Kubernetes(_Record):
    container_name: str = ""
    namespace_name: str = ""
    pod_name: str = ""
    pod_id: str = ""
    labels: Any = None
    host: str = ""
    master_url: str = ""
    namespace_id: str = ""


class Source(_Record):
    log: str = ""
    stream: str = ""
    docker: Any = None
    kubernetes: Kubernetes | None = None
    timestamp: str = Field(default="", alias="@timestamp")
    tag: str = ""


class Hit(_Record):
    index: str = Field(default="", alias="_index")
    type: str = Field(default="", alias="_type")
    id: str = Field(default="", alias="_id")
    score: float | None = Field(default=None, alias="_score")
    source: Source | None = Field(default=None, alias="_source")
    sort: list[NonNegativeInt] = Field(default_factory=list)


class TotalHits(_Record):
    value: int = 0
    relation: str = "eq"


class HitsEnvelope(_Record):
    total: int | TotalHits = 0
    max_score: float | None = None
    hits: list[Hit] = Field(default_factory=list)

    @field_validator("hits", mode="before")
    @classmethod
    def _null_hits(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def total_count(self) -> int:
        return self.total.value if isinstance(self.total, TotalHits) else self.total


class SearchResponse(_Record):
    took: int = 0
    timed_out: bool = False
    shards: Any = Field(default=None, alias="_shards")
    hits: HitsEnvelope = Field(default_factory=HitsEnvelope)
    error: Any = None

    @field_validator("hits", mode="before")
    @classmethod
    def _null_envelope(cls, value: Any) -> Any:
        return {} if value is None else value


__all__ = ["Kubernetes", "Source", "Hit", "TotalHits", "HitsEnvelope", "SearchResponse"]
