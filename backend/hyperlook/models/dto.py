"""Pydantic DTOs exposed via API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class HealthResponse(BaseModel):
    ok: bool


class CycleStats(BaseModel):
    received: int
    processed: int
    duplicates: int
    skipped: int
    matches: int


class PollerStatusResponse(BaseModel):
    state: Literal["idle", "querying", "extracting", "analyzing", "sleeping", "stopped"]
    running: bool
    url: str
    cycles: int
    consecutive_failures: int
    last_error: str | None = None
    last_stats: CycleStats | None = None


__all__ = ["HealthResponse", "CycleStats", "PollerStatusResponse"]
