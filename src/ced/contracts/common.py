"""Common Pydantic models: response envelope, errors, metrics."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Target(BaseModel):
    """Identifies the table a statement ran against."""

    file: str | None = None
    mode: str = "tabular"  # tabular / raw
    ref: str | None = None


class ErrorDetail(BaseModel):
    """Structured error."""

    code: str
    message: str
    details: dict[str, Any] | None = None


class Metrics(BaseModel):
    """Execution metrics."""

    duration_ms: int = 0


class HistoryInfo(BaseModel):
    """Undo/redo depth after the statement ran."""

    undo: int = 0
    redo: int = 0
    capacity: int = 0


class ChangeRecord(BaseModel):
    """Describes a single change made by a mutating command."""

    type: str
    target: str
    before: Any | None = None
    after: Any | None = None
    impact: dict[str, Any] | None = None


class ResponseEnvelope(BaseModel):
    """Standard response envelope returned for every statement."""

    ok: bool = True
    command: str = ""
    input: str = ""
    target: Target = Field(default_factory=Target)
    result: Any = None
    changes: list[ChangeRecord] = Field(default_factory=list)
    errors: list[ErrorDetail] = Field(default_factory=list)
    metrics: Metrics = Field(default_factory=Metrics)
    history: HistoryInfo = Field(default_factory=HistoryInfo)
