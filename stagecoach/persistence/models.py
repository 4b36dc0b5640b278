"""Data models for recorded deployment runs."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class StepRecord(BaseModel):
    """Record of an individual step execution."""

    id: Optional[int] = None
    run_id: str
    stage_index: int
    step_name: str
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    status: Optional[str] = None
    message: Optional[str] = None


class RunRecord(BaseModel):
    """Recorded deployment run."""

    run_id: str
    definition: dict[str, Any] = Field(default_factory=dict)
    iterator: dict[str, Any] = Field(default_factory=dict)
    status: str = "in_progress"
    steps: list[StepRecord] = Field(default_factory=list)
