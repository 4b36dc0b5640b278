"""Run history port for stagecoach deployments."""

from __future__ import annotations

from .inmemory import InMemoryRunRepository
from .models import RunRecord, StepRecord
from .repository import RunRepository

__all__ = [
    "RunRecord",
    "StepRecord",
    "RunRepository",
    "InMemoryRunRepository",
]
