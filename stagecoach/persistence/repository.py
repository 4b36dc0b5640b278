"""Repository abstraction for deployment run history."""

from __future__ import annotations

from typing import Protocol

from .models import RunRecord


class RunRepository(Protocol):
    """Protocol for run history backends."""

    async def create_run(self, run_id: str, definition: dict) -> None:
        """Persist the start of a run."""

    async def update_iterator(self, run_id: str, iterator: dict) -> None:
        """Persist the iterator handoff produced by an advance."""

    async def mark_step_started(
        self, run_id: str, stage_index: int, step_name: str
    ) -> None:
        """Record start of a step."""

    async def mark_step_completed(
        self,
        run_id: str,
        stage_index: int,
        step_name: str,
        status: str,
        message: str | None = None,
    ) -> None:
        """Record completion of a step."""

    async def mark_run_completed(self, run_id: str, status: str = "complete") -> None:
        """Mark the run as finished."""

    async def get_run(self, run_id: str) -> RunRecord | None:
        """Retrieve the run by id."""

    async def list_runs(self) -> list[RunRecord]:
        """Return all recorded runs."""
