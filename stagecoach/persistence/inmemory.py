"""In-memory implementation of the run repository."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict

from .models import RunRecord, StepRecord
from .repository import RunRepository


class InMemoryRunRepository(RunRepository):
    """Store run history in local memory.

    Useful for tests or when no durable backend is wired in. Data is not
    persisted across process restarts.
    """

    def __init__(self) -> None:
        self._runs: Dict[str, RunRecord] = {}
        self._step_id = 0

    # ------------------------------------------------------------------
    async def create_run(self, run_id: str, definition: dict) -> None:
        self._runs[run_id] = RunRecord(run_id=run_id, definition=definition)

    async def update_iterator(self, run_id: str, iterator: dict) -> None:
        run = self._runs.get(run_id)
        if run:
            run.iterator = iterator

    async def mark_step_started(
        self, run_id: str, stage_index: int, step_name: str
    ) -> None:
        run = self._runs.get(run_id)
        if not run:
            return
        self._step_id += 1
        run.steps.append(
            StepRecord(
                id=self._step_id,
                run_id=run_id,
                stage_index=stage_index,
                step_name=step_name,
                started_at=datetime.now(timezone.utc),
            )
        )

    async def mark_step_completed(
        self,
        run_id: str,
        stage_index: int,
        step_name: str,
        status: str,
        message: str | None = None,
    ) -> None:
        run = self._runs.get(run_id)
        if not run:
            return
        for step in run.steps:
            if (
                step.stage_index == stage_index
                and step.step_name == step_name
                and step.completed_at is None
            ):
                step.completed_at = datetime.now(timezone.utc)
                step.status = status
                step.message = message
                break

    async def mark_run_completed(self, run_id: str, status: str = "complete") -> None:
        run = self._runs.get(run_id)
        if run:
            run.status = status

    async def get_run(self, run_id: str) -> RunRecord | None:
        return self._runs.get(run_id)

    async def list_runs(self) -> list[RunRecord]:
        return list(self._runs.values())
