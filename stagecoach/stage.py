"""Concurrent fan-out of a stage's steps."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .contracts import Stage, StageResult
from .execute import StepExecutor

logger = logging.getLogger(__name__)


class StageRunner:
    """Runs every step of a stage concurrently and waits for all of them.

    Results come back in submission order regardless of completion order.
    Steps cannot see each other's results; a dependency between steps has to
    be expressed as separate stages.
    """

    def __init__(self, executor: StepExecutor) -> None:
        self._executor = executor

    async def run_stage(
        self, stage: Stage, index: int = 0, run_id: Optional[str] = None
    ) -> StageResult:
        logger.info(f"Running stage {stage.name} with {len(stage.steps)} steps")
        results = await asyncio.gather(
            *(
                self._executor.execute(step, run_id=run_id, stage_index=index)
                for step in stage.steps
            )
        )
        return StageResult(stage_name=stage.name, index=index, results=list(results))
