from __future__ import annotations

import asyncio

from ..contracts import StepResult, StepType, WaitStep
from ..exceptions import InvalidStepParametersError
from ..registry.strategy import StepContext, StepStrategy


class WaitStrategy(StepStrategy):
    """Suspend the step's task for ``seconds``; no side effects."""

    type_name = StepType.WAIT.value

    def validate(self, step: WaitStep) -> None:
        seconds = step.seconds
        if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds < 0:
            raise InvalidStepParametersError(
                f"Step '{step.name}': seconds must be a non-negative integer, got {seconds!r}"
            )

    async def execute(self, step: WaitStep, context: StepContext) -> int:
        if step.seconds:
            await asyncio.sleep(step.seconds)
        return step.seconds

    def interpret_result(self, step: WaitStep, raw: int) -> StepResult:
        return StepResult.ok(step, f"Waited {raw} seconds")
