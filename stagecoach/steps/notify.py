from __future__ import annotations

from ..contracts import NotifyStep, StepResult, StepType
from ..exceptions import InvalidStepParametersError
from ..registry.strategy import StepContext, StepStrategy


class NotifyStrategy(StepStrategy):
    """Publish the step's message. Publish errors fail the step."""

    type_name = StepType.NOTIFY.value

    def validate(self, step: NotifyStep) -> None:
        if not isinstance(step.message, str) or not step.message:
            raise InvalidStepParametersError(
                f"Step '{step.name}' requires a non-empty message string"
            )

    async def execute(self, step: NotifyStep, context: StepContext) -> None:
        await context.notifier.publish(step.message, subject=step.name)

    def interpret_result(self, step: NotifyStep, raw: None) -> StepResult:
        return StepResult.ok(step, "Notification sent")
