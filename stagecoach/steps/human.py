"""Human approval step type."""

from __future__ import annotations

import asyncio
import logging

from ..approval import build_confirmation_link
from ..constants import APPROVE, REJECT
from ..contracts import HumanStep, StepResult, StepType
from ..exceptions import InvalidStepParametersError, StepExecutionError
from ..registry.strategy import StepContext, StepStrategy

logger = logging.getLogger(__name__)


def approval_message(message: str, base_url: str, token: str) -> str:
    approve = build_confirmation_link(base_url, token, APPROVE)
    reject = build_confirmation_link(base_url, token, REJECT)
    return (
        f"{message}\nTo continue the execution: {approve} "
        f"\nTo reject the execution: {reject}"
    )


class HumanStrategy(StepStrategy):
    """Send approve/reject links and suspend until one is followed.

    Waits indefinitely unless ``context.approval_timeout`` is set. The token
    is discarded when the step ends, resolved or not.
    """

    type_name = StepType.HUMAN.value

    def validate(self, step: HumanStep) -> None:
        if not isinstance(step.message, str) or not step.message:
            raise InvalidStepParametersError(
                f"Step '{step.name}' requires a non-empty message string"
            )

    async def execute(self, step: HumanStep, context: StepContext) -> str:
        token, future = context.gateway.begin_approval(step.message)
        try:
            await context.notifier.publish(
                approval_message(step.message, context.confirmation_url, token),
                subject=step.name,
            )
            logger.info(f"Step {step.name} waiting for human approval")
            if context.approval_timeout is None:
                return await future
            return await asyncio.wait_for(future, context.approval_timeout)
        except asyncio.TimeoutError:
            # A resolution that won the race against the deadline stands
            action = context.gateway.discard(token)
            if action is not None:
                return action
            raise StepExecutionError(
                f"Approval for step '{step.name}' timed out after {context.approval_timeout} seconds"
            ) from None
        finally:
            context.gateway.discard(token)

    def interpret_result(self, step: HumanStep, raw: str) -> StepResult:
        if raw == APPROVE:
            return StepResult.ok(step, "Human confirmation approved")
        return StepResult.failed(step, "Human confirmation rejected")
