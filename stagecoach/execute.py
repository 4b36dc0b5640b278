"""Step execution engine for stagecoach deployments."""

from __future__ import annotations

import logging
from typing import Optional

from .contracts import BaseStep, StepResult
from .exceptions import InvalidStepParametersError, StepError, StepExecutionError
from .persistence import RunRepository
from .registry import StepContext, StepStrategy, StepTypeRegistry

logger = logging.getLogger(__name__)


class StepExecutor:
    """Executes single steps through their registered strategies.

    Every failure is contained at the step boundary: the caller always gets a
    ``StepResult`` back, never an exception, so sibling steps in the same
    stage are unaffected.
    """

    def __init__(
        self,
        registry: StepTypeRegistry,
        context: StepContext,
        repository: RunRepository | None = None,
    ) -> None:
        self._registry = registry
        self._context = context
        self._repository = repository

    @property
    def registry(self) -> StepTypeRegistry:
        return self._registry

    def _resolve(self, step: BaseStep) -> StepStrategy:
        strategy = self._registry.get(step.type)
        try:
            strategy.validate(step)
        except StepError:
            raise
        except Exception as e:
            raise InvalidStepParametersError(
                f"Step '{step.name}' failed validation: {e}"
            ) from e
        return strategy

    def check(self, step: BaseStep) -> Optional[StepResult]:
        """Resolve and validate ``step`` without executing it.

        Returns a failing ``StepResult`` describing the problem, or ``None``
        when the step would be executed.
        """
        try:
            self._resolve(step)
        except StepError as e:
            return StepResult.failed(step, str(e), error=type(e).__name__)
        return None

    async def execute(
        self, step: BaseStep, run_id: Optional[str] = None, stage_index: int = 0
    ) -> StepResult:
        """Execute ``step`` and return its result."""
        if self._repository is not None and run_id is not None:
            await self._repository.mark_step_started(run_id, stage_index, step.name)

        logger.info(f"Executing step {step.name} ({step.type})")
        result = await self._run(step)
        if result.success:
            logger.info(f"Step {step.name} succeeded: {result.message}")
        else:
            logger.warning(f"Step {step.name} failed: {result.message}")

        if self._repository is not None and run_id is not None:
            await self._repository.mark_step_completed(
                run_id,
                stage_index,
                step.name,
                status="succeeded" if result.success else "failed",
                message=result.message,
            )
        return result

    async def _run(self, step: BaseStep) -> StepResult:
        try:
            strategy = self._resolve(step)
            raw = await strategy.execute(step, self._context)
            return strategy.interpret_result(step, raw)
        except StepError as e:
            return StepResult.failed(step, str(e), error=type(e).__name__)
        except Exception as e:
            logger.exception(f"Step {step.name} raised during execution")
            error = StepExecutionError(f"{type(e).__name__}: {e}")
            return StepResult.failed(step, str(error), error=type(error).__name__)
