"""Workflow driver for stagecoach deployments."""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from .approval import ApprovalGateway
from .builds import BaseBuildClient, InMemoryBuildClient, get_build_client
from .config import StagecoachConfig, load_config
from .constants import COMPLETION_MESSAGE
from .contracts import (
    IteratorState,
    RawInput,
    RunStatus,
    StageResult,
    TerminalOutcome,
    WorkflowDefinition,
    parse_workflow,
)
from .exceptions import InvalidInputError, StageFailedError
from .execute import StepExecutor
from .notifiers import BaseNotifier, get_notifier
from .persistence import InMemoryRunRepository, RunRepository
from .registry import StepContext, StepTypeRegistry, default_registry
from .stage import StageRunner

logger = logging.getLogger(__name__)


class WorkflowDriver:
    """Advances a deployment through its stages, strictly one at a time.

    Each stage's steps run concurrently; the driver only moves on once every
    step of the current stage has reported. A stage with any failing step
    ends the run with :class:`StageFailedError` and no later stage starts.
    Nothing is rolled back.
    """

    def __init__(
        self,
        notifier: BaseNotifier,
        build_client: Optional[BaseBuildClient] = None,
        gateway: Optional[ApprovalGateway] = None,
        registry: Optional[StepTypeRegistry] = None,
        repository: Optional[RunRepository] = None,
        config: Optional[StagecoachConfig] = None,
    ) -> None:
        self.config = config or StagecoachConfig()
        self.notifier = notifier
        self.gateway = gateway or ApprovalGateway()
        self.registry = registry or default_registry()
        self.repository = repository or InMemoryRunRepository()

        context = StepContext(
            notifier=notifier,
            build_client=build_client or InMemoryBuildClient(),
            gateway=self.gateway,
            poll_interval=self.config.builds.poll_interval_seconds,
            confirmation_url=self.config.approval.confirmation_url,
            approval_timeout=self.config.approval.timeout_seconds,
        )
        self.executor = StepExecutor(self.registry, context, self.repository)
        self.runner = StageRunner(self.executor)

    @classmethod
    def from_config(
        cls, config: Optional[StagecoachConfig] = None, **kwargs
    ) -> "WorkflowDriver":
        """Build a driver with the notifier and build client ``config`` selects."""
        config = config or load_config()
        kwargs.setdefault("notifier", get_notifier(config=config))
        kwargs.setdefault("build_client", get_build_client(config=config))
        return cls(config=config, **kwargs)

    @property
    def start_message(self) -> str:
        return (
            f"{self.config.application_name} has started "
            f"{self.config.environment_name} deployment"
        )

    @property
    def subject(self) -> str:
        return f"{self.config.application_name} {self.config.environment_name}"

    def parse(self, raw_input: RawInput) -> WorkflowDefinition:
        """Parse ``raw_input``, rejecting unregistered step types in strict mode."""
        definition = parse_workflow(raw_input)
        if self.config.strict_step_types:
            unknown = sorted(t for t in definition.step_types() if t not in self.registry)
            if unknown:
                raise InvalidInputError(f"Unknown step types: {', '.join(unknown)}")
        return definition

    async def run(self, raw_input: RawInput, run_id: Optional[str] = None) -> TerminalOutcome:
        """Run the deployment described by ``raw_input`` to completion.

        Raises:
            InvalidInputError: The input could not be parsed; nothing ran.
            StageFailedError: A stage had failing steps; carries the failing
                ``StageResult`` and the failed ``TerminalOutcome``.
        """
        definition = self.parse(raw_input)
        run_id = run_id or str(uuid.uuid4())
        state = IteratorState(count=definition.count)

        await self.repository.create_run(run_id, definition.model_dump(by_alias=True))
        await self.notifier.publish(self.start_message, subject=self.subject)
        logger.info(f"Run {run_id} started with {state.count} stages")

        stage_results: List[StageResult] = []
        last: Optional[StageResult] = None
        while True:
            if last is not None and last.failed:
                await self._fail(run_id, state, stage_results, last)
            if not state.continue_flag:
                break

            state = state.advance()
            await self.repository.update_iterator(
                run_id, state.handoff(definition).model_dump(by_alias=True)
            )
            stage = definition.stages[state.index]
            logger.info(
                f"Run {run_id} advanced to stage {state.index + 1}/{state.count}: {stage.name}"
            )
            last = await self.runner.run_stage(stage, index=state.index, run_id=run_id)
            stage_results.append(last)

        await self.notifier.publish(COMPLETION_MESSAGE, subject=self.subject)
        await self.repository.mark_run_completed(run_id, RunStatus.COMPLETE.value)
        logger.info(f"Run {run_id} completed")
        return TerminalOutcome(
            run_id=run_id,
            status=RunStatus.COMPLETE,
            advances=state.index + 1,
            stage_results=stage_results,
        )

    async def _fail(
        self,
        run_id: str,
        state: IteratorState,
        stage_results: List[StageResult],
        failed: StageResult,
    ) -> None:
        outcome = TerminalOutcome(
            run_id=run_id,
            status=RunStatus.FAILED,
            advances=state.index + 1,
            stage_results=stage_results,
            failed_stage=failed,
        )
        await self.repository.mark_run_completed(run_id, RunStatus.FAILED.value)
        error = StageFailedError(failed, outcome)
        logger.error(f"Run {run_id} failed: {error}")
        raise error
