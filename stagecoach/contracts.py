"""Core data contracts for stagecoach deployments."""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Annotated, Any, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    ValidationError,
)

from .exceptions import InvalidInputError

logger = logging.getLogger(__name__)


class StepType(str, Enum):
    """Built-in step type tags."""

    CODEBUILD = "CodeBuild"
    CODEBUILD_NO_WAIT = "CodeBuildNoWait"
    HUMAN = "Human"
    NOTIFY = "Notify"
    WAIT = "Wait"


BUILTIN_STEP_TYPES = frozenset(t.value for t in StepType)


class BaseStep(BaseModel):
    """Fields shared by every step variant."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    type: str


class CodeBuildStep(BaseStep):
    """Start a build and poll it until it reaches a terminal status."""

    type: Literal["CodeBuild"] = "CodeBuild"
    code_build_name: Any = Field(default=None, alias="codeBuildName")
    # Either a plain string or {"type": "branch"|"tag", "value": ...}
    source_version: Any = Field(default=None, alias="sourceVersion")
    environment_variable_overrides: Any = Field(
        default=None, alias="environmentVariableOverrides"
    )


class CodeBuildNoWaitStep(CodeBuildStep):
    """Start a build and return without waiting for it."""

    type: Literal["CodeBuildNoWait"] = "CodeBuildNoWait"


class HumanStep(BaseStep):
    """Suspend until a person approves or rejects the deployment."""

    type: Literal["Human"] = "Human"
    message: Any = None


class NotifyStep(BaseStep):
    """Publish a message through the notification port."""

    type: Literal["Notify"] = "Notify"
    message: Any = None


class WaitStep(BaseStep):
    """Pause for a number of seconds."""

    type: Literal["Wait"] = "Wait"
    seconds: Any = None


class ExtensionStep(BaseStep):
    """A step whose type is not built in.

    Extra parameters are kept as-is so a strategy registered at runtime can
    read them through :attr:`params`.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    @property
    def params(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


def _step_tag(value: Any) -> str:
    if isinstance(value, Mapping):
        tag = value.get("type")
    else:
        tag = getattr(value, "type", None)
    return tag if tag in BUILTIN_STEP_TYPES else "extension"


Step = Annotated[
    Union[
        Annotated[CodeBuildStep, Tag(StepType.CODEBUILD.value)],
        Annotated[CodeBuildNoWaitStep, Tag(StepType.CODEBUILD_NO_WAIT.value)],
        Annotated[HumanStep, Tag(StepType.HUMAN.value)],
        Annotated[NotifyStep, Tag(StepType.NOTIFY.value)],
        Annotated[WaitStep, Tag(StepType.WAIT.value)],
        Annotated[ExtensionStep, Tag("extension")],
    ],
    Discriminator(_step_tag),
]


class Stage(BaseModel):
    """A named group of steps that run concurrently."""

    model_config = ConfigDict(frozen=True)

    name: str
    steps: Tuple[Step, ...] = ()


class WorkflowDefinition(BaseModel):
    """Ordered, immutable sequence of stages."""

    model_config = ConfigDict(frozen=True)

    stages: Tuple[Stage, ...] = Field(min_length=1)

    @property
    def count(self) -> int:
        return len(self.stages)

    def step_types(self) -> set[str]:
        """Return every step type tag used by the workflow."""
        return {step.type for stage in self.stages for step in stage.steps}


class IteratorHandoff(BaseModel):
    """Snapshot passed between advances, in its wire shape."""

    model_config = ConfigDict(populate_by_name=True)

    index: int
    count: int
    continue_flag: bool = Field(alias="continue")
    current_stage_steps: Optional[Stage] = Field(
        default=None, alias="currentStageSteps"
    )


class IteratorState(BaseModel):
    """Position of the driver in the stage sequence.

    ``continue_flag`` is derived from ``index`` and ``count`` so it can never
    go stale across a transition.
    """

    model_config = ConfigDict(frozen=True)

    index: int = Field(default=-1, ge=-1)
    count: int = Field(ge=0)

    @property
    def continue_flag(self) -> bool:
        return self.index + 1 < self.count

    def advance(self) -> "IteratorState":
        """Return the state pointing at the next stage."""
        if not self.continue_flag:
            raise ValueError(
                f"Cannot advance past the last stage (index={self.index}, count={self.count})"
            )
        return IteratorState(index=self.index + 1, count=self.count)

    def handoff(self, definition: WorkflowDefinition) -> IteratorHandoff:
        current = (
            definition.stages[self.index] if 0 <= self.index < self.count else None
        )
        return IteratorHandoff(
            index=self.index,
            count=self.count,
            continue_flag=self.continue_flag,
            current_stage_steps=current,
        )


class StepResult(BaseModel):
    """Outcome of executing a single step."""

    step_name: str
    step_type: str
    success: bool
    message: str = ""
    error: Optional[str] = None

    @classmethod
    def ok(cls, step: BaseStep, message: str = "") -> "StepResult":
        return cls(step_name=step.name, step_type=step.type, success=True, message=message)

    @classmethod
    def failed(
        cls, step: BaseStep, message: str, error: Optional[str] = None
    ) -> "StepResult":
        return cls(
            step_name=step.name,
            step_type=step.type,
            success=False,
            message=message,
            error=error,
        )


class StageResult(BaseModel):
    """Step results for one stage, in submission order."""

    stage_name: str
    index: int
    results: List[StepResult] = Field(default_factory=list)

    @property
    def failures(self) -> List[StepResult]:
        return [r for r in self.results if not r.success]

    @property
    def failed(self) -> bool:
        """A stage fails iff any of its steps failed; empty stages pass."""
        return bool(self.failures)


class RunStatus(str, Enum):
    COMPLETE = "complete"
    FAILED = "failed"


class TerminalOutcome(BaseModel):
    """Final state of a deployment run."""

    run_id: str
    status: RunStatus
    advances: int = 0
    stage_results: List[StageResult] = Field(default_factory=list)
    failed_stage: Optional[StageResult] = None

    @property
    def succeeded(self) -> bool:
        return self.status == RunStatus.COMPLETE


RawInput = Union[str, bytes, bytearray, Mapping[str, Any]]


def parse_workflow(raw: RawInput) -> WorkflowDefinition:
    """Deserialize workflow input into a :class:`WorkflowDefinition`.

    Raises:
        InvalidInputError: If the payload is not well-formed JSON, lacks a
            ``stages`` list, the list is empty, or a stage or step is
            structurally invalid.
    """
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidInputError(f"Input is not valid JSON: {e}") from e
    else:
        data = raw

    if not isinstance(data, Mapping) or "stages" not in data:
        raise InvalidInputError("Input invalid: missing 'stages'")

    stages = data["stages"]
    if not isinstance(stages, (list, tuple)):
        raise InvalidInputError("Input invalid: 'stages' must be a list")
    if not stages:
        raise InvalidInputError("Input invalid: 'stages' must not be empty")

    try:
        definition = WorkflowDefinition.model_validate({"stages": stages})
    except ValidationError as e:
        raise InvalidInputError(f"Input invalid: {e}") from e

    logger.debug(f"Parsed workflow with {definition.count} stages")
    return definition
