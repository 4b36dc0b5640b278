"""Error taxonomy for stagecoach deployments."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .contracts import StageResult, TerminalOutcome


class StagecoachError(Exception):
    """Base class for all stagecoach errors."""


class InvalidInputError(StagecoachError):
    """Workflow input is malformed or has no stages."""


class StepError(StagecoachError):
    """Step-local failure, converted to a failing ``StepResult``."""


class UnknownStepTypeError(StepError):
    """No strategy is registered for a step's type tag."""

    def __init__(self, step_type: str) -> None:
        super().__init__(f"Unknown step type: {step_type}")
        self.step_type = step_type


class InvalidStepParametersError(StepError):
    """A step's parameters failed its strategy's validation."""


class StepExecutionError(StepError):
    """A strategy raised while executing a step."""


class StageFailedError(StagecoachError):
    """Raised when a stage contains at least one failing step."""

    def __init__(
        self, stage_result: "StageResult", outcome: Optional["TerminalOutcome"] = None
    ) -> None:
        failed = ", ".join(
            f"{r.step_name}: {r.message}" for r in stage_result.failures
        )
        super().__init__(
            f"Stage '{stage_result.stage_name}' had failing steps ({failed})"
        )
        self.stage_result = stage_result
        self.outcome = outcome


class ApprovalError(StagecoachError):
    """Misuse of the approval resolution call."""


class UnknownTokenError(ApprovalError):
    """The approval token is not pending."""


class InvalidActionError(ApprovalError):
    """The resolution action is not ``approve`` or ``reject``."""


class AlreadyResolvedError(ApprovalError):
    """The approval token has already been resolved."""


__all__ = [
    "StagecoachError",
    "InvalidInputError",
    "StepError",
    "UnknownStepTypeError",
    "InvalidStepParametersError",
    "StepExecutionError",
    "StageFailedError",
    "ApprovalError",
    "UnknownTokenError",
    "InvalidActionError",
    "AlreadyResolvedError",
]
