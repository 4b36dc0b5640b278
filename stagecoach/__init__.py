"""stagecoach: staged deployment orchestration."""

from .approval import ApprovalGateway, ConfirmationHandler
from .builds import get_build_client
from .config import StagecoachConfig, load_config
from .contracts import (
    IteratorState,
    Stage,
    StageResult,
    StepResult,
    StepType,
    TerminalOutcome,
    WorkflowDefinition,
    parse_workflow,
)
from .driver import WorkflowDriver
from .execute import StepExecutor
from .notifiers import get_notifier
from .registry import StepStrategy, StepTypeRegistry, default_registry
from .stage import StageRunner

__version__ = "0.1.0"
__all__ = [
    "ApprovalGateway",
    "ConfirmationHandler",
    "IteratorState",
    "Stage",
    "StageResult",
    "StageRunner",
    "StagecoachConfig",
    "StepExecutor",
    "StepResult",
    "StepStrategy",
    "StepType",
    "StepTypeRegistry",
    "TerminalOutcome",
    "WorkflowDefinition",
    "WorkflowDriver",
    "default_registry",
    "get_build_client",
    "get_notifier",
    "load_config",
    "parse_workflow",
]
