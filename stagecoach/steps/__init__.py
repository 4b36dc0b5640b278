"""Built-in step type strategies."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .codebuild import CodeBuildNoWaitStrategy, CodeBuildStrategy
from .human import HumanStrategy
from .notify import NotifyStrategy
from .wait import WaitStrategy

if TYPE_CHECKING:
    from ..registry import StepTypeRegistry

BUILTIN_STRATEGIES = (
    CodeBuildStrategy,
    CodeBuildNoWaitStrategy,
    HumanStrategy,
    NotifyStrategy,
    WaitStrategy,
)


def register_builtin_steps(registry: "StepTypeRegistry") -> None:
    """Register every built-in step type on ``registry``."""
    for strategy_cls in BUILTIN_STRATEGIES:
        registry.add(strategy_cls())


__all__ = [
    "CodeBuildStrategy",
    "CodeBuildNoWaitStrategy",
    "HumanStrategy",
    "NotifyStrategy",
    "WaitStrategy",
    "BUILTIN_STRATEGIES",
    "register_builtin_steps",
]
