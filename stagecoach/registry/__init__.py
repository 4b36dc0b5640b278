"""Step type registry."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..exceptions import UnknownStepTypeError
from .strategy import (
    ExecuteFn,
    FunctionStrategy,
    InterpretFn,
    StepContext,
    StepStrategy,
    ValidateFn,
)

logger = logging.getLogger(__name__)


class StepTypeRegistry:
    """Maps step type tags to strategies.

    Registering a tag twice replaces the earlier strategy (last write wins).
    """

    def __init__(self) -> None:
        self._strategies: Dict[str, StepStrategy] = {}

    def add(self, strategy: StepStrategy, type_tag: Optional[str] = None) -> None:
        """Register ``strategy`` under ``type_tag`` or its ``type_name``."""
        tag = type_tag or strategy.type_name
        if not tag:
            raise ValueError("Step strategies need a non-empty type tag")
        if tag in self._strategies:
            logger.warning(f"Replacing strategy registered for step type {tag}")
        self._strategies[tag] = strategy

    def register(
        self,
        type_tag: str,
        execute: ExecuteFn,
        validate: Optional[ValidateFn] = None,
        interpret_result: Optional[InterpretFn] = None,
    ) -> StepStrategy:
        """Register a strategy built from plain callables."""
        strategy = FunctionStrategy(type_tag, execute, validate, interpret_result)
        self.add(strategy)
        return strategy

    def get(self, type_tag: str) -> StepStrategy:
        try:
            return self._strategies[type_tag]
        except KeyError:
            raise UnknownStepTypeError(type_tag) from None

    def types(self) -> List[str]:
        return sorted(self._strategies)

    def __contains__(self, type_tag: object) -> bool:
        return type_tag in self._strategies


def default_registry() -> StepTypeRegistry:
    """Return a new registry with the built-in step types registered."""
    from ..steps import register_builtin_steps

    registry = StepTypeRegistry()
    register_builtin_steps(registry)
    return registry


__all__ = [
    "StepContext",
    "StepStrategy",
    "FunctionStrategy",
    "StepTypeRegistry",
    "default_registry",
]
