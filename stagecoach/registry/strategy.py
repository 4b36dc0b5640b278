"""Strategy interface implemented by every step type."""

from __future__ import annotations

import abc
import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, ClassVar, Optional, Union

from ..constants import DEFAULT_CONFIRMATION_URL, DEFAULT_POLL_INTERVAL_SECONDS
from ..contracts import BaseStep, StepResult
from ..exceptions import InvalidStepParametersError

if TYPE_CHECKING:
    from ..approval import ApprovalGateway
    from ..builds import BaseBuildClient
    from ..notifiers import BaseNotifier


@dataclass
class StepContext:
    """Collaborators and settings available to strategies while executing."""

    notifier: "BaseNotifier"
    build_client: "BaseBuildClient"
    gateway: "ApprovalGateway"
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS
    confirmation_url: str = DEFAULT_CONFIRMATION_URL
    approval_timeout: Optional[float] = None


class StepStrategy(metaclass=abc.ABCMeta):
    """Validate, execute and interpret one kind of step.

    Subclasses set ``type_name`` and implement :meth:`execute`. The default
    :meth:`validate` accepts everything and the default
    :meth:`interpret_result` treats any completed execution as success.
    """

    type_name: ClassVar[str] = ""

    def validate(self, step: BaseStep) -> None:
        """Raise :class:`InvalidStepParametersError` for unusable parameters."""

    @abc.abstractmethod
    async def execute(self, step: BaseStep, context: StepContext) -> Any:
        """Perform the step's action and return its raw outcome."""
        raise NotImplementedError

    def interpret_result(self, step: BaseStep, raw: Any) -> StepResult:
        """Map the raw outcome of :meth:`execute` to a ``StepResult``."""
        return StepResult.ok(step, f"{step.type} step completed")


ExecuteFn = Callable[[BaseStep, StepContext], Union[Any, Awaitable[Any]]]
ValidateFn = Callable[[BaseStep], Optional[bool]]
InterpretFn = Callable[[BaseStep, Any], Union[bool, StepResult]]


class FunctionStrategy(StepStrategy):
    """Strategy assembled from plain callables.

    ``validate`` may return ``False`` or raise to reject parameters.
    ``interpret_result`` may return a ``StepResult`` or a boolean.
    """

    def __init__(
        self,
        type_name: str,
        execute: ExecuteFn,
        validate: Optional[ValidateFn] = None,
        interpret_result: Optional[InterpretFn] = None,
    ) -> None:
        self.type_name = type_name
        self._execute = execute
        self._validate = validate
        self._interpret = interpret_result

    def validate(self, step: BaseStep) -> None:
        if self._validate is not None and self._validate(step) is False:
            raise InvalidStepParametersError(
                f"Invalid parameters for step '{step.name}' of type {step.type}"
            )

    async def execute(self, step: BaseStep, context: StepContext) -> Any:
        result = self._execute(step, context)
        if inspect.isawaitable(result):
            result = await result
        return result

    def interpret_result(self, step: BaseStep, raw: Any) -> StepResult:
        if self._interpret is None:
            return super().interpret_result(step, raw)
        outcome = self._interpret(step, raw)
        if isinstance(outcome, StepResult):
            return outcome
        if outcome:
            return StepResult.ok(step, f"{step.type} step completed")
        return StepResult.failed(step, f"{step.type} step reported failure")
