"""CodeBuild step types: start a build and optionally wait for it."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Mapping, Optional

from pydantic import ValidationError

from ..builds import BuildInfo, BuildStatus, EnvironmentVariable
from ..contracts import CodeBuildStep, StepResult, StepType
from ..exceptions import InvalidStepParametersError, StepExecutionError
from ..registry.strategy import StepContext, StepStrategy

logger = logging.getLogger(__name__)


def source_version_of(step: CodeBuildStep) -> Optional[str]:
    """Return the source version as a string, flattening ``{"type", "value"}``."""
    value = step.source_version
    if isinstance(value, Mapping):
        value = value.get("value")
    return value if isinstance(value, str) and value else None


def environment_overrides_of(step: CodeBuildStep) -> List[EnvironmentVariable]:
    overrides = step.environment_variable_overrides
    if overrides is None:
        return []
    if not isinstance(overrides, (list, tuple)):
        raise InvalidStepParametersError(
            f"Step '{step.name}': environmentVariableOverrides must be a list of name/value pairs"
        )
    try:
        return [EnvironmentVariable.model_validate(item) for item in overrides]
    except ValidationError as e:
        raise InvalidStepParametersError(
            f"Step '{step.name}': invalid environment variable override: {e}"
        ) from e


class CodeBuildStrategy(StepStrategy):
    """Start a build, then poll until it reaches a terminal status."""

    type_name = StepType.CODEBUILD.value

    def validate(self, step: CodeBuildStep) -> None:
        if not isinstance(step.code_build_name, str) or not step.code_build_name:
            raise InvalidStepParametersError(
                f"Step '{step.name}' requires codeBuildName as a non-empty string"
            )
        if source_version_of(step) is None:
            raise InvalidStepParametersError(f"Step '{step.name}' requires sourceVersion")
        environment_overrides_of(step)

    async def _start(self, step: CodeBuildStep, context: StepContext) -> BuildInfo:
        build = await context.build_client.start_build(
            step.code_build_name,
            source_version=source_version_of(step),
            environment_overrides=environment_overrides_of(step),
        )
        if build is None:
            raise StepExecutionError("CodeBuild failed")
        logger.info(f"Step {step.name} started build {build.id}")
        return build

    async def execute(self, step: CodeBuildStep, context: StepContext) -> BuildStatus:
        build = await self._start(step, context)
        status = build.status
        while not status.is_terminal:
            await asyncio.sleep(context.poll_interval)
            status = await context.build_client.get_build_status(build.id)
            logger.debug(f"Build {build.id} status: {status.value}")
        return status

    def interpret_result(self, step: CodeBuildStep, raw: BuildStatus) -> StepResult:
        if raw == BuildStatus.SUCCEEDED:
            return StepResult.ok(step, "CodeBuild succeeded")
        return StepResult.failed(step, f"CodeBuild failed with status {raw.value}")


class CodeBuildNoWaitStrategy(CodeBuildStrategy):
    """Start a build and return immediately; its outcome is never checked."""

    type_name = StepType.CODEBUILD_NO_WAIT.value

    async def execute(self, step: CodeBuildStep, context: StepContext) -> BuildInfo:
        return await self._start(step, context)

    def interpret_result(self, step: CodeBuildStep, raw: BuildInfo) -> StepResult:
        return StepResult.ok(step, f"CodeBuild {raw.id} started")
