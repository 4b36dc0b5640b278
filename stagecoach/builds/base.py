"""Build service port used by the CodeBuild step types."""

from __future__ import annotations

import abc
from enum import Enum
from typing import Optional, Sequence

from pydantic import BaseModel


class BuildStatus(str, Enum):
    """Build statuses, mirroring CodeBuild's."""

    IN_PROGRESS = "IN_PROGRESS"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    FAULT = "FAULT"
    TIMED_OUT = "TIMED_OUT"
    STOPPED = "STOPPED"

    @property
    def is_terminal(self) -> bool:
        return self is not BuildStatus.IN_PROGRESS


class EnvironmentVariable(BaseModel):
    """A single environment variable override for a build."""

    name: str
    value: str


class BuildInfo(BaseModel):
    """Handle for a started build."""

    id: str
    project: str
    status: BuildStatus = BuildStatus.IN_PROGRESS


class BaseBuildClient(metaclass=abc.ABCMeta):
    """Abstract client for starting and inspecting builds."""

    @abc.abstractmethod
    async def start_build(
        self,
        project: str,
        source_version: Optional[str] = None,
        environment_overrides: Sequence[EnvironmentVariable] = (),
    ) -> Optional[BuildInfo]:
        """Start a build of ``project``.

        Returns ``None`` when the service accepted the call but did not
        start a build.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def get_build_status(self, build_id: str) -> BuildStatus:
        """Return the current status of a started build."""
        raise NotImplementedError
