"""Build client that runs a local shell command per project."""

from __future__ import annotations

import asyncio
import logging
import os
import uuid
from typing import Dict, Mapping, Optional, Sequence

from .base import BaseBuildClient, BuildInfo, BuildStatus, EnvironmentVariable

logger = logging.getLogger(__name__)


class LocalBuildClient(BaseBuildClient):
    """Run builds as asyncio subprocesses.

    Exit code 0 maps to ``SUCCEEDED``; anything else to ``FAILED``. The
    source version is exported as ``SOURCE_VERSION`` next to the
    environment overrides.
    """

    def __init__(self, projects: Mapping[str, str]) -> None:
        self._projects = dict(projects)
        self._statuses: Dict[str, BuildStatus] = {}
        self._watchers: Dict[str, asyncio.Task] = {}

    async def start_build(
        self,
        project: str,
        source_version: Optional[str] = None,
        environment_overrides: Sequence[EnvironmentVariable] = (),
    ) -> Optional[BuildInfo]:
        command = self._projects.get(project)
        if command is None:
            raise ValueError(f"No build command configured for project {project}")

        env = dict(os.environ)
        if source_version:
            env["SOURCE_VERSION"] = source_version
        env.update({var.name: var.value for var in environment_overrides})

        process = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            env=env,
        )
        build_id = f"{project}:{uuid.uuid4()}"
        self._statuses[build_id] = BuildStatus.IN_PROGRESS
        self._watchers[build_id] = asyncio.create_task(self._watch(build_id, process))
        logger.info(f"Started local build {build_id} (pid={process.pid})")
        return BuildInfo(id=build_id, project=project)

    async def _watch(self, build_id: str, process: asyncio.subprocess.Process) -> None:
        output, _ = await process.communicate()
        if output:
            logger.debug(f"Build {build_id} output:\n{output.decode(errors='replace')}")
        status = BuildStatus.SUCCEEDED if process.returncode == 0 else BuildStatus.FAILED
        self._statuses[build_id] = status
        logger.info(f"Local build {build_id} finished with {status.value}")

    async def get_build_status(self, build_id: str) -> BuildStatus:
        try:
            return self._statuses[build_id]
        except KeyError:
            raise KeyError(f"Unknown build: {build_id}") from None

    async def wait(self, build_id: str) -> BuildStatus:
        """Block until the build finishes and return its status."""
        await self._watchers[build_id]
        return self._statuses[build_id]
