"""In-memory build client for tests and dry runs."""

from __future__ import annotations

import uuid
from typing import Dict, Iterable, List, Optional, Sequence

from .base import BaseBuildClient, BuildInfo, BuildStatus, EnvironmentVariable


class InMemoryBuildClient(BaseBuildClient):
    """Simulate builds from scripted status sequences.

    Each status check of a build consumes the next status scripted for its
    project; the last status repeats once the script is exhausted. Projects
    without a script succeed on the first check. Projects listed in
    ``unavailable`` never start.
    """

    def __init__(
        self,
        scripts: Optional[Dict[str, Sequence[BuildStatus]]] = None,
        unavailable: Iterable[str] = (),
    ) -> None:
        self._scripts = {k: list(v) for k, v in (scripts or {}).items()}
        self._unavailable = set(unavailable)
        self._builds: Dict[str, BuildInfo] = {}
        self._checks: Dict[str, int] = {}
        self.started: List[dict] = []

    async def start_build(
        self,
        project: str,
        source_version: Optional[str] = None,
        environment_overrides: Sequence[EnvironmentVariable] = (),
    ) -> Optional[BuildInfo]:
        if project in self._unavailable:
            return None
        build = BuildInfo(id=f"{project}:{uuid.uuid4()}", project=project)
        self._builds[build.id] = build
        self._checks[build.id] = 0
        self.started.append(
            {
                "id": build.id,
                "project": project,
                "source_version": source_version,
                "environment_overrides": [e.model_dump() for e in environment_overrides],
            }
        )
        return build

    async def get_build_status(self, build_id: str) -> BuildStatus:
        build = self._builds.get(build_id)
        if build is None:
            raise KeyError(f"Unknown build: {build_id}")
        script = self._scripts.get(build.project) or [BuildStatus.SUCCEEDED]
        position = min(self._checks[build_id], len(script) - 1)
        self._checks[build_id] += 1
        build.status = script[position]
        return build.status

    def checks(self, build_id: str) -> int:
        """Number of status checks made for ``build_id``."""
        return self._checks.get(build_id, 0)
