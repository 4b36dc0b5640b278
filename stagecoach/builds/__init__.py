"""Build client factory and initialization."""

from __future__ import annotations

import os
from typing import Optional

from ..config import StagecoachConfig, load_config
from .base import BaseBuildClient, BuildInfo, BuildStatus, EnvironmentVariable
from .inmemory import InMemoryBuildClient
from .local import LocalBuildClient


def get_build_client(
    backend: Optional[str] = None, config: Optional[StagecoachConfig] = None
) -> BaseBuildClient:
    """Factory function to get the configured build client."""

    config = config or load_config()
    backend = (
        backend or os.getenv("STAGECOACH_BUILD_BACKEND") or config.builds.backend
    ).lower()

    if backend == "inmemory":
        return InMemoryBuildClient()
    elif backend == "local":
        return LocalBuildClient(config.builds.projects)
    else:
        raise ValueError(f"Unsupported build backend: {backend}")


__all__ = [
    "BaseBuildClient",
    "BuildInfo",
    "BuildStatus",
    "EnvironmentVariable",
    "InMemoryBuildClient",
    "LocalBuildClient",
    "get_build_client",
]
