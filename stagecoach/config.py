from __future__ import annotations

import os
from typing import Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field

from .constants import (
    DEFAULT_APPLICATION_NAME,
    DEFAULT_CONFIRMATION_URL,
    DEFAULT_ENVIRONMENT_NAME,
    DEFAULT_POLL_INTERVAL_SECONDS,
)


class RedisConfig(BaseModel):
    """Configuration for the Redis notifier."""

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None


class NotifierConfig(BaseModel):
    """Notification backend settings."""

    backend: Literal["inmemory", "console", "redis"] = "console"
    topic: str = "notifications"
    redis: RedisConfig = RedisConfig()


class BuildConfig(BaseModel):
    """Build service settings.

    ``projects`` maps a project name to the shell command the ``local``
    backend runs for it.
    """

    backend: Literal["inmemory", "local"] = "inmemory"
    poll_interval_seconds: float = Field(default=DEFAULT_POLL_INTERVAL_SECONDS, ge=0)
    projects: Dict[str, str] = Field(default_factory=dict)


class ApprovalConfig(BaseModel):
    """Human approval settings.

    ``timeout_seconds`` is unset by default, meaning approvals wait
    indefinitely.
    """

    confirmation_url: str = DEFAULT_CONFIRMATION_URL
    timeout_seconds: Optional[float] = Field(default=None, gt=0)


class StagecoachConfig(BaseModel):
    """Top-level configuration model."""

    application_name: str = DEFAULT_APPLICATION_NAME
    environment_name: str = DEFAULT_ENVIRONMENT_NAME
    log_level: str = "INFO"
    strict_step_types: bool = False
    notifier: NotifierConfig = NotifierConfig()
    builds: BuildConfig = BuildConfig()
    approval: ApprovalConfig = ApprovalConfig()


def load_config(path: Optional[str] = None) -> StagecoachConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to STAGECOACH_CONFIG env
            variable or 'stagecoach.yaml' in the current directory.
    """

    config_path = path or os.getenv("STAGECOACH_CONFIG", "stagecoach.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = StagecoachConfig(**data)
    else:
        config = StagecoachConfig()

    env_url = os.getenv("STAGECOACH_CONFIRMATION_URL")
    if env_url:
        config.approval.confirmation_url = env_url
    env_notifier = os.getenv("STAGECOACH_NOTIFIER")
    if env_notifier:
        config.notifier.backend = env_notifier
    env_builds = os.getenv("STAGECOACH_BUILD_BACKEND")
    if env_builds:
        config.builds.backend = env_builds
    env_level = os.getenv("STAGECOACH_LOG_LEVEL")
    if env_level:
        config.log_level = env_level
    return config
