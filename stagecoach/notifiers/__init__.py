"""Notifier factory and initialization."""

from __future__ import annotations

import os
from typing import Optional

from ..config import StagecoachConfig, load_config
from .base import BaseNotifier
from .console import ConsoleNotifier
from .inmemory import InMemoryNotifier


def get_notifier(
    backend: Optional[str] = None, config: Optional[StagecoachConfig] = None
) -> BaseNotifier:
    """Factory function to get the configured notifier."""

    config = config or load_config()
    backend = (
        backend or os.getenv("STAGECOACH_NOTIFIER") or config.notifier.backend
    ).lower()

    if backend == "inmemory":
        return InMemoryNotifier()
    elif backend == "console":
        return ConsoleNotifier()
    elif backend == "redis":
        from .redis import RedisNotifier

        redis_conf = config.notifier.redis
        return RedisNotifier(
            topic=config.notifier.topic,
            host=redis_conf.host,
            port=redis_conf.port,
            db=redis_conf.db,
            password=redis_conf.password,
        )
    else:
        raise ValueError(f"Unsupported notifier backend: {backend}")


__all__ = ["BaseNotifier", "ConsoleNotifier", "InMemoryNotifier", "get_notifier"]
