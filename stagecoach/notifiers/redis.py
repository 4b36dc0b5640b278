"""Redis notifier for cross-process delivery."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import redis.asyncio as redis

from .base import BaseNotifier

logger = logging.getLogger(__name__)


class RedisNotifier(BaseNotifier):
    """Push notifications onto a Redis list acting as a queue."""

    def __init__(
        self,
        topic: str = "notifications",
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: Optional[str] = None,
    ) -> None:
        self.topic = topic
        self.host = host
        self.port = port
        self.db = db
        self.password = password
        self._redis: Optional[Any] = None

    @property
    def queue_name(self) -> str:
        return f"stagecoach:{self.topic}"

    async def connect(self) -> None:
        """Connect to Redis."""
        self._redis = redis.Redis(
            host=self.host,
            port=self.port,
            db=self.db,
            password=self.password,
            decode_responses=True,
        )
        await self._redis.ping()

    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    async def publish(self, message: str, subject: Optional[str] = None) -> None:
        if not self._redis:
            await self.connect()

        body = json.dumps(
            {
                "subject": subject,
                "message": message,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )
        await self._redis.lpush(self.queue_name, body)
        logger.debug(f"Published notification to {self.queue_name}")
