"""In-memory notifier for testing."""

from __future__ import annotations

import asyncio
from typing import List, Optional, Tuple

from .base import BaseNotifier


class InMemoryNotifier(BaseNotifier):
    """Collects published messages in process memory."""

    def __init__(self) -> None:
        self.published: List[Tuple[Optional[str], str]] = []
        self._lock = asyncio.Lock()

    async def publish(self, message: str, subject: Optional[str] = None) -> None:
        async with self._lock:
            self.published.append((subject, message))

    @property
    def messages(self) -> List[str]:
        return [message for _, message in self.published]
