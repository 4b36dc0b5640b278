"""Base notifier interface for deployment notifications."""

from __future__ import annotations

import abc
from typing import Optional


class BaseNotifier(metaclass=abc.ABCMeta):
    """Abstract notification port.

    Publishing is fire-and-forget from the engine's point of view, but a
    failed publish must raise so the calling step can report it.
    """

    async def connect(self) -> None:
        """Open connection to the backend (no-op by default)."""
        pass

    async def disconnect(self) -> None:
        """Close connection to the backend (no-op by default)."""
        pass

    @abc.abstractmethod
    async def publish(self, message: str, subject: Optional[str] = None) -> None:
        """Deliver ``message`` to subscribers."""
        raise NotImplementedError
