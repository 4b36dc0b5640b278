"""Notifier that writes to the terminal."""

from __future__ import annotations

from typing import Optional

import typer

from .base import BaseNotifier


class ConsoleNotifier(BaseNotifier):
    """Echo notifications to stdout; used by the CLI."""

    async def publish(self, message: str, subject: Optional[str] = None) -> None:
        prefix = f"[{subject}] " if subject else ""
        typer.secho(f"{prefix}{message}", fg=typer.colors.CYAN)
