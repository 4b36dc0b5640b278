"""Command line interface for running stagecoach deployments."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from pathlib import Path
from typing import Optional, Set

import typer

from stagecoach import (
    ApprovalGateway,
    StagecoachConfig,
    WorkflowDriver,
    default_registry,
    load_config,
)
from stagecoach.approval import PendingApproval
from stagecoach.constants import APPROVE, REJECT
from stagecoach.contracts import StageResult, TerminalOutcome
from stagecoach.exceptions import ApprovalError, InvalidInputError, StageFailedError
from stagecoach.notifiers import InMemoryNotifier

app = typer.Typer(help="CLI for stagecoach deployments")

EXIT_STAGE_FAILED = 1
EXIT_INVALID_INPUT = 2


@app.callback()
def main() -> None:
    """stagecoach CLI entry point."""
    pass


def _load(config_path: Optional[Path]) -> StagecoachConfig:
    config = load_config(str(config_path) if config_path else None)
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return config


def _read_input(input_path: Path) -> str:
    if not input_path.exists():
        typer.secho(f"Input file not found: {input_path}", fg=typer.colors.RED)
        raise typer.Exit(code=EXIT_INVALID_INPUT)
    return input_path.read_text()


def _echo_stage(result: StageResult) -> None:
    status = "FAILED" if result.failed else "ok"
    typer.echo(f"Stage {result.index + 1} {result.stage_name}: {status}")
    for step in result.results:
        mark = "ok" if step.success else "FAILED"
        typer.echo(f"  - {step.step_name} ({step.step_type}): {mark} - {step.message}")


def _echo_outcome(outcome: TerminalOutcome) -> None:
    typer.echo(f"Run {outcome.run_id}: {outcome.status.value}")
    for result in outcome.stage_results:
        _echo_stage(result)


class ConsoleApprovals:
    """Answers pending approvals with prompts on the console.

    Each prompt blocks on stdin in a daemon thread, outside the loop's
    default executor, so an unanswered prompt never keeps the CLI alive
    after the run ends. Call :meth:`close` when the run ends to cancel
    prompts that are still queued.
    """

    def __init__(self) -> None:
        self.gateway = ApprovalGateway(on_pending=self._on_pending)
        self._prompts: Set[asyncio.Task] = set()
        self._lock = asyncio.Lock()

    def _on_pending(self, pending: PendingApproval) -> None:
        task = asyncio.get_running_loop().create_task(self._prompt(pending))
        self._prompts.add(task)
        task.add_done_callback(self._prompts.discard)

    async def _prompt(self, pending: PendingApproval) -> None:
        async with self._lock:
            if not self.gateway.is_pending(pending.token):
                return
            approved = await _confirm(f"Approve '{pending.message}'?")
        try:
            self.gateway.resolve(pending.token, APPROVE if approved else REJECT)
        except ApprovalError as e:
            typer.secho(f"Approval not applied: {e}", fg=typer.colors.YELLOW)

    def close(self) -> None:
        for task in list(self._prompts):
            task.cancel()


async def _confirm(question: str) -> bool:
    loop = asyncio.get_running_loop()
    answer: asyncio.Future = loop.create_future()

    def deliver(callback, value) -> None:
        # The run may have finished while the prompt was open
        with contextlib.suppress(RuntimeError):
            loop.call_soon_threadsafe(callback, value)

    def settle_result(value) -> None:
        if not answer.done():
            answer.set_result(value)

    def settle_error(error) -> None:
        if not answer.done():
            answer.set_exception(error)

    def ask() -> None:
        try:
            approved = typer.confirm(question)
        except Exception as e:
            deliver(settle_error, e)
        else:
            deliver(settle_result, approved)

    threading.Thread(target=ask, name="stagecoach-approval-prompt", daemon=True).start()
    return await answer


async def _run(
    raw: str, config: StagecoachConfig, interactive: bool, run_id: Optional[str]
) -> TerminalOutcome:
    console = ConsoleApprovals() if interactive else None
    gateway = console.gateway if console else ApprovalGateway()
    driver = WorkflowDriver.from_config(config, gateway=gateway)
    try:
        return await driver.run(raw, run_id=run_id)
    finally:
        if console is not None:
            console.close()
        await driver.notifier.disconnect()


@app.command("run")
def run(
    input_path: Path,
    config: Optional[Path] = typer.Option(None, help="Path to a YAML config file"),
    interactive: bool = typer.Option(
        False, help="Prompt on the console to resolve Human approval steps"
    ),
    run_id: Optional[str] = typer.Option(None, help="Identifier for this run"),
) -> None:
    """
    Run a deployment workflow.

    Stages run in order; the steps of each stage run concurrently. The run
    stops at the first stage with a failing step.

    Example:
        stagecoach run deploy.json
        stagecoach run deploy.json --config stagecoach.yaml --interactive
    """
    cfg = _load(config)
    raw = _read_input(input_path)

    try:
        outcome = asyncio.run(_run(raw, cfg, interactive, run_id))
    except InvalidInputError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(code=EXIT_INVALID_INPUT)
    except StageFailedError as e:
        if e.outcome is not None:
            _echo_outcome(e.outcome)
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(code=EXIT_STAGE_FAILED)

    _echo_outcome(outcome)
    typer.secho("Deployment complete", fg=typer.colors.GREEN)


@app.command("validate")
def validate(
    input_path: Path,
    config: Optional[Path] = typer.Option(None, help="Path to a YAML config file"),
) -> None:
    """
    Check a workflow without running it.

    Parses the input and validates every step's parameters against its
    registered step type.
    """
    cfg = _load(config)
    raw = _read_input(input_path)
    driver = WorkflowDriver(notifier=InMemoryNotifier(), config=cfg)

    try:
        definition = driver.parse(raw)
    except InvalidInputError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(code=EXIT_INVALID_INPUT)

    problems = 0
    for index, stage in enumerate(definition.stages, start=1):
        typer.echo(f"Stage {index} {stage.name}: {len(stage.steps)} steps")
        for step in stage.steps:
            failure = driver.executor.check(step)
            if failure is None:
                typer.echo(f"  - {step.name} ({step.type}): ok")
            else:
                problems += 1
                typer.secho(
                    f"  - {step.name} ({step.type}): {failure.error}: {failure.message}",
                    fg=typer.colors.RED,
                )

    if problems:
        typer.secho(f"{problems} invalid steps", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.echo("Workflow is valid")


@app.command("types")
def types() -> None:
    """List registered step types."""
    for tag in default_registry().types():
        typer.echo(tag)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
