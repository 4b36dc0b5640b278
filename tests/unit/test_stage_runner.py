"""Stage fan-out tests."""

import asyncio

import pytest

from stagecoach import StageRunner, StepExecutor
from stagecoach.contracts import ExtensionStep, Stage, WaitStep


@pytest.mark.asyncio
async def test_results_follow_submission_order(registry, context):
    async def sleepy(step, ctx):
        await asyncio.sleep(step.params["delay"])

    registry.register("Sleepy", sleepy)
    runner = StageRunner(StepExecutor(registry, context))
    stage = Stage(
        name="s1",
        steps=[
            ExtensionStep(name="slow", type="Sleepy", delay=0.05),
            ExtensionStep(name="fast", type="Sleepy", delay=0),
        ],
    )

    result = await runner.run_stage(stage, index=3)

    assert result.stage_name == "s1"
    assert result.index == 3
    assert [r.step_name for r in result.results] == ["slow", "fast"]


@pytest.mark.asyncio
async def test_steps_in_a_stage_run_concurrently(registry, context):
    started = []
    both_started = asyncio.Event()

    async def rendezvous(step, ctx):
        started.append(step.name)
        if len(started) == 2:
            both_started.set()
        await asyncio.wait_for(both_started.wait(), timeout=1)

    registry.register("Rendezvous", rendezvous)
    runner = StageRunner(StepExecutor(registry, context))
    stage = Stage(
        name="s1",
        steps=[
            ExtensionStep(name="a", type="Rendezvous"),
            ExtensionStep(name="b", type="Rendezvous"),
        ],
    )

    result = await runner.run_stage(stage)
    assert result.failed is False


@pytest.mark.asyncio
async def test_invalid_step_does_not_stop_siblings(executor):
    runner = StageRunner(executor)
    stage = Stage(
        name="s1",
        steps=[
            WaitStep(name="bad", seconds=-1),
            WaitStep(name="good", seconds=0),
            ExtensionStep(name="odd", type="Frobnicate"),
        ],
    )

    result = await runner.run_stage(stage)

    assert [r.success for r in result.results] == [False, True, False]
    assert result.failed is True
    assert [r.step_name for r in result.failures] == ["bad", "odd"]


@pytest.mark.asyncio
async def test_empty_stage_passes(executor):
    result = await StageRunner(executor).run_stage(Stage(name="nothing"))
    assert result.results == []
    assert result.failed is False
