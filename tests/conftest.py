"""Shared fixtures for stagecoach tests."""

import asyncio

import pytest

from stagecoach import ApprovalGateway, StagecoachConfig, StepExecutor, WorkflowDriver
from stagecoach.builds import InMemoryBuildClient
from stagecoach.config import BuildConfig
from stagecoach.notifiers import InMemoryNotifier
from stagecoach.persistence import InMemoryRunRepository
from stagecoach.registry import StepContext, default_registry


@pytest.fixture
def notifier() -> InMemoryNotifier:
    return InMemoryNotifier()


@pytest.fixture
def build_client() -> InMemoryBuildClient:
    return InMemoryBuildClient()


@pytest.fixture
def gateway() -> ApprovalGateway:
    return ApprovalGateway()


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def repository() -> InMemoryRunRepository:
    return InMemoryRunRepository()


@pytest.fixture
def context(notifier, build_client, gateway) -> StepContext:
    return StepContext(
        notifier=notifier,
        build_client=build_client,
        gateway=gateway,
        poll_interval=0,
    )


@pytest.fixture
def executor(registry, context) -> StepExecutor:
    return StepExecutor(registry, context)


@pytest.fixture
def config() -> StagecoachConfig:
    return StagecoachConfig(builds=BuildConfig(poll_interval_seconds=0))


@pytest.fixture
def driver(notifier, build_client, gateway, registry, repository, config) -> WorkflowDriver:
    return WorkflowDriver(
        notifier=notifier,
        build_client=build_client,
        gateway=gateway,
        registry=registry,
        repository=repository,
        config=config,
    )


@pytest.fixture
def next_token(gateway):
    """Yield to the loop until a Human step has asked for approval."""

    async def _next() -> str:
        for _ in range(200):
            tokens = gateway.pending_tokens()
            if tokens:
                return tokens[0]
            await asyncio.sleep(0)
        raise AssertionError("No approval became pending")

    return _next
