"""Build client tests."""

import pytest

from stagecoach.builds import BuildStatus, EnvironmentVariable, InMemoryBuildClient
from stagecoach.builds.local import LocalBuildClient


@pytest.mark.asyncio
async def test_inmemory_script_repeats_last_status():
    client = InMemoryBuildClient(
        scripts={"api": [BuildStatus.IN_PROGRESS, BuildStatus.FAILED]}
    )
    build = await client.start_build("api", source_version="main")

    assert build.status == BuildStatus.IN_PROGRESS
    assert await client.get_build_status(build.id) == BuildStatus.IN_PROGRESS
    assert await client.get_build_status(build.id) == BuildStatus.FAILED
    assert await client.get_build_status(build.id) == BuildStatus.FAILED
    assert client.checks(build.id) == 3


@pytest.mark.asyncio
async def test_inmemory_unscripted_project_succeeds():
    client = InMemoryBuildClient()
    build = await client.start_build("web")
    assert await client.get_build_status(build.id) == BuildStatus.SUCCEEDED


@pytest.mark.asyncio
async def test_inmemory_unavailable_project_does_not_start():
    client = InMemoryBuildClient(unavailable=["api"])
    assert await client.start_build("api") is None
    assert client.started == []


@pytest.mark.asyncio
async def test_inmemory_unknown_build_raises():
    with pytest.raises(KeyError):
        await InMemoryBuildClient().get_build_status("missing")


def test_terminal_statuses():
    assert not BuildStatus.IN_PROGRESS.is_terminal
    assert all(
        status.is_terminal for status in BuildStatus if status != BuildStatus.IN_PROGRESS
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "command, expected",
    [("exit 0", BuildStatus.SUCCEEDED), ("exit 3", BuildStatus.FAILED)],
)
async def test_local_build_maps_exit_code(command, expected):
    client = LocalBuildClient({"api": command})
    build = await client.start_build("api")

    assert await client.wait(build.id) == expected
    assert await client.get_build_status(build.id) == expected


@pytest.mark.asyncio
async def test_local_build_exports_source_version_and_overrides():
    client = LocalBuildClient(
        {"api": 'test "$SOURCE_VERSION" = main && test "$STAGE" = qa'}
    )
    build = await client.start_build(
        "api",
        source_version="main",
        environment_overrides=[EnvironmentVariable(name="STAGE", value="qa")],
    )
    assert await client.wait(build.id) == BuildStatus.SUCCEEDED


@pytest.mark.asyncio
async def test_local_build_unknown_project():
    with pytest.raises(ValueError):
        await LocalBuildClient({}).start_build("api")
