"""Simple example showing a two-stage deployment."""

import asyncio

from stagecoach import WorkflowDriver, load_config
from stagecoach.builds import BuildStatus, InMemoryBuildClient
from stagecoach.notifiers import ConsoleNotifier

WORKFLOW = {
    "stages": [
        {
            "name": "build",
            "steps": [
                {
                    "name": "api",
                    "type": "CodeBuild",
                    "codeBuildName": "api-build",
                    "sourceVersion": {"type": "branch", "value": "main"},
                    "environmentVariableOverrides": [{"name": "STAGE", "value": "dev"}],
                },
                {
                    "name": "docs",
                    "type": "CodeBuildNoWait",
                    "codeBuildName": "docs-build",
                    "sourceVersion": "main",
                },
            ],
        },
        {
            "name": "announce",
            "steps": [
                {"name": "settle", "type": "Wait", "seconds": 1},
                {"name": "tell", "type": "Notify", "message": "API is live on DEV"},
            ],
        },
    ]
}


async def main():
    config = load_config()
    config.builds.poll_interval_seconds = 0.5

    # Pretend the API build takes two checks to finish
    builds = InMemoryBuildClient(
        scripts={"api-build": [BuildStatus.IN_PROGRESS, BuildStatus.SUCCEEDED]}
    )
    driver = WorkflowDriver(notifier=ConsoleNotifier(), build_client=builds, config=config)

    outcome = await driver.run(WORKFLOW)

    print(f"Run {outcome.run_id} finished: {outcome.status.value}")
    for stage in outcome.stage_results:
        print(f"  {stage.stage_name}: {[r.message for r in stage.results]}")


if __name__ == "__main__":
    asyncio.run(main())
