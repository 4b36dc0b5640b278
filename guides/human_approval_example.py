"""Example showing a Human approval gate resolved through its link.

A custom step type is registered at runtime to show how the engine is
extended beyond the built-in step types.
"""

import asyncio
from urllib.parse import parse_qs, urlparse

from stagecoach import ApprovalGateway, ConfirmationHandler, WorkflowDriver, default_registry
from stagecoach.notifiers import InMemoryNotifier

WORKFLOW = {
    "stages": [
        {
            "name": "gate",
            "steps": [
                {"name": "approval", "type": "Human", "message": "Promote build 42 to PROD?"}
            ],
        },
        {
            "name": "promote",
            "steps": [{"name": "flip", "type": "FeatureFlag", "flag": "new-checkout"}],
        },
    ]
}


async def flip_flag(step, context):
    print(f"Enabling feature flag {step.params['flag']}")


async def main():
    notifier = InMemoryNotifier()
    gateway = ApprovalGateway()
    handler = ConfirmationHandler(gateway)

    registry = default_registry()
    registry.register("FeatureFlag", flip_flag)

    driver = WorkflowDriver(notifier=notifier, gateway=gateway, registry=registry)
    run = asyncio.create_task(driver.run(WORKFLOW))

    # Wait for the approval links to be published, then follow the approve one
    while not gateway.pending_tokens():
        await asyncio.sleep(0.01)
    links = [m for m in notifier.messages if "taskToken=" in m][0]
    print(links)
    approve_url = next(w for w in links.split() if "action=approve" in w)
    params = {k: v[0] for k, v in parse_qs(urlparse(approve_url).query).items()}

    response = handler.handle(params)
    print(f"Confirmation endpoint answered {response.status_code} {response.body}")

    outcome = await run
    print(f"Run {outcome.run_id} finished: {outcome.status.value}")


if __name__ == "__main__":
    asyncio.run(main())
