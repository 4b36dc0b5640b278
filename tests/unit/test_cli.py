import json
import threading

import pytest
from typer.testing import CliRunner

from stagecoach.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def workspace(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in ("STAGECOACH_CONFIG", "STAGECOACH_NOTIFIER", "STAGECOACH_BUILD_BACKEND"):
        monkeypatch.delenv(name, raising=False)
    (tmp_path / "stagecoach.yaml").write_text(
        "application_name: shop\n"
        "environment_name: QA\n"
        "notifier:\n  backend: console\n"
        "builds:\n  poll_interval_seconds: 0\n"
    )
    return tmp_path


def _write(workspace, payload, name="deploy.json"):
    path = workspace / name
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload))
    return str(path)


GOOD = {
    "stages": [
        {
            "name": "build",
            "steps": [
                {
                    "name": "api",
                    "type": "CodeBuild",
                    "codeBuildName": "api-build",
                    "sourceVersion": "main",
                },
                {"name": "tell", "type": "Notify", "message": "Building"},
            ],
        },
        {"name": "settle", "steps": [{"name": "pause", "type": "Wait", "seconds": 0}]},
    ]
}


def test_types_lists_builtin_step_types():
    result = runner.invoke(app, ["types"])
    assert result.exit_code == 0, f"Output: {result.output}"
    for tag in ("CodeBuild", "CodeBuildNoWait", "Human", "Notify", "Wait"):
        assert tag in result.output


def test_run_success(workspace):
    result = runner.invoke(app, ["run", _write(workspace, GOOD)])

    assert result.exit_code == 0, f"Output: {result.output}"
    assert "shop has started QA deployment" in result.output
    assert "[tell] Building" in result.output
    assert "Deployments complete" in result.output
    assert "Stage 2 settle: ok" in result.output


def test_run_failed_stage_exits_one(workspace):
    payload = {
        "stages": [
            {"name": "odd", "steps": [{"name": "x", "type": "Frobnicate"}]},
            {"name": "never", "steps": [{"name": "tell", "type": "Notify", "message": "nope"}]},
        ]
    }
    result = runner.invoke(app, ["run", _write(workspace, payload)])

    assert result.exit_code == 1, f"Output: {result.output}"
    assert "Unknown step type: Frobnicate" in result.output
    assert "Deployments complete" not in result.output
    assert "nope" not in result.output


@pytest.mark.parametrize("payload", ["{not json", {"stages": []}, {"steps": []}])
def test_run_invalid_input_exits_two(workspace, payload):
    result = runner.invoke(app, ["run", _write(workspace, payload)])
    assert result.exit_code == 2, f"Output: {result.output}"


def test_run_missing_file_exits_two(workspace):
    result = runner.invoke(app, ["run", str(workspace / "missing.json")])
    assert result.exit_code == 2


def test_validate_good_workflow(workspace):
    result = runner.invoke(app, ["validate", _write(workspace, GOOD)])
    assert result.exit_code == 0, f"Output: {result.output}"
    assert "Workflow is valid" in result.output


def test_validate_reports_invalid_steps(workspace):
    payload = {
        "stages": [
            {
                "name": "s1",
                "steps": [
                    {"name": "pause", "type": "Wait", "seconds": -5},
                    {"name": "x", "type": "Frobnicate"},
                    {"name": "tell", "type": "Notify", "message": "ok"},
                ],
            }
        ]
    }
    result = runner.invoke(app, ["validate", _write(workspace, payload)])

    assert result.exit_code == 1, f"Output: {result.output}"
    assert "InvalidStepParametersError" in result.output
    assert "UnknownStepTypeError" in result.output
    assert "2 invalid steps" in result.output


HUMAN = {
    "stages": [
        {"name": "gate", "steps": [{"name": "approval", "type": "Human", "message": "Ship it?"}]},
        {"name": "after", "steps": [{"name": "tell", "type": "Notify", "message": "Shipped"}]},
    ]
}


def test_run_interactive_resolves_approvals_on_the_console(workspace, monkeypatch):
    questions = []

    def confirm(question):
        questions.append(question)
        return True

    monkeypatch.setattr("stagecoach.cli.typer.confirm", confirm)
    result = runner.invoke(app, ["run", _write(workspace, HUMAN), "--interactive"])

    assert result.exit_code == 0, f"Output: {result.output}"
    assert questions == ["Approve 'Ship it?'?"]
    assert "Human confirmation approved" in result.output
    assert "[tell] Shipped" in result.output


def test_run_interactive_returns_with_prompt_unanswered(workspace, monkeypatch):
    released = threading.Event()

    def confirm(question):
        released.wait(timeout=10)
        return True

    config = workspace / "timeout.yaml"
    config.write_text(
        "notifier:\n  backend: console\n"
        "approval:\n  timeout_seconds: 0.05\n"
    )
    monkeypatch.setattr("stagecoach.cli.typer.confirm", confirm)
    try:
        result = runner.invoke(
            app, ["run", _write(workspace, HUMAN), "--interactive", "--config", str(config)]
        )
    finally:
        released.set()

    assert result.exit_code == 1, f"Output: {result.output}"
    assert "timed out" in result.output
    assert "Shipped" not in result.output
