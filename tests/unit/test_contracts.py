"""Workflow parsing and data model tests."""

import json

import pytest
from pydantic import ValidationError

from stagecoach.contracts import (
    CodeBuildStep,
    ExtensionStep,
    HumanStep,
    IteratorState,
    StageResult,
    StepResult,
    WaitStep,
    parse_workflow,
)
from stagecoach.exceptions import InvalidInputError


def test_parse_counts_stages():
    definition = parse_workflow(
        '{"stages":[{"name":"s1","steps":[]},{"name":"s2","steps":[]}]}'
    )
    assert definition.count == 2
    assert [s.name for s in definition.stages] == ["s1", "s2"]


def test_parse_accepts_bytes_and_mappings():
    payload = {"stages": [{"name": "only", "steps": []}]}
    assert parse_workflow(json.dumps(payload).encode()).count == 1
    assert parse_workflow(payload).count == 1


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[]",
        "{}",
        '{"stages": "s1"}',
        '{"stages": []}',
        '{"stages": [{"steps": []}]}',
        '{"stages": [{"name": "s1", "steps": [{"name": "no-type"}]}]}',
        '{"stages": [{"name": "s1", "steps": [{"type": "Wait", "seconds": 1}]}]}',
    ],
)
def test_parse_rejects_malformed_input(raw):
    with pytest.raises(InvalidInputError):
        parse_workflow(raw)


def test_builtin_steps_parse_into_typed_variants():
    definition = parse_workflow(
        {
            "stages": [
                {
                    "name": "build",
                    "steps": [
                        {
                            "name": "api",
                            "type": "CodeBuild",
                            "codeBuildName": "api-build",
                            "sourceVersion": "main",
                            "environmentVariableOverrides": [
                                {"name": "STAGE", "value": "qa"}
                            ],
                        },
                        {"name": "ok?", "type": "Human", "message": "Ship it?"},
                        {"name": "pause", "type": "Wait", "seconds": 5},
                    ],
                }
            ]
        }
    )
    build, human, pause = definition.stages[0].steps
    assert isinstance(build, CodeBuildStep)
    assert build.code_build_name == "api-build"
    assert build.source_version == "main"
    assert build.environment_variable_overrides == [{"name": "STAGE", "value": "qa"}]
    assert isinstance(human, HumanStep)
    assert human.message == "Ship it?"
    assert isinstance(pause, WaitStep)
    assert pause.seconds == 5


def test_unknown_step_type_is_kept_as_extension():
    definition = parse_workflow(
        {
            "stages": [
                {
                    "name": "s1",
                    "steps": [{"name": "odd", "type": "Frobnicate", "level": 11}],
                }
            ]
        }
    )
    step = definition.stages[0].steps[0]
    assert isinstance(step, ExtensionStep)
    assert step.type == "Frobnicate"
    assert step.params == {"level": 11}
    assert definition.step_types() == {"Frobnicate"}


def test_definition_is_immutable():
    definition = parse_workflow({"stages": [{"name": "s1"}]})
    with pytest.raises(ValidationError):
        definition.stages = ()


def test_iterator_continue_flag_follows_index():
    state = IteratorState(count=3)
    assert state.index == -1
    assert state.continue_flag is True

    flags = []
    while state.continue_flag:
        state = state.advance()
        flags.append(state.continue_flag)

    assert state.index == 2
    assert flags == [True, True, False]
    with pytest.raises(ValueError):
        state.advance()


def test_iterator_with_no_stages_does_not_continue():
    assert IteratorState(count=0).continue_flag is False


def test_iterator_handoff_wire_shape():
    definition = parse_workflow(
        {"stages": [{"name": "s1", "steps": [{"name": "w", "type": "Wait", "seconds": 0}]}]}
    )
    state = IteratorState(count=definition.count).advance()
    handoff = state.handoff(definition).model_dump(by_alias=True)

    assert handoff["index"] == 0
    assert handoff["count"] == 1
    assert handoff["continue"] is False
    assert handoff["currentStageSteps"]["name"] == "s1"


def test_stage_result_failure_is_any_failed_step():
    ok = StepResult(step_name="a", step_type="Wait", success=True)
    bad = StepResult(step_name="b", step_type="Wait", success=False, message="nope")

    assert StageResult(stage_name="empty", index=0).failed is False
    assert StageResult(stage_name="good", index=0, results=[ok]).failed is False
    failed = StageResult(stage_name="mixed", index=0, results=[ok, bad])
    assert failed.failed is True
    assert failed.failures == [bad]


def test_mistyped_step_parameters_still_parse():
    definition = parse_workflow(
        {
            "stages": [
                {
                    "name": "s1",
                    "steps": [
                        {"name": "tell", "type": "Notify", "message": 123},
                        {"name": "gate", "type": "Human", "message": None},
                        {"name": "api", "type": "CodeBuild", "codeBuildName": 42},
                    ],
                }
            ]
        }
    )
    tell, gate, api = definition.stages[0].steps
    assert tell.message == 123
    assert gate.message is None
    assert api.code_build_name == 42
