"""Tests for applying edit commands."""

import pytest
from arazzo_builder.workflow import commands
from arazzo_builder.workflow.compiler import load_yaml
from arazzo_builder.workflow.selection import EditorState


YAML = """
arazzo: 1.0.1
info: { title: Pets, version: 1.0.0 }
workflows:
  - workflowId: adopt
    steps:
      - stepId: find
        onSuccess:
          - { name: goto-reserve, type: goto, stepId: reserve }
      - stepId: reserve
"""


def _state() -> EditorState:
    return EditorState(document=load_yaml(YAML))


def _ids(state: EditorState):
    return [s.step_id for s in state.document.workflows[0].steps]


def test_apply_sequence_of_commands():
    """Test a small editing session expressed as commands."""
    state = _state()
    for command in [
        commands.AddStep({"stepId": "pay"}),
        commands.AddConnection("reserve", "pay"),
        commands.RenameStep("reserve", "hold"),
        commands.SelectStep("hold"),
    ]:
        state = commands.apply(state, command).state

    steps = state.document.workflows[0].steps
    assert _ids(state) == ["find", "hold", "pay"]
    assert steps[0].on_success[0].step_id == "hold"
    assert steps[1].on_success[0].step_id == "pay"
    assert state.selection.step_id == "hold"


def test_apply_leaves_input_state_untouched():
    state = _state()
    commands.apply(state, commands.DeleteStep("reserve"))
    assert _ids(state) == ["find", "reserve"]


def test_apply_insert_on_edge():
    result = commands.apply(_state(), commands.InsertStepOnEdge({"stepId": "check"}, "find", "reserve"))
    assert _ids(result.state) == ["find", "reserve", "check"]
    assert result.state.selection.step_id == "check"


def test_apply_add_source():
    """Test sources go through the source registry."""
    result = commands.apply(_state(), commands.AddSource("petstore", {"paths": {}}))
    assert [s.name for s in result.state.document.source_descriptions] == ["petstore"]
    assert "petstore" in result.state.sources


def test_apply_unknown_command():
    """Test that unsupported commands raise ValueError."""
    with pytest.raises(ValueError, match="Unsupported command: str"):
        commands.apply(_state(), "delete everything")
