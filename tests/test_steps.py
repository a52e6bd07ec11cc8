"""Tests for the step collection."""

import pytest
from arazzo_builder.workflow.errors import DuplicateIdError, NotFoundError
from arazzo_builder.workflow.schema import Step
from arazzo_builder.workflow.steps import StepCollection, move_item


def _steps():
    return [
        Step.model_validate({"stepId": "a", "onSuccess": [{"name": "goto-b", "type": "goto", "stepId": "b"}]}),
        Step.model_validate({"stepId": "b", "outputs": {"id": "$response.body#/id"}}),
        Step.model_validate({"stepId": "c", "parameters": [
            {"name": "id", "in": "path", "value": "$steps.b.outputs.id"}]}),
    ]


def test_insert_rejects_duplicate():
    """Test inserting an existing stepId fails and leaves the list alone."""
    steps = StepCollection(_steps())
    with pytest.raises(DuplicateIdError, match="Duplicate step id: b"):
        steps.insert(Step(step_id="b"))
    assert steps.ids() == ["a", "b", "c"]


def test_insert_appends():
    """Test new steps go to the end."""
    steps = StepCollection(_steps())
    steps.insert(Step(step_id="d"))
    assert steps.ids() == ["a", "b", "c", "d"]


def test_remove_returns_step_and_referencing_siblings():
    """Test remove reports the steps that still point at the removed one."""
    steps = StepCollection(_steps())
    removed, referencing = steps.remove("b")

    assert removed.step_id == "b"
    assert [s.step_id for s in referencing] == ["a", "c"]
    assert steps.ids() == ["a", "c"]


def test_remove_absent_is_noop():
    """Test removing an unknown id changes nothing."""
    steps = StepCollection(_steps())
    assert steps.remove("zzz") == (None, [])
    assert len(steps) == 3


def test_rename_returns_referencing_steps():
    """Test rename swaps the id and lists the steps to rewrite."""
    steps = StepCollection(_steps())
    affected = steps.rename("b", "lookup")

    assert steps.ids() == ["a", "lookup", "c"]
    assert [s.step_id for s in affected] == ["a", "c"]


def test_rename_collision():
    """Test renaming onto another step's id is rejected."""
    steps = StepCollection(_steps())
    with pytest.raises(DuplicateIdError):
        steps.rename("a", "c")
    assert steps.ids() == ["a", "b", "c"]


def test_rename_unknown_step():
    """Test renaming a missing step raises NotFoundError."""
    with pytest.raises(NotFoundError, match="Step not found: nope"):
        StepCollection(_steps()).rename("nope", "x")


def test_rename_to_same_id_is_noop():
    steps = StepCollection(_steps())
    assert steps.rename("a", "a") == []
    assert steps.ids() == ["a", "b", "c"]


def test_reorder():
    """Test moving one step shifts the others and keeps ids."""
    steps = StepCollection(_steps())
    assert steps.reorder(0, 2) is True
    assert steps.ids() == ["b", "c", "a"]


def test_reorder_out_of_range_is_noop():
    steps = StepCollection(_steps())
    assert steps.reorder(0, 3) is False
    assert steps.reorder(-1, 0) is False
    assert steps.ids() == ["a", "b", "c"]


def test_move_item():
    items = ["x", "y", "z"]
    assert move_item(items, 2, 0)
    assert items == ["z", "x", "y"]
