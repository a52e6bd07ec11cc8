"""
Document mutation engine.

Every operation takes an ``EditorState`` and returns an ``EditResult`` with
the next state. Work happens on a deep copy of the document, so a raised
error leaves the caller's revision untouched, and no-ops hand back the
very same state object.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Union

from arazzo_builder.config.settings import BuilderSettings, get_settings

from .actions import dangling_targets, make_goto, remove_targeting, retarget, splice_insert, targets
from .compiler import ensure_integrity, parse_document
from .errors import DanglingReferenceWarning, DuplicateIdError, NotFoundError, WorkflowEditError
from .expressions import (
    find_step_references,
    iter_step_expressions,
    rewrite_step_expressions,
    rewrite_workflow_outputs,
)
from .schema import Components, Document, Info, Step, Workflow, merge_fields
from .selection import EMPTY_SELECTION, NODE_TYPES, EditorState, EditResult, Selection
from .steps import StepCollection, move_item

logger = logging.getLogger(__name__)

StepLike = Union[Step, Dict[str, Any]]
WorkflowLike = Union[Workflow, Dict[str, Any]]

_STEP_ID_KEYS = ("stepId", "step_id")
_WORKFLOW_ID_KEYS = ("workflowId", "workflow_id")


def new_editor_state(settings: Optional[BuilderSettings] = None) -> EditorState:
    """A blank document holding one empty workflow."""
    settings = settings or get_settings()
    document = Document(
        arazzo=settings.arazzo_version,
        info=Info(title=settings.default_title, version="1.0.0"),
        workflows=[Workflow(workflow_id=settings.default_workflow_id)],
    )
    return EditorState(document=document)


# -------------------------
# HELPERS
# -------------------------

def _working_copy(state: EditorState) -> Document:
    return state.document.model_copy(deep=True)


def _active(document: Document, state: EditorState) -> Workflow:
    if not 0 <= state.workflow_index < len(document.workflows):
        raise NotFoundError("workflow", state.workflow_index)
    return document.workflows[state.workflow_index]


def _find_workflow(document: Document, workflow_id: str) -> Optional[Workflow]:
    for workflow in document.workflows:
        if workflow.workflow_id == workflow_id:
            return workflow
    return None


def _target_workflow(document: Document, state: EditorState, workflow_id: Optional[str]) -> Optional[Workflow]:
    if workflow_id is None:
        return _active(document, state)
    return _find_workflow(document, workflow_id)


def _as_step(step: StepLike) -> Step:
    if isinstance(step, Step):
        return step.model_copy(deep=True)
    return Step.model_validate(step)


def _as_workflow(workflow: WorkflowLike) -> Workflow:
    if isinstance(workflow, Workflow):
        return workflow.model_copy(deep=True)
    return Workflow.model_validate(workflow)


def _drop_empty_actions(step: Step) -> Step:
    # an empty action list is written as an absent key
    step.on_success = step.on_success or None
    step.on_failure = step.on_failure or None
    return step


def _check_targets(step: Step, known_ids) -> None:
    for field in ("on_success", "on_failure"):
        missing = dangling_targets(getattr(step, field), set(known_ids))
        if missing:
            raise NotFoundError("step", missing[0])


def _pop_id(updates: Dict[str, Any], keys) -> Optional[str]:
    new_id = None
    for key in keys:
        if key in updates:
            new_id = updates.pop(key)
    return new_id


def _reorder_mapping(mapping: Optional[Dict[str, Any]], start: int, end: int) -> Optional[Dict[str, Any]]:
    if not mapping:
        return None
    keys = list(mapping)
    if not move_item(keys, start, end):
        return None
    return {k: mapping[k] for k in keys}


def generate_step_id(state: EditorState, prefix: Optional[str] = None) -> str:
    """First unused ``<prefix>-<n>`` in the active workflow."""
    prefix = prefix or get_settings().step_id_prefix
    used = set(StepCollection(_active(state.document, state).steps).ids())
    n = 1
    while f"{prefix}-{n}" in used:
        n += 1
    return f"{prefix}-{n}"


# -------------------------
# STEP OPERATIONS
# -------------------------

def add_step(state: EditorState, step: StepLike) -> EditResult:
    step = _drop_empty_actions(_as_step(step))
    document = _working_copy(state)
    steps = StepCollection(_active(document, state).steps)
    steps.insert(step)
    _check_targets(step, steps.ids())
    logger.debug("Added step %s", step.step_id)
    return EditResult(state.evolve(document=document))


def delete_step(state: EditorState, step_id: str) -> EditResult:
    """
    Remove a step and every branch action aimed at it.

    Expressions naming the step are left in place and reported as warnings.
    Deleting an absent step is a no-op.
    """
    document = _working_copy(state)
    workflow = _active(document, state)
    steps = StepCollection(workflow.steps)
    removed, referencing = steps.remove(step_id)
    if removed is None:
        return EditResult(state)

    for step in steps:
        step.on_success = remove_targeting(step.on_success, step_id)
        step.on_failure = remove_targeting(step.on_failure, step_id)

    warnings: List[DanglingReferenceWarning] = []
    for step in referencing:
        for location, expr in iter_step_expressions(step):
            if step_id in find_step_references(expr):
                warnings.append(DanglingReferenceWarning(step.step_id, location, expr, step_id))
    for key, expr in (workflow.outputs or {}).items():
        if step_id in find_step_references(expr):
            warnings.append(DanglingReferenceWarning("", f"outputs.{key}", expr, step_id))
    for warning in warnings:
        logger.warning("Dangling reference: %s", warning)

    selection = EMPTY_SELECTION if state.selection.step_id == step_id else state.selection
    logger.debug("Deleted step %s", step_id)
    return EditResult(state.evolve(document=document, selection=selection), warnings)


def rename_step(state: EditorState, old_id: str, new_id: str) -> EditResult:
    """
    Rename a step and rewrite every action target, action name and
    ``$steps.<old_id>`` expression in the active workflow.
    """
    if not new_id:
        raise ValueError("stepId must not be empty")
    document = _working_copy(state)
    workflow = _active(document, state)
    steps = StepCollection(workflow.steps)
    if old_id == new_id:
        steps.require(old_id)
        return EditResult(state)

    affected = steps.rename(old_id, new_id)
    for step in affected:
        step.on_success = retarget(step.on_success, old_id, new_id)
        step.on_failure = retarget(step.on_failure, old_id, new_id)
        rewrite_step_expressions(step, old_id, new_id)
    rewrite_workflow_outputs(workflow, old_id, new_id)

    selection = state.selection
    if selection.step_id == old_id:
        selection = replace(selection, step_id=new_id)
    logger.debug("Renamed step %s -> %s (%d referencing step(s))", old_id, new_id, len(affected))
    return EditResult(state.evolve(document=document, selection=selection))


def update_step(state: EditorState, step_id: str, updates: Dict[str, Any]) -> EditResult:
    """
    Shallow-merge ``updates`` into a step. A new stepId among the updates is
    applied through ``rename_step`` first. Unknown steps are a no-op.
    """
    if StepCollection(_active(state.document, state).steps).get(step_id) is None:
        return EditResult(state)

    updates = dict(updates)
    new_id = _pop_id(updates, _STEP_ID_KEYS)
    result = EditResult(state)
    if new_id and new_id != step_id:
        result = rename_step(state, step_id, new_id)
        step_id = new_id
    if not updates:
        return result

    current = result.state
    document = _working_copy(current)
    steps = _active(document, current).steps
    index = StepCollection(steps).index_of(step_id)
    merged = _drop_empty_actions(merge_fields(steps[index], updates))
    _check_targets(merged, StepCollection(steps).ids())
    steps[index] = merged
    logger.debug("Updated step %s: %s", step_id, sorted(updates))
    return EditResult(current.evolve(document=document), result.warnings)


def add_connection(state: EditorState, source_id: str, target_id: str) -> EditResult:
    """
    Append ``goto-<target>`` to the source's onSuccess. No duplicate edge: a
    goto already aimed at the target makes this a no-op, as does a missing step.
    """
    document = _working_copy(state)
    steps = StepCollection(_active(document, state).steps)
    source = steps.get(source_id)
    if source is None or target_id not in steps:
        return EditResult(state)
    if any(targets(a, target_id, kind="goto") for a in source.on_success or []):
        return EditResult(state)
    source.on_success = list(source.on_success or []) + [make_goto(target_id)]
    logger.debug("Connected %s -> %s", source_id, target_id)
    return EditResult(state.evolve(document=document))


def delete_connection(state: EditorState, source_id: str, target_id: str) -> EditResult:
    """Drop the goto actions from source to target; other action types stay."""
    document = _working_copy(state)
    source = StepCollection(_active(document, state).steps).get(source_id)
    if source is None or not any(targets(a, target_id, kind="goto") for a in source.on_success or []):
        return EditResult(state)
    source.on_success = remove_targeting(source.on_success, target_id, kind="goto")
    logger.debug("Disconnected %s -> %s", source_id, target_id)
    return EditResult(state.evolve(document=document))


def insert_step_on_edge(state: EditorState, step: StepLike, source_id: str, target_id: str) -> EditResult:
    """
    Route the edge source -> target through a new step.

    The new step is appended last, its onSuccess replaced by a single goto to
    the old target, and it becomes the selection.
    """
    step = _as_step(step)
    document = _working_copy(state)
    steps = StepCollection(_active(document, state).steps)
    source = steps.require(source_id)
    steps.require(target_id)
    if step.step_id in steps:
        raise DuplicateIdError("step", step.step_id)

    source.on_success = splice_insert(source.on_success, target_id, step.step_id)
    step.on_success = [make_goto(target_id)]
    steps.insert(step)
    _check_targets(step, steps.ids())
    logger.debug("Inserted step %s on edge %s -> %s", step.step_id, source_id, target_id)
    return EditResult(state.evolve(document=document, selection=Selection.of_step(step.step_id)))


def reorder_step(state: EditorState, start: int, end: int, workflow_id: Optional[str] = None) -> EditResult:
    document = _working_copy(state)
    workflow = _target_workflow(document, state, workflow_id)
    if workflow is None or not StepCollection(workflow.steps).reorder(start, end):
        return EditResult(state)
    return EditResult(state.evolve(document=document))


def reorder_input(state: EditorState, start: int, end: int, workflow_id: Optional[str] = None,
                  component_key: Optional[str] = None) -> EditResult:
    """Move one input property, of a workflow or of a reusable ``components.inputs`` entry."""
    document = _working_copy(state)
    if component_key is not None:
        inputs = (document.components.inputs or {}).get(component_key) if document.components else None
    else:
        workflow = _target_workflow(document, state, workflow_id)
        inputs = workflow.inputs if workflow else None
    if inputs is None:
        return EditResult(state)
    reordered = _reorder_mapping(inputs.properties, start, end)
    if reordered is None:
        return EditResult(state)
    inputs.properties = reordered
    return EditResult(state.evolve(document=document))


def reorder_output(state: EditorState, start: int, end: int, workflow_id: Optional[str] = None,
                   step_id: Optional[str] = None) -> EditResult:
    """Move one output of a workflow, or of one of its steps when ``step_id`` is given."""
    document = _working_copy(state)
    owner = _target_workflow(document, state, workflow_id)
    if owner is not None and step_id is not None:
        owner = owner.get_step(step_id)
    if owner is None:
        return EditResult(state)
    reordered = _reorder_mapping(owner.outputs, start, end)
    if reordered is None:
        return EditResult(state)
    owner.outputs = reordered
    return EditResult(state.evolve(document=document))


# -------------------------
# DOCUMENT & WORKFLOW OPERATIONS
# -------------------------

def load_document(state: EditorState, document: Union[Document, Dict[str, Any]],
                  sources: Optional[Dict[str, Any]] = None) -> EditResult:
    """
    Replace the whole document, e.g. after the text editor re-parsed it.

    Passing ``sources`` also replaces the source registry and asks the canvas
    for a fresh layout.
    """
    if isinstance(document, Document):
        document = document.model_copy(deep=True)
        ensure_integrity(document)
    else:
        document = parse_document(document)
    changes: Dict[str, Any] = dict(document=document, selection=EMPTY_SELECTION, workflow_index=0)
    if sources is not None:
        changes.update(sources=dict(sources), needs_auto_layout=True)
    logger.info("Loaded document %r", document.info.title)
    return EditResult(state.evolve(**changes))


def add_workflow(state: EditorState, workflow: WorkflowLike) -> EditResult:
    workflow = _as_workflow(workflow)
    document = _working_copy(state)
    if _find_workflow(document, workflow.workflow_id) is not None:
        raise DuplicateIdError("workflow", workflow.workflow_id)
    document.workflows.append(workflow)
    ensure_integrity(document)
    logger.debug("Added workflow %s", workflow.workflow_id)
    return EditResult(state.evolve(document=document))


def rename_workflow(state: EditorState, old_id: str, new_id: str) -> EditResult:
    """
    Rename a workflow. Steps and actions of other workflows that name it are
    not rewritten.
    """
    if not new_id:
        raise ValueError("workflowId must not be empty")
    document = _working_copy(state)
    workflow = _find_workflow(document, old_id)
    if workflow is None:
        raise NotFoundError("workflow", old_id)
    if new_id == old_id:
        return EditResult(state)
    if _find_workflow(document, new_id) is not None:
        raise DuplicateIdError("workflow", new_id)
    workflow.workflow_id = new_id
    logger.debug("Renamed workflow %s -> %s", old_id, new_id)
    return EditResult(state.evolve(document=document))


def update_workflow(state: EditorState, workflow_id: str, updates: Dict[str, Any]) -> EditResult:
    if _find_workflow(state.document, workflow_id) is None:
        raise NotFoundError("workflow", workflow_id)

    updates = dict(updates)
    new_id = _pop_id(updates, _WORKFLOW_ID_KEYS)
    result = EditResult(state)
    if new_id and new_id != workflow_id:
        result = rename_workflow(state, workflow_id, new_id)
        workflow_id = new_id
    if not updates:
        return result

    current = result.state
    document = _working_copy(current)
    index = next(i for i, wf in enumerate(document.workflows) if wf.workflow_id == workflow_id)
    document.workflows[index] = merge_fields(document.workflows[index], updates)
    ensure_integrity(document)

    selection = current.selection
    if (index == current.workflow_index and selection.step_id is not None
            and document.workflows[index].get_step(selection.step_id) is None):
        selection = EMPTY_SELECTION
    return EditResult(current.evolve(document=document, selection=selection))


def delete_workflow(state: EditorState, workflow_id: str) -> EditResult:
    document = _working_copy(state)
    index = next((i for i, wf in enumerate(document.workflows) if wf.workflow_id == workflow_id), None)
    if index is None:
        return EditResult(state)
    if len(document.workflows) == 1:
        raise WorkflowEditError("A document must keep at least one workflow")
    del document.workflows[index]

    active = state.workflow_index
    if index <= active:
        active = max(0, active - 1)
    logger.debug("Deleted workflow %s", workflow_id)
    return EditResult(state.evolve(document=document, workflow_index=active, selection=EMPTY_SELECTION))


def set_workflow_index(state: EditorState, index: int) -> EditResult:
    if not 0 <= index < len(state.document.workflows):
        raise NotFoundError("workflow", index)
    return EditResult(state.evolve(workflow_index=index, selection=EMPTY_SELECTION))


# -------------------------
# COMPONENTS
# -------------------------

_COMPONENT_FIELDS = {
    "inputs": "inputs",
    "schemas": "schemas",
    "parameters": "parameters",
    "successActions": "success_actions",
    "failureActions": "failure_actions",
}


def update_components(state: EditorState, updates: Dict[str, Any]) -> EditResult:
    document = _working_copy(state)
    document.components = merge_fields(document.components or Components(), updates)
    return EditResult(state.evolve(document=document))


def delete_component(state: EditorState, kind: str, name: str) -> EditResult:
    if kind not in _COMPONENT_FIELDS:
        raise ValueError(f"Unsupported component type: {kind}")
    document = _working_copy(state)
    if document.components is None:
        return EditResult(state)
    field = _COMPONENT_FIELDS[kind]
    entries = getattr(document.components, field)
    if not entries or name not in entries:
        return EditResult(state)
    del entries[name]
    setattr(document.components, field, entries or None)

    selection = state.selection
    if selection.component_key == name:
        selection = EMPTY_SELECTION
    return EditResult(state.evolve(document=document, selection=selection))


# -------------------------
# SELECTION
# -------------------------

def select_step(state: EditorState, step_id: Optional[str]) -> EditResult:
    if step_id is not None:
        StepCollection(_active(state.document, state).steps).require(step_id)
    return EditResult(state.evolve(selection=Selection.of_step(step_id)))


def select_node(state: EditorState, node_type: Optional[str], node_id: Optional[str] = None) -> EditResult:
    if node_type is not None and node_type not in NODE_TYPES:
        raise ValueError(f"Unsupported node type: {node_type}")
    if node_type == "step":
        return select_step(state, node_id)
    selection = Selection(node_type=node_type, component_key=node_id) if node_type else EMPTY_SELECTION
    return EditResult(state.evolve(selection=selection))


def clear_auto_layout(state: EditorState) -> EditResult:
    if not state.needs_auto_layout:
        return EditResult(state)
    return EditResult(state.evolve(needs_auto_layout=False))
