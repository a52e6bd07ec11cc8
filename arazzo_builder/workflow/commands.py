""" Edit commands as values, and the reducer that applies them. """
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Type

from arazzo_builder.sources.registry import register_source

from . import engine
from .selection import EditorState, EditResult


@dataclass(frozen=True)
class LoadDocument:
    document: Any
    sources: Optional[Dict[str, Any]] = None

@dataclass(frozen=True)
class AddSource:
    name: str
    content: Any

@dataclass(frozen=True)
class AddWorkflow:
    workflow: Any

@dataclass(frozen=True)
class RenameWorkflow:
    old_workflow_id: str
    new_workflow_id: str

@dataclass(frozen=True)
class UpdateWorkflow:
    workflow_id: str
    updates: Dict[str, Any] = field(default_factory=dict)

@dataclass(frozen=True)
class DeleteWorkflow:
    workflow_id: str

@dataclass(frozen=True)
class AddStep:
    step: Any

@dataclass(frozen=True)
class DeleteStep:
    step_id: str

@dataclass(frozen=True)
class RenameStep:
    old_step_id: str
    new_step_id: str

@dataclass(frozen=True)
class UpdateStep:
    step_id: str
    updates: Dict[str, Any] = field(default_factory=dict)

@dataclass(frozen=True)
class UpdateComponents:
    updates: Dict[str, Any] = field(default_factory=dict)

@dataclass(frozen=True)
class DeleteComponent:
    kind: str       # inputs, schemas, parameters, successActions, failureActions
    name: str

@dataclass(frozen=True)
class AddConnection:
    source_step_id: str
    target_step_id: str

@dataclass(frozen=True)
class DeleteConnection:
    source_step_id: str
    target_step_id: str

@dataclass(frozen=True)
class InsertStepOnEdge:
    step: Any
    source_step_id: str
    target_step_id: str

@dataclass(frozen=True)
class ReorderStep:
    start_index: int
    end_index: int
    workflow_id: Optional[str] = None

@dataclass(frozen=True)
class ReorderInput:
    start_index: int
    end_index: int
    workflow_id: Optional[str] = None
    component_key: Optional[str] = None

@dataclass(frozen=True)
class ReorderOutput:
    start_index: int
    end_index: int
    workflow_id: Optional[str] = None
    step_id: Optional[str] = None

@dataclass(frozen=True)
class SelectStep:
    step_id: Optional[str]

@dataclass(frozen=True)
class SelectNode:
    node_type: Optional[str]
    node_id: Optional[str] = None

@dataclass(frozen=True)
class SetWorkflowIndex:
    index: int

@dataclass(frozen=True)
class ClearAutoLayout:
    pass


_HANDLERS: Dict[Type, Callable[[EditorState, Any], EditResult]] = {
    LoadDocument: lambda s, c: engine.load_document(s, c.document, c.sources),
    AddSource: lambda s, c: register_source(s, c.name, c.content),
    AddWorkflow: lambda s, c: engine.add_workflow(s, c.workflow),
    RenameWorkflow: lambda s, c: engine.rename_workflow(s, c.old_workflow_id, c.new_workflow_id),
    UpdateWorkflow: lambda s, c: engine.update_workflow(s, c.workflow_id, c.updates),
    DeleteWorkflow: lambda s, c: engine.delete_workflow(s, c.workflow_id),
    AddStep: lambda s, c: engine.add_step(s, c.step),
    DeleteStep: lambda s, c: engine.delete_step(s, c.step_id),
    RenameStep: lambda s, c: engine.rename_step(s, c.old_step_id, c.new_step_id),
    UpdateStep: lambda s, c: engine.update_step(s, c.step_id, c.updates),
    UpdateComponents: lambda s, c: engine.update_components(s, c.updates),
    DeleteComponent: lambda s, c: engine.delete_component(s, c.kind, c.name),
    AddConnection: lambda s, c: engine.add_connection(s, c.source_step_id, c.target_step_id),
    DeleteConnection: lambda s, c: engine.delete_connection(s, c.source_step_id, c.target_step_id),
    InsertStepOnEdge: lambda s, c: engine.insert_step_on_edge(s, c.step, c.source_step_id, c.target_step_id),
    ReorderStep: lambda s, c: engine.reorder_step(s, c.start_index, c.end_index, c.workflow_id),
    ReorderInput: lambda s, c: engine.reorder_input(s, c.start_index, c.end_index, c.workflow_id, c.component_key),
    ReorderOutput: lambda s, c: engine.reorder_output(s, c.start_index, c.end_index, c.workflow_id, c.step_id),
    SelectStep: lambda s, c: engine.select_step(s, c.step_id),
    SelectNode: lambda s, c: engine.select_node(s, c.node_type, c.node_id),
    SetWorkflowIndex: lambda s, c: engine.set_workflow_index(s, c.index),
    ClearAutoLayout: lambda s, c: engine.clear_auto_layout(s),
}


def apply(state: EditorState, command) -> EditResult:
    """Apply one command to ``state``; the input state is never modified."""
    handler = _HANDLERS.get(type(command))
    if not handler:
        raise ValueError(f"Unsupported command: {type(command).__name__}")
    return handler(state, command)
