""" Editor state: the document revision plus what the user has focused. """
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from .errors import DanglingReferenceWarning
from .schema import Document

NODE_TYPES = ("step", "input", "output", "schema", "reusable-input")


@dataclass(frozen=True)
class Selection:
    step_id: Optional[str] = None
    node_type: Optional[str] = None      # one of NODE_TYPES
    component_key: Optional[str] = None

    @classmethod
    def of_step(cls, step_id: Optional[str]) -> "Selection":
        return cls(step_id=step_id, node_type="step" if step_id else None)

    def is_empty(self) -> bool:
        return self.step_id is None and self.node_type is None and self.component_key is None


EMPTY_SELECTION = Selection()


@dataclass(frozen=True)
class EditorState:
    """
    One revision of an editing session.

    ``workflow_index`` picks the active workflow by position; ``sources``
    holds parsed external API descriptions by name and is opaque here.
    """
    document: Document
    selection: Selection = EMPTY_SELECTION
    workflow_index: int = 0
    sources: Dict[str, Any] = field(default_factory=dict)
    needs_auto_layout: bool = False

    def evolve(self, **changes) -> "EditorState":
        return replace(self, **changes)


@dataclass
class EditResult:
    state: EditorState
    warnings: List[DanglingReferenceWarning] = field(default_factory=list)
