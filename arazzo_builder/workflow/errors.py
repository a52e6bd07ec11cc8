""" Error taxonomy for document edits. """

from dataclasses import dataclass


class WorkflowEditError(ValueError):
    """Base class for edits rejected by the engine."""


class DuplicateIdError(WorkflowEditError):
    """An edit would make two entities share an identifier within one scope."""

    def __init__(self, scope: str, identifier: str):
        self.scope = scope
        self.identifier = identifier
        super().__init__(f"Duplicate {scope} id: {identifier}")


class NotFoundError(WorkflowEditError):
    """An edit names a step, workflow or source that does not exist."""

    def __init__(self, kind: str, identifier):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind.capitalize()} not found: {identifier}")


@dataclass(frozen=True)
class DanglingReferenceWarning:
    """ An expression still naming a step that was deleted.

    Returned alongside the new state, never raised.
    """
    step_id: str            # step holding the expression ("" for workflow outputs)
    location: str           # e.g. "parameters[0].value", "outputs.petId"
    expression: str
    missing_step_id: str

    def __str__(self) -> str:
        owner = f"step {self.step_id}" if self.step_id else "workflow"
        return (f"{owner} {self.location} references deleted step "
                f"{self.missing_step_id}: {self.expression}")
