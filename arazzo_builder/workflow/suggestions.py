""" Expression candidates offered by inspector fields. """
from dataclasses import dataclass
from typing import List, Optional

from .schema import Workflow

_CONTEXT = [
    ("$url", "Request URL"),
    ("$method", "HTTP Method"),
    ("$statusCode", "Response Status Code"),
    ("$response.body", "Response Body"),
    ("$response.header.", "Response Header"),
]


@dataclass(frozen=True)
class ExpressionSuggestion:
    expression: str
    label: str
    kind: str       # "step", "input" or "context"


def expression_suggestions(workflow: Workflow, current_step_id: Optional[str] = None) -> List[ExpressionSuggestion]:
    """
    Outputs of the other steps, then workflow inputs, then context values.
    A read-only view; nothing here touches the document.
    """
    suggestions: List[ExpressionSuggestion] = []
    for step in workflow.steps:
        if step.step_id == current_step_id:
            continue
        for key in step.outputs or {}:
            suggestions.append(ExpressionSuggestion(
                f"$steps.{step.step_id}.outputs.{key}", f"{step.step_id}.{key}", "step"))

    properties = workflow.inputs.properties if workflow.inputs else None
    for key in properties or {}:
        suggestions.append(ExpressionSuggestion(f"$inputs.{key}", f"Input: {key}", "input"))

    for expression, label in _CONTEXT:
        suggestions.append(ExpressionSuggestion(expression, label, "context"))
    return suggestions
