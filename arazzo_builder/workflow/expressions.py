"""
Scan and rewrite runtime expressions.

Expressions are opaque interpolation strings. The only structure the editor
relies on is the ``$steps.<stepId>`` prefix, detected and replaced textually;
nothing here parses or evaluates an expression.
"""

import re
from typing import Any, Dict, Iterator, Optional, Set, Tuple

from .schema import BranchAction, Parameter, Step, Workflow

# Arazzo stepIds match [A-Za-z0-9_\-]+
_ID = r"[\w-]+"
_STEP_REF = re.compile(r"\$steps\.(" + _ID + r")")

_CONTEXT_TOKENS = {"$url": "url", "$method": "method", "$statusCode": "statusCode"}
_INPUT = re.compile(r"\$inputs\.(" + _ID + r")")
_STEP_OUTPUT = re.compile(r"\$steps\.(" + _ID + r")\.outputs\.(" + _ID + r")")
_REQUEST = re.compile(r"\$request\.(header|query|path)\.(" + _ID + r")")
_RESPONSE_HEADER = re.compile(r"\$response\.header\.(" + _ID + r")")
_COMPONENT = re.compile(r"\$components\.(inputs|parameters|successActions|failureActions)\.(" + _ID + r")")


def find_step_references(expr: Any) -> Set[str]:
    """Return the stepIds mentioned as ``$steps.<stepId>`` in ``expr``."""
    if not isinstance(expr, str):
        return set()
    return set(_STEP_REF.findall(expr))


def rewrite_step_reference(expr: Any, old_id: str, new_id: str) -> Any:
    """
    Replace ``$steps.<old_id>`` with ``$steps.<new_id>``.

    The match is bounded on the right so ``$steps.step-1`` does not rewrite
    ``$steps.step-10``. Non-string values come back unchanged.
    """
    if not isinstance(expr, str) or f"$steps.{old_id}" not in expr:
        return expr
    pattern = re.compile(re.escape(f"$steps.{old_id}") + r"(?![\w-])")
    return pattern.sub(lambda _: f"$steps.{new_id}", expr)


def extract_expression_source(expr: str) -> Optional[Dict[str, str]]:
    """ Classify where an expression reads its value from, or None. """
    if expr in _CONTEXT_TOKENS:
        return {"type": _CONTEXT_TOKENS[expr]}

    match = _INPUT.search(expr)
    if match:
        return {"type": "inputs", "source": match.group(1)}

    match = _STEP_OUTPUT.search(expr)
    if match:
        return {"type": "steps", "source": match.group(1), "field": match.group(2)}

    if expr == "$request.body":
        return {"type": "request", "part": "body"}
    match = _REQUEST.search(expr)
    if match:
        return {"type": "request", "part": match.group(1), "name": match.group(2)}

    if expr == "$response.body":
        return {"type": "response", "part": "body"}
    match = _RESPONSE_HEADER.search(expr)
    if match:
        return {"type": "response", "part": "header", "name": match.group(1)}

    match = _COMPONENT.search(expr)
    if match:
        return {"type": "components", "category": match.group(1), "name": match.group(2)}

    return None


# -------------------------
# STEP-LEVEL SCANNING
# -------------------------

def _walk_payload(value: Any, location: str) -> Iterator[Tuple[str, str]]:
    if isinstance(value, str):
        yield location, value
    elif isinstance(value, dict):
        for key, item in value.items():
            yield from _walk_payload(item, f"{location}.{key}")
    elif isinstance(value, list):
        for i, item in enumerate(value):
            yield from _walk_payload(item, f"{location}[{i}]")


def iter_step_expressions(step: Step) -> Iterator[Tuple[str, str]]:
    """Yield ``(location, string)`` for every expression-bearing field of a step."""
    for i, param in enumerate(step.parameters or []):
        if isinstance(param, Parameter) and isinstance(param.value, str):
            yield f"parameters[{i}].value", param.value
    if step.request_body is not None:
        yield from _walk_payload(step.request_body.payload, "requestBody.payload")
    for i, criterion in enumerate(step.success_criteria or []):
        yield f"successCriteria[{i}].condition", criterion.condition
    for key, value in (step.outputs or {}).items():
        yield f"outputs.{key}", value
    for field in ("on_success", "on_failure"):
        for i, action in enumerate(getattr(step, field) or []):
            if not isinstance(action, BranchAction):
                continue
            label = "onSuccess" if field == "on_success" else "onFailure"
            for j, criterion in enumerate(action.criteria or []):
                yield f"{label}[{i}].criteria[{j}].condition", criterion.condition


def step_references(step: Step) -> Set[str]:
    """All stepIds named by any expression inside ``step``."""
    found: Set[str] = set()
    for _, expr in iter_step_expressions(step):
        found |= find_step_references(expr)
    return found


def _rewrite_payload(value: Any, old_id: str, new_id: str) -> Any:
    if isinstance(value, str):
        return rewrite_step_reference(value, old_id, new_id)
    if isinstance(value, dict):
        return {k: _rewrite_payload(v, old_id, new_id) for k, v in value.items()}
    if isinstance(value, list):
        return [_rewrite_payload(v, old_id, new_id) for v in value]
    return value


def rewrite_step_expressions(step: Step, old_id: str, new_id: str) -> None:
    """Rewrite every ``$steps.<old_id>`` inside ``step`` in place."""
    for param in step.parameters or []:
        if isinstance(param, Parameter):
            param.value = rewrite_step_reference(param.value, old_id, new_id)
    if step.request_body is not None:
        step.request_body.payload = _rewrite_payload(step.request_body.payload, old_id, new_id)
    for criterion in step.success_criteria or []:
        criterion.condition = rewrite_step_reference(criterion.condition, old_id, new_id)
    if step.outputs:
        step.outputs = {k: rewrite_step_reference(v, old_id, new_id) for k, v in step.outputs.items()}
    for actions in (step.on_success, step.on_failure):
        for action in actions or []:
            if isinstance(action, BranchAction):
                for criterion in action.criteria or []:
                    criterion.condition = rewrite_step_reference(criterion.condition, old_id, new_id)


def rewrite_workflow_outputs(workflow: Workflow, old_id: str, new_id: str) -> None:
    if workflow.outputs:
        workflow.outputs = {k: rewrite_step_reference(v, old_id, new_id)
                            for k, v in workflow.outputs.items()}
