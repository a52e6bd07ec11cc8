""" Load, check and dump Arazzo documents as YAML. """

import logging
from typing import Any, Dict, List

import yaml

from .actions import dangling_targets
from .errors import DuplicateIdError, NotFoundError
from .schema import Document, Workflow, model_to_dict, validate_document

logger = logging.getLogger(__name__)


def load_yaml(yaml_text: str) -> Document:
    """
    Load a Document from a YAML (or JSON) string.
    """
    data = yaml.safe_load(yaml_text)
    if not isinstance(data, dict):
        raise ValueError("Document must be a mapping")
    return parse_document(data)


def parse_document(data: Dict[str, Any]) -> Document:
    # basic validation
    for key in ["arazzo", "info", "workflows"]:
        if key not in data:
            raise ValueError(f"Missing required field: {key}")
    if not isinstance(data["workflows"], list) or not data["workflows"]:
        raise ValueError("Missing or empty required field: workflows")

    document = validate_document(data)
    ensure_integrity(document)
    logger.debug("Loaded document %r with %d workflow(s)",
                 document.info.title, len(document.workflows))
    return document


def dump_yaml(document: Document) -> str:
    return yaml.safe_dump(model_to_dict(document), sort_keys=False, allow_unicode=True)


def workflow_errors(workflow: Workflow) -> List[str]:
    """
    Referential-integrity problems of one workflow (empty = consistent).
    """
    errors: List[str] = []
    seen = set()
    for step in workflow.steps:
        if step.step_id in seen:
            errors.append(f"Duplicate step id: {step.step_id}")
        seen.add(step.step_id)

    for step in workflow.steps:
        for field in ("on_success", "on_failure"):
            for target in dangling_targets(getattr(step, field), seen):
                errors.append(f"Step {step.step_id} jumps to unknown step: {target}")
    return errors


def ensure_integrity(document: Document) -> None:
    """Raise on duplicate workflow/step ids or same-workflow jumps to missing steps."""
    if not document.workflows:
        raise ValueError("Missing or empty required field: workflows")
    seen = set()
    for workflow in document.workflows:
        if workflow.workflow_id in seen:
            raise DuplicateIdError("workflow", workflow.workflow_id)
        seen.add(workflow.workflow_id)

        step_ids = set()
        for step in workflow.steps:
            if step.step_id in step_ids:
                raise DuplicateIdError("step", step.step_id)
            step_ids.add(step.step_id)
        for step in workflow.steps:
            for field in ("on_success", "on_failure"):
                missing = dangling_targets(getattr(step, field), step_ids)
                if missing:
                    raise NotFoundError("step", missing[0])
