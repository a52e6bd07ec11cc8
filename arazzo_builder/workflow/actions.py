"""
Branch actions: the ordered onSuccess / onFailure lists of a step.

Each entry is either an inline ``BranchAction`` or a ``ReusableReference``
into ``components``. References are opaque here and always pass through.
An empty list is collapsed to ``None`` so the field is omitted on output.
"""

from typing import List, Optional, Set

from .schema import ActionEntry, BranchAction, ReusableReference

GOTO_PREFIX = "goto-"


def is_reference(entry) -> bool:
    return isinstance(entry, ReusableReference)


def make_goto(target_step_id: str) -> BranchAction:
    """A goto action named by convention after its target."""
    return BranchAction(name=f"{GOTO_PREFIX}{target_step_id}", type="goto", step_id=target_step_id)


def targets(entry, step_id: str, kind: Optional[str] = None) -> bool:
    """
    True when an inline action points at ``step_id`` (and is of ``kind`` if given).
    Actions carrying a workflowId jump to another workflow and never match.
    """
    if is_reference(entry):
        return False
    if entry.workflow_id or (kind is not None and entry.type != kind):
        return False
    return entry.step_id == step_id


def action_targets(actions: Optional[List[ActionEntry]]) -> Set[str]:
    """Step ids targeted by the inline actions of a list."""
    return {a.step_id for a in actions or [] if not is_reference(a) and a.step_id and not a.workflow_id}


def _rename_in(name: str, old_id: str, new_id: str) -> str:
    # names end with their target by convention ("goto-<id>"), so swap the last hit
    if not name or old_id not in name:
        return name
    head, _, tail = name.rpartition(old_id)
    return f"{head}{new_id}{tail}"


def retarget(actions: Optional[List[ActionEntry]], old_id: str, new_id: str) -> Optional[List[ActionEntry]]:
    """Point every action aimed at ``old_id`` at ``new_id``, keeping names in sync."""
    if actions is None:
        return None
    out: List[ActionEntry] = []
    for entry in actions:
        if targets(entry, old_id):
            entry = entry.model_copy(update={"step_id": new_id, "name": _rename_in(entry.name, old_id, new_id)})
        out.append(entry)
    return out


def remove_targeting(actions: Optional[List[ActionEntry]], step_id: str,
                     kind: Optional[str] = None) -> Optional[List[ActionEntry]]:
    """
    Drop the actions aimed at ``step_id``; with ``kind`` only those of that type.
    Returns None when nothing is left.
    """
    if actions is None:
        return None
    kept = [a for a in actions if not targets(a, step_id, kind)]
    return kept or None


def splice_insert(actions: Optional[List[ActionEntry]], old_target: str, new_target: str) -> Optional[List[ActionEntry]]:
    """Reroute exactly the goto actions aimed at ``old_target`` through ``new_target``."""
    if actions is None:
        return None
    out: List[ActionEntry] = []
    for entry in actions:
        if targets(entry, old_target, kind="goto"):
            entry = entry.model_copy(update={"step_id": new_target, "name": f"{GOTO_PREFIX}{new_target}"})
        out.append(entry)
    return out


def dangling_targets(actions: Optional[List[ActionEntry]], known_ids: Set[str]) -> List[str]:
    """Same-workflow goto/retry targets missing from ``known_ids``."""
    missing = []
    for entry in actions or []:
        if is_reference(entry) or entry.type == "end" or not entry.step_id:
            continue
        if entry.workflow_id:
            continue  # cross-workflow jumps are not resolved here
        if entry.step_id not in known_ids:
            missing.append(entry.step_id)
    return missing
