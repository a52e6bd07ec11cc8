""" Ordered, id-keyed step collection of one workflow. """

from typing import Iterator, List, Optional, Tuple

from .actions import action_targets
from .errors import DuplicateIdError, NotFoundError
from .expressions import step_references
from .schema import Step


def references_step(step: Step, step_id: str) -> bool:
    """True when ``step`` names ``step_id`` in an action target or an expression."""
    if step_id in action_targets(step.on_success) or step_id in action_targets(step.on_failure):
        return True
    return step_id in step_references(step)


def move_item(items: list, start: int, end: int) -> bool:
    """Move ``items[start]`` to position ``end`` in place. False if either index is out of range."""
    size = len(items)
    if not (0 <= start < size and 0 <= end < size):
        return False
    item = items.pop(start)
    items.insert(end, item)
    return True


class StepCollection:
    """
    View over a workflow's step list enforcing unique stepIds.

    The collection edits the list it wraps; the engine only ever hands it
    the steps of a private copy of the document.
    """

    def __init__(self, steps: List[Step]):
        self._steps = steps

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def __contains__(self, step_id: str) -> bool:
        return self.index_of(step_id) is not None

    def ids(self) -> List[str]:
        return [s.step_id for s in self._steps]

    def index_of(self, step_id: str) -> Optional[int]:
        for i, step in enumerate(self._steps):
            if step.step_id == step_id:
                return i
        return None

    def get(self, step_id: str) -> Optional[Step]:
        index = self.index_of(step_id)
        return None if index is None else self._steps[index]

    def require(self, step_id: str) -> Step:
        step = self.get(step_id)
        if step is None:
            raise NotFoundError("step", step_id)
        return step

    def referencing(self, step_id: str) -> List[Step]:
        """Steps whose actions or expressions name ``step_id``."""
        return [s for s in self._steps if references_step(s, step_id)]

    def insert(self, step: Step) -> None:
        if step.step_id in self:
            raise DuplicateIdError("step", step.step_id)
        self._steps.append(step)

    def remove(self, step_id: str) -> Tuple[Optional[Step], List[Step]]:
        """
        Remove a step. Absent ids are a no-op.

        Returns the removed step (or None) and the remaining steps that still
        reference it.
        """
        index = self.index_of(step_id)
        if index is None:
            return None, []
        removed = self._steps.pop(index)
        return removed, self.referencing(step_id)

    def rename(self, old_id: str, new_id: str) -> List[Step]:
        """
        Swap a stepId and return the steps that referenced the old one.

        The renamed step itself is included when it references itself.
        Callers rewrite those references.
        """
        step = self.require(old_id)
        if new_id == old_id:
            return []
        if new_id in self:
            raise DuplicateIdError("step", new_id)
        affected = self.referencing(old_id)
        step.step_id = new_id
        return affected

    def reorder(self, start: int, end: int) -> bool:
        return move_item(self._steps, start, end)
