"""
Editing session shared by the canvas, the text editor and the inspectors.

The engine is pure; the session is the one place that holds the current
revision. Commands are applied one at a time under a lock, each committed
revision is broadcast to subscribers, and earlier revisions are kept for
undo.
"""

import logging
import threading
from typing import Callable, List, Optional

from arazzo_builder.config.settings import get_settings
from arazzo_builder.workflow.commands import apply
from arazzo_builder.workflow.engine import new_editor_state
from arazzo_builder.workflow.selection import EditorState, EditResult

logger = logging.getLogger(__name__)

Subscriber = Callable[[EditResult], None]


class EditingSession:
    """
    Serialized mutation queue around one ``EditorState``.

    A command that raises leaves the current revision in place. A subscriber
    that raises is logged and does not undo the committed revision.
    """

    def __init__(self, state: Optional[EditorState] = None, history_limit: Optional[int] = None):
        self._state = state or new_editor_state()
        self._history: List[EditorState] = []
        self._history_limit = get_settings().history_limit if history_limit is None else history_limit
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def history(self) -> List[EditorState]:
        return list(self._history)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def _unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)
        return _unsubscribe

    def dispatch(self, command) -> EditResult:
        with self._lock:
            result = apply(self._state, command)
            if result.state is not self._state:
                self._remember(self._state)
                self._state = result.state
        self._broadcast(result)
        return result

    def undo(self) -> bool:
        """Restore the previous revision. False when there is nothing to undo."""
        with self._lock:
            if not self._history:
                return False
            self._state = self._history.pop()
            result = EditResult(self._state)
        self._broadcast(result)
        return True

    def _remember(self, state: EditorState) -> None:
        if self._history_limit == 0:
            return
        self._history.append(state)
        if len(self._history) > self._history_limit:
            del self._history[0]

    def _broadcast(self, result: EditResult) -> None:
        for callback in list(self._subscribers):
            try:
                callback(result)
            except Exception:
                logger.exception("Subscriber %r failed", callback)
