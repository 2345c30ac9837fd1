"""
Workflow State Store
====================

Holds the single WorkflowState instance. The pipeline is its only writer;
the presentation layer reads it or subscribes to changes.
"""

import logging
from dataclasses import fields, replace
from typing import Optional, Callable, Dict, Any, List

from ..core.exceptions import ValidationError
from ..models import WorkflowState

logger = logging.getLogger(__name__)

StateListener = Callable[[WorkflowState], None]

_STATE_FIELDS = frozenset(f.name for f in fields(WorkflowState))


class WorkflowStateStore:
    """
    Merge-style store for the workflow state.

    Usage:
        store = WorkflowStateStore()
        unsubscribe = store.subscribe(lambda state: print(state.current_stage))
        store.update(is_processing=True)
    """

    def __init__(self, initial: Optional[WorkflowState] = None):
        self._state = initial or WorkflowState()
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> WorkflowState:
        """Current state. Treat as read-only outside the pipeline."""
        return self._state

    def snapshot(self) -> Dict[str, Any]:
        """Plain-dict copy of the current state."""
        return self._state.to_dict()

    def update(self, **changes: Any) -> WorkflowState:
        """
        Apply a partial set of field changes, preserving all other fields.

        Args:
            **changes: WorkflowState field names and their new values

        Returns:
            The new state
        """
        unknown = set(changes) - _STATE_FIELDS
        if unknown:
            raise ValidationError(
                f"Unknown workflow state field(s): {', '.join(sorted(unknown))}",
                field="state",
                value=sorted(unknown),
            )

        self._state = replace(self._state, **changes)
        self._notify()
        return self._state

    def publish(self) -> None:
        """Notify subscribers after an in-place scene mutation."""
        self._notify()

    def reset(self) -> WorkflowState:
        """Replace the state with a fresh one."""
        self._state = WorkflowState()
        self._notify()
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener called with the state after every change.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                logger.error(f"State listener failed: {e}")
