"""StoreState: one state tree, one tracker, two ways in.

Renders get a read-tracking proxy through get_subscribable_state(); actions
get a write-collecting proxy through get_changable_state(). The container
takes ownership of the tree it is given: mutating the raw nodes directly
bypasses all tracking and is undefined behaviour.
"""

from __future__ import annotations

from typing import Any

from reactree._tracking import Subscriber, UpdateTracker
from reactree.exceptions import InvalidStateShape
from reactree.proxy import ReadSession, WriteSession, is_state_node


class StoreState:
    """Owns one state tree and the dependency graph over it."""

    def __init__(self, state: dict | list, tracker: UpdateTracker | None = None) -> None:
        if not is_state_node(state):
            raise InvalidStateShape(state)
        self._original_state = state
        self._tracker = tracker if tracker is not None else UpdateTracker()

    @property
    def original_state(self) -> dict | list:
        """The root node. Identity never changes; never mutate it directly."""
        return self._original_state

    @property
    def tracker(self) -> UpdateTracker:
        return self._tracker

    def get_subscribable_state(self, subscriber: Subscriber | None = None) -> Any:
        """Read-only view for one render pass.

        Every read registers a dependency of subscriber. Without a subscriber
        the view is still read-only but tracks nothing.
        """
        return ReadSession(self._tracker, subscriber).wrap(self._original_state)

    def get_changable_state(self) -> Any:
        """Writable view for one action. The caller must flush() afterwards."""
        return WriteSession(self._tracker).wrap(self._original_state)

    def clean_update(self, subscriber: Subscriber) -> None:
        """Forget every dependency of subscriber (unmount)."""
        self._tracker.cleanup(subscriber)

    def flush(self) -> None:
        self._tracker.flush()

    def __repr__(self) -> str:
        return f"StoreState({self._original_state!r})"
