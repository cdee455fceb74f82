"""Store: a StoreState plus a set of named actions.

The store is what application code holds: views call get_state() with their
re-render callable, event handlers call the bound actions from get_actions().
"""

from __future__ import annotations

import copy
from types import SimpleNamespace
from typing import Any, Callable, Mapping

from reactree._tracking import Subscriber
from reactree.action import action as bind_action
from reactree.state import StoreState


class Store:
    """State container with bound actions and subscriber lifecycle."""

    def __init__(
        self,
        state: dict | list,
        actions: Mapping[str, Callable[..., Any]] | None = None,
    ) -> None:
        # Each store owns its tree, so one template can seed many stores.
        self._state = StoreState(copy.deepcopy(state))
        self._actions: dict[str, Callable[..., Any]] = {}
        for name, fn in (actions or {}).items():
            self._actions[name] = bind_action(self._state, fn)

    @property
    def store_state(self) -> StoreState:
        return self._state

    def get_state(self, subscriber: Subscriber | None = None) -> Any:
        return self._state.get_subscribable_state(subscriber)

    def get_actions(self) -> SimpleNamespace:
        return SimpleNamespace(**self._actions)

    def action(self, fn: Callable[..., Any]) -> Callable[..., Any]:
        """Decorator: register fn as an action under its own name.

        Usage:
            store = Store({"count": 0})

            @store.action
            def inc(state):
                state["count"] += 1

            inc()  # or store.get_actions().inc()
        """
        bound = bind_action(self._state, fn)
        self._actions[fn.__name__] = bound
        return bound

    def unsubscribe(self, subscriber: Subscriber) -> None:
        self._state.clean_update(subscriber)
