"""Actions and transactions: the only way to change a StoreState.

A transaction opens a write pass over the tree. Changes are collected while
it runs and flushed to subscribers once the outermost transaction on the
same container exits, whether it returned or raised. Nested actions
therefore produce a single notification round.
"""

from __future__ import annotations

import functools
import logging
from contextlib import contextmanager
from typing import Any, Callable, Concatenate, Iterator, ParamSpec, TypeVar

from reactree.state import StoreState

logger = logging.getLogger("reactree.action")

P = ParamSpec("P")
R = TypeVar("R")


@contextmanager
def transaction(store_state: StoreState) -> Iterator[Any]:
    """Context manager yielding a writable view of the state.

    Usage:
        with transaction(store_state) as state:
            state["a"] = 1
            state["b"] = 2
            # subscribers are notified here, after both writes
    """
    tracker = store_state.tracker
    tracker.begin_batch()
    try:
        yield store_state.get_changable_state()
    except BaseException:
        # The body failed: its error wins over any subscriber error.
        try:
            tracker.end_batch()
        except Exception:
            logger.warning("Subscriber error during flush of a failed action discarded")
        raise
    tracker.end_batch()


def action(store_state: StoreState, fn: Callable[Concatenate[Any, P], R]) -> Callable[P, R]:
    """Bind fn to store_state. fn receives the writable state first.

    Usage:
        def inc(state, by=1):
            state["count"] += by

        inc_action = action(store_state, inc)
        inc_action(by=2)
    """

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        with transaction(store_state) as state:
            return fn(state, *args, **kwargs)

    return wrapper
