"""Textual integration for reactree. Opt-in, requires textual.

bind() is the view side of a Store: it renders from a read-tracking proxy and
re-renders whenever an action changes something the last render read.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Callable

from textual.css.query import NoMatches

from reactree.store import Store

# Module-owned pause state, keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend bound renders during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


class Binding:
    """Handle for one bound render function."""

    __slots__ = ("_store", "_subscriber", "_disposed")

    def __init__(self, store: Store, subscriber: Callable[[], None]) -> None:
        self._store = store
        self._subscriber = subscriber
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Unmount: drop every dependency, no further renders."""
        self._disposed = True
        self._store.unsubscribe(self._subscriber)


def bind(app, store: Store, render: Callable[[Any], None]) -> Binding:
    """Render from store now and after every relevant action.

    Guards against rendering during pause/not-running, catches NoMatches
    from widget queries, and marshals cross-thread notifications via
    call_from_thread. Each render starts from a clean dependency set, so
    the binding depends exactly on what its latest render read.
    """
    _main = threading.get_ident()

    def _render() -> None:
        if binding.disposed:
            return
        store.unsubscribe(_subscriber)
        try:
            render(store.get_state(_subscriber))
        except NoMatches:
            pass

    def _subscriber() -> None:
        if not is_safe(app):
            return
        if threading.get_ident() != _main:
            app.call_from_thread(_render)
        else:
            _render()

    binding = Binding(store, _subscriber)
    _render()
    return binding
