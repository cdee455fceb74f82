"""Dependency tracking engine: the heart of reactree.

An UpdateTracker owns two indexes over the state tree:

- edges: path -> subscribers that read it, where a path is (node, key) and
  nodes are keyed by identity.
- subscriptions: subscriber -> paths it read (the reverse index), so cleanup
  touches only the subscriber's own edges.

Writes made inside an action are collected into a pending change set and
flushed once, at the end of the outermost action, so every affected
subscriber is notified at most once no matter how many of its paths changed.

The tracker holds strong references to every node it keys by id(). An id
therefore cannot be recycled by another object while an edge or a pending
change still refers to it.
"""

from __future__ import annotations

import logging
from types import MethodType
from typing import Callable, Hashable

logger = logging.getLogger("reactree.tracking")

Subscriber = Callable[[], object]
PathKey = tuple[int, Hashable]


def subscriber_key(subscriber: Subscriber) -> Hashable:
    """Identity of a subscriber.

    Bound methods are recreated on every attribute access, so they are keyed
    by (id(instance), function) instead of by the method object.
    """
    if isinstance(subscriber, MethodType):
        return (id(subscriber.__self__), subscriber.__func__)
    return id(subscriber)


class _PathToken:
    """Reserved key for paths that are not a single mapping entry."""

    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return f"<{self._name}>"


# The key set of a mapping: iteration, len() and key additions/removals.
KEYS = _PathToken("KEYS")
# The whole content of a sequence. Sequences are tracked in bulk.
ITEMS = _PathToken("ITEMS")


class _Edge:
    __slots__ = ("node", "key", "subscribers")

    def __init__(self, node: object, key: Hashable) -> None:
        self.node = node
        self.key = key
        self.subscribers: dict[Hashable, Subscriber] = {}


class _Subscription:
    __slots__ = ("subscriber", "paths")

    def __init__(self, subscriber: Subscriber) -> None:
        self.subscriber = subscriber
        self.paths: set[PathKey] = set()


class UpdateTracker:
    """Subscriber/path dependency graph plus batched change collection."""

    def __init__(self) -> None:
        self._edges: dict[PathKey, _Edge] = {}
        self._subscriptions: dict[Hashable, _Subscription] = {}
        # path -> node; the node reference keeps id() stable until flush.
        self._changes: dict[PathKey, object] = {}
        self._batch_depth = 0

    # --- Dependencies ---

    def track_update(self, node: object, key: Hashable, subscriber: Subscriber) -> None:
        """Record that subscriber read (node, key). Re-recording is a no-op."""
        path = (id(node), key)
        sid = subscriber_key(subscriber)

        edge = self._edges.get(path)
        if edge is None:
            edge = self._edges[path] = _Edge(node, key)
        elif sid in edge.subscribers:
            return
        edge.subscribers[sid] = subscriber

        subscription = self._subscriptions.get(sid)
        if subscription is None:
            subscription = self._subscriptions[sid] = _Subscription(subscriber)
        subscription.paths.add(path)

    def cleanup(self, subscriber: Subscriber) -> None:
        """Remove every edge of subscriber. Safe for unknown subscribers."""
        sid = subscriber_key(subscriber)
        subscription = self._subscriptions.pop(sid, None)
        if subscription is None:
            return

        for path in subscription.paths:
            edge = self._edges.get(path)
            if edge is None:
                continue
            edge.subscribers.pop(sid, None)
            if not edge.subscribers:
                del self._edges[path]
        logger.debug("Cleaned up %d dependencies of %r", len(subscription.paths), subscriber)

    # --- Changes ---

    def collect_update(self, node: object, key: Hashable) -> None:
        """Record that (node, key) changed. Notification waits for flush()."""
        self._changes[(id(node), key)] = node

    def flush(self) -> None:
        """Notify every subscriber of the collected changes, each exactly once."""
        if not self._changes:
            return

        # Snapshot and clear: subscribers may run actions of their own.
        changed = list(self._changes)
        self._changes.clear()

        notify: dict[Hashable, Subscriber] = {}
        for path in changed:
            edge = self._edges.get(path)
            if edge is not None:
                notify.update(edge.subscribers)

        if not notify:
            return

        logger.debug("Flushing %d changed paths to %d subscribers", len(changed), len(notify))

        first_error: BaseException | None = None
        for sid, subscriber in notify.items():
            # Skip subscribers torn down by an earlier callback in this flush.
            if sid not in self._subscriptions:
                continue
            try:
                subscriber()
            except Exception as exc:
                logger.exception("Subscriber %r failed during flush", subscriber)
                if first_error is None:
                    first_error = exc

        if first_error is not None:
            raise first_error

    # --- Batching ---

    def begin_batch(self) -> None:
        """Enter an action scope. Nested scopes are supported."""
        self._batch_depth += 1

    def end_batch(self) -> None:
        """Exit an action scope. The outermost exit flushes."""
        self._batch_depth -= 1
        if self._batch_depth == 0:
            self.flush()

    @property
    def in_batch(self) -> bool:
        return self._batch_depth > 0

    # --- Introspection ---

    @property
    def pending_count(self) -> int:
        """Number of changed paths waiting for flush. Useful for testing."""
        return len(self._changes)

    @property
    def edge_count(self) -> int:
        """Number of paths with at least one subscriber."""
        return len(self._edges)

    def is_subscribed(self, subscriber: Subscriber) -> bool:
        return subscriber_key(subscriber) in self._subscriptions

    def dependency_count(self, subscriber: Subscriber) -> int:
        subscription = self._subscriptions.get(subscriber_key(subscriber))
        return len(subscription.paths) if subscription is not None else 0
