"""Proxies over the raw state tree.

Two families, both created lazily one node at a time as the tree is walked:

- Read proxies (ReadOnlyMapping, ReadOnlySequence) report every read to the
  tracker as a dependency of one subscriber and reject every mutation.
- Write proxies (WritableMapping, WritableSequence) apply mutations to the
  real nodes and report every actual change to the tracker.

A session is one pass over the tree: one render for reads, one action for
writes. It caches the proxy built for each node so repeated access to the
same nested node in a pass returns the same object.

Sequences are tracked in bulk through the ITEMS path: reading any index
depends on the whole list. Node elements are still wrapped, so they stay
read-only (or write-collecting) and track their own keys.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from typing import Any, Hashable, Iterator

from reactree._tracking import ITEMS, KEYS, Subscriber, UpdateTracker
from reactree.exceptions import ImmutabilityViolation

_MISSING = object()


def is_state_node(value: object) -> bool:
    """Mappings and sequences of the tree. Everything else is a leaf."""
    return isinstance(value, (dict, list))


def has_changed(old: object, new: object) -> bool:
    """Strict comparison: identity for nodes, type and value for leaves."""
    if old is new:
        return False
    if is_state_node(old) or is_state_node(new):
        return True
    if type(old) is not type(new):
        return True
    return old != new


def unwrap(value: Any) -> Any:
    """Return the real node behind a proxy, or value itself."""
    if isinstance(value, (_ReadProxy, _WriteProxy)):
        return value._target
    return value


# ─── Sessions ────────────────────────────────────────────────────────────────


class ReadSession:
    """One read pass of one subscriber. subscriber=None tracks nothing."""

    __slots__ = ("tracker", "subscriber", "_proxies")

    def __init__(self, tracker: UpdateTracker, subscriber: Subscriber | None = None) -> None:
        self.tracker = tracker
        self.subscriber = subscriber
        self._proxies: dict[int, _ReadProxy] = {}

    def track(self, node: object, key: Hashable) -> None:
        if self.subscriber is not None:
            self.tracker.track_update(node, key, self.subscriber)

    def wrap(self, node: Any) -> Any:
        if not is_state_node(node):
            return node
        proxy = self._proxies.get(id(node))
        if proxy is None:
            cls = ReadOnlySequence if isinstance(node, list) else ReadOnlyMapping
            # The proxy holds node, so id(node) stays unique for the pass.
            proxy = self._proxies[id(node)] = cls(node, self)
        return proxy


class WriteSession:
    """One write pass, bound to the lifetime of one action call."""

    __slots__ = ("tracker", "_proxies")

    def __init__(self, tracker: UpdateTracker) -> None:
        self.tracker = tracker
        self._proxies: dict[int, _WriteProxy] = {}

    def changed(self, node: object, key: Hashable) -> None:
        self.tracker.collect_update(node, key)

    def wrap(self, node: Any) -> Any:
        if not is_state_node(node):
            return node
        proxy = self._proxies.get(id(node))
        if proxy is None:
            cls = WritableSequence if isinstance(node, list) else WritableMapping
            proxy = self._proxies[id(node)] = cls(node, self)
        return proxy


# ─── Read proxies ────────────────────────────────────────────────────────────


class _ReadProxy:
    __slots__ = ()

    _target: Any
    _session: ReadSession

    def __init__(self, target: Any, session: ReadSession) -> None:
        object.__setattr__(self, "_target", target)
        object.__setattr__(self, "_session", session)

    def _reject(self, *args: Any, **kwargs: Any) -> Any:
        raise ImmutabilityViolation("modify state", self._target)

    def __setattr__(self, name: str, value: Any) -> None:
        raise ImmutabilityViolation(f"set attribute {name!r}", self._target)

    def __delattr__(self, name: str) -> None:
        raise ImmutabilityViolation(f"delete attribute {name!r}", self._target)

    def __setitem__(self, key: Any, value: Any) -> None:
        raise ImmutabilityViolation(f"set item {key!r}", self._target)

    def __delitem__(self, key: Any) -> None:
        raise ImmutabilityViolation(f"delete item {key!r}", self._target)

    # Copies are plain, untracked snapshots. Nested nodes are never shared.
    def __copy__(self) -> Any:
        return copy.deepcopy(self._target)

    def __deepcopy__(self, memo: dict) -> Any:
        return copy.deepcopy(self._target, memo)


class ReadOnlyMapping(_ReadProxy, Mapping):
    """Read-tracking view of a dict node."""

    __slots__ = ("_target", "_session")

    def __getitem__(self, key: Hashable) -> Any:
        self._session.track(self._target, key)
        return self._session.wrap(self._target[key])

    def __contains__(self, key: object) -> bool:
        self._session.track(self._target, key)
        return key in self._target

    def __iter__(self) -> Iterator:
        self._session.track(self._target, KEYS)
        return iter(list(self._target))

    def __len__(self) -> int:
        self._session.track(self._target, KEYS)
        return len(self._target)

    pop = popitem = clear = update = setdefault = _ReadProxy._reject

    def __repr__(self) -> str:
        return f"ReadOnlyMapping({self._target!r})"


class ReadOnlySequence(_ReadProxy, Sequence):
    """Read-tracking view of a list node. Any read depends on the whole list."""

    __slots__ = ("_target", "_session")

    def _track(self) -> None:
        self._session.track(self._target, ITEMS)

    def __getitem__(self, index: int | slice) -> Any:
        self._track()
        if isinstance(index, slice):
            return [self._session.wrap(v) for v in self._target[index]]
        return self._session.wrap(self._target[index])

    def __len__(self) -> int:
        self._track()
        return len(self._target)

    def __iter__(self) -> Iterator:
        self._track()
        return iter([self._session.wrap(v) for v in self._target])

    def __contains__(self, item: object) -> bool:
        self._track()
        return unwrap(item) in self._target

    def __reversed__(self) -> Iterator:
        self._track()
        return iter([self._session.wrap(v) for v in reversed(self._target)])

    def __eq__(self, other: object) -> bool:
        self._track()
        other = unwrap(other)
        if isinstance(other, list):
            return self._target == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __iadd__(self, other: Any) -> Any:
        raise ImmutabilityViolation("extend list", self._target)

    append = extend = insert = pop = remove = clear = reverse = sort = _ReadProxy._reject

    def __repr__(self) -> str:
        return f"ReadOnlySequence({self._target!r})"


# ─── Write proxies ───────────────────────────────────────────────────────────


class _WriteProxy:
    __slots__ = ()

    _target: Any
    _session: WriteSession

    def __init__(self, target: Any, session: WriteSession) -> None:
        self._target = target
        self._session = session

    def __deepcopy__(self, memo: dict) -> Any:
        return copy.deepcopy(self._target, memo)


class WritableMapping(_WriteProxy, MutableMapping):
    """Write-collecting view of a dict node, valid for one action."""

    __slots__ = ("_target", "_session")

    def __getitem__(self, key: Hashable) -> Any:
        return self._session.wrap(self._target[key])

    def __setitem__(self, key: Hashable, value: Any) -> None:
        value = unwrap(value)
        old = self._target.get(key, _MISSING)
        self._target[key] = value
        if old is _MISSING:
            self._session.changed(self._target, key)
            self._session.changed(self._target, KEYS)
        elif has_changed(old, value):
            self._session.changed(self._target, key)

    def __delitem__(self, key: Hashable) -> None:
        if not self.discard(key):
            raise KeyError(key)

    def discard(self, key: Hashable) -> bool:
        """Remove key if present. Returns whether it was present.

        Always counts as a change of key, even when it was absent.
        """
        existed = key in self._target
        self._target.pop(key, None)
        self._session.changed(self._target, key)
        if existed:
            self._session.changed(self._target, KEYS)
        return existed

    def setdefault(self, key: Hashable, default: Any = None) -> Any:
        if key not in self._target:
            self[key] = default
        return self[key]

    def __contains__(self, key: object) -> bool:
        return key in self._target

    def __iter__(self) -> Iterator:
        return iter(list(self._target))

    def __len__(self) -> int:
        return len(self._target)

    def __repr__(self) -> str:
        return f"WritableMapping({self._target!r})"


class WritableSequence(_WriteProxy, MutableSequence):
    """Write-collecting view of a list node. Node elements are wrapped too."""

    __slots__ = ("_target", "_session")

    def _changed(self) -> None:
        self._session.changed(self._target, ITEMS)

    def __getitem__(self, index: int | slice) -> Any:
        if isinstance(index, slice):
            return [self._session.wrap(v) for v in self._target[index]]
        return self._session.wrap(self._target[index])

    def __setitem__(self, index: int | slice, value: Any) -> None:
        if isinstance(index, slice):
            self._target[index] = [unwrap(v) for v in value]
            self._changed()
            return
        value = unwrap(value)
        old = self._target[index]
        self._target[index] = value
        if has_changed(old, value):
            self._changed()

    def __delitem__(self, index: int | slice) -> None:
        del self._target[index]
        self._changed()

    def __len__(self) -> int:
        return len(self._target)

    def __iter__(self) -> Iterator:
        return iter([self._session.wrap(v) for v in self._target])

    def __contains__(self, item: object) -> bool:
        return unwrap(item) in self._target

    def __eq__(self, other: object) -> bool:
        other = unwrap(other)
        if isinstance(other, list):
            return self._target == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def insert(self, index: int, value: Any) -> None:
        self._target.insert(index, unwrap(value))
        self._changed()

    def extend(self, values: Any) -> None:
        if values is self:
            values = list(self._target)
        self._target.extend(unwrap(v) for v in values)
        self._changed()

    def clear(self) -> None:
        self._target.clear()
        self._changed()

    def reverse(self) -> None:
        self._target.reverse()
        self._changed()

    def sort(self, *, key: Any = None, reverse: bool = False) -> None:
        self._target.sort(key=key, reverse=reverse)
        self._changed()

    def __repr__(self) -> str:
        return f"WritableSequence({self._target!r})"
