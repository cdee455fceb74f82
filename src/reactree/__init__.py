"""reactree: fine-grained reactive state trees for Python."""

from importlib.metadata import version as _version

__version__ = _version("reactree")

from reactree._tracking import ITEMS, KEYS, UpdateTracker
from reactree.exceptions import ReactreeError, ImmutabilityViolation, InvalidStateShape
from reactree.proxy import (
    ReadOnlyMapping,
    ReadOnlySequence,
    WritableMapping,
    WritableSequence,
    is_state_node,
)
from reactree.state import StoreState
from reactree.action import action, transaction
from reactree.store import Store
# textual NOT auto-imported; opt-in only

__all__ = [
    "UpdateTracker",
    "KEYS",
    "ITEMS",
    "ReactreeError",
    "ImmutabilityViolation",
    "InvalidStateShape",
    "ReadOnlyMapping",
    "ReadOnlySequence",
    "WritableMapping",
    "WritableSequence",
    "is_state_node",
    "StoreState",
    "action",
    "transaction",
    "Store",
]
