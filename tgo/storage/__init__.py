"""
Event storage and ordering

This package holds the run's single source of truth, the EventStore, and
the deterministic ordering used whenever keys are listed.

Usage:
    from tgo.storage import EventStore

    store = EventStore()
    store.append(event)
    failed = store.with_action(Action.FAIL)
    for key in failed.ordered_keys():
        ...
"""

from .ordering import key_order, natural_key, ordered_keys
from .store import EventStore

__all__ = [
    "EventStore",
    "key_order",
    "natural_key",
    "ordered_keys",
]
