"""
In-memory store of event histories.

The EventStore maps every Key seen during a run to its ordered event
history. It only grows: histories are appended to and never removed.
Filter helpers return new stores that share the histories of the store
they were built from.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping

from ..events.history import (
    EventHistory,
    find_coverage,
    has_action,
    is_package_without_tests,
    resolve_status,
)
from ..events.models import Action, Event, Key, Status
from .ordering import ordered_keys


class EventStore:
    """
    Append-only mapping from Key to event history.

    Example:
        store = EventStore()
        store.append(event)
        for key in store.ordered_keys():
            print(key, store.status(key))
    """

    def __init__(self, histories: Mapping[Key, list[Event]] | None = None):
        self._histories: dict[Key, list[Event]] = dict(histories or {})

    def append(self, event: Event) -> Key:
        """Append an event to its Key's history, creating it if needed."""
        key = event.key
        self._histories.setdefault(key, []).append(event)
        return key

    def get(self, key: Key) -> EventHistory:
        """History for `key`, empty when the key was never seen."""
        return tuple(self._histories.get(key, ()))

    def keys(self) -> set[Key]:
        return set(self._histories)

    def status(self, key: Key) -> Status:
        return resolve_status(self._histories.get(key, ()))

    def ordered_keys(self) -> list[Key]:
        return ordered_keys(self._histories)

    def __len__(self) -> int:
        return len(self._histories)

    def __contains__(self, key: object) -> bool:
        return key in self._histories

    def __iter__(self) -> Iterator[Key]:
        return iter(self.ordered_keys())

    def __repr__(self) -> str:
        return f"EventStore(keys={len(self._histories)})"

    # ─────────────────────────────────────────────────────────────────────────
    # Filters
    # ─────────────────────────────────────────────────────────────────────────

    def filter(self, predicate: Callable[[Key, EventHistory], bool]) -> EventStore:
        """New store holding the keys for which `predicate(key, history)` is true."""
        return EventStore(
            {key: events for key, events in self._histories.items() if predicate(key, events)}
        )

    def exclude_keys(self, keys: Iterable[Key]) -> EventStore:
        excluded = set(keys)
        return self.filter(lambda key, _: key not in excluded)

    def with_action(self, action: Action) -> EventStore:
        """Keys whose history contains `action` anywhere."""
        return self.filter(lambda _, events: has_action(events, action))

    def without_actions(self, *actions: Action) -> EventStore:
        """Keys whose history contains none of `actions`."""
        return self.filter(lambda _, events: not has_action(events, *actions))

    def with_status(self, status: Status) -> EventStore:
        return self.filter(lambda _, events: resolve_status(events) == status)

    def package_results(self) -> EventStore:
        return self.filter(lambda key, _: key.is_package)

    def test_results(self) -> EventStore:
        return self.filter(lambda key, _: not key.is_package)

    def package_tests(self, package: str) -> EventStore:
        return self.filter(lambda key, _: key.package == package)

    def with_coverage(self) -> EventStore:
        return self.filter(
            lambda key, events: key.is_package and key.package != "" and find_coverage(events) != ""
        )

    def without_no_test_packages(self) -> EventStore:
        return self.filter(lambda _, events: not is_package_without_tests(events))

    def count_tests(self) -> int:
        """Number of per-test keys, package results excluded."""
        return len(self.test_results())
