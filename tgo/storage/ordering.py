"""
Deterministic ordering of test identities.

Keys are listed in natural (numeric-aware) order, so "Test2" comes before
"Test10". A package's own result always trails the tests of that package.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from natsort import natsort_keygen

from ..events.models import Key

natural_key = natsort_keygen()


def key_order(key: Key) -> tuple[Any, ...]:
    """
    Sort key for a Key.

    Grouping by package first keeps the order transitive when one package
    name is a prefix of another.
    """
    return (natural_key(key.package), key.is_package, natural_key(key.test))


def ordered_keys(keys: Iterable[Key]) -> list[Key]:
    """Return `keys` as a new list in report order."""
    return sorted(keys, key=key_order)
