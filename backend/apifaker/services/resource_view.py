"""
API Faker — Resource Classification
=====================================

What:  Turns "whatever the store holds at this name" into one of three
       explicit kinds: Collection, Singular or Missing.
Why:   The same URL pattern means different things for arrays and objects
       (POST /settings replaces, POST /posts appends). Every handler asks
       classify() once and matches on the result instead of probing the
       value's shape itself.
When:  Once per request. Never cached, since the store can change between requests.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Protocol, Union


class SupportsLookup(Protocol):
    """The slice of the Database contract classification needs."""

    def has(self, name: str) -> bool: ...

    def get_collection(self, name: str) -> Any: ...


@dataclass(frozen=True)
class Collection:
    name: str
    items: List[Any]


@dataclass(frozen=True)
class Singular:
    """Any non-array value: usually an object, possibly a scalar or null."""

    name: str
    value: Any

    @property
    def is_object(self) -> bool:
        return isinstance(self.value, dict)


@dataclass(frozen=True)
class Missing:
    name: str


ResourceView = Union[Collection, Singular, Missing]


def classify(store: SupportsLookup, name: str) -> ResourceView:
    """A resource is a collection iff its value is an array; absent names are Missing."""
    if not store.has(name):
        return Missing(name)
    value = store.get_collection(name)
    if isinstance(value, list):
        return Collection(name, value)
    return Singular(name, value)


def shallow_merge(current: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    """
    Field-by-field merge: keys in `patch` win, keys only in `current` stay.

    Nested objects are replaced whole, not merged. Neither input is mutated.
    """
    merged = dict(current)
    merged.update(patch)
    return merged
