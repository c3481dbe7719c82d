"""Attribute-equality query evaluation.

A document matches a query when every distinct attribute name in the query
has at least one of its required values among the document's values for that
name. ``AttributeIndex`` answers queries from an inverted index;
``scan`` answers them by checking every document. Both return the same ids.
"""

from collections import defaultdict
from typing import Iterable, Mapping, Set

from edv.storage.base import Attributes

Constraints = Mapping[str, Set[str]]


def matches(constraints: Constraints, attributes: Attributes) -> bool:
    """Whether a document with these attribute pairs satisfies the constraints."""
    values_by_name: dict[str, set[str]] = defaultdict(set)
    for name, value in attributes:
        values_by_name[name].add(value)

    return all(
        not values_by_name[name].isdisjoint(required)
        for name, required in constraints.items()
    )


def scan(constraints: Constraints, items: Iterable[tuple[str, Attributes]]) -> list[str]:
    """Full-scan evaluation over (key, attributes) pairs. Returns sorted keys."""
    return sorted(key for key, attributes in items if matches(constraints, attributes))


class AttributeIndex:
    """Inverted index from (name, value) to the keys carrying that pair."""

    def __init__(self) -> None:
        self._postings: dict[tuple[str, str], set[str]] = defaultdict(set)
        self._pairs_by_key: dict[str, set[tuple[str, str]]] = {}

    def add(self, key: str, attributes: Attributes) -> None:
        """Index a key, replacing whatever was indexed for it before."""
        self.remove(key)
        pairs = set(attributes)
        if not pairs:
            return
        self._pairs_by_key[key] = pairs
        for pair in pairs:
            self._postings[pair].add(key)

    def remove(self, key: str) -> None:
        pairs = self._pairs_by_key.pop(key, set())
        for pair in pairs:
            keys = self._postings[pair]
            keys.discard(key)
            if not keys:
                del self._postings[pair]

    def search(self, constraints: Constraints) -> list[str]:
        """Indexed evaluation. Returns sorted keys."""
        result: set[str] | None = None
        for name, required in constraints.items():
            candidates: set[str] = set()
            for value in required:
                candidates |= self._postings.get((name, value), set())
            result = candidates if result is None else result & candidates
            if not result:
                return []
        return sorted(result or ())

    def __len__(self) -> int:
        return len(self._pairs_by_key)
