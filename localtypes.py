"""
Type definitions shared by the closure, graph and lattice packages.

Elements of a ground set are opaque hashable values. Every container that
stores elements receives an optional sort key which fixes the strict total
order used by the algorithms (Next-Closure, tie-breaks, "first" elements).
Algorithms only compare positions in that order, never elements themselves.
"""

from collections.abc import Callable, Hashable, Iterable
from typing import Any, TypeVar

# Type variables for generic containers
Element = TypeVar("Element", bound=Hashable)
Observation = TypeVar("Observation", bound=Hashable)
Attribute = TypeVar("Attribute", bound=Hashable)
Payload = TypeVar("Payload")
Label = TypeVar("Label")

type OrderKey = Callable[[Any], Any]
"""Sort key defining the total order on a ground set."""

type Witnesses[T] = frozenset[frozenset[T]]
"""Inclusion-minimal witness sets labelling a dependency edge."""


class MalformedInputError(ValueError):
    """Raised when a mutation would break a ground-set or relation invariant."""

    pass


def identity_key(value: Any) -> Any:
    return value


def ordered(elements: Iterable[Element], key: OrderKey | None = None) -> tuple[Element, ...]:
    """Returns the elements as a tuple sorted by `key` (natural order by default)."""
    return tuple(sorted(elements, key=key or identity_key))


def first(
    elements: Iterable[Element], order: dict[Element, int]
) -> Element | None:
    """Returns the element with the smallest position in `order`, None if empty."""
    return min(elements, key=order.__getitem__, default=None)


__all__ = [
    "Element",
    "Observation",
    "Attribute",
    "Payload",
    "Label",
    "OrderKey",
    "Witnesses",
    "MalformedInputError",
    "identity_key",
    "ordered",
    "first",
]
