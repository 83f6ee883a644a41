"""
Closure systems and their exhaustive enumeration.

A closure system is a finite ordered ground set S together with a closure
operator cl: 2^S -> 2^S that is extensive (X ⊆ cl(X)), idempotent
(cl(cl(X)) = cl(X)) and monotone (X ⊆ Y implies cl(X) ⊆ cl(Y)).

Anything exposing `ground_set()` and `closure()` qualifies: relation
snapshots (closure.relation) and implication sets (closure.implications)
both do. The functions below only rely on that protocol.
"""

import logging
from collections.abc import Iterable, Iterator
from typing import Protocol, TypeVar

from dgraph import DirectedGraph, Node

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ClosureSystem(Protocol[T]):
    """Ground set in its total order plus a closure operator."""

    def ground_set(self) -> tuple[T, ...]: ...

    def closure(self, elements: Iterable[T]) -> frozenset[T]: ...


def is_closed(system: ClosureSystem[T], elements: Iterable[T]) -> bool:
    elements = frozenset(elements)
    return system.closure(elements) == elements


def iter_closures(system: ClosureSystem[T]) -> Iterator[frozenset[T]]:
    """
    Yields every closed set exactly once, in lectic order (Next-Closure).

    Starting from cl(∅), the successor of a closed set X is found by scanning
    the ground set from its last element down: for the largest index i with
    x_i ∉ X, Y = cl({x_j ∈ X : j < i} ∪ {x_i}) is the next closed set when it
    adds no element of index below i. The scan fails only once X is the
    closure of the whole ground set.

    Complexity: O(|closed sets| × |S| × cost(cl)).
    """
    ground = system.ground_set()
    position = {element: i for i, element in enumerate(ground)}

    current = system.closure(())
    yield current

    while True:
        for i in reversed(range(len(ground))):
            candidate_element = ground[i]
            if candidate_element in current:
                continue

            prefix = frozenset(x for x in current if position[x] < i)
            candidate = system.closure(prefix | {candidate_element})

            # Canonicity test: nothing new before position i
            if all(position[x] >= i for x in candidate - current):
                current = candidate
                yield current
                break
        else:
            return


def all_closures(system: ClosureSystem[T]) -> tuple[frozenset[T], ...]:
    """Every closed set of the system, in lectic order."""
    closures = tuple(iter_closures(system))
    logger.debug(f"Enumerated {len(closures)} closed sets")
    return closures


def precedence_graph(system: ClosureSystem[T]) -> DirectedGraph[T, None]:
    """
    Graph on the ground set with an edge x -> y iff x ∈ cl({y}) and x ≠ y.

    Elements with the same closure form a strongly connected component; the
    graph is acyclic exactly when the system is reduced with respect to
    equivalent elements.
    """
    graph: DirectedGraph[T, None] = DirectedGraph()
    node_of: dict[T, Node[T]] = {x: graph.add_node(x) for x in system.ground_set()}
    for target, target_node in node_of.items():
        for source in system.closure({target}):
            if source != target:
                graph.add_edge(node_of[source], target_node)
    return graph


def reducible_elements(system: ClosureSystem[T]) -> dict[T, frozenset[T]]:
    """
    Returns the reducible elements mapped to the set they reduce to.

    An element is reducible when:
    - an earlier element (in ground order) has the same closure; it then
      maps to that first element, which survives, or
    - it belongs to the closure of the surviving elements strictly below it
      (y ∈ cl({x}) but x ∉ cl({y})); it then maps to that set.

    Complexity: O(|S|² × cost(cl)).
    """
    ground = system.ground_set()
    single = {x: system.closure({x}) for x in ground}
    reducible: dict[T, frozenset[T]] = {}

    for i, x in enumerate(ground):
        survivor = next(
            (y for y in ground[:i] if y not in reducible and single[y] == single[x]),
            None,
        )
        if survivor is not None:
            reducible[x] = frozenset({survivor})

    for x in ground:
        if x in reducible:
            continue
        below = frozenset(
            y
            for y in single[x]
            if y != x and y not in reducible and x not in single[y]
        )
        if x in system.closure(below):
            reducible[x] = below

    logger.debug(f"Found {len(reducible)} reducible elements out of {len(ground)}")
    return reducible
