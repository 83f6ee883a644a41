"""
Lattices as directed graphs.

A Lattice wraps an acyclic DirectedGraph whose edges point upwards (from
smaller to larger nodes). The graph may be the Hasse diagram or any graph
with the same reachability: order queries go through the reflexive
reachability matrix, cover queries through the transitive reduction.

Functions:
    is_lattice(graph)         - True if the graph orders a lattice
    validate_lattice(graph)   - same check, raising on the first failure
"""

import logging
from collections.abc import Hashable
from functools import cached_property
from typing import Generic

import numpy as np

from closure.relation import BitRelation
from dgraph import (
    CyclicGraphError,
    DirectedGraph,
    Node,
    reachability,
    sinks,
    sources,
    topological_sort,
    transitive_reduction,
)
from dgraph.algorithms import BoolMatrix
from localtypes import Label, Payload

logger = logging.getLogger(__name__)


class PreconditionViolationError(Exception):
    """Raised when a structure does not satisfy what an operation requires."""

    pass


def _least(candidates: np.ndarray, reach: BoolMatrix) -> int | None:
    """Index among `candidates` below every other candidate, if any."""
    indices = np.flatnonzero(candidates)
    if len(indices) == 0:
        return None
    below_all = reach[np.ix_(indices, indices)].all(axis=1)
    found = np.flatnonzero(below_all)
    return int(indices[found[0]]) if len(found) else None


def _check_lattice(graph: DirectedGraph[Payload, Label]) -> str | None:
    """Returns why the graph is not a lattice (cycles aside), None if it is one."""
    if len(graph) == 0:
        return "the graph is empty"
    bottoms, tops = list(sources(graph)), list(sinks(graph))
    if len(bottoms) != 1:
        return f"expected one bottom, found {len(bottoms)}"
    if len(tops) != 1:
        return f"expected one top, found {len(tops)}"

    nodes, reach = reachability(graph, reflexive=True)
    for i in range(len(nodes)):
        for j in range(i + 1, len(nodes)):
            if _least(reach[i] & reach[j], reach) is None:
                return f"nodes {nodes[i]} and {nodes[j]} have no join"
            if _least(reach[:, i] & reach[:, j], reach.T) is None:
                return f"nodes {nodes[i]} and {nodes[j]} have no meet"
    return None


def validate_lattice(graph: DirectedGraph[Payload, Label]) -> None:
    """
    Checks that the graph orders a lattice.

    Raises:
        CyclicGraphError: If the graph contains a cycle.
        PreconditionViolationError: If bounds, joins or meets are missing.
    """
    topological_sort(graph)
    reason = _check_lattice(graph)
    if reason is not None:
        raise PreconditionViolationError(f"Not a lattice: {reason}")
    logger.debug(f"Validated lattice of {len(graph)} nodes")


def is_lattice(graph: DirectedGraph[Payload, Label]) -> bool:
    try:
        validate_lattice(graph)
    except (CyclicGraphError, PreconditionViolationError):
        return False
    return True


class Lattice(Generic[Payload]):
    """
    A lattice ordered by the reachability of its graph.

    The constructor trusts its input; use `Lattice.validated` for graphs of
    unknown shape.
    """

    def __init__(self, graph: DirectedGraph[Payload, Label]) -> None:
        self.graph = graph

    @classmethod
    def validated(cls, graph: DirectedGraph[Payload, Label]) -> "Lattice[Payload]":
        validate_lattice(graph)
        return cls(graph)

    @property
    def nodes(self) -> tuple[Node[Payload], ...]:
        return self.graph.nodes

    def __len__(self) -> int:
        return len(self.graph)

    # Order

    @cached_property
    def _order(self) -> tuple[dict[Node[Payload], int], BoolMatrix]:
        nodes, reach = reachability(self.graph, reflexive=True)
        reach.setflags(write=False)
        return {node: i for i, node in enumerate(nodes)}, reach

    def _index(self, node: Node[Payload]) -> int:
        index, _ = self._order
        if node not in index:
            raise PreconditionViolationError(f"Node {node} is not in the lattice")
        return index[node]

    def bottom(self) -> Node[Payload]:
        return next(sources(self.graph))

    def top(self) -> Node[Payload]:
        return next(sinks(self.graph))

    def leq(self, x: Node[Payload], y: Node[Payload]) -> bool:
        _, reach = self._order
        return bool(reach[self._index(x), self._index(y)])

    def join(self, x: Node[Payload], y: Node[Payload]) -> Node[Payload]:
        """Least upper bound of x and y."""
        _, reach = self._order
        found = _least(reach[self._index(x)] & reach[self._index(y)], reach)
        if found is None:
            raise PreconditionViolationError(f"Nodes {x} and {y} have no join")
        return self.nodes[found]

    def meet(self, x: Node[Payload], y: Node[Payload]) -> Node[Payload]:
        """Greatest lower bound of x and y."""
        _, reach = self._order
        found = _least(reach[:, self._index(x)] & reach[:, self._index(y)], reach.T)
        if found is None:
            raise PreconditionViolationError(f"Nodes {x} and {y} have no meet")
        return self.nodes[found]

    # Covers

    @cached_property
    def _hasse(self) -> DirectedGraph[Payload, Label]:
        return transitive_reduction(self.graph)

    def diagram(self) -> "Lattice[Payload]":
        """The same lattice restricted to its cover edges."""
        return Lattice(self._hasse)

    def upper_covers(self, node: Node[Payload]) -> tuple[Node[Payload], ...]:
        return self._hasse.successors(node)

    def lower_covers(self, node: Node[Payload]) -> tuple[Node[Payload], ...]:
        return self._hasse.predecessors(node)

    def join_irreducibles(self) -> tuple[Node[Payload], ...]:
        """Nodes with exactly one lower cover."""
        return tuple(n for n in self.nodes if self._hasse.in_degree(n) == 1)

    def meet_irreducibles(self) -> tuple[Node[Payload], ...]:
        """Nodes with exactly one upper cover."""
        return tuple(n for n in self.nodes if self._hasse.out_degree(n) == 1)

    # Derived structures

    def irreducibles_reduction(
        self,
        join_label=None,
        meet_label=None,
    ) -> "Lattice[frozenset[Hashable]]":
        """
        Returns an order-isomorphic lattice, sharing node identifiers, whose
        payloads are frozensets holding `join_label(node)` for join
        irreducibles and `meet_label(node)` for meet irreducibles. Other nodes
        carry the empty set. Labels default to the node identifier.
        """
        join_label = join_label or (lambda node: node.ident)
        meet_label = meet_label or (lambda node: node.ident)
        joins, meets = set(self.join_irreducibles()), set(self.meet_irreducibles())

        def reduce(node: Node[Payload]) -> frozenset[Hashable]:
            labels = set()
            if node in joins:
                labels.add(join_label(node))
            if node in meets:
                labels.add(meet_label(node))
            return frozenset(labels)

        return Lattice(self.graph.map_contents(reduce))

    def table(self) -> BitRelation[Node[Payload], Node[Payload]]:
        """
        Relation between join irreducibles (observations) and meet
        irreducibles (attributes): j is related to m iff j <= m.
        """
        joins, meets = self.join_irreducibles(), self.meet_irreducibles()
        return BitRelation.from_pairs(
            joins, meets, ((j, m) for j in joins for m in meets if self.leq(j, m))
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self)} nodes, {self.graph.edge_count()} edges)"
