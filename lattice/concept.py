"""
Concept lattices: lattices of closed sets.

Each node carries a Concept, i.e. a closed set of the ground set (intent)
and, when the closure system comes from a relation, the observations sharing
it (extent). Concepts are ordered by inclusion of their intents, so the
bottom is cl(∅) and the top is the closure of the whole ground set.

Generation:
    complete_lattice(system)   - Next-Closure, full (transitively closed) order
    diagram_lattice(system)    - Bordat, Hasse diagram plus dependency graph
    immediate_successors(...)  - one Bordat step
    ideal_lattice(graph)       - lattice of the down-sets of an acyclic graph
"""

import logging
from collections import deque
from collections.abc import Hashable, Iterable
from dataclasses import dataclass
from typing import Any

from closure.implications import ImplicationSet
from closure.relation import IndexedRelation
from closure.system import ClosureSystem, all_closures
from constants import DEFAULT_ICEBERG_THRESHOLD
from dgraph import (
    DirectedGraph,
    Node,
    sinks,
    sources,
    strongly_connected_components,
    topological_sort,
    transitive_closure,
    transitive_reduction,
)
from localtypes import Element, MalformedInputError, Witnesses, first

from .dependency import DependencyTracker, canonical_direct_basis, minimal_generators
from .lattice import Lattice, PreconditionViolationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Concept:
    """A closed set and, when known, the observations sharing it."""

    intent: frozenset[Any]
    extent: frozenset[Any] | None = None

    def __str__(self) -> str:
        intent = ",".join(sorted(map(str, self.intent)))
        if self.extent is None:
            return f"{{{intent}}}"
        extent = ",".join(sorted(map(str, self.extent)))
        return f"{{{intent}}}x{{{extent}}}"


class ConceptLattice:
    """
    A Lattice whose node payloads are Concepts over an ordered ground set.

    `observations` is set once extents are filled in; `dependency_graph` is
    only available for lattices built by `diagram_lattice`.
    """

    def __init__(
        self,
        graph: DirectedGraph[Concept, Any],
        ground: tuple[Hashable, ...],
        observations: tuple[Hashable, ...] | None = None,
        dependency_graph: DirectedGraph[Hashable, Witnesses[Hashable]] | None = None,
    ) -> None:
        self.lattice: Lattice[Concept] = Lattice(graph)
        self.ground = ground
        self.observations = observations
        self.dependency_graph = dependency_graph

    @property
    def graph(self) -> DirectedGraph[Concept, Any]:
        return self.lattice.graph

    @property
    def nodes(self) -> tuple[Node[Concept], ...]:
        return self.lattice.nodes

    def __len__(self) -> int:
        return len(self.lattice)

    def bottom(self) -> Node[Concept]:
        return self.lattice.bottom()

    def top(self) -> Node[Concept]:
        return self.lattice.top()

    # Queries

    def concepts(self) -> tuple[Concept, ...]:
        return tuple(node.content for node in self.nodes)

    def find(self, intent: Iterable[Hashable]) -> Node[Concept] | None:
        """Returns the node whose concept has the given intent."""
        intent = frozenset(intent)
        return next((n for n in self.nodes if n.content.intent == intent), None)

    def order_relation(self) -> frozenset[tuple[frozenset[Hashable], frozenset[Hashable]]]:
        """Pairs (smaller intent, larger intent) of the strict order."""
        return frozenset(
            (x.content.intent, y.content.intent)
            for x in self.nodes
            for y in self.nodes
            if x != y and self.lattice.leq(x, y)
        )

    @property
    def has_extents(self) -> bool:
        return self.observations is not None and all(
            c.extent is not None for c in self.concepts()
        )

    # Derived lattices

    def with_extents(self, relation: IndexedRelation) -> "ConceptLattice":
        """Same lattice with every extent computed from `relation`."""
        graph = self.graph.map_contents(
            lambda node: Concept(node.content.intent, relation.extent_of(node.content.intent))
        )
        return ConceptLattice(graph, self.ground, relation.observations, self.dependency_graph)

    def iceberg(self, threshold: float = DEFAULT_ICEBERG_THRESHOLD) -> "ConceptLattice":
        """
        Keeps the concepts whose support (extent size over the size of the
        bottom extent) reaches `threshold`, plus the top. Kept concepts left
        without an upper neighbour are linked to the top.

        Raises:
            PreconditionViolationError: If the concepts have no extent.
        """
        if not 0.0 <= threshold <= 1.0:
            raise MalformedInputError(f"Iceberg threshold {threshold} is outside [0, 1]")
        if not self.has_extents:
            raise PreconditionViolationError("Iceberg lattices need concept extents")

        support = len(self.bottom().content.extent)

        def frequent(node: Node[Concept]) -> bool:
            if support == 0:
                return True
            return len(node.content.extent) / support >= threshold

        top = self.top()
        kept = [node for node in self.nodes if frequent(node)]
        if top not in kept:
            kept.append(top)
        graph = self.graph.subgraph(kept)
        for node in list(sinks(graph)):
            if node != top:
                graph.add_edge(node, top)

        logger.debug(f"Iceberg at {threshold}: kept {len(graph)} of {len(self)} concepts")
        return ConceptLattice(graph, self.ground, self.observations)

    def irreducibles_reduction(self) -> Lattice[frozenset[Hashable]]:
        """
        Reduced lattice labelled by the concepts themselves: a join
        irreducible carries the first attribute it introduces, a meet
        irreducible the first observation it introduces (its identifier when
        extents are unknown).
        """
        lattice = self.lattice
        ground_position = {x: i for i, x in enumerate(self.ground)}
        observation_position = {o: i for i, o in enumerate(self.observations or ())}

        def introduced_attribute(node: Node[Concept]) -> Hashable:
            (lower,) = lattice.lower_covers(node)
            return first(node.content.intent - lower.content.intent, ground_position)

        def introduced_observation(node: Node[Concept]) -> Hashable:
            if not self.has_extents:
                return node.ident
            (upper,) = lattice.upper_covers(node)
            return first(node.content.extent - upper.content.extent, observation_position)

        return lattice.irreducibles_reduction(introduced_attribute, introduced_observation)

    # Dependency graph readings

    def _require_dependency_graph(self) -> DirectedGraph[Hashable, Witnesses[Hashable]]:
        if self.dependency_graph is None:
            raise PreconditionViolationError(
                "No dependency graph: build the lattice with diagram_lattice"
            )
        return self.dependency_graph

    def minimal_generators(self) -> tuple[frozenset[Hashable], ...]:
        return minimal_generators(self._require_dependency_graph(), self.bottom().content.intent)

    def canonical_direct_basis(self) -> ImplicationSet[Hashable]:
        return canonical_direct_basis(
            self._require_dependency_graph(), self.bottom().content.intent
        )

    def __repr__(self) -> str:
        return (
            f"ConceptLattice({len(self)} concepts, {self.graph.edge_count()} edges, "
            f"{len(self.ground)} elements)"
        )


def complete_lattice(system: ClosureSystem[Element]) -> ConceptLattice:
    """
    Lattice of every closed set, with an edge between each pair of strictly
    included intents. The graph is the whole strict order, not its diagram.

    Complexity: O(|closed sets|² × |S|) on top of the enumeration.
    """
    graph: DirectedGraph[Concept, None] = DirectedGraph()
    nodes = [graph.add_node(Concept(closed)) for closed in all_closures(system)]
    for lower in nodes:
        for upper in nodes:
            if lower.content.intent < upper.content.intent:
                graph.add_edge(lower, upper)
    logger.debug(f"Complete lattice: {len(graph)} concepts, {graph.edge_count()} edges")
    return ConceptLattice(graph, system.ground_set())


def immediate_successors(
    system: ClosureSystem[Element],
    closed: Iterable[Element],
    tracker: DependencyTracker[Element] | None = None,
) -> tuple[frozenset[Element], ...]:
    """
    Covers of the closed set F in the lattice of closed sets (Bordat).

    For every pair source ≠ target outside F with source ∈ cl(F ∪ {target}),
    the dependency edge source -> target is recorded in `tracker` with the
    witness of F. Each strongly connected component of these local
    dependencies that no other element depends on yields the cover F ∪ C.
    """
    tracker = tracker or DependencyTracker(system)
    closed = frozenset(closed)
    witness = tracker.witness(closed)
    outside = [x for x in tracker.ground if x not in closed]

    local_edges = []
    for target in outside:
        implied = system.closure(closed | {target})
        for source in outside:
            if source != target and source in implied:
                tracker.record(source, target, witness)
                local_edges.append((tracker.node(source), tracker.node(target)))

    local = tracker.graph.subgraph(tracker.node(x) for x in outside).edge_subgraph(local_edges)
    condensation = strongly_connected_components(local)
    covers = tuple(
        closed | {member.content for member in component.content}
        for component in sources(condensation)
    )
    logger.debug(f"{len(covers)} covers for closed set of size {len(closed)}")
    return covers


def diagram_lattice(system: ClosureSystem[Element]) -> ConceptLattice:
    """
    Hasse diagram of the lattice of closed sets, generated from cl(∅) by
    repeated immediate successor steps, together with the dependency graph
    collected on the way.

    Complexity: O(|closed sets| × |S|² × cost(cl)).
    """
    tracker = DependencyTracker(system)
    graph: DirectedGraph[Concept, None] = DirectedGraph()
    bottom = graph.add_node(Concept(tracker.bottom))
    node_of = {tracker.bottom: bottom}

    pending = deque([bottom])
    while pending:
        node = pending.popleft()
        for cover in immediate_successors(system, node.content.intent, tracker):
            if cover not in node_of:
                node_of[cover] = graph.add_node(Concept(cover))
                pending.append(node_of[cover])
            graph.add_edge(node, node_of[cover])

    logger.debug(
        f"Diagram lattice: {len(graph)} concepts, {graph.edge_count()} cover edges, "
        f"{tracker.graph.edge_count()} dependencies"
    )
    return ConceptLattice(graph, tracker.ground, dependency_graph=tracker.graph)


def ideal_lattice(dag: DirectedGraph[Any, Any]) -> ConceptLattice:
    """
    Lattice of the ideals (down-sets) of an acyclic graph, ordered by
    inclusion. Intents are sets of nodes of `dag`.

    Ideals are built by following a topological order: each node x extends
    every ideal already containing all the predecessors of x.

    Raises:
        CyclicGraphError: If the graph contains a cycle.
    """
    order = topological_sort(dag)
    closed = transitive_closure(dag)

    ideals: list[frozenset[Node[Any]]] = [frozenset()]
    for node in order:
        below = set(closed.predecessors(node))
        ideals.extend([ideal | {node} for ideal in ideals if below <= ideal])

    graph: DirectedGraph[Concept, None] = DirectedGraph()
    nodes = [graph.add_node(Concept(ideal)) for ideal in ideals]
    for lower in nodes:
        for upper in nodes:
            if lower.content.intent < upper.content.intent:
                graph.add_edge(lower, upper)
    logger.debug(f"Ideal lattice: {len(nodes)} ideals")
    return ConceptLattice(transitive_reduction(graph), dag.nodes)
