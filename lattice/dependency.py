"""
Dependency graph bookkeeping for Bordat's diagram algorithm.

The dependency graph has one node per ground element. While the lattice is
generated, an edge source -> target is recorded each time a closed set F
satisfies source ∈ cl(F ∪ {target}); its label keeps the inclusion-minimal
witnesses, a witness being F stripped of the elements that are implied by
other elements of F.

Read back, an edge source -> target labelled by W yields the rule
W ∪ {target} -> {source} of the canonical direct basis, and W ∪ {target} is a
minimal generator.
"""

import logging
from collections.abc import Iterable
from typing import Generic

from closure.implications import ImplicationSet
from closure.system import ClosureSystem, precedence_graph
from dgraph import DirectedGraph, Node, minorants, strongly_connected_components
from localtypes import Element, OrderKey, Witnesses, identity_key, ordered

logger = logging.getLogger(__name__)


def minimize_witnesses(
    witnesses: Witnesses[Element], candidate: frozenset[Element]
) -> Witnesses[Element]:
    """
    Adds `candidate` to an antichain of witnesses, keeping it inclusion-minimal.
    """
    if any(witness <= candidate for witness in witnesses):
        return witnesses
    return frozenset(w for w in witnesses if not candidate <= w) | {candidate}


def strict_minorants(system: ClosureSystem[Element]) -> dict[Element, frozenset[Element]]:
    """
    Maps each element x to the elements strictly implied by it: those whose
    precedence component lies strictly below the component of x.
    """
    condensation = strongly_connected_components(precedence_graph(system))
    below: dict[Element, frozenset[Element]] = {}
    for component in condensation.nodes:
        implied = frozenset(
            member.content
            for lower in minorants(condensation, component)
            for member in lower.content
        )
        for member in component.content:
            below[member.content] = implied
    return below


class DependencyTracker(Generic[Element]):
    """
    Dependency graph under construction, with the precomputed order data of
    the closure system it belongs to.
    """

    def __init__(self, system: ClosureSystem[Element]) -> None:
        self.ground = system.ground_set()
        self.bottom = system.closure(())
        self.graph: DirectedGraph[Element, Witnesses[Element]] = DirectedGraph()
        self._node_of: dict[Element, Node[Element]] = {
            element: self.graph.add_node(element) for element in self.ground
        }
        self._below = strict_minorants(system)

    def node(self, element: Element) -> Node[Element]:
        return self._node_of[element]

    def witness(self, closed: frozenset[Element]) -> frozenset[Element]:
        """`closed` without cl(∅) and without elements implied by other members."""
        implied = set(self.bottom)
        for element in closed:
            implied |= self._below[element]
        return closed - implied

    def record(self, source: Element, target: Element, witness: frozenset[Element]) -> None:
        source_node, target_node = self.node(source), self.node(target)
        if self.graph.add_edge(source_node, target_node, frozenset({witness})):
            return
        current = self.graph.label(source_node, target_node)
        self.graph.set_label(source_node, target_node, minimize_witnesses(current, witness))


def minimal_generators(
    dependency_graph: DirectedGraph[Element, Witnesses[Element]],
    bottom: Iterable[Element] = (),
    key: OrderKey | None = None,
) -> tuple[frozenset[Element], ...]:
    """
    Minimal generators read from a dependency graph: every singleton outside
    cl(∅) plus W ∪ {target} for each witness W of each edge.
    """
    bottom = frozenset(bottom)
    generators = {
        frozenset({node.content}) for node in dependency_graph.nodes if node.content not in bottom
    }
    for edge in dependency_graph.edges():
        for witness in edge.label or ():
            generators.add(witness | {edge.target.content})
    return tuple(sorted(generators, key=lambda g: (len(g), ordered(g, key))))


def canonical_direct_basis(
    dependency_graph: DirectedGraph[Element, Witnesses[Element]],
    bottom: Iterable[Element] = (),
    key: OrderKey | None = None,
) -> ImplicationSet[Element]:
    """
    Canonical direct basis read from a dependency graph: the rules
    W ∪ {target} -> {source} grouped by premise, plus ∅ -> cl(∅) when cl(∅)
    is not empty.
    """
    bottom = frozenset(bottom)
    conclusions: dict[frozenset[Element], set[Element]] = {}
    for edge in dependency_graph.edges():
        for witness in edge.label or ():
            premise = witness | {edge.target.content}
            conclusions.setdefault(premise, set()).add(edge.source.content)

    basis = ImplicationSet((node.content for node in dependency_graph.nodes), key or identity_key)
    if bottom:
        basis.add_rule((), bottom)
    for premise in sorted(conclusions, key=lambda p: (len(p), ordered(p, key))):
        basis.add_rule(premise, conclusions[premise])
    logger.debug(f"Canonical direct basis: {len(basis)} rules")
    return basis
