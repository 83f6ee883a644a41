"""
The bijective components of a closure system.

A closure system, its lattice of closed sets, the reduced lattice, the
table of the reduced lattice, the dependency graph, the minimal generators,
the canonical direct basis and the canonical basis all describe the same
structure. BijectiveComponents computes every one of them from the closure
system in a single pass.
"""

import logging
import time
from collections.abc import Hashable
from typing import Any, Generic

from closure.implications import ImplicationSet
from closure.relation import BitRelation, IndexedRelation
from closure.system import ClosureSystem
from dgraph import DirectedGraph, Node
from localtypes import Element, Witnesses

from .concept import ConceptLattice, diagram_lattice
from .lattice import Lattice

logger = logging.getLogger(__name__)


class NotYetComputedError(Exception):
    """Raised when a component is read before `compute()` ran."""

    pass


class BijectiveComponents(Generic[Element]):
    """
    Owner of the components derived from one closure system.

    Example:
        >>> components = BijectiveComponents(relation.reindex())
        >>> seconds = components.compute()
        >>> components.canonical_basis
        ImplicationSet(...)
    """

    def __init__(self, closure_system: ClosureSystem[Element]) -> None:
        self.closure_system = closure_system
        self._components: dict[str, Any] = {}

    def compute(self) -> float:
        """Computes every component; returns the elapsed time in seconds."""
        start = time.perf_counter()
        system = self.closure_system

        lattice = diagram_lattice(system)
        if isinstance(system, IndexedRelation):
            lattice = lattice.with_extents(system)
        logger.info(f"Lattice generated: {len(lattice)} closed sets")

        reduced = lattice.irreducibles_reduction()
        direct_basis = lattice.canonical_direct_basis()
        components = {
            "lattice": lattice,
            "reduced_lattice": reduced,
            "dependency_graph": lattice.dependency_graph,
            "minimal_generators": lattice.minimal_generators(),
            "canonical_direct_basis": direct_basis,
            "canonical_basis": direct_basis.canonical_basis(),
            "table": reduced.table(),
        }
        self._components = components

        elapsed = time.perf_counter() - start
        logger.info(
            f"Bijective components computed in {elapsed:.3f}s: "
            f"{len(components['minimal_generators'])} minimal generators, "
            f"{len(direct_basis)} direct rules, "
            f"{len(components['canonical_basis'])} canonical rules"
        )
        return elapsed

    def _get(self, name: str) -> Any:
        if name not in self._components:
            raise NotYetComputedError(f"Component '{name}' is not available before compute()")
        return self._components[name]

    @property
    def is_computed(self) -> bool:
        return bool(self._components)

    @property
    def lattice(self) -> ConceptLattice:
        return self._get("lattice")

    @property
    def reduced_lattice(self) -> Lattice[frozenset[Hashable]]:
        return self._get("reduced_lattice")

    @property
    def dependency_graph(self) -> DirectedGraph[Element, Witnesses[Element]]:
        return self._get("dependency_graph")

    @property
    def minimal_generators(self) -> tuple[frozenset[Element], ...]:
        return self._get("minimal_generators")

    @property
    def canonical_direct_basis(self) -> ImplicationSet[Element]:
        return self._get("canonical_direct_basis")

    @property
    def canonical_basis(self) -> ImplicationSet[Element]:
        return self._get("canonical_basis")

    @property
    def table(self) -> BitRelation[Node[frozenset[Hashable]], Node[frozenset[Hashable]]]:
        return self._get("table")
