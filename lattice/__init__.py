"""
Lattices of closed sets and the structures derived from them.

**Lattice** (lattice.py)
    - Lattice: order, join/meet, covers, irreducibles, table
    - is_lattice / validate_lattice

**Concept lattices** (concept.py)
    - Concept, ConceptLattice
    - complete_lattice (Next-Closure), diagram_lattice (Bordat)
    - immediate_successors, ideal_lattice

**Dependency graph** (dependency.py)
    - minimal generators, canonical direct basis

**Arrow relation** (arrows.py)
    - Arrow, ArrowRelation

**Bijective components** (bijective.py)
    - BijectiveComponents
"""

from .arrows import Arrow, ArrowRelation
from .bijective import BijectiveComponents, NotYetComputedError
from .concept import (
    Concept,
    ConceptLattice,
    complete_lattice,
    diagram_lattice,
    ideal_lattice,
    immediate_successors,
)
from .dependency import (
    DependencyTracker,
    canonical_direct_basis,
    minimal_generators,
    minimize_witnesses,
)
from .lattice import Lattice, PreconditionViolationError, is_lattice, validate_lattice

__all__ = [
    # Lattice
    "Lattice",
    "is_lattice",
    "validate_lattice",
    # Concept lattices
    "Concept",
    "ConceptLattice",
    "complete_lattice",
    "diagram_lattice",
    "immediate_successors",
    "ideal_lattice",
    # Dependency graph
    "DependencyTracker",
    "minimize_witnesses",
    "minimal_generators",
    "canonical_direct_basis",
    # Arrow relation
    "Arrow",
    "ArrowRelation",
    # Bijective components
    "BijectiveComponents",
    # Errors
    "PreconditionViolationError",
    "NotYetComputedError",
]
