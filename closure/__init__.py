"""
Closure systems: a ground set plus a closure operator.

**Protocol & enumeration** (system.py)
    - ClosureSystem, is_closed
    - iter_closures / all_closures (Next-Closure, lectic order)
    - precedence_graph, reducible_elements

**Relations** (relation.py)
    - BitRelation: mutable observation x attribute relation
    - IndexedRelation: immutable bit-matrix snapshot answering closures

**Implications** (implications.py)
    - Rule, ImplicationSet (forward chaining, canonical basis)
"""

from .implications import ImplicationSet, Rule
from .relation import BitRelation, IndexedRelation
from .system import (
    ClosureSystem,
    all_closures,
    is_closed,
    iter_closures,
    precedence_graph,
    reducible_elements,
)

__all__ = [
    # Protocol & enumeration
    "ClosureSystem",
    "is_closed",
    "iter_closures",
    "all_closures",
    "precedence_graph",
    "reducible_elements",
    # Relations
    "BitRelation",
    "IndexedRelation",
    # Implications
    "Rule",
    "ImplicationSet",
]
