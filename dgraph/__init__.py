"""
Directed graph primitives.

**Store** (graph.py)
    Nodes with integer identity and arbitrary payload, labelled edges.
    - DirectedGraph, Node, Edge

**Algorithms** (algorithms.py)
    Order-theoretic operations shared by the lattice constructions.
    - transitive_closure / transitive_reduction
    - topological_sort (deterministic Kahn)
    - strongly_connected_components (condensation DAG)
    - sinks / sources, majorants / minorants
"""

from utils.dag_functionals import CyclicGraphError

from .algorithms import (
    adjacency_matrix,
    is_acyclic,
    majorants,
    minorants,
    reachability,
    sinks,
    sources,
    strongly_connected_components,
    topological_sort,
    transitive_closure,
    transitive_reduction,
)
from .graph import DirectedGraph, Edge, Node

__all__ = [
    # Store
    "DirectedGraph",
    "Edge",
    "Node",
    # Algorithms
    "adjacency_matrix",
    "reachability",
    "transitive_closure",
    "transitive_reduction",
    "topological_sort",
    "is_acyclic",
    "strongly_connected_components",
    "sinks",
    "sources",
    "majorants",
    "minorants",
    # Errors
    "CyclicGraphError",
]
