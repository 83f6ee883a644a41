"""
Order-theoretic algorithms on DirectedGraph.

Reachability is computed on a dense boolean adjacency matrix (numpy), which
keeps the O(n³) closure vectorised. Strongly connected components come from
scipy's compressed sparse graph routines.

Functions:
    adjacency_matrix(graph)            - nodes and boolean adjacency matrix
    reachability(graph, reflexive)     - nodes and boolean reachability matrix
    transitive_closure(graph)          - graph with every implied edge
    transitive_reduction(graph)        - graph without implied edges
    topological_sort(graph)            - Kahn order, ties broken by node order
    strongly_connected_components(g)   - condensation DAG of the SCCs
    sinks(graph) / sources(graph)      - nodes without out-/in-edges
    majorants(graph, node)             - nodes strictly reachable from node
    minorants(graph, node)             - nodes strictly reaching node
"""

import logging
from collections import deque
from collections.abc import Iterator

import numpy as np
from numpy.typing import NDArray
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import connected_components

from localtypes import Label, Payload
from utils.dag_functionals import CyclicGraphError
from utils.dag_functionals import topological_sort as sort_adjacency

from .graph import DirectedGraph, Node

logger = logging.getLogger(__name__)

type BoolMatrix = NDArray[np.bool_]


def adjacency_matrix(
    graph: DirectedGraph[Payload, Label],
) -> tuple[tuple[Node[Payload], ...], BoolMatrix]:
    """
    Returns the nodes (in node order) and the matrix M with M[i, j] true iff
    there is an edge from nodes[i] to nodes[j].
    """
    nodes = graph.nodes
    index = {node: i for i, node in enumerate(nodes)}
    matrix = np.zeros((len(nodes), len(nodes)), dtype=bool)
    for edge in graph.edges():
        matrix[index[edge.source], index[edge.target]] = True
    return nodes, matrix


def _warshall(matrix: BoolMatrix) -> BoolMatrix:
    """Boolean transitive closure, one vectorised pass per pivot."""
    reach = matrix.copy()
    for k in range(reach.shape[0]):
        reach |= reach[:, k, None] & reach[None, k, :]
    return reach


def reachability(
    graph: DirectedGraph[Payload, Label], reflexive: bool = False
) -> tuple[tuple[Node[Payload], ...], BoolMatrix]:
    """
    Returns the nodes and the matrix R with R[i, j] true iff nodes[j] can be
    reached from nodes[i] by a non-empty path (or i == j when reflexive).
    """
    nodes, matrix = adjacency_matrix(graph)
    reach = _warshall(matrix)
    if reflexive:
        np.fill_diagonal(reach, True)
    return nodes, reach


def transitive_closure(
    graph: DirectedGraph[Payload, Label], reflexive: bool = False
) -> DirectedGraph[Payload, Label]:
    """
    Returns a new graph with an edge u -> v whenever v is reachable from u.

    Existing edges keep their label, added edges are unlabelled. With
    `reflexive`, a loop is added on every node.
    """
    nodes, reach = reachability(graph, reflexive)
    closed = graph.copy()
    for i, j in zip(*np.nonzero(reach)):
        closed.add_edge(nodes[i], nodes[j])
    logger.debug(
        f"Transitive closure: {graph.edge_count()} -> {closed.edge_count()} edges"
    )
    return closed


def transitive_reduction(graph: DirectedGraph[Payload, Label]) -> DirectedGraph[Payload, Label]:
    """
    Returns a new graph without the edges implied by longer paths.

    An edge u -> v is dropped when some w distinct from u and v satisfies
    u ->+ w ->+ v. The result is unique when the graph is acyclic.
    """
    nodes, reach = reachability(graph)
    np.fill_diagonal(reach, False)
    through = (reach.astype(np.int64) @ reach.astype(np.int64)) > 0
    index = {node: i for i, node in enumerate(nodes)}
    reduced = graph.copy()
    for edge in graph.edges():
        if through[index[edge.source], index[edge.target]]:
            reduced.remove_edge(edge.source, edge.target)
    logger.debug(
        f"Transitive reduction: {graph.edge_count()} -> {reduced.edge_count()} edges"
    )
    return reduced


def topological_sort(graph: DirectedGraph[Payload, Label]) -> tuple[Node[Payload], ...]:
    """
    Returns the nodes so that every edge goes forward, smallest node first
    among the available ones.

    Raises:
        CyclicGraphError: If the graph contains a cycle.
    """
    adjacency = {node: set(graph.successors(node)) for node in graph.nodes}
    return sort_adjacency(adjacency)


def is_acyclic(graph: DirectedGraph[Payload, Label]) -> bool:
    try:
        topological_sort(graph)
    except CyclicGraphError:
        return False
    return True


def strongly_connected_components(
    graph: DirectedGraph[Payload, Label],
) -> DirectedGraph[frozenset[Node[Payload]], None]:
    """
    Returns the condensation of the graph.

    Each node of the result carries the frozenset of member nodes of one
    strongly connected component; there is an edge between two components
    when some edge of the graph links their members. Components are created
    in the order of their smallest member.
    """
    condensation: DirectedGraph[frozenset[Node[Payload]], None] = DirectedGraph()
    nodes, matrix = adjacency_matrix(graph)
    if not nodes:
        return condensation

    _, labels = connected_components(
        csr_matrix(matrix), directed=True, connection="strong"
    )

    members: dict[int, list[Node[Payload]]] = {}
    for node, label in zip(nodes, labels):
        members.setdefault(int(label), []).append(node)

    component_of: dict[Node[Payload], Node[frozenset[Node[Payload]]]] = {}
    for group in sorted(members.values(), key=min):
        component = condensation.add_node(frozenset(group))
        for node in group:
            component_of[node] = component

    for edge in graph.edges():
        source, target = component_of[edge.source], component_of[edge.target]
        if source != target:
            condensation.add_edge(source, target)
    return condensation


def sinks(graph: DirectedGraph[Payload, Label]) -> Iterator[Node[Payload]]:
    """Lazily yields the nodes without outgoing edges."""
    return (node for node in graph.nodes if graph.out_degree(node) == 0)


def sources(graph: DirectedGraph[Payload, Label]) -> Iterator[Node[Payload]]:
    """Lazily yields the nodes without incoming edges."""
    return (node for node in graph.nodes if graph.in_degree(node) == 0)


def _reachable(graph, node, step) -> frozenset:
    seen = set()
    queue = deque(step(node))
    while queue:
        current = queue.popleft()
        if current in seen:
            continue
        seen.add(current)
        queue.extend(step(current))
    return frozenset(seen)


def majorants(
    graph: DirectedGraph[Payload, Label], node: Node[Payload]
) -> frozenset[Node[Payload]]:
    """Nodes reachable from `node` by a non-empty path."""
    return _reachable(graph, node, graph.successors)


def minorants(
    graph: DirectedGraph[Payload, Label], node: Node[Payload]
) -> frozenset[Node[Payload]]:
    """Nodes from which `node` is reachable by a non-empty path."""
    return _reachable(graph, node, graph.predecessors)
