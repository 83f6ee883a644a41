"""
DAG (Directed Acyclic Graph) utilities.

Functions:
    topological_sort(graph, key) - Kahn's algorithm with deterministic tie-breaks
"""

import heapq
from collections.abc import Callable, Mapping, Set
from typing import Any, TypeVar

T = TypeVar("T")


class CyclicGraphError(ValueError):
    """Raised when an operation requiring an acyclic graph meets a cycle."""

    pass


def topological_sort(
    parent_to_children: Mapping[T, Set[T]],
    key: Callable[[T], Any] | None = None,
) -> tuple[T, ...]:
    """
    Returns nodes in topological order using Kahn's algorithm.

    Among the nodes whose predecessors have all been emitted, the smallest
    one according to `key` (natural order by default) is emitted first, so
    the result only depends on the graph and the order.

    Args:
        parent_to_children: Graph as adjacency list (node -> set of dependents)
        key: Sort key used to break ties.

    Returns:
        Nodes ordered so parents come before children.

    Raises:
        CyclicGraphError: If the graph contains a cycle.
    """
    all_nodes: set[T] = set(parent_to_children.keys())
    for children in parent_to_children.values():
        all_nodes.update(children)

    # Ties are broken on the rank of each node in the requested order
    ranked = sorted(all_nodes, key=key) if key else sorted(all_nodes)  # type: ignore[type-var]
    rank: dict[T, int] = {node: i for i, node in enumerate(ranked)}

    in_degree: dict[T, int] = {node: 0 for node in all_nodes}
    for parent, children in parent_to_children.items():
        for child in children:
            in_degree[child] += 1

    heap = [rank[node] for node in all_nodes if in_degree[node] == 0]
    heapq.heapify(heap)
    sorted_list: list[T] = []

    while heap:
        node = ranked[heapq.heappop(heap)]
        sorted_list.append(node)

        for child in parent_to_children.get(node, ()):
            in_degree[child] -= 1
            if in_degree[child] == 0:
                heapq.heappush(heap, rank[child])

    if len(sorted_list) != len(all_nodes):
        residual = [node for node in ranked if in_degree[node] > 0]
        raise CyclicGraphError(
            f"Graph contains a cycle through {len(residual)} nodes: {residual[:5]}"
        )

    return tuple(sorted_list)
