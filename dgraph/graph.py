"""
Directed graph node/edge store.

A DirectedGraph holds Nodes, each carrying an arbitrary payload, and at most
one edge per ordered pair of nodes, optionally labelled. Node identity is an
integer allocated by the graph, so several nodes may carry equal payloads
(e.g. the empty payload of reduced lattices).

Derived graphs (subgraphs, closures, reductions) share the Node objects of
the graph they come from, so nodes can be used across them as keys.
"""

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, Generic

from localtypes import Label, MalformedInputError, Payload


@dataclass(frozen=True, slots=True, order=True)
class Node(Generic[Payload]):
    """
    A graph node: an identifier plus a payload.

    Equality, hashing and ordering only use `ident`; the payload is data.
    """

    ident: int
    content: Payload = field(compare=False)

    def __str__(self) -> str:
        return f"{self.ident}:{self.content}"


@dataclass(frozen=True, slots=True)
class Edge(Generic[Payload, Label]):
    source: Node[Payload]
    target: Node[Payload]
    label: Label | None = None

    def __str__(self) -> str:
        if self.label is None:
            return f"{self.source.ident}->{self.target.ident}"
        return f"{self.source.ident}-[{self.label}]->{self.target.ident}"


class DirectedGraph(Generic[Payload, Label]):
    """
    Mutable adjacency store with successor and predecessor maps.

    Example:
        >>> graph = DirectedGraph[str, None]()
        >>> a, b = graph.add_node("a"), graph.add_node("b")
        >>> graph.add_edge(a, b)
        True
        >>> [n.content for n in graph.successors(a)]
        ['b']
    """

    def __init__(self) -> None:
        self._successors: dict[Node[Payload], dict[Node[Payload], Label | None]] = {}
        self._predecessors: dict[Node[Payload], dict[Node[Payload], Label | None]] = {}
        self._next_ident = 0

    # Nodes

    def add_node(self, content: Payload) -> Node[Payload]:
        """Creates a node carrying `content` and returns it."""
        node = Node(self._next_ident, content)
        self._next_ident += 1
        self._successors[node] = {}
        self._predecessors[node] = {}
        return node

    def insert_node(self, node: Node[Payload]) -> bool:
        """
        Adds an existing Node object, keeping its identifier.

        Returns False if the node is already present. A different node with
        the same identifier is a conflict.
        """
        if node in self._successors:
            existing = next(n for n in self._successors if n == node)
            if existing.content != node.content:
                raise MalformedInputError(
                    f"Node identifier {node.ident} already carries {existing.content!r}"
                )
            return False
        self._successors[node] = {}
        self._predecessors[node] = {}
        self._next_ident = max(self._next_ident, node.ident + 1)
        return True

    def remove_node(self, node: Node[Payload]) -> None:
        self._require(node)
        for successor in self._successors.pop(node):
            del self._predecessors[successor][node]
        for predecessor in self._predecessors.pop(node):
            del self._successors[predecessor][node]

    def find(self, content: Payload) -> Node[Payload] | None:
        """Returns the first node (by identifier) carrying `content`."""
        return next((n for n in self.nodes if n.content == content), None)

    @property
    def nodes(self) -> tuple[Node[Payload], ...]:
        return tuple(sorted(self._successors))

    def __contains__(self, node: object) -> bool:
        return node in self._successors

    def __len__(self) -> int:
        return len(self._successors)

    # Edges

    def add_edge(
        self, source: Node[Payload], target: Node[Payload], label: Label | None = None
    ) -> bool:
        """
        Adds the edge source -> target.

        Returns False, leaving the existing label untouched, if the edge
        is already present.
        """
        self._require(source)
        self._require(target)
        if target in self._successors[source]:
            return False
        self._successors[source][target] = label
        self._predecessors[target][source] = label
        return True

    def remove_edge(self, source: Node[Payload], target: Node[Payload]) -> bool:
        self._require(source)
        self._require(target)
        if target not in self._successors[source]:
            return False
        del self._successors[source][target]
        del self._predecessors[target][source]
        return True

    def has_edge(self, source: Node[Payload], target: Node[Payload]) -> bool:
        return source in self._successors and target in self._successors[source]

    def label(self, source: Node[Payload], target: Node[Payload]) -> Label | None:
        if not self.has_edge(source, target):
            raise MalformedInputError(f"No edge {source} -> {target}")
        return self._successors[source][target]

    def set_label(
        self, source: Node[Payload], target: Node[Payload], label: Label | None
    ) -> None:
        if not self.has_edge(source, target):
            raise MalformedInputError(f"No edge {source} -> {target}")
        self._successors[source][target] = label
        self._predecessors[target][source] = label

    def edges(self) -> Iterator[Edge[Payload, Label]]:
        """Iterates over edges ordered by (source, target)."""
        for source in self.nodes:
            for target in sorted(self._successors[source]):
                yield Edge(source, target, self._successors[source][target])

    def edge_count(self) -> int:
        return sum(len(targets) for targets in self._successors.values())

    def successors(self, node: Node[Payload]) -> tuple[Node[Payload], ...]:
        self._require(node)
        return tuple(sorted(self._successors[node]))

    def predecessors(self, node: Node[Payload]) -> tuple[Node[Payload], ...]:
        self._require(node)
        return tuple(sorted(self._predecessors[node]))

    def successor_edges(self, node: Node[Payload]) -> tuple[Edge[Payload, Label], ...]:
        return tuple(
            Edge(node, target, self._successors[node][target])
            for target in self.successors(node)
        )

    def predecessor_edges(self, node: Node[Payload]) -> tuple[Edge[Payload, Label], ...]:
        return tuple(
            Edge(source, node, self._predecessors[node][source])
            for source in self.predecessors(node)
        )

    def out_degree(self, node: Node[Payload]) -> int:
        self._require(node)
        return len(self._successors[node])

    def in_degree(self, node: Node[Payload]) -> int:
        self._require(node)
        return len(self._predecessors[node])

    # Derived graphs

    def subgraph(self, nodes: Iterable[Node[Payload]]) -> "DirectedGraph[Payload, Label]":
        """Induced subgraph on `nodes`, sharing the Node objects."""
        kept = set(nodes)
        sub: DirectedGraph[Payload, Label] = DirectedGraph()
        for node in sorted(kept):
            self._require(node)
            sub.insert_node(node)
        for node in sorted(kept):
            for target, label in self._successors[node].items():
                if target in kept:
                    sub.add_edge(node, target, label)
        return sub

    def edge_subgraph(
        self, pairs: Iterable[tuple[Node[Payload], Node[Payload]]]
    ) -> "DirectedGraph[Payload, Label]":
        """Keeps every node but only the listed edges that exist in this graph."""
        sub: DirectedGraph[Payload, Label] = DirectedGraph()
        for node in self.nodes:
            sub.insert_node(node)
        for source, target in pairs:
            if self.has_edge(source, target):
                sub.add_edge(source, target, self._successors[source][target])
        return sub

    def transpose(self) -> "DirectedGraph[Payload, Label]":
        transposed: DirectedGraph[Payload, Label] = DirectedGraph()
        for node in self.nodes:
            transposed.insert_node(node)
        for edge in self.edges():
            transposed.add_edge(edge.target, edge.source, edge.label)
        return transposed

    def copy(self) -> "DirectedGraph[Payload, Label]":
        return self.subgraph(self._successors)

    def map_contents(
        self, function: Callable[[Node[Payload]], Any]
    ) -> "DirectedGraph[Any, Label]":
        """
        Same structure and identifiers, payloads replaced by `function(node)`.
        """
        mapped: DirectedGraph[Any, Label] = DirectedGraph()
        renamed = {node: Node(node.ident, function(node)) for node in self.nodes}
        for node in self.nodes:
            mapped.insert_node(renamed[node])
        for edge in self.edges():
            mapped.add_edge(renamed[edge.source], renamed[edge.target], edge.label)
        return mapped

    # Helpers

    def _require(self, node: Node[Payload]) -> None:
        if node not in self._successors:
            raise MalformedInputError(f"Unknown node {node}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DirectedGraph):
            return NotImplemented
        own_nodes = [(n.ident, n.content) for n in self.nodes]
        other_nodes = [(n.ident, n.content) for n in other.nodes]
        return own_nodes == other_nodes and list(self.edges()) == list(other.edges())

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        nodes = ",".join(str(node) for node in self.nodes)
        edges = ",".join(str(edge) for edge in self.edges())
        return (
            f"DirectedGraph({len(self)} nodes: {{{nodes}}}, "
            f"{self.edge_count()} edges: {{{edges}}})"
        )
