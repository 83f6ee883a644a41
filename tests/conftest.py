"""Shared fixtures: small relations, rule sets and lattices with known answers."""

import logging

import pytest

from closure import BitRelation, ImplicationSet
from constants import LOG_FORMAT, LOG_LEVEL
from dgraph import DirectedGraph

logging.basicConfig(format=LOG_FORMAT, level=LOG_LEVEL)


@pytest.fixture
def small_relation() -> BitRelation[int, str]:
    """
    1: a b
    2: a
    3:   b c
    """
    return BitRelation.from_pairs(
        [1, 2, 3], ["a", "b", "c"], [(1, "a"), (1, "b"), (2, "a"), (3, "b"), (3, "c")]
    )


@pytest.fixture
def contranominal() -> BitRelation[int, str]:
    """Every observation misses exactly one attribute: every set is closed."""
    return BitRelation.from_pairs(
        [1, 2, 3], ["a", "b", "c"], [(1, "b"), (1, "c"), (2, "a"), (2, "c"), (3, "a"), (3, "b")]
    )


@pytest.fixture
def ab_implies_c() -> ImplicationSet[str]:
    rules = ImplicationSet("abc")
    rules.add_rule("ab", "c")
    return rules


def graph_from_edges(contents, edges) -> tuple[DirectedGraph, dict]:
    """Builds a graph with one node per content and edges given by contents."""
    graph = DirectedGraph()
    node_of = {content: graph.add_node(content) for content in contents}
    for source, target in edges:
        graph.add_edge(node_of[source], node_of[target])
    return graph, node_of


@pytest.fixture
def pentagon() -> tuple[DirectedGraph, dict]:
    """N5: 0 < a < b < 1 and 0 < c < 1."""
    return graph_from_edges(
        ["0", "a", "b", "c", "1"],
        [("0", "a"), ("a", "b"), ("b", "1"), ("0", "c"), ("c", "1")],
    )


@pytest.fixture
def square() -> tuple[DirectedGraph, dict]:
    """Boolean lattice of two atoms a and b."""
    return graph_from_edges(
        ["0", "a", "b", "1"],
        [("0", "a"), ("0", "b"), ("a", "1"), ("b", "1")],
    )


@pytest.fixture
def make_graph():
    return graph_from_edges
