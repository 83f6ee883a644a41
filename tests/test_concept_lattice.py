"""Tests for lattice/concept.py and lattice/dependency.py"""

import pytest

from closure import BitRelation, ImplicationSet, Rule
from localtypes import MalformedInputError
from lattice import (
    Concept,
    DependencyTracker,
    PreconditionViolationError,
    complete_lattice,
    diagram_lattice,
    ideal_lattice,
    immediate_successors,
    is_lattice,
    minimize_witnesses,
)


def intents(lattice) -> set[frozenset]:
    return {c.intent for c in lattice.concepts()}


def cover_pairs(lattice) -> set[tuple[frozenset, frozenset]]:
    return {
        (edge.source.content.intent, edge.target.content.intent)
        for edge in lattice.graph.edges()
    }


class TestGeneration:
    def test_both_algorithms_agree(self, small_relation, contranominal, ab_implies_c):
        for system in (small_relation.reindex(), contranominal.reindex(), ab_implies_c):
            complete, diagram = complete_lattice(system), diagram_lattice(system)
            assert intents(complete) == intents(diagram)
            assert complete.order_relation() == diagram.order_relation()

    def test_complete_lattice_holds_the_whole_order(self, contranominal):
        lattice = complete_lattice(contranominal.reindex())
        assert len(lattice) == 8
        assert lattice.graph.edge_count() == 19
        assert is_lattice(lattice.graph)

    def test_diagram_lattice_holds_the_covers(self, small_relation):
        lattice = diagram_lattice(small_relation.reindex())
        assert cover_pairs(lattice) == {
            (frozenset(), frozenset("a")),
            (frozenset(), frozenset("b")),
            (frozenset("a"), frozenset("ab")),
            (frozenset("b"), frozenset("ab")),
            (frozenset("b"), frozenset("bc")),
            (frozenset("ab"), frozenset("abc")),
            (frozenset("bc"), frozenset("abc")),
        }
        assert is_lattice(lattice.graph)

    def test_two_independent_attributes(self):
        relation = BitRelation.from_pairs([1, 2, 3], ["a", "b"], [(1, "a"), (2, "b")])
        lattice = diagram_lattice(relation.reindex())
        assert intents(lattice) == {frozenset(), frozenset("a"), frozenset("b"), frozenset("ab")}
        bottom, top = lattice.bottom(), lattice.top()
        covers = lattice.graph.successors(bottom)
        assert len(covers) == 2
        assert all(lattice.graph.successors(cover) == (top,) for cover in covers)

    def test_immediate_successors_of_bottom(self, small_relation):
        covers = immediate_successors(small_relation.reindex(), ())
        assert covers == (frozenset("a"), frozenset("b"))

    def test_immediate_successors_skip_non_covers(self, small_relation):
        covers = immediate_successors(small_relation.reindex(), {"a"})
        assert covers == (frozenset("ab"),)

    def test_relation_concept_lattice_has_extents(self, small_relation):
        lattice = small_relation.reindex().concept_lattice()
        assert lattice.find({"a"}).content == Concept(frozenset("a"), frozenset({1, 2}))
        assert lattice.find(()).content.extent == {1, 2, 3}
        assert lattice.find({"a", "c"}) is None
        assert lattice.has_extents

    def test_non_diagram_concept_lattice(self, small_relation):
        lattice = small_relation.reindex().concept_lattice(diagram=False)
        assert lattice.dependency_graph is None
        assert len(lattice) == 6


class TestDependencyGraph:
    def test_antichain_has_no_dependencies(self, contranominal):
        lattice = diagram_lattice(contranominal.reindex())
        assert lattice.dependency_graph.edge_count() == 0
        assert lattice.minimal_generators() == (
            frozenset("a"), frozenset("b"), frozenset("c"),
        )

    def test_rule_dependencies(self, ab_implies_c):
        lattice = diagram_lattice(ab_implies_c)
        edges = {
            (e.source.content, e.target.content): e.label
            for e in lattice.dependency_graph.edges()
        }
        assert edges == {
            ("c", "a"): {frozenset("b")},
            ("c", "b"): {frozenset("a")},
        }
        assert lattice.minimal_generators() == (
            frozenset("a"), frozenset("b"), frozenset("c"), frozenset("ab"),
        )
        assert lattice.canonical_direct_basis().rules == (Rule(frozenset("ab"), frozenset("c")),)

    def test_relation_dependencies(self, small_relation):
        lattice = diagram_lattice(small_relation.reindex())
        basis = lattice.canonical_direct_basis()
        assert basis.rules == (Rule(frozenset("c"), frozenset("b")),)
        assert lattice.minimal_generators() == (frozenset("a"), frozenset("b"), frozenset("c"))

    def test_non_empty_bottom(self):
        relation = BitRelation.from_pairs([1, 2], ["a", "b"], [(1, "a"), (2, "a"), (2, "b")])
        lattice = diagram_lattice(relation.reindex())
        assert lattice.bottom().content.intent == {"a"}
        assert lattice.minimal_generators() == (frozenset("b"),)
        assert lattice.canonical_direct_basis().rules == (Rule(frozenset(), frozenset("a")),)

    def test_direct_basis_is_equivalent(self):
        rules = ImplicationSet("abcd")
        rules.add_rule("a", "b")
        rules.add_rule("bc", "d")
        basis = diagram_lattice(rules).canonical_direct_basis()
        for mask in range(16):
            subset = {x for i, x in enumerate("abcd") if mask >> i & 1}
            assert basis.closure(subset) == rules.closure(subset)

    def test_dependency_readings_need_a_diagram(self, ab_implies_c):
        lattice = complete_lattice(ab_implies_c)
        with pytest.raises(PreconditionViolationError, match="dependency graph"):
            lattice.minimal_generators()
        with pytest.raises(PreconditionViolationError, match="dependency graph"):
            lattice.canonical_direct_basis()

    def test_minimize_witnesses(self):
        witnesses = frozenset({frozenset("ab")})
        assert minimize_witnesses(witnesses, frozenset("abc")) == witnesses
        assert minimize_witnesses(witnesses, frozenset("a")) == {frozenset("a")}
        assert minimize_witnesses(witnesses, frozenset("c")) == {frozenset("ab"), frozenset("c")}

    def test_tracker_witness_drops_implied_elements(self, small_relation):
        tracker = DependencyTracker(small_relation.reindex())
        assert tracker.witness(frozenset("bc")) == {"c"}
        assert tracker.witness(frozenset("ab")) == {"a", "b"}


class TestIceberg:
    def test_half_support(self, small_relation):
        iceberg = small_relation.reindex().concept_lattice().iceberg(0.5)
        assert intents(iceberg) == {frozenset(), frozenset("a"), frozenset("b"), frozenset("abc")}
        assert iceberg.graph.edge_count() == 4
        assert is_lattice(iceberg.graph)

    def test_full_support_keeps_bounds(self, small_relation):
        iceberg = small_relation.reindex().concept_lattice().iceberg(1.0)
        assert intents(iceberg) == {frozenset(), frozenset("abc")}

    def test_zero_support_keeps_everything(self, small_relation):
        lattice = small_relation.reindex().concept_lattice()
        assert intents(lattice.iceberg(0.0)) == intents(lattice)

    def test_iceberg_needs_extents(self, ab_implies_c):
        with pytest.raises(PreconditionViolationError, match="extents"):
            diagram_lattice(ab_implies_c).iceberg()

    def test_threshold_range(self, small_relation):
        with pytest.raises(MalformedInputError, match="threshold"):
            small_relation.reindex().concept_lattice().iceberg(1.5)


class TestIrreduciblesReduction:
    def test_labels_come_from_the_concepts(self, small_relation):
        lattice = small_relation.reindex().concept_lattice()
        reduced = lattice.irreducibles_reduction()
        payload = {n.ident: n.content for n in reduced.nodes}

        def label(intent: str) -> frozenset:
            return payload[lattice.find(frozenset(intent)).ident]

        assert label("") == frozenset()
        assert label("a") == {"a", 2}
        assert label("b") == {"b"}
        assert label("bc") == {"c", 3}
        assert label("ab") == {1}
        assert label("abc") == frozenset()
        assert is_lattice(reduced.graph)

    def test_without_extents_meets_use_identifiers(self, ab_implies_c):
        lattice = diagram_lattice(ab_implies_c)
        reduced = lattice.irreducibles_reduction()
        node_a = lattice.find({"a"})
        assert {n.ident: n.content for n in reduced.nodes}[node_a.ident] == {"a", node_a.ident}


class TestIdealLattice:
    def test_v_shape(self, make_graph):
        graph, node = make_graph("xyz", ["xz", "yz"])
        lattice = ideal_lattice(graph)
        assert intents(lattice) == {
            frozenset(),
            frozenset({node["x"]}),
            frozenset({node["y"]}),
            frozenset({node["x"], node["y"]}),
            frozenset({node["x"], node["y"], node["z"]}),
        }
        assert lattice.graph.edge_count() == 5
        assert is_lattice(lattice.graph)

    def test_chain(self, make_graph):
        graph, _ = make_graph("xy", ["xy"])
        assert len(ideal_lattice(graph)) == 3
