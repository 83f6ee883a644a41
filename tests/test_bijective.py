"""Tests for lattice/bijective.py"""

import pytest

from closure import ImplicationSet, Rule
from lattice import BijectiveComponents, NotYetComputedError, is_lattice


class TestBijectiveComponents:
    def test_components_are_unavailable_before_compute(self, ab_implies_c):
        components = BijectiveComponents(ab_implies_c)
        assert not components.is_computed
        for name in (
            "lattice",
            "reduced_lattice",
            "dependency_graph",
            "minimal_generators",
            "canonical_direct_basis",
            "canonical_basis",
            "table",
        ):
            with pytest.raises(NotYetComputedError, match=name):
                getattr(components, name)

    def test_rule_set(self, ab_implies_c):
        components = BijectiveComponents(ab_implies_c)
        elapsed = components.compute()
        assert elapsed >= 0.0
        assert components.closure_system is ab_implies_c
        assert len(components.lattice) == 7
        assert components.dependency_graph.edge_count() == 2
        assert len(components.minimal_generators) == 4
        assert components.canonical_direct_basis.rules == (Rule(frozenset("ab"), frozenset("c")),)
        assert components.canonical_basis == components.canonical_direct_basis
        assert is_lattice(components.reduced_lattice.graph)

    def test_relation(self, small_relation):
        components = BijectiveComponents(small_relation.reindex())
        components.compute()
        assert components.lattice.has_extents
        assert len(components.reduced_lattice) == 6
        assert components.canonical_basis.rules == (Rule(frozenset("c"), frozenset("b")),)

        table = components.table
        assert len(table.observations) == 3
        assert len(table.attributes) == 3
        assert len(list(table.pairs())) == 5

    def test_table_matches_the_reduced_order(self, small_relation):
        components = BijectiveComponents(small_relation.reindex())
        components.compute()
        reduced = components.reduced_lattice
        assert all(reduced.leq(j, m) for j, m in components.table.pairs())

    def test_empty_rule_set(self):
        components = BijectiveComponents(ImplicationSet())
        components.compute()
        assert len(components.lattice) == 1
        assert components.minimal_generators == ()
        assert len(components.canonical_basis) == 0
        assert components.table.observations == ()

    def test_compute_logs_milestones(self, ab_implies_c, caplog):
        with caplog.at_level("INFO", logger="lattice.bijective"):
            BijectiveComponents(ab_implies_c).compute()
        assert "Bijective components computed" in caplog.text
