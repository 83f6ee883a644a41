"""Tests for closure/implications.py"""

import pytest

from closure import ImplicationSet, Rule
from localtypes import MalformedInputError


class TestRules:
    def test_conclusion_drops_premise_elements(self):
        rules = ImplicationSet("abc")
        assert rules.add_rule("a", "ab")
        assert rules.rules == (Rule(frozenset("a"), frozenset("b")),)

    def test_trivial_and_duplicate_rules_are_ignored(self):
        rules = ImplicationSet("ab")
        assert not rules.add_rule("ab", "a")
        assert rules.add_rule("a", "b")
        assert not rules.add_rule("a", "b")
        assert len(rules) == 1

    def test_unknown_elements_are_rejected(self):
        rules = ImplicationSet("ab")
        with pytest.raises(MalformedInputError, match="unknown elements"):
            rules.add_rule("a", "z")
        assert len(rules) == 0

    def test_duplicate_element(self):
        with pytest.raises(MalformedInputError, match="Duplicate element"):
            ImplicationSet("aa")

    def test_remove_rule(self, ab_implies_c):
        assert ab_implies_c.remove_rule("ab", "c")
        assert not ab_implies_c.remove_rule("ab", "c")
        assert len(ab_implies_c) == 0

    def test_remove_element_drops_its_rules(self, ab_implies_c):
        ab_implies_c.add_rule("c", "a")
        ab_implies_c.remove_element("b")
        assert ab_implies_c.elements == ("a", "c")
        assert ab_implies_c.rules == (Rule(frozenset("c"), frozenset("a")),)

    def test_elements_follow_key(self):
        rules = ImplicationSet([3, 1, 2], key=lambda x: -x)
        assert rules.ground_set() == (3, 2, 1)


class TestClosure:
    def test_forward_chaining(self):
        rules = ImplicationSet("abcd")
        rules.add_rule("cd", "a")
        rules.add_rule("b", "c")
        rules.add_rule("a", "d")
        assert rules.closure("b") == {"b", "c"}
        assert rules.closure("bd") == {"a", "b", "c", "d"}

    def test_empty_premise_fires_immediately(self):
        rules = ImplicationSet("ab")
        rules.add_rule((), "a")
        assert rules.closure(()) == {"a"}

    def test_unknown_element_in_query(self, ab_implies_c):
        with pytest.raises(MalformedInputError, match="Unknown elements"):
            ab_implies_c.closure("z")


class TestCanonicalBasis:
    def test_single_rule_is_its_own_basis(self, ab_implies_c):
        assert ab_implies_c.canonical_basis() == ab_implies_c

    def test_redundant_rule_is_dropped(self):
        rules = ImplicationSet("abc")
        rules.add_rule("a", "b")
        rules.add_rule("b", "c")
        rules.add_rule("a", "c")
        basis = rules.canonical_basis()
        assert set(basis.rules) == {
            Rule(frozenset("a"), frozenset("bc")),
            Rule(frozenset("b"), frozenset("c")),
        }

    def test_premises_are_saturated(self):
        rules = ImplicationSet("abcd")
        rules.add_rule("a", "b")
        rules.add_rule("ab", "c")
        rules.add_rule("abc", "d")
        basis = rules.canonical_basis()
        assert basis.rules == (Rule(frozenset("a"), frozenset("bcd")),)

    def test_basis_is_equivalent(self):
        rules = ImplicationSet("abcd")
        rules.add_rule("a", "b")
        rules.add_rule("cd", "a")
        rules.add_rule("bc", "d")
        rules.add_rule("ac", "d")
        basis = rules.canonical_basis()
        for mask in range(16):
            subset = {x for i, x in enumerate("abcd") if mask >> i & 1}
            assert basis.closure(subset) == rules.closure(subset)
        assert len(basis) <= len(rules)
