"""
Implication rules over an ordered ground set.

An ImplicationSet is a closure system: the closure of X is the smallest
superset of X that, for every rule premise -> conclusion with premise ⊆ X,
also contains the conclusion.

Functions:
    ImplicationSet.closure(elements)  - forward chaining to a fixpoint
    ImplicationSet.canonical_basis()  - equivalent Duquenne-Guigues basis
"""

import logging
from collections.abc import Iterable, Iterator
from typing import Generic, NamedTuple

from localtypes import Element, MalformedInputError, OrderKey, identity_key, ordered

logger = logging.getLogger(__name__)


class Rule(NamedTuple, Generic[Element]):
    premise: frozenset[Element]
    conclusion: frozenset[Element]

    def __str__(self) -> str:
        return f"{set(self.premise) or '{}'} -> {set(self.conclusion) or '{}'}"


class ImplicationSet(Generic[Element]):
    """
    Mutable set of rules over an ordered ground set.

    Example:
        >>> rules = ImplicationSet("abc")
        >>> rules.add_rule("ab", "c")
        True
        >>> sorted(rules.closure("ab"))
        ['a', 'b', 'c']
    """

    def __init__(self, elements: Iterable[Element] = (), key: OrderKey | None = None) -> None:
        self.key = key or identity_key
        self._elements: set[Element] = set()
        self._rules: dict[Rule[Element], None] = {}
        for element in elements:
            self.add_element(element)

    # Ground set

    @property
    def elements(self) -> tuple[Element, ...]:
        return ordered(self._elements, self.key)

    def ground_set(self) -> tuple[Element, ...]:
        return self.elements

    def add_element(self, element: Element) -> None:
        if element in self._elements:
            raise MalformedInputError(f"Duplicate element {element!r}")
        self._elements.add(element)

    def remove_element(self, element: Element) -> None:
        """Removes the element together with every rule mentioning it."""
        if element not in self._elements:
            raise MalformedInputError(f"Unknown element {element!r}")
        self._elements.discard(element)
        self._rules = {
            rule: None
            for rule in self._rules
            if element not in rule.premise and element not in rule.conclusion
        }

    # Rules

    @property
    def rules(self) -> tuple[Rule[Element], ...]:
        return tuple(self._rules)

    def __iter__(self) -> Iterator[Rule[Element]]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self._rules)

    def add_rule(self, premise: Iterable[Element], conclusion: Iterable[Element]) -> bool:
        """
        Adds premise -> conclusion, dropping conclusion elements already in the
        premise. Returns False when the rule is trivial or already present.
        """
        rule = self._make_rule(premise, conclusion)
        if not rule.conclusion or rule in self._rules:
            return False
        self._rules[rule] = None
        return True

    def remove_rule(self, premise: Iterable[Element], conclusion: Iterable[Element]) -> bool:
        rule = self._make_rule(premise, conclusion)
        if rule not in self._rules:
            return False
        del self._rules[rule]
        return True

    def _make_rule(
        self, premise: Iterable[Element], conclusion: Iterable[Element]
    ) -> Rule[Element]:
        premise, conclusion = frozenset(premise), frozenset(conclusion)
        unknown = (premise | conclusion) - self._elements
        if unknown:
            raise MalformedInputError(f"Rule mentions unknown elements {sorted(unknown, key=self.key)}")
        return Rule(premise, conclusion - premise)

    # Closure

    def closure(self, elements: Iterable[Element]) -> frozenset[Element]:
        closed = set(elements)
        unknown = closed - self._elements
        if unknown:
            raise MalformedInputError(f"Unknown elements {sorted(unknown, key=self.key)}")
        return _forward_chain(closed, self._rules)

    def canonical_basis(self) -> "ImplicationSet[Element]":
        """
        Returns the canonical (Duquenne-Guigues) basis of this rule set: the
        equivalent set of rules with the fewest rules, unique up to order.

        Every conclusion is first saturated to the closure of its premise;
        each premise is then replaced by its closure under the remaining
        rules, and a rule whose conclusion is already derived is dropped.
        """
        rules = [Rule(rule.premise, self.closure(rule.premise)) for rule in self._rules]

        i = 0
        while i < len(rules):
            premise, conclusion = rules[i]
            others = rules[:i] + rules[i + 1 :]
            saturated = _forward_chain(set(premise), others)
            if conclusion <= saturated:
                del rules[i]
            else:
                rules[i] = Rule(saturated, conclusion)
                i += 1

        merged: dict[frozenset[Element], frozenset[Element]] = {}
        for premise, conclusion in rules:
            merged[premise] = merged.get(premise, frozenset()) | conclusion

        basis: ImplicationSet[Element] = ImplicationSet(self._elements, self.key)
        for premise in sorted(merged, key=lambda p: (len(p), ordered(p, self.key))):
            basis.add_rule(premise, merged[premise])
        logger.debug(f"Canonical basis: {len(self._rules)} -> {len(basis)} rules")
        return basis

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ImplicationSet):
            return NotImplemented
        return self._elements == other._elements and set(self._rules) == set(other._rules)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        rules = "; ".join(str(rule) for rule in self._rules)
        return f"ImplicationSet({len(self._elements)} elements: {rules})"


def _forward_chain(
    closed: set[Element], rules: Iterable[Rule[Element]]
) -> frozenset[Element]:
    pending = list(rules)
    changed = True
    while changed:
        changed = False
        remaining = []
        for rule in pending:
            if rule.premise <= closed:
                if not rule.conclusion <= closed:
                    closed |= rule.conclusion
                    changed = True
            else:
                remaining.append(rule)
        pending = remaining
    return frozenset(closed)
