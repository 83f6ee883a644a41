"""
Binary relations between observations and attributes.

Two types split the lifecycle of a relation:

- BitRelation is the mutable builder. It keeps the intent of every
  observation and the extent of every attribute in sync, and rejects
  mutations that reference unknown or duplicate elements.
- IndexedRelation is the immutable snapshot returned by
  `BitRelation.reindex()`. It stores the relation as a read-only boolean
  incidence matrix (rows = observations, columns = attributes) and answers
  every closure query with vectorised row/column conjunctions.

Closure queries only exist on the snapshot, so a relation mutated after
indexing cannot be queried through a stale index.

The Galois connection:
    intent(B) = attributes shared by every observation of B
    extent(X) = observations having every attribute of X
    closure(X) = intent(extent(X))
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from functools import cached_property
from itertools import compress
from typing import TYPE_CHECKING, Any, Generic

import numpy as np
from numpy.typing import NDArray

from localtypes import (
    Attribute,
    MalformedInputError,
    Observation,
    OrderKey,
    identity_key,
    ordered,
)

from .system import reducible_elements

if TYPE_CHECKING:
    from lattice.concept import ConceptLattice

logger = logging.getLogger(__name__)


class BitRelation(Generic[Observation, Attribute]):
    """
    Mutable relation R ⊆ O × A with symmetric intent/extent maps.

    Example:
        >>> relation = BitRelation.from_pairs([1, 2], ["a", "b"], [(1, "a"), (2, "b")])
        >>> sorted(relation.intent(1))
        ['a']
        >>> relation.reindex().closure({"a"})
        frozenset({'a'})
    """

    def __init__(
        self,
        observation_key: OrderKey | None = None,
        attribute_key: OrderKey | None = None,
    ) -> None:
        self._observation_key = observation_key or identity_key
        self._attribute_key = attribute_key or identity_key
        self._intent: dict[Observation, set[Attribute]] = {}
        self._extent: dict[Attribute, set[Observation]] = {}

    @classmethod
    def from_pairs(
        cls,
        observations: Iterable[Observation],
        attributes: Iterable[Attribute],
        pairs: Iterable[tuple[Observation, Attribute]],
        observation_key: OrderKey | None = None,
        attribute_key: OrderKey | None = None,
    ) -> "BitRelation[Observation, Attribute]":
        relation = cls(observation_key, attribute_key)
        for observation in observations:
            relation.add_observation(observation)
        for attribute in attributes:
            relation.add_attribute(attribute)
        for observation, attribute in pairs:
            relation.add_pair(observation, attribute)
        return relation

    # Ground sets

    @property
    def observations(self) -> tuple[Observation, ...]:
        return ordered(self._intent, self._observation_key)

    @property
    def attributes(self) -> tuple[Attribute, ...]:
        return ordered(self._extent, self._attribute_key)

    def add_observation(self, observation: Observation) -> None:
        if observation in self._intent:
            raise MalformedInputError(f"Duplicate observation {observation!r}")
        self._intent[observation] = set()

    def add_attribute(self, attribute: Attribute) -> None:
        if attribute in self._extent:
            raise MalformedInputError(f"Duplicate attribute {attribute!r}")
        self._extent[attribute] = set()

    def remove_observation(self, observation: Observation) -> None:
        self._require_observation(observation)
        for attribute in self._intent.pop(observation):
            self._extent[attribute].discard(observation)

    def remove_attribute(self, attribute: Attribute) -> None:
        self._require_attribute(attribute)
        for observation in self._extent.pop(attribute):
            self._intent[observation].discard(attribute)

    # Pairs

    def add_pair(self, observation: Observation, attribute: Attribute) -> bool:
        """Relates `observation` to `attribute`; False if they already were."""
        self._require_observation(observation)
        self._require_attribute(attribute)
        if attribute in self._intent[observation]:
            return False
        self._intent[observation].add(attribute)
        self._extent[attribute].add(observation)
        return True

    def remove_pair(self, observation: Observation, attribute: Attribute) -> bool:
        self._require_observation(observation)
        self._require_attribute(attribute)
        if attribute not in self._intent[observation]:
            return False
        self._intent[observation].discard(attribute)
        self._extent[attribute].discard(observation)
        return True

    def contains(self, observation: Observation, attribute: Attribute) -> bool:
        return attribute in self._intent.get(observation, ())

    def intent(self, observation: Observation) -> frozenset[Attribute]:
        self._require_observation(observation)
        return frozenset(self._intent[observation])

    def extent(self, attribute: Attribute) -> frozenset[Observation]:
        self._require_attribute(attribute)
        return frozenset(self._extent[attribute])

    def pairs(self) -> Iterator[tuple[Observation, Attribute]]:
        """Iterates over related pairs, observation-major in ground order."""
        attribute_order = {a: i for i, a in enumerate(self.attributes)}
        for observation in self.observations:
            for attribute in sorted(self._intent[observation], key=attribute_order.__getitem__):
                yield observation, attribute

    # Derived relations

    def reverse(self) -> "BitRelation[Attribute, Observation]":
        """The dual relation: attributes become observations and vice versa."""
        reversed_relation: BitRelation[Attribute, Observation] = BitRelation(
            self._attribute_key, self._observation_key
        )
        reversed_relation._intent = {a: set(obs) for a, obs in self._extent.items()}
        reversed_relation._extent = {o: set(atts) for o, atts in self._intent.items()}
        return reversed_relation

    def copy(self) -> "BitRelation[Observation, Attribute]":
        return self.reverse().reverse()

    def reindex(self) -> "IndexedRelation[Observation, Attribute]":
        """Builds the immutable bit-matrix snapshot used by closure queries."""
        observations, attributes = self.observations, self.attributes
        column = {attribute: j for j, attribute in enumerate(attributes)}
        incidence = np.zeros((len(observations), len(attributes)), dtype=bool)
        for i, observation in enumerate(observations):
            for attribute in self._intent[observation]:
                incidence[i, column[attribute]] = True
        incidence.setflags(write=False)
        logger.debug(
            f"Reindexed relation: {len(observations)} observations x "
            f"{len(attributes)} attributes, {int(incidence.sum())} pairs"
        )
        return IndexedRelation(
            observations,
            attributes,
            incidence,
            self._observation_key,
            self._attribute_key,
        )

    # Reductions

    def attributes_reduction(self) -> dict[Attribute, frozenset[Attribute]]:
        """Removes reducible attributes; returns them with their replacement."""
        reducible = self.reindex().reducible_attributes()
        for attribute in reducible:
            self.remove_attribute(attribute)
        return reducible

    def observations_reduction(self) -> dict[Observation, frozenset[Observation]]:
        """Removes reducible observations; returns them with their replacement."""
        reducible = self.reindex().reducible_observations()
        for observation in reducible:
            self.remove_observation(observation)
        return reducible

    def reduction(self) -> dict[Any, frozenset[Any]]:
        reduced: dict[Any, frozenset[Any]] = dict(self.attributes_reduction())
        reduced.update(self.observations_reduction())
        return reduced

    # Helpers

    def _require_observation(self, observation: Observation) -> None:
        if observation not in self._intent:
            raise MalformedInputError(f"Unknown observation {observation!r}")

    def _require_attribute(self, attribute: Attribute) -> None:
        if attribute not in self._extent:
            raise MalformedInputError(f"Unknown attribute {attribute!r}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitRelation):
            return NotImplemented
        return self._intent == other._intent and self._extent == other._extent

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"BitRelation({len(self._intent)} observations, "
            f"{len(self._extent)} attributes, "
            f"{sum(len(a) for a in self._intent.values())} pairs)"
        )


@dataclass(frozen=True, eq=False)
class IndexedRelation(Generic[Observation, Attribute]):
    """
    Immutable snapshot of a BitRelation backed by a boolean matrix.

    Implements the closure system protocol with the attributes as ground set.
    """

    observations: tuple[Observation, ...]
    attributes: tuple[Attribute, ...]
    incidence: NDArray[np.bool_] = field(repr=False)
    observation_key: OrderKey = identity_key
    attribute_key: OrderKey = identity_key

    @cached_property
    def _row(self) -> dict[Observation, int]:
        return {observation: i for i, observation in enumerate(self.observations)}

    @cached_property
    def _column(self) -> dict[Attribute, int]:
        return {attribute: j for j, attribute in enumerate(self.attributes)}

    # Closure system protocol

    def ground_set(self) -> tuple[Attribute, ...]:
        return self.attributes

    def closure(self, attributes: Iterable[Attribute]) -> frozenset[Attribute]:
        """intent(extent(X)), in O(|O| × |A|)."""
        return self._intent_mask(self._extent_mask(attributes))

    # Galois connection

    def intent(self, observation: Observation) -> frozenset[Attribute]:
        row = self._rows([observation])[0]
        return frozenset(compress(self.attributes, self.incidence[row]))

    def extent(self, attribute: Attribute) -> frozenset[Observation]:
        column = self._columns([attribute])[0]
        return frozenset(compress(self.observations, self.incidence[:, column]))

    def intent_of(self, observations: Iterable[Observation]) -> frozenset[Attribute]:
        """Attributes shared by every given observation (all attributes if none)."""
        mask = np.zeros(len(self.observations), dtype=bool)
        mask[self._rows(observations)] = True
        return self._intent_mask(mask)

    def extent_of(self, attributes: Iterable[Attribute]) -> frozenset[Observation]:
        """Observations having every given attribute (all observations if none)."""
        return frozenset(compress(self.observations, self._extent_mask(attributes)))

    def extent_size(self, attributes: Iterable[Attribute]) -> int:
        return int(self._extent_mask(attributes).sum())

    def inverse_closure(self, observations: Iterable[Observation]) -> frozenset[Observation]:
        """extent(intent(B)): the closure on the observation side."""
        return self.extent_of(self.intent_of(observations))

    # Derived snapshots and structures

    def reverse(self) -> "IndexedRelation[Attribute, Observation]":
        transposed = self.incidence.T.copy()
        transposed.setflags(write=False)
        return IndexedRelation(
            self.attributes,
            self.observations,
            transposed,
            self.attribute_key,
            self.observation_key,
        )

    def unindexed(self) -> BitRelation[Observation, Attribute]:
        rows, columns = np.nonzero(self.incidence)
        return BitRelation.from_pairs(
            self.observations,
            self.attributes,
            ((self.observations[i], self.attributes[j]) for i, j in zip(rows, columns)),
            self.observation_key,
            self.attribute_key,
        )

    def reducible_attributes(self) -> dict[Attribute, frozenset[Attribute]]:
        return reducible_elements(self)

    def reducible_observations(self) -> dict[Observation, frozenset[Observation]]:
        return reducible_elements(self.reverse())

    def concept_lattice(
        self, diagram: bool = True
    ) -> "ConceptLattice":
        """
        Concept lattice of the relation: closed attribute sets with their
        extents. The Hasse diagram (Bordat) is built when `diagram`, the full
        order (Next-Closure) otherwise.
        """
        from lattice.concept import complete_lattice, diagram_lattice

        generate = diagram_lattice if diagram else complete_lattice
        return generate(self).with_extents(self)

    # Helpers

    def _rows(self, observations: Iterable[Observation]) -> list[int]:
        try:
            return [self._row[o] for o in observations]
        except KeyError as error:
            raise MalformedInputError(f"Unknown observation {error.args[0]!r}") from error

    def _columns(self, attributes: Iterable[Attribute]) -> list[int]:
        try:
            return [self._column[a] for a in attributes]
        except KeyError as error:
            raise MalformedInputError(f"Unknown attribute {error.args[0]!r}") from error

    def _extent_mask(self, attributes: Iterable[Attribute]) -> NDArray[np.bool_]:
        return self.incidence[:, self._columns(attributes)].all(axis=1)

    def _intent_mask(self, rows: NDArray[np.bool_]) -> frozenset[Attribute]:
        return frozenset(compress(self.attributes, self.incidence[rows].all(axis=0)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IndexedRelation):
            return NotImplemented
        return (
            self.observations == other.observations
            and self.attributes == other.attributes
            and np.array_equal(self.incidence, other.incidence)
        )

    __hash__ = None  # type: ignore[assignment]
