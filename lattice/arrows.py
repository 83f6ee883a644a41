"""
Arrow relation of a lattice.

For a join irreducible j with lower cover j- and a meet irreducible m with
upper cover m+, the pair (j, m) is classified as:
    cross    j <= m
    down     j- <= m            (and not j <= m)
    up-down  j- <= m, j <= m+
    up       j <= m+            (and not j- <= m)
    circ     none of the above
"""

import logging
from collections.abc import Iterator
from enum import Enum
from typing import Generic

from closure.relation import BitRelation
from dgraph import Node
from localtypes import Payload

from .lattice import Lattice, PreconditionViolationError, is_lattice

logger = logging.getLogger(__name__)


class Arrow(Enum):
    UP = "up"
    DOWN = "down"
    UP_DOWN = "up-down"
    CROSS = "cross"
    CIRC = "circ"


def _single_cover(covers: tuple[Node[Payload], ...], node: Node[Payload], side: str) -> Node[Payload]:
    if len(covers) != 1:
        raise PreconditionViolationError(
            f"Node {node} has {len(covers)} {side} covers, expected exactly one"
        )
    return covers[0]


class ArrowRelation(Generic[Payload]):
    """
    Classification of every (join irreducible, meet irreducible) pair.
    """

    def __init__(self, lattice: Lattice[Payload]) -> None:
        if not is_lattice(lattice.graph):
            raise PreconditionViolationError("Arrow relations are only defined on lattices")
        self.lattice = lattice
        self.joins = lattice.join_irreducibles()
        self.meets = lattice.meet_irreducibles()
        self._arrows: dict[tuple[Node[Payload], Node[Payload]], Arrow] = {}

        lower = {j: _single_cover(lattice.lower_covers(j), j, "lower") for j in self.joins}
        upper = {m: _single_cover(lattice.upper_covers(m), m, "upper") for m in self.meets}

        for j in self.joins:
            for m in self.meets:
                self._arrows[j, m] = self._classify(j, lower[j], m, upper[m])
        logger.debug(
            f"Arrow relation: {len(self.joins)} join x {len(self.meets)} meet irreducibles"
        )

    def _classify(
        self,
        j: Node[Payload],
        j_minus: Node[Payload],
        m: Node[Payload],
        m_plus: Node[Payload],
    ) -> Arrow:
        leq = self.lattice.leq
        if leq(j, m):
            return Arrow.CROSS
        if leq(j_minus, m):
            return Arrow.UP_DOWN if leq(j, m_plus) else Arrow.DOWN
        if leq(j, m_plus):
            return Arrow.UP
        return Arrow.CIRC

    def arrow(self, j: Node[Payload], m: Node[Payload]) -> Arrow:
        if (j, m) not in self._arrows:
            raise PreconditionViolationError(
                f"({j}, {m}) is not a (join irreducible, meet irreducible) pair"
            )
        return self._arrows[j, m]

    def items(self) -> Iterator[tuple[tuple[Node[Payload], Node[Payload]], Arrow]]:
        return iter(self._arrows.items())

    def table(self, *arrows: Arrow) -> BitRelation[Node[Payload], Node[Payload]]:
        """Relation between the irreducibles, holding the pairs with one of `arrows`."""
        chosen = set(arrows)
        return BitRelation.from_pairs(
            self.joins,
            self.meets,
            (pair for pair, arrow in self._arrows.items() if arrow in chosen),
        )

    def double_arrow_table(self) -> BitRelation[Node[Payload], Node[Payload]]:
        return self.table(Arrow.UP_DOWN)

    def down_arrow_table(self) -> BitRelation[Node[Payload], Node[Payload]]:
        return self.table(Arrow.DOWN, Arrow.UP_DOWN)

    def up_arrow_table(self) -> BitRelation[Node[Payload], Node[Payload]]:
        return self.table(Arrow.UP, Arrow.UP_DOWN)

    def circ_arrow_table(self) -> BitRelation[Node[Payload], Node[Payload]]:
        # up-down pairs are counted with the circ ones
        return self.table(Arrow.CIRC, Arrow.UP_DOWN)

    def __len__(self) -> int:
        return len(self._arrows)
