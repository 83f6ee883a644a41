"""
Console rendering with rich.

Functions:
    relation_to_table(relation)       - cross table of a relation
    lattice_to_table(lattice)         - one row per node with its covers
    rules_to_table(rules)             - one row per implication
    display_components(components)    - every bijective component in turn
"""

from collections.abc import Iterable

from rich.console import Console
from rich.table import Table
from rich.text import Text

from closure.implications import Rule
from closure.relation import BitRelation
from lattice.bijective import BijectiveComponents
from lattice.lattice import Lattice


def _format_set(elements: Iterable) -> str:
    return "{" + ", ".join(sorted(map(str, elements))) + "}"


def relation_to_table(relation: BitRelation, title: str = "") -> Table:
    """Cross table: observations as rows, attributes as columns."""
    table = Table(title=title or None, show_lines=False)
    table.add_column("", style="bold")
    attributes = relation.attributes
    for attribute in attributes:
        table.add_column(str(attribute), justify="center")
    for observation in relation.observations:
        cells = [
            Text("x", style="green") if relation.contains(observation, a) else Text(".", style="dim")
            for a in attributes
        ]
        table.add_row(str(observation), *cells)
    return table


def lattice_to_table(lattice: Lattice, title: str = "") -> Table:
    table = Table(title=title or None)
    table.add_column("node", justify="right")
    table.add_column("content")
    table.add_column("upper covers")
    for node in lattice.nodes:
        covers = " ".join(str(cover.ident) for cover in lattice.upper_covers(node))
        table.add_row(str(node.ident), str(node.content), covers)
    return table


def rules_to_table(rules: Iterable[Rule], title: str = "") -> Table:
    table = Table(title=title or None)
    table.add_column("premise")
    table.add_column("conclusion")
    for rule in rules:
        table.add_row(_format_set(rule.premise), _format_set(rule.conclusion))
    return table


def display_components(components: BijectiveComponents, console: Console | None = None) -> None:
    console = console or Console()
    console.print(lattice_to_table(components.lattice.lattice, "Lattice"))
    console.print(lattice_to_table(components.reduced_lattice, "Reduced lattice"))
    console.print(relation_to_table(components.table, "Table"))
    console.print(rules_to_table(components.canonical_direct_basis, "Canonical direct basis"))
    console.print(rules_to_table(components.canonical_basis, "Canonical basis"))

    generators = ", ".join(_format_set(g) for g in components.minimal_generators)
    console.print(f"Minimal generators: {generators or '-'}")
