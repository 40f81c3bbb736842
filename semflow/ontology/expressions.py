"""Ontology expressions: objects (types) and morphism generators.

Expressions serialize to JSON s-expressions::

    ["Ob", "table"]
    ["Hom", "read-table", [["Ob", "file"]], [["Ob", "table"]]]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from semflow.core.errors import OntologyFormatError
from semflow.wiring.diagram import INPUT_ID, OUTPUT_ID, Box, Port, Wire, WiringDiagram


@dataclass(frozen=True)
class Ob:
    """An ontology object, i.e. a semantic type."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Hom:
    """A morphism generator ``name: dom -> codom``."""

    name: str
    dom: tuple[Ob, ...] = field(default_factory=tuple)
    codom: tuple[Ob, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "dom", tuple(self.dom))
        object.__setattr__(self, "codom", tuple(self.codom))

    def __str__(self) -> str:
        dom = ", ".join(map(str, self.dom))
        codom = ", ".join(map(str, self.codom))
        return f"{self.name}: ({dom}) -> ({codom})"


def to_wiring_diagram(expr: Hom | WiringDiagram) -> WiringDiagram:
    """Return the canonical wiring diagram of a morphism expression.

    A generator becomes a diagram holding one box, each boundary port wired
    straight to the matching box port. A diagram is copied.
    """
    if isinstance(expr, WiringDiagram):
        return expr.copy()
    diagram = WiringDiagram(expr.dom, expr.codom)
    v = diagram.add_box(Box(expr, expr.dom, expr.codom))
    diagram.add_wires(Wire(Port(INPUT_ID, i), Port(v, i)) for i in range(len(expr.dom)))
    diagram.add_wires(Wire(Port(v, j), Port(OUTPUT_ID, j)) for j in range(len(expr.codom)))
    return diagram


def to_json_sexpr(expr: Ob | Hom) -> list[Any]:
    if isinstance(expr, Ob):
        return ["Ob", expr.name]
    if isinstance(expr, Hom):
        return [
            "Hom",
            expr.name,
            [to_json_sexpr(ob) for ob in expr.dom],
            [to_json_sexpr(ob) for ob in expr.codom],
        ]
    raise TypeError(f"Cannot serialize {type(expr).__name__} as an ontology expression")


def parse_json_sexpr(sexpr: Any) -> Ob | Hom:
    """Parse a JSON s-expression produced by :func:`to_json_sexpr`.

    Raises:
        OntologyFormatError: If the value is not a well-formed expression.
    """
    if not isinstance(sexpr, list) or not sexpr:
        raise OntologyFormatError(f"Malformed ontology expression: {sexpr!r}")
    head = sexpr[0]
    if head == "Ob" and len(sexpr) == 2 and isinstance(sexpr[1], str):
        return Ob(sexpr[1])
    if head == "Hom" and len(sexpr) == 4 and isinstance(sexpr[1], str):
        dom = tuple(_parse_ob(x) for x in sexpr[2])
        codom = tuple(_parse_ob(x) for x in sexpr[3])
        return Hom(sexpr[1], dom, codom)
    raise OntologyFormatError(f"Malformed ontology expression: {sexpr!r}")


def _parse_ob(sexpr: Any) -> Ob:
    ob = parse_json_sexpr(sexpr)
    if not isinstance(ob, Ob):
        raise OntologyFormatError(f"Expected an object expression, got {sexpr!r}")
    return ob
