"""Construction collaborator used for Construct-kind box expansion."""

from __future__ import annotations

from typing import Protocol

from semflow.ontology.expressions import Hom, Ob, to_wiring_diagram
from semflow.wiring.diagram import WiringDiagram


class Constructor(Protocol):
    def construct(self, ob: Ob) -> WiringDiagram:
        """Return the diagram that builds an instance of ``ob``."""
        ...


class DefaultConstructor:
    """Builds every object with a single nullary ``construct`` box."""

    def construct(self, ob: Ob) -> WiringDiagram:
        return to_wiring_diagram(Hom("construct", (), (ob,)))
