"""Resolved ontology annotations.

A function annotation (``HomAnnotation``) maps a piece of code onto a
morphism of the ontology. A type annotation (``ObAnnotation``) maps a type
onto an ontology object, together with the ordered accessors ("slots") for
its components.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from semflow.ontology.expressions import Hom, Ob
from semflow.wiring.diagram import WiringDiagram


@dataclass(frozen=True)
class HomAnnotation:
    """Function annotation whose definition is a morphism (sub-diagram)."""

    name: str
    definition: Hom | WiringDiagram


@dataclass(frozen=True)
class ObAnnotation:
    """Type annotation whose definition is an object, with ordered slots."""

    name: str
    definition: Ob
    slots: tuple[Hom, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "slots", tuple(self.slots))


Annotation = Union[HomAnnotation, ObAnnotation]
