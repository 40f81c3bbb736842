"""Elements of semantic objects, carried by semantic flow graph ports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from semflow.ontology.expressions import Ob


@dataclass(frozen=True)
class SemanticElem:
    """An element of an ontology object.

    ``ob`` is the object (type) of the element, ``id`` the identifier of
    the runtime value it came from, and ``value`` its literal value when
    one was recorded. All three are optional. Equality is structural.
    """

    ob: Ob | None = None
    id: str | None = None
    value: Any = None
