"""Port typing: raw ports to semantic port types."""

from __future__ import annotations

from collections.abc import Sequence

from semflow.flowgraph.elements import SemanticElem
from semflow.flowgraph.raw import RawPort
from semflow.ontology.expressions import Ob
from semflow.ontology.resolver import AnnotationResolver, load_ob_annotation

SemanticPort = SemanticElem | Ob | None


def type_port(resolver: AnnotationResolver, port: RawPort) -> Ob | None:
    """Return the ontology object a raw port is annotated with, if any.

    Raises:
        AnnotationNotFoundError: If the annotation name is unknown.
        AnnotationKindMismatchError: If it names a function annotation.
    """
    if port.annotation is None:
        return None
    return load_ob_annotation(resolver, port.annotation).definition


def to_semantic_ports(
    resolver: AnnotationResolver,
    ports: Sequence[RawPort],
    *,
    elements: bool = True,
) -> list[SemanticPort]:
    """Type a sequence of raw ports.

    Args:
        resolver: Annotation resolver.
        ports: Raw ports, in port order.
        elements: If True, each port becomes a ``SemanticElem`` carrying the
            raw port's id and value. Otherwise the bare object (or None).

    Returns:
        Semantic ports, same length and order as ``ports``.
    """
    result: list[SemanticPort] = []
    for port in ports:
        ob = type_port(resolver, port)
        result.append(SemanticElem(ob, port.id, port.value) if elements else ob)
    return result
