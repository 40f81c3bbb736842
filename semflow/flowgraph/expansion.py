"""Box expansion: raw boxes to semantic boxes or sub-diagrams.

Dispatch is over the closed set of annotation kinds:

- no annotation: an opaque atomic box (value None) typed by its ports
- ``function``: the annotated morphism, wired to the box's ports by the
  ports' annotation indices
- ``construct``: the diagram that constructs the annotated object
- ``slot``: the accessor for one slot of the annotated object
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from semflow.core.errors import AnnotationIndexError
from semflow.flowgraph.ports import SemanticPort
from semflow.flowgraph.raw import RawNode, RawNodeAnnotationKind, RawPort
from semflow.ontology.construct import Constructor, DefaultConstructor
from semflow.ontology.expressions import to_wiring_diagram
from semflow.ontology.resolver import AnnotationResolver, load_hom_annotation, load_ob_annotation
from semflow.wiring.diagram import INPUT_ID, OUTPUT_ID, AbstractBox, Box, Port, Wire, WiringDiagram

logger = logging.getLogger(__name__)


def expand_box(
    resolver: AnnotationResolver,
    raw_box: Box,
    inputs: Sequence[SemanticPort],
    outputs: Sequence[SemanticPort],
    *,
    constructor: Constructor | None = None,
    index_origin: int = 0,
) -> AbstractBox:
    """Expand one raw box.

    Args:
        resolver: Annotation resolver.
        raw_box: Atomic box whose value is a ``RawNode`` and whose ports
            are ``RawPort`` values.
        inputs: The box's input ports, already typed.
        outputs: The box's output ports, already typed.
        constructor: Construction collaborator for ``construct`` boxes.
        index_origin: Origin (0 or 1) of annotation indices.

    Returns:
        An atomic ``Box`` with value None for an unannotated raw box,
        otherwise a ``WiringDiagram``.

    Raises:
        AnnotationNotFoundError: If the annotation cannot be resolved.
        AnnotationKindMismatchError: If it resolves to the wrong kind.
        AnnotationIndexError: If an annotation index selects nothing.
    """
    node: RawNode = raw_box.value
    if node.annotation is None:
        return Box(None, inputs, outputs)

    logger.debug("Expanding %s box %r (%s)", node.annotation_kind, node.annotation, node.label)
    kind = node.annotation_kind
    if kind is RawNodeAnnotationKind.FUNCTION:
        return _expand_function(resolver, raw_box, inputs, outputs, index_origin)
    if kind is RawNodeAnnotationKind.CONSTRUCT:
        note = load_ob_annotation(resolver, node.annotation)
        return (constructor or DefaultConstructor()).construct(note.definition)
    if kind is RawNodeAnnotationKind.SLOT:
        note = load_ob_annotation(resolver, node.annotation)
        pos = _position(node.annotation_index, index_origin, len(note.slots), f"slot of {node.annotation!r}")
        return to_wiring_diagram(note.slots[pos])
    raise AssertionError(f"Unhandled annotation kind {kind!r}")


def _expand_function(
    resolver: AnnotationResolver,
    raw_box: Box,
    inputs: Sequence[SemanticPort],
    outputs: Sequence[SemanticPort],
    index_origin: int,
) -> WiringDiagram:
    node: RawNode = raw_box.value
    note = load_hom_annotation(resolver, node.annotation)
    f = WiringDiagram(inputs, outputs)
    inner = to_wiring_diagram(note.definition)
    v = f.add_box(inner)

    # Ports without an annotation index are arguments the annotation does
    # not cover; they stay unwired.
    raw_inputs: Sequence[RawPort] = raw_box.input_ports
    for i, port in enumerate(raw_inputs):
        if port.annotation_index is not None:
            j = _position(port.annotation_index, index_origin, len(inner.input_ports), f"input of {node.annotation!r}")
            f.add_wire(Wire(Port(INPUT_ID, i), Port(v, j)))
    raw_outputs: Sequence[RawPort] = raw_box.output_ports
    for i, port in enumerate(raw_outputs):
        if port.annotation_index is not None:
            j = _position(port.annotation_index, index_origin, len(inner.output_ports), f"output of {node.annotation!r}")
            f.add_wire(Wire(Port(v, j), Port(OUTPUT_ID, i)))

    f.substitute([v])
    return f


def _position(index: int | None, origin: int, size: int, what: str) -> int:
    if index is None:
        raise AnnotationIndexError(f"Missing annotation index for {what}")
    pos = index - origin
    if not 0 <= pos < size:
        raise AnnotationIndexError(f"Annotation index {index} out of range for {what} (size {size}, origin {origin})")
    return pos
