"""Semantic enrichment of raw flow graphs.

Converts a raw flow graph into a semantic flow graph in four passes over a
fresh diagram:

1. Type the boundary ports.
2. Expand every raw box and insert the result under the raw box's handle,
   remembering which handles now hold sub-diagrams.
3. Copy the raw wires verbatim. This is valid only because step 2 kept
   the handles, so it must run before any substitution.
4. Substitute the remembered sub-diagrams, then collapse unannotated boxes.
"""

from __future__ import annotations

import logging

from semflow.core.config import Settings, get_settings
from semflow.core.errors import DanglingWireError, InvalidRawGraphError
from semflow.flowgraph.collapse import collapse_unannotated_boxes
from semflow.flowgraph.elements import SemanticElem
from semflow.flowgraph.expansion import expand_box
from semflow.flowgraph.ports import SemanticPort, to_semantic_ports
from semflow.flowgraph.raw import RawNode
from semflow.ontology.construct import Constructor
from semflow.ontology.resolver import AnnotationResolver
from semflow.wiring.diagram import Box, WiringDiagram

logger = logging.getLogger(__name__)


def expand_raw_graph(
    resolver: AnnotationResolver,
    raw: WiringDiagram,
    *,
    elements: bool | None = None,
    constructor: Constructor | None = None,
    settings: Settings | None = None,
) -> tuple[WiringDiagram, list[int]]:
    """Type and expand every box of ``raw``, keeping box handles.

    Returns:
        The semantic diagram with raw wires copied in but nothing
        substituted yet, and the handles pending substitution in raw
        handle order.
    """
    settings = settings or get_settings()
    if elements is None:
        elements = settings.elements

    sem = WiringDiagram(
        to_semantic_ports(resolver, raw.input_ports, elements=elements),
        to_semantic_ports(resolver, raw.output_ports, elements=elements),
    )

    to_substitute: list[int] = []
    for v in raw.box_ids():
        raw_box = raw.box(v)
        if not isinstance(raw_box, Box) or not isinstance(raw_box.value, RawNode):
            raise InvalidRawGraphError(f"Raw box {v} must be an atomic box with a RawNode value")
        sem_box = expand_box(
            resolver,
            raw_box,
            to_semantic_ports(resolver, raw_box.input_ports, elements=elements),
            to_semantic_ports(resolver, raw_box.output_ports, elements=elements),
            constructor=constructor,
            index_origin=settings.index_origin,
        )
        sem.add_box(sem_box, handle=v)
        if isinstance(sem_box, WiringDiagram):
            to_substitute.append(v)

    for wire in raw.wires():
        if sem.has_source(wire.source) and sem.has_target(wire.target):
            sem.add_wire(wire)
            continue
        # The expanded box lacks a port the raw graph wired, e.g. an
        # argument that has no counterpart in the annotated morphism.
        message = f"Raw wire {wire.source} -> {wire.target} has no matching port after expansion"
        if settings.dangling_wire_policy == "raise":
            raise DanglingWireError(message)
        logger.warning("%s; dropping it", message)

    return sem, to_substitute


def to_semantic_graph(
    resolver: AnnotationResolver,
    raw: WiringDiagram,
    *,
    elements: bool | None = None,
    constructor: Constructor | None = None,
    settings: Settings | None = None,
) -> WiringDiagram:
    """Convert a raw flow graph into a semantic flow graph.

    Args:
        resolver: Annotation resolver for the ontology.
        raw: Raw flow graph. It is not modified.
        elements: Type ports with ``SemanticElem`` values (True) or bare
            objects (False). Defaults to ``settings.elements``.
        constructor: Construction collaborator for ``construct`` boxes.
        settings: Enrichment settings. Defaults to :func:`get_settings`.

    Returns:
        The semantic flow graph.

    Raises:
        SemflowError: Any resolution, indexing, or wiring failure aborts
            the whole conversion.
    """
    settings = settings or get_settings()
    if elements is None:
        elements = settings.elements

    sem, to_substitute = expand_raw_graph(
        resolver, raw, elements=elements, constructor=constructor, settings=settings,
    )
    sem.substitute(to_substitute)
    if elements:
        _ports_as_elements(sem)
    collapse_unannotated_boxes(sem)
    logger.info(
        "Enriched raw graph: %d raw box(es) -> %d semantic box(es), %d expanded",
        raw.nboxes(),
        sem.nboxes(),
        len(to_substitute),
    )
    return sem


def _ports_as_elements(diagram: WiringDiagram) -> None:
    """Wrap bare object ports of expanded boxes as elements.

    Boxes inlined from ontology definitions are typed by bare objects, so
    element mode needs them lifted to match the raw-typed ports.
    """
    for v in diagram.box_ids():
        box = diagram.box(v)
        if isinstance(box, WiringDiagram):
            box.input_ports = [_as_element(p) for p in box.input_ports]
            box.output_ports = [_as_element(p) for p in box.output_ports]
            _ports_as_elements(box)
        else:
            diagram.set_box(v, Box(
                box.value,
                [_as_element(p) for p in box.input_ports],
                [_as_element(p) for p in box.output_ports],
            ))


def _as_element(port: SemanticPort) -> SemanticElem:
    return port if isinstance(port, SemanticElem) else SemanticElem(port)
