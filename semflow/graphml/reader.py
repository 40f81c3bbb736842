"""GraphML reader for wiring diagrams.

Parses documents in the layout written by :mod:`semflow.graphml.writer`.
Documents with or without the GraphML namespace are accepted. Box node ids
of the form ``<parent>:n<k>`` keep handle ``k``; other ids get the handles
after those, in document order.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any
from xml.etree.ElementTree import Element

import defusedxml.ElementTree as ET  # noqa: N817

from semflow.core.errors import DanglingWireError, GraphMLFormatError
from semflow.graphml.convert import elem_from_data, hom_from_data, ob_from_data, raw_node_from_data, raw_port_from_data
from semflow.wiring.diagram import INPUT_ID, OUTPUT_ID, AbstractBox, Box, Port, Wire, WiringDiagram

logger = logging.getLogger(__name__)

_PORT_NAME = re.compile(r"^(in|out):(\d+)$")


class _Context:
    def __init__(self, ns: str, keys: dict[str, str], box_from_data: Callable, port_from_data: Callable) -> None:
        self.ns = ns
        self.keys = keys
        self.box_from_data = box_from_data
        self.port_from_data = port_from_data

    def tag(self, name: str) -> str:
        return f"{self.ns}{name}"


def read_graphml(
    xml: str,
    box_from_data: Callable[[dict[str, Any]], Any],
    port_from_data: Callable[[dict[str, Any]], Any],
) -> WiringDiagram:
    """Parse a GraphML string into a wiring diagram.

    Args:
        xml: GraphML document.
        box_from_data: Builds a box value from its data attributes.
        port_from_data: Builds a port value from its data attributes.

    Raises:
        GraphMLFormatError: If the document is not a well-formed diagram.
    """
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as e:
        raise GraphMLFormatError(f"Failed to parse GraphML: {e}") from e

    ns = root.tag[: root.tag.index("}") + 1] if root.tag.startswith("{") else ""
    keys = {k.get("id", ""): k.get("attr.name", k.get("id", "")) for k in root.findall(f"{ns}key")}
    ctx = _Context(ns, keys, box_from_data, port_from_data)

    graph = root.find(ctx.tag("graph"))
    if graph is None:
        raise GraphMLFormatError("GraphML document has no <graph> element")
    nodes = graph.findall(ctx.tag("node"))
    if len(nodes) != 1:
        raise GraphMLFormatError(f"Top-level graph must contain exactly one node, found {len(nodes)}")

    diagram = _read_node(nodes[0], ctx)
    if not isinstance(diagram, WiringDiagram):
        raise GraphMLFormatError("Top-level node has no nested <graph>")
    logger.debug("Read diagram with %d box(es) and %d wire(s)", diagram.nboxes(), len(diagram.wires()))
    return diagram


def _read_node(node: Element, ctx: _Context) -> AbstractBox:
    node_id = node.get("id", "")
    data = _read_data(node, ctx)
    inputs, outputs = _read_ports(node, ctx)

    graph = node.find(ctx.tag("graph"))
    if graph is None:
        return Box(ctx.box_from_data(data), inputs, outputs)

    diagram = WiringDiagram(inputs, outputs, ctx.box_from_data(data) if data else None)
    handles: dict[str, int] = {}
    prefix = f"{node_id}:n"
    explicit: list[tuple[Element, int]] = []
    automatic: list[Element] = []
    for child in graph.findall(ctx.tag("node")):
        child_id = child.get("id", "")
        suffix = child_id[len(prefix):] if child_id.startswith(prefix) else ""
        if suffix.isdigit() and int(suffix) > 0:
            explicit.append((child, int(suffix)))
        else:
            automatic.append(child)

    # Explicit handles are claimed first so automatic ones never collide.
    for child, handle in [*explicit, *((child, None) for child in automatic)]:
        child_id = child.get("id", "")
        if child_id in handles:
            raise GraphMLFormatError(f"Duplicate box node {child_id!r}")
        try:
            handles[child_id] = diagram.add_box(_read_node(child, ctx), handle=handle)
        except ValueError as e:
            raise GraphMLFormatError(f"Duplicate box node {child_id!r}") from e

    for edge in graph.findall(ctx.tag("edge")):
        source = _endpoint(edge.get("source", ""), edge.get("sourceport", ""), node_id, handles, is_source=True)
        target = _endpoint(edge.get("target", ""), edge.get("targetport", ""), node_id, handles, is_source=False)
        try:
            diagram.add_wire(Wire(source, target))
        except DanglingWireError as e:
            raise GraphMLFormatError(f"Edge {source} -> {target} in {node_id!r}: {e}") from e
    return diagram


def _read_ports(node: Element, ctx: _Context) -> tuple[list[Any], list[Any]]:
    found: dict[str, dict[int, Any]] = {"in": {}, "out": {}}
    for port in node.findall(ctx.tag("port")):
        direction, index = _parse_port_name(port.get("name", ""))
        found[direction][index] = ctx.port_from_data(_read_data(port, ctx))
    result = []
    for direction in ("in", "out"):
        ports = found[direction]
        if sorted(ports) != list(range(len(ports))):
            raise GraphMLFormatError(f"Node {node.get('id')!r} has non-contiguous {direction} ports")
        result.append([ports[i] for i in range(len(ports))])
    return result[0], result[1]


def _parse_port_name(name: str) -> tuple[str, int]:
    m = _PORT_NAME.match(name)
    if m is None:
        raise GraphMLFormatError(f"Invalid port name {name!r}, expected 'in:<k>' or 'out:<k>'")
    return m.group(1), int(m.group(2))


def _endpoint(node_ref: str, port_name: str, parent_id: str, handles: dict[str, int], *, is_source: bool) -> Port:
    direction, index = _parse_port_name(port_name)
    if node_ref == parent_id:
        # The parent node's own ports are the diagram boundary.
        expected = "in" if is_source else "out"
        if direction != expected:
            raise GraphMLFormatError(f"Boundary edge endpoint {port_name!r} on {parent_id!r} must be an '{expected}' port")
        return Port(INPUT_ID if is_source else OUTPUT_ID, index)
    if node_ref not in handles:
        raise GraphMLFormatError(f"Edge references unknown node {node_ref!r}")
    expected = "out" if is_source else "in"
    if direction != expected:
        raise GraphMLFormatError(f"Edge endpoint {port_name!r} on {node_ref!r} must be an '{expected}' port")
    return Port(handles[node_ref], index)


def _read_data(element: Element, ctx: _Context) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for data_el in element.findall(ctx.tag("data")):
        key = data_el.get("key", "")
        name = ctx.keys.get(key, key)
        try:
            data[name] = json.loads(data_el.text or "null")
        except json.JSONDecodeError as e:
            raise GraphMLFormatError(f"Data {name!r} is not valid JSON: {e}") from e
    return data


# ── Flow graphs ──────────────────────────────────────────────────


def read_raw_graph(xml: str) -> WiringDiagram:
    """Read a raw flow graph from GraphML.

    Raises:
        GraphMLFormatError: If the document is malformed.
        UnknownAnnotationKindError: If a node has an unrecognized
            ``annotation_kind`` label.
    """
    return read_graphml(xml, raw_node_from_data, raw_port_from_data)


def read_semantic_graph(xml: str, *, elements: bool = True) -> WiringDiagram:
    """Read a semantic flow graph from GraphML.

    Args:
        xml: GraphML document.
        elements: Read ports as ``SemanticElem`` values (True) or as bare
            objects (False).
    """
    return read_graphml(xml, hom_from_data, elem_from_data if elements else ob_from_data)


def read_raw_graph_file(path: str | Path) -> WiringDiagram:
    return read_raw_graph(Path(path).read_text(encoding="utf-8"))


def read_semantic_graph_file(path: str | Path, *, elements: bool = True) -> WiringDiagram:
    return read_semantic_graph(Path(path).read_text(encoding="utf-8"), elements=elements)
