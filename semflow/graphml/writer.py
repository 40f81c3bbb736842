"""GraphML writer for wiring diagrams.

Layout of the document::

    <graphml>
      <key id="d0" for="node" attr.name="annotation" attr.type="string"/>
      <graph id="G" edgedefault="directed">
        <node id="n">                       <!-- the diagram itself -->
          <port name="in:0">...</port>      <!-- boundary ports -->
          <graph id="n:" edgedefault="directed">
            <node id="n:n1">...</node>      <!-- box with handle 1 -->
            <edge source="n" sourceport="in:0" target="n:n1" targetport="in:0"/>
          </graph>
        </node>
      </graph>
    </graphml>

Nested diagrams nest the same way. Data values are JSON-encoded.
"""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from collections.abc import Callable
from pathlib import Path
from typing import Any

from semflow.graphml.convert import elem_to_data, hom_to_data, raw_node_to_data, raw_port_to_data
from semflow.wiring.diagram import INPUT_ID, OUTPUT_ID, AbstractBox, Port, WiringDiagram

logger = logging.getLogger(__name__)

GRAPHML_NS = "http://graphml.graphdrawing.org/xmlns"

DataFn = Callable[[Any], dict[str, Any]]


class _KeyRegistry:
    """Allocates GraphML <key> ids per (domain, attribute name)."""

    def __init__(self) -> None:
        self.keys: dict[tuple[str, str], str] = {}

    def key_id(self, domain: str, name: str) -> str:
        k = (domain, name)
        if k not in self.keys:
            self.keys[k] = f"d{len(self.keys)}"
        return self.keys[k]


def write_graphml(diagram: WiringDiagram, box_data: DataFn, port_data: DataFn) -> str:
    """Serialize a wiring diagram to a GraphML string.

    Args:
        diagram: The diagram to write.
        box_data: Converts a box value to data attributes. Called for every
            atomic box, and for nested diagrams whose value is not None.
        port_data: Converts a port value to data attributes.
    """
    ET.register_namespace("", GRAPHML_NS)
    root = ET.Element(f"{{{GRAPHML_NS}}}graphml")
    registry = _KeyRegistry()

    graph = ET.Element(f"{{{GRAPHML_NS}}}graph", {"id": "G", "edgedefault": "directed"})
    _write_node(graph, "n", diagram, box_data, port_data, registry)

    for (domain, name), key_id in registry.keys.items():
        ET.SubElement(root, f"{{{GRAPHML_NS}}}key", {
            "id": key_id,
            "for": domain,
            "attr.name": name,
            "attr.type": "string",
        })
    root.append(graph)

    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="unicode", xml_declaration=True)


def _write_node(
    parent: ET.Element,
    node_id: str,
    box: AbstractBox,
    box_data: DataFn,
    port_data: DataFn,
    registry: _KeyRegistry,
) -> None:
    node = ET.SubElement(parent, f"{{{GRAPHML_NS}}}node", {"id": node_id})
    is_diagram = isinstance(box, WiringDiagram)
    if not is_diagram or box.value is not None:
        _write_data(node, "node", box_data(box.value), registry)
    for i, port in enumerate(box.input_ports):
        port_el = ET.SubElement(node, f"{{{GRAPHML_NS}}}port", {"name": f"in:{i}"})
        _write_data(port_el, "port", port_data(port), registry)
    for j, port in enumerate(box.output_ports):
        port_el = ET.SubElement(node, f"{{{GRAPHML_NS}}}port", {"name": f"out:{j}"})
        _write_data(port_el, "port", port_data(port), registry)
    if not is_diagram:
        return

    graph = ET.SubElement(node, f"{{{GRAPHML_NS}}}graph", {"id": f"{node_id}:", "edgedefault": "directed"})
    for v in box.box_ids():
        _write_node(graph, f"{node_id}:n{v}", box.box(v), box_data, port_data, registry)
    for wire in sorted(box.wires()):
        source, sourceport = _endpoint(node_id, wire.source, is_source=True)
        target, targetport = _endpoint(node_id, wire.target, is_source=False)
        ET.SubElement(graph, f"{{{GRAPHML_NS}}}edge", {
            "source": source,
            "sourceport": sourceport,
            "target": target,
            "targetport": targetport,
        })


def _endpoint(node_id: str, port: Port, *, is_source: bool) -> tuple[str, str]:
    if port.box == INPUT_ID:
        return node_id, f"in:{port.port}"
    if port.box == OUTPUT_ID:
        return node_id, f"out:{port.port}"
    return f"{node_id}:n{port.box}", f"{'out' if is_source else 'in'}:{port.port}"


def _write_data(element: ET.Element, domain: str, data: dict[str, Any], registry: _KeyRegistry) -> None:
    for name, value in data.items():
        data_el = ET.SubElement(element, f"{{{GRAPHML_NS}}}data", {"key": registry.key_id(domain, name)})
        data_el.text = json.dumps(value, sort_keys=True)


# ── Flow graphs ──────────────────────────────────────────────────


def write_raw_graph(diagram: WiringDiagram) -> str:
    """Serialize a raw flow graph to GraphML."""
    return write_graphml(diagram, raw_node_to_data, raw_port_to_data)


def write_semantic_graph(diagram: WiringDiagram) -> str:
    """Serialize a semantic flow graph (element or object ports) to GraphML."""
    return write_graphml(diagram, hom_to_data, elem_to_data)


def write_raw_graph_file(diagram: WiringDiagram, path: str | Path) -> None:
    Path(path).write_text(write_raw_graph(diagram), encoding="utf-8")
    logger.info("Wrote raw graph with %d box(es) to %s", diagram.nboxes(), path)


def write_semantic_graph_file(diagram: WiringDiagram, path: str | Path) -> None:
    Path(path).write_text(write_semantic_graph(diagram), encoding="utf-8")
    logger.info("Wrote semantic graph with %d box(es) to %s", diagram.nboxes(), path)
