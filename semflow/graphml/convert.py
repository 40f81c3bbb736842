"""Conversions between flow graph values and GraphML data attributes.

Each box or port value becomes a flat dict of data attributes. Reserved
keys carry the annotation fields; every other key of a raw value is
source-language metadata and passes through untouched.
"""

from __future__ import annotations

from typing import Any

from semflow.core.errors import GraphMLFormatError
from semflow.flowgraph.elements import SemanticElem
from semflow.flowgraph.raw import RawNode, RawNodeAnnotationKind, RawPort
from semflow.ontology.expressions import Hom, Ob, parse_json_sexpr, to_json_sexpr


# ── Raw flow graphs ──────────────────────────────────────────────


def raw_node_to_data(node: RawNode) -> dict[str, Any]:
    data = dict(node.metadata)
    if node.annotation is not None:
        data["annotation"] = node.annotation
    if node.annotation_index is not None:
        data["annotation_index"] = node.annotation_index
    if node.annotation is not None or node.annotation_kind is not RawNodeAnnotationKind.FUNCTION:
        data["annotation_kind"] = node.annotation_kind.value
    return data


def raw_node_from_data(data: dict[str, Any]) -> RawNode:
    data = dict(data)
    annotation = data.pop("annotation", None)
    annotation_index = data.pop("annotation_index", None)
    kind_label = data.pop("annotation_kind", None)
    kind = RawNodeAnnotationKind.FUNCTION if kind_label is None else RawNodeAnnotationKind.parse(kind_label)
    return RawNode(data, annotation, annotation_index, kind)


def raw_port_to_data(port: RawPort) -> dict[str, Any]:
    data = dict(port.metadata)
    if port.annotation is not None:
        data["annotation"] = port.annotation
    if port.annotation_index is not None:
        data["annotation_index"] = port.annotation_index
    if port.id is not None:
        data["id"] = port.id
    if port.value is not None:
        data["value"] = port.value
    return data


def raw_port_from_data(data: dict[str, Any]) -> RawPort:
    data = dict(data)
    annotation = data.pop("annotation", None)
    annotation_index = data.pop("annotation_index", None)
    port_id = data.pop("id", None)
    value = data.pop("value", None)
    return RawPort(data, annotation, annotation_index, port_id, value)


# ── Semantic flow graphs ─────────────────────────────────────────


def hom_to_data(value: Hom | None) -> dict[str, Any]:
    if value is None:
        return {}
    return {"expr": to_json_sexpr(value)}


def hom_from_data(data: dict[str, Any]) -> Hom | None:
    if "expr" not in data:
        return None
    expr = parse_json_sexpr(data["expr"])
    if not isinstance(expr, Hom):
        raise GraphMLFormatError(f"Box expression must be a morphism, got {data['expr']!r}")
    return expr


def elem_to_data(port: SemanticElem | Ob | None) -> dict[str, Any]:
    if port is None:
        return {}
    if isinstance(port, Ob):
        return {"ob": to_json_sexpr(port)}
    data: dict[str, Any] = {}
    if port.ob is not None:
        data["ob"] = to_json_sexpr(port.ob)
    if port.id is not None:
        data["id"] = port.id
    if port.value is not None:
        data["value"] = port.value
    return data


def ob_from_data(data: dict[str, Any]) -> Ob | None:
    if "ob" not in data:
        return None
    ob = parse_json_sexpr(data["ob"])
    if not isinstance(ob, Ob):
        raise GraphMLFormatError(f"Port type must be an object, got {data['ob']!r}")
    return ob


def elem_from_data(data: dict[str, Any]) -> SemanticElem:
    return SemanticElem(ob_from_data(data), data.get("id"), data.get("value"))
