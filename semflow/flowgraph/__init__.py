"""Raw and semantic flow graphs and the enrichment algorithm between them.

The entry point is :func:`to_semantic_graph`, which converts a raw flow
graph into a semantic one:

- ports are typed by the ontology objects they are annotated with
- annotated boxes are expanded into the morphisms they are annotated with
- chains of unannotated boxes are collapsed
"""

from semflow.flowgraph.collapse import collapse_unannotated_boxes
from semflow.flowgraph.elements import SemanticElem
from semflow.flowgraph.enrichment import expand_raw_graph, to_semantic_graph
from semflow.flowgraph.expansion import expand_box
from semflow.flowgraph.ports import to_semantic_ports, type_port
from semflow.flowgraph.raw import RawNode, RawNodeAnnotationKind, RawPort

__all__ = [
    "RawNode",
    "RawNodeAnnotationKind",
    "RawPort",
    "SemanticElem",
    "collapse_unannotated_boxes",
    "expand_box",
    "expand_raw_graph",
    "to_semantic_graph",
    "to_semantic_ports",
    "type_port",
]
