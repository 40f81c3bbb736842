"""GraphML serialization of raw and semantic flow graphs."""

from semflow.graphml.reader import (
    read_graphml,
    read_raw_graph,
    read_raw_graph_file,
    read_semantic_graph,
    read_semantic_graph_file,
)
from semflow.graphml.writer import (
    write_graphml,
    write_raw_graph,
    write_raw_graph_file,
    write_semantic_graph,
    write_semantic_graph_file,
)

__all__ = [
    "read_graphml",
    "read_raw_graph",
    "read_raw_graph_file",
    "read_semantic_graph",
    "read_semantic_graph_file",
    "write_graphml",
    "write_raw_graph",
    "write_raw_graph_file",
    "write_semantic_graph",
    "write_semantic_graph_file",
]
