"""Collapse adjacent unannotated boxes into single boxes.

Unannotated boxes are the plumbing of a flow graph: calls the ontology
knows nothing about. Chains of them are merged into one encapsulated box,
as long as the merge does not order two annotated boxes that were
previously unordered and does not wire a box back into itself.
"""

from __future__ import annotations

import logging

import networkx as nx

from semflow.wiring.diagram import WiringDiagram

logger = logging.getLogger(__name__)

_Order = dict[int, frozenset[int]]


def collapse_unannotated_boxes(diagram: WiringDiagram) -> WiringDiagram:
    """Collapse adjacent unannotated boxes of ``diagram`` in place.

    Groups of unannotated boxes grow one wire at a time. Two groups joined
    by a wire are merged only if, in the graph with every group contracted
    to a single node, every annotated box still reaches exactly the
    annotated boxes it reached before, and an acyclic graph stays acyclic.
    Candidate wires are retried until no merge succeeds, so the grouping is
    a fixpoint.

    Each group is then encapsulated. Lone unannotated boxes are encapsulated
    too, which drops their unused ports; a box that is already such an
    encapsulation is left alone, so collapsing twice changes nothing.

    Returns:
        The same diagram, for chaining.
    """
    graph = diagram.graph()
    annotated = {v for v in graph if diagram.box(v).value is not None}
    order = _annotated_order(graph, annotated)
    acyclic = nx.is_directed_acyclic_graph(graph)
    candidates = sorted((u, v) for u, v in graph.edges() if u != v and u not in annotated and v not in annotated)

    leader = {v: v for v in graph}
    merged = True
    while merged:
        merged = False
        for parent, child in candidates:
            a, b = leader[parent], leader[child]
            if a == b:
                continue
            keep, drop = min(a, b), max(a, b)
            trial = {v: keep if lead == drop else lead for v, lead in leader.items()}
            if _preserves_order(graph, trial, annotated, order, acyclic):
                leader = trial
                merged = True

    groups: dict[int, list[int]] = {}
    for v in sorted(graph):
        if v not in annotated:
            groups.setdefault(leader[v], []).append(v)
    components = [c for c in sorted(groups.values()) if len(c) > 1 or not _is_encapsulated(diagram, c[0])]
    if components:
        diagram.encapsulate(components, None)
    logger.info("Collapsed unannotated boxes into %d box(es); diagram has %d box(es)", len(components), diagram.nboxes())
    return diagram


def _annotated_order(graph: nx.DiGraph, annotated: set[int]) -> _Order:
    return {a: frozenset(nx.descendants(graph, a) & annotated) for a in annotated}


def _preserves_order(
    graph: nx.DiGraph,
    leader: dict[int, int],
    annotated: set[int],
    order: _Order,
    acyclic: bool,
) -> bool:
    contracted = nx.DiGraph()
    contracted.add_nodes_from(set(leader.values()))
    contracted.add_edges_from((leader[u], leader[v]) for u, v in graph.edges() if leader[u] != leader[v])
    if acyclic and not nx.is_directed_acyclic_graph(contracted):
        return False
    # Annotated boxes are never merged, so each leads its own group.
    return _annotated_order(contracted, annotated) == order


def _is_encapsulated(diagram: WiringDiagram, v: int) -> bool:
    box = diagram.box(v)
    if not isinstance(box, WiringDiagram) or box.value is not None:
        return False
    return all(diagram.in_wires(v, i) for i in range(len(box.input_ports))) and all(
        diagram.out_wires(v, j) for j in range(len(box.output_ports))
    )
