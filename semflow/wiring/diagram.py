"""Wiring diagrams: boxes with typed ports connected by wires.

A diagram owns an arena of boxes addressed by integer handles (1, 2, ...)
and a separate ordered set of wires between ``(handle, port)`` pairs. The
two reserved handles ``INPUT_ID`` and ``OUTPUT_ID`` stand for the
diagram's own boundary: a wire leaving ``(INPUT_ID, i)`` reads the i-th
input port of the diagram, a wire entering ``(OUTPUT_ID, j)`` writes the
j-th output port. Port indices are 0-based.

Handles are stable until a box is removed. ``substitute`` and
``encapsulate`` remove boxes as a batch and compact the handles once at the
end of the pass, so handles stay valid while the pass is running.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Union

import networkx as nx

from semflow.core.errors import DanglingWireError

logger = logging.getLogger(__name__)

INPUT_ID = -1
OUTPUT_ID = -2


@dataclass(frozen=True, order=True)
class Port:
    """A port reference: box handle (or boundary sentinel) and port index."""

    box: int
    port: int


@dataclass(frozen=True, order=True)
class Wire:
    """A directed wire from an output port to an input port."""

    source: Port
    target: Port

    @classmethod
    def of(cls, source: tuple[int, int], target: tuple[int, int]) -> Wire:
        return cls(Port(*source), Port(*target))


@dataclass(frozen=True)
class Box:
    """An atomic box. ``value`` is the payload, None for an opaque box."""

    value: Any
    input_ports: tuple[Any, ...] = field(default_factory=tuple)
    output_ports: tuple[Any, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "input_ports", tuple(self.input_ports))
        object.__setattr__(self, "output_ports", tuple(self.output_ports))


AbstractBox = Union[Box, "WiringDiagram"]


class WiringDiagram:
    """A mutable wiring diagram, usable itself as a (nested) box."""

    def __init__(
        self,
        input_ports: Sequence[Any] = (),
        output_ports: Sequence[Any] = (),
        value: Any = None,
    ) -> None:
        self.value = value
        self.input_ports: list[Any] = list(input_ports)
        self.output_ports: list[Any] = list(output_ports)
        self._boxes: dict[int, AbstractBox] = {}
        self._wires: dict[Wire, None] = {}
        self._next_id = 1

    # ── Boxes ────────────────────────────────────────────────────

    def box_ids(self) -> list[int]:
        return sorted(self._boxes)

    def boxes(self) -> list[AbstractBox]:
        return [self._boxes[v] for v in self.box_ids()]

    def box(self, handle: int) -> AbstractBox:
        try:
            return self._boxes[handle]
        except KeyError:
            raise KeyError(f"No box with handle {handle}") from None

    def has_box(self, handle: int) -> bool:
        return handle in self._boxes

    def nboxes(self) -> int:
        return len(self._boxes)

    def add_box(self, box: AbstractBox, handle: int | None = None) -> int:
        """Add a box and return its handle.

        Args:
            box: An atomic ``Box`` or a nested ``WiringDiagram``.
            handle: Explicit handle to use. Must be positive and unused.

        Returns:
            The handle of the new box.
        """
        if handle is None:
            handle = self._next_id
        elif handle < 1 or handle in self._boxes:
            raise ValueError(f"Box handle {handle} is invalid or already in use")
        self._boxes[handle] = box
        self._next_id = max(self._next_id, handle + 1)
        return handle

    def set_box(self, handle: int, box: AbstractBox) -> None:
        """Replace the box at ``handle``. Its wires are kept, so the new box
        must have at least the ports they use."""
        if handle not in self._boxes:
            raise KeyError(f"No box with handle {handle}")
        self._boxes[handle] = box

    def add_boxes(self, boxes: Iterable[AbstractBox]) -> list[int]:
        return [self.add_box(b) for b in boxes]

    def remove_boxes(self, handles: Iterable[int]) -> None:
        """Remove boxes and their incident wires, without compacting handles."""
        doomed = set(handles)
        for v in doomed:
            if v not in self._boxes:
                raise KeyError(f"No box with handle {v}")
            del self._boxes[v]
        self._wires = {
            w: None for w in self._wires
            if w.source.box not in doomed and w.target.box not in doomed
        }

    def compact(self) -> dict[int, int]:
        """Renumber box handles to 1..n, preserving their relative order.

        Returns:
            Mapping from old handle to new handle (boundary sentinels map to
            themselves).
        """
        order = sorted(self._boxes)
        remap = {old: new for new, old in enumerate(order, start=1)}
        remap[INPUT_ID] = INPUT_ID
        remap[OUTPUT_ID] = OUTPUT_ID
        self._boxes = {remap[v]: self._boxes[v] for v in order}
        self._wires = {
            Wire(Port(remap[w.source.box], w.source.port), Port(remap[w.target.box], w.target.port)): None
            for w in self._wires
        }
        self._next_id = len(order) + 1
        return remap

    # ── Ports ────────────────────────────────────────────────────

    def output_port_types(self, handle: int) -> Sequence[Any]:
        """Port types that can act as a wire source on ``handle``."""
        if handle == INPUT_ID:
            return self.input_ports
        if handle == OUTPUT_ID:
            return ()
        return self.box(handle).output_ports

    def input_port_types(self, handle: int) -> Sequence[Any]:
        """Port types that can act as a wire target on ``handle``."""
        if handle == OUTPUT_ID:
            return self.output_ports
        if handle == INPUT_ID:
            return ()
        return self.box(handle).input_ports

    def has_source(self, port: Port) -> bool:
        if port.box not in (INPUT_ID, OUTPUT_ID) and port.box not in self._boxes:
            return False
        return 0 <= port.port < len(self.output_port_types(port.box))

    def has_target(self, port: Port) -> bool:
        if port.box not in (INPUT_ID, OUTPUT_ID) and port.box not in self._boxes:
            return False
        return 0 <= port.port < len(self.input_port_types(port.box))

    # ── Wires ────────────────────────────────────────────────────

    def wires(self) -> list[Wire]:
        return list(self._wires)

    def has_wire(self, wire: Wire) -> bool:
        return wire in self._wires

    def add_wire(self, wire: Wire) -> None:
        """Add a wire, validating that both endpoints exist.

        Raises:
            DanglingWireError: If either endpoint is not an existing port.
        """
        if not self.has_source(wire.source):
            raise DanglingWireError(f"Wire source {wire.source} is not an output port of the diagram")
        if not self.has_target(wire.target):
            raise DanglingWireError(f"Wire target {wire.target} is not an input port of the diagram")
        self._wires[wire] = None

    def add_wires(self, wires: Iterable[Wire]) -> None:
        for wire in wires:
            self.add_wire(wire)

    def remove_wire(self, wire: Wire) -> None:
        del self._wires[wire]

    def in_wires(self, handle: int, port: int | None = None) -> list[Wire]:
        return [
            w for w in self._wires
            if w.target.box == handle and (port is None or w.target.port == port)
        ]

    def out_wires(self, handle: int, port: int | None = None) -> list[Wire]:
        return [
            w for w in self._wires
            if w.source.box == handle and (port is None or w.source.port == port)
        ]

    def graph(self) -> nx.DiGraph:
        """Directed graph of boxes, one edge per wired pair of boxes.

        Boundary sentinels are left out.
        """
        g: nx.DiGraph = nx.DiGraph()
        g.add_nodes_from(self.box_ids())
        for w in self._wires:
            if w.source.box in self._boxes and w.target.box in self._boxes:
                g.add_edge(w.source.box, w.target.box)
        return g

    # ── Substitution / encapsulation ─────────────────────────────

    def substitute(self, handles: Iterable[int]) -> dict[int, int]:
        """Inline the nested diagrams held by ``handles``.

        Each listed box must hold a ``WiringDiagram``. Its boxes and
        internal wires are copied into this diagram, and wires that crossed
        its boundary are rewired to whatever the nested diagram connects
        its boundary ports to. Boundary ports the nested diagram leaves
        unconnected simply drop their outer wires.

        Handles are compacted once, after all substitutions.

        Returns:
            Mapping from pre-pass handle to post-pass handle for boxes that
            survived the pass.
        """
        handles = list(handles)
        for v in handles:
            self._inline(v)
        remap = self.compact()
        logger.debug("Substituted %d box(es); diagram now has %d", len(handles), self.nboxes())
        return remap

    def _inline(self, v: int) -> None:
        sub = self.box(v)
        if not isinstance(sub, WiringDiagram):
            raise TypeError(f"Box {v} is atomic and cannot be substituted")

        incoming: dict[int, list[Port]] = {}
        for w in self.in_wires(v):
            if w.source.box != v:
                incoming.setdefault(w.target.port, []).append(w.source)
        outgoing: dict[int, list[Port]] = {}
        for w in self.out_wires(v):
            if w.target.box != v:
                outgoing.setdefault(w.source.port, []).append(w.target)

        self.remove_boxes([v])
        mapping = {u: self.add_box(sub.box(u)) for u in sub.box_ids()}

        for w in sub.wires():
            if w.source.box == INPUT_ID:
                sources = incoming.get(w.source.port, [])
            else:
                sources = [Port(mapping[w.source.box], w.source.port)]
            if w.target.box == OUTPUT_ID:
                targets = outgoing.get(w.target.port, [])
            else:
                targets = [Port(mapping[w.target.box], w.target.port)]
            for s in sources:
                for t in targets:
                    self.add_wire(Wire(s, t))

    def encapsulate(self, components: Iterable[Iterable[int]], value: Any = None) -> list[int]:
        """Replace each set of boxes with a single nested-diagram box.

        The new box's ports are exactly the member ports that have wires
        crossing the component boundary, ordered by (member handle, port).
        Internal wires move into the nested diagram.

        Returns:
            Post-compaction handles of the new boxes, one per component.
        """
        created = [self._encapsulate_one(sorted(set(members)), value) for members in components]
        remap = self.compact()
        logger.debug("Encapsulated %d component(s); diagram now has %d", len(created), self.nboxes())
        return [remap[h] for h in created]

    def _encapsulate_one(self, members: list[int], value: Any) -> int:
        member_set = set(members)
        sub = WiringDiagram(value=value)
        mapping = {v: sub.add_box(self.box(v)) for v in members}

        internal: list[Wire] = []
        entering: list[Wire] = []
        leaving: list[Wire] = []
        for w in self._wires:
            src_in = w.source.box in member_set
            tgt_in = w.target.box in member_set
            if src_in and tgt_in:
                internal.append(w)
            elif tgt_in:
                entering.append(w)
            elif src_in:
                leaving.append(w)

        in_ports = sorted({w.target for w in entering})
        out_ports = sorted({w.source for w in leaving})
        in_index = {p: i for i, p in enumerate(in_ports)}
        out_index = {p: j for j, p in enumerate(out_ports)}
        sub.input_ports = [self.input_port_types(p.box)[p.port] for p in in_ports]
        sub.output_ports = [self.output_port_types(p.box)[p.port] for p in out_ports]

        for w in internal:
            sub.add_wire(Wire(
                Port(mapping[w.source.box], w.source.port),
                Port(mapping[w.target.box], w.target.port),
            ))
        for p, i in in_index.items():
            sub.add_wire(Wire(Port(INPUT_ID, i), Port(mapping[p.box], p.port)))
        for p, j in out_index.items():
            sub.add_wire(Wire(Port(mapping[p.box], p.port), Port(OUTPUT_ID, j)))

        self.remove_boxes(members)
        h = self.add_box(sub)
        for w in entering:
            self.add_wire(Wire(w.source, Port(h, in_index[w.target])))
        for w in leaving:
            self.add_wire(Wire(Port(h, out_index[w.source]), w.target))
        return h

    # ── Misc ─────────────────────────────────────────────────────

    def copy(self) -> WiringDiagram:
        """Copy the diagram structure, recursively copying nested diagrams."""
        other = WiringDiagram(self.input_ports, self.output_ports, self.value)
        for v, b in self._boxes.items():
            other._boxes[v] = b.copy() if isinstance(b, WiringDiagram) else b
        other._wires = dict(self._wires)
        other._next_id = self._next_id
        return other

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WiringDiagram):
            return NotImplemented
        return (
            self.value == other.value
            and self.input_ports == other.input_ports
            and self.output_ports == other.output_ports
            and self._boxes == other._boxes
            and set(self._wires) == set(other._wires)
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"WiringDiagram(inputs={len(self.input_ports)}, outputs={len(self.output_ports)}, "
            f"boxes={len(self._boxes)}, wires={len(self._wires)}, value={self.value!r})"
        )
