"""Tests for the wiring diagram arena (semflow/wiring/diagram.py)."""

from __future__ import annotations

import pytest

from semflow.core.errors import DanglingWireError
from semflow.wiring.diagram import INPUT_ID, OUTPUT_ID, Box, Port, Wire, WiringDiagram


def _chain(*values: str) -> WiringDiagram:
    """input -> values[0] -> values[1] -> ... -> output, one port each."""
    d = WiringDiagram(["T"], ["T"])
    prev = Port(INPUT_ID, 0)
    for value in values:
        v = d.add_box(Box(value, ["T"], ["T"]))
        d.add_wire(Wire(prev, Port(v, 0)))
        prev = Port(v, 0)
    d.add_wire(Wire(prev, Port(OUTPUT_ID, 0)))
    return d


def _edges_by_value(d: WiringDiagram) -> set[tuple[object, object]]:
    def name(port: Port) -> object:
        if port.box == INPUT_ID:
            return "input"
        if port.box == OUTPUT_ID:
            return "output"
        return d.box(port.box).value

    return {(name(w.source), name(w.target)) for w in d.wires()}


class TestBoxes:
    def test_handles_are_sequential_from_one(self) -> None:
        d = WiringDiagram()
        assert d.add_boxes([Box("a"), Box("b"), Box("c")]) == [1, 2, 3]
        assert d.box_ids() == [1, 2, 3]

    def test_explicit_handle(self) -> None:
        d = WiringDiagram()
        assert d.add_box(Box("a"), handle=5) == 5
        assert d.add_box(Box("b")) == 6

    def test_explicit_handle_in_use_rejected(self) -> None:
        d = WiringDiagram()
        d.add_box(Box("a"))
        with pytest.raises(ValueError, match="already in use"):
            d.add_box(Box("b"), handle=1)

    def test_box_ports_are_tuples(self) -> None:
        box = Box("a", ["X"], ["Y", "Z"])
        assert box.input_ports == ("X",)
        assert box.output_ports == ("Y", "Z")

    def test_unknown_box(self) -> None:
        with pytest.raises(KeyError):
            WiringDiagram().box(1)

    def test_remove_boxes_drops_incident_wires(self) -> None:
        d = _chain("a", "b", "c")
        d.remove_boxes([2])
        assert d.box_ids() == [1, 3]
        assert _edges_by_value(d) == {("input", "a"), ("c", "output")}

    def test_compact_renumbers_in_order(self) -> None:
        d = _chain("a", "b", "c")
        d.remove_boxes([1])
        remap = d.compact()
        assert remap[2] == 1 and remap[3] == 2
        assert [b.value for b in d.boxes()] == ["b", "c"]
        assert _edges_by_value(d) == {("b", "c"), ("c", "output")}
        assert d.add_box(Box("d")) == 3

    def test_set_box(self) -> None:
        d = _chain("a")
        d.set_box(1, Box("z", ["T"], ["T"]))
        assert _edges_by_value(d) == {("input", "z"), ("z", "output")}


class TestWires:
    def test_wire_to_missing_port(self) -> None:
        d = _chain("a")
        with pytest.raises(DanglingWireError):
            d.add_wire(Wire(Port(1, 0), Port(1, 1)))

    def test_wire_to_missing_box(self) -> None:
        d = _chain("a")
        with pytest.raises(DanglingWireError):
            d.add_wire(Wire(Port(1, 0), Port(7, 0)))

    def test_boundary_directions(self) -> None:
        d = _chain("a")
        with pytest.raises(DanglingWireError):
            d.add_wire(Wire(Port(OUTPUT_ID, 0), Port(1, 0)))
        with pytest.raises(DanglingWireError):
            d.add_wire(Wire(Port(1, 0), Port(INPUT_ID, 0)))

    def test_duplicate_wire_is_stored_once(self) -> None:
        d = _chain("a")
        d.add_wire(Wire.of((INPUT_ID, 0), (1, 0)))
        assert len(d.wires()) == 2

    def test_in_and_out_wires(self) -> None:
        d = _chain("a", "b")
        assert d.in_wires(2) == [Wire.of((1, 0), (2, 0))]
        assert d.out_wires(2, 0) == [Wire.of((2, 0), (OUTPUT_ID, 0))]
        assert d.out_wires(2, 1) == []

    def test_graph_excludes_boundary(self) -> None:
        g = _chain("a", "b", "c").graph()
        assert sorted(g.nodes) == [1, 2, 3]
        assert sorted(g.edges) == [(1, 2), (2, 3)]


class TestSubstitute:
    def test_inlines_nested_diagram(self) -> None:
        outer = WiringDiagram(["T"], ["T"])
        v = outer.add_box(_chain("a", "b"))
        outer.add_wires([Wire.of((INPUT_ID, 0), (v, 0)), Wire.of((v, 0), (OUTPUT_ID, 0))])

        outer.substitute([v])

        assert outer.box_ids() == [1, 2]
        assert _edges_by_value(outer) == {("input", "a"), ("a", "b"), ("b", "output")}

    def test_adjacent_substitutions_in_one_pass(self) -> None:
        outer = WiringDiagram(["T"], ["T"])
        v1 = outer.add_box(_chain("a"))
        v2 = outer.add_box(_chain("b"))
        outer.add_wires([
            Wire.of((INPUT_ID, 0), (v1, 0)),
            Wire.of((v1, 0), (v2, 0)),
            Wire.of((v2, 0), (OUTPUT_ID, 0)),
        ])

        outer.substitute([v1, v2])

        assert [b.value for b in outer.boxes()] == ["a", "b"]
        assert _edges_by_value(outer) == {("input", "a"), ("a", "b"), ("b", "output")}

    def test_unconnected_boundary_port_drops_outer_wire(self) -> None:
        inner = WiringDiagram(["T", "T"], ["T"])
        a = inner.add_box(Box("a", ["T"], ["T"]))
        inner.add_wires([Wire.of((INPUT_ID, 0), (a, 0)), Wire.of((a, 0), (OUTPUT_ID, 0))])

        outer = WiringDiagram([], ["T"])
        s = outer.add_box(Box("s", [], ["T", "T"]))
        v = outer.add_box(inner)
        outer.add_wires([
            Wire.of((s, 0), (v, 0)),
            Wire.of((s, 1), (v, 1)),
            Wire.of((v, 0), (OUTPUT_ID, 0)),
        ])

        outer.substitute([v])

        assert _edges_by_value(outer) == {("s", "a"), ("a", "output")}
        assert len(outer.wires()) == 2

    def test_passthrough_wire(self) -> None:
        inner = WiringDiagram(["T"], ["T"])
        inner.add_wire(Wire.of((INPUT_ID, 0), (OUTPUT_ID, 0)))
        outer = WiringDiagram(["T"], ["T"])
        v = outer.add_box(inner)
        outer.add_wires([Wire.of((INPUT_ID, 0), (v, 0)), Wire.of((v, 0), (OUTPUT_ID, 0))])

        outer.substitute([v])

        assert outer.nboxes() == 0
        assert outer.wires() == [Wire.of((INPUT_ID, 0), (OUTPUT_ID, 0))]

    def test_atomic_box_cannot_be_substituted(self) -> None:
        d = _chain("a")
        with pytest.raises(TypeError):
            d.substitute([1])


class TestEncapsulate:
    def test_encapsulates_component(self) -> None:
        d = _chain("a", "b", "c")

        (h,) = d.encapsulate([[1, 2]])

        assert d.nboxes() == 2
        sub = d.box(h)
        assert isinstance(sub, WiringDiagram)
        assert sub.value is None
        assert sub.input_ports == ["T"] and sub.output_ports == ["T"]
        assert _edges_by_value(sub) == {("input", "a"), ("a", "b"), ("b", "output")}
        assert _edges_by_value(d) == {("input", None), (None, "c"), ("c", "output")}

    def test_only_crossing_ports_survive(self) -> None:
        d = WiringDiagram(["T"], ["T"])
        x = d.add_box(Box("x", ["I0", "I1"], ["O0", "O1"]))
        d.add_wires([Wire.of((INPUT_ID, 0), (x, 1)), Wire.of((x, 0), (OUTPUT_ID, 0))])

        (h,) = d.encapsulate([[x]])

        sub = d.box(h)
        assert sub.input_ports == ["I1"]
        assert sub.output_ports == ["O0"]
        assert set(sub.wires()) == {Wire.of((INPUT_ID, 0), (1, 1)), Wire.of((1, 0), (OUTPUT_ID, 0))}

    def test_substitution_undoes_encapsulation(self) -> None:
        d = _chain("a", "b", "c")
        before = _edges_by_value(d)

        (h,) = d.encapsulate([[2, 3]])
        d.substitute([h])

        assert _edges_by_value(d) == before
        assert sorted(b.value for b in d.boxes()) == ["a", "b", "c"]


class TestEqualityAndCopy:
    def test_structural_equality(self) -> None:
        assert _chain("a", "b") == _chain("a", "b")
        assert _chain("a", "b") != _chain("b", "a")

    def test_copy_is_independent(self) -> None:
        d = _chain("a")
        d.add_box(_chain("n"))
        c = d.copy()
        assert c == d
        c.box(2).add_box(Box("extra"))
        assert c != d
