"""Tests for the YAML ontology loader (semflow/ontology/loader.py)."""

from __future__ import annotations

import pytest
import yaml

from semflow.core.errors import OntologyFormatError
from semflow.ontology.annotations import HomAnnotation, ObAnnotation
from semflow.ontology.expressions import Hom, Ob
from semflow.ontology.loader import load_annotations, parse_annotations
from semflow.wiring.diagram import INPUT_ID, OUTPUT_ID, Wire, WiringDiagram

ONTOLOGY_YAML = """\
annotations:
  - name: pandas/read-csv
    kind: function
    definition:
      hom: read-table
      dom: [file]
      codom: [table]
  - name: pandas/data-frame
    kind: type
    definition: table
    slots:
      - {hom: rows, dom: [table], codom: [number]}
      - {hom: columns, dom: [table], codom: [number]}
  - name: sklearn/fit-predict
    definition:
      inputs: [model, data]
      outputs: [labels]
      boxes:
        - {hom: fit, dom: [model, data], codom: [model]}
        - {hom: predict, dom: [model, data], codom: [labels]}
      wires:
        - [[input, 0], [1, 0]]
        - [[input, 1], [1, 1]]
        - [[1, 0], [2, 0]]
        - [[input, 1], [2, 1]]
        - [[2, 0], [output, 0]]
"""


class TestLoadAnnotations:
    """Test suite for loading an ontology file."""

    def test_load_from_file(self, tmp_path) -> None:
        path = tmp_path / "ontology.yaml"
        path.write_text(ONTOLOGY_YAML, encoding="utf-8")

        resolver = load_annotations(path)

        assert resolver.names() == ["pandas/data-frame", "pandas/read-csv", "sklearn/fit-predict"]

    def test_generator_definition(self, tmp_path) -> None:
        path = tmp_path / "ontology.yaml"
        path.write_text(ONTOLOGY_YAML, encoding="utf-8")

        note = load_annotations(str(path)).lookup("pandas/read-csv")

        assert note == HomAnnotation("pandas/read-csv", Hom("read-table", (Ob("file"),), (Ob("table"),)))

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_annotations(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path) -> None:
        """A YAML syntax error surfaces as an OntologyFormatError."""
        path = tmp_path / "broken.yaml"
        path.write_text("annotations: [read-table, {name: x\n", encoding="utf-8")

        with pytest.raises(OntologyFormatError, match="Failed to parse ontology") as exc_info:
            load_annotations(path)
        assert isinstance(exc_info.value.__cause__, yaml.YAMLError)


class TestParseAnnotations:
    """Test suite for building annotations from a parsed document."""

    def test_type_with_slots(self) -> None:
        note = parse_annotations(yaml.safe_load(ONTOLOGY_YAML)).lookup("pandas/data-frame")

        assert isinstance(note, ObAnnotation)
        assert note.definition == Ob("table")
        assert [slot.name for slot in note.slots] == ["rows", "columns"]

    def test_composite_definition(self) -> None:
        """Kind defaults to function; a definition with boxes is a diagram."""
        note = parse_annotations(yaml.safe_load(ONTOLOGY_YAML)).lookup("sklearn/fit-predict")

        assert isinstance(note, HomAnnotation)
        diagram = note.definition
        assert isinstance(diagram, WiringDiagram)
        assert diagram.input_ports == [Ob("model"), Ob("data")]
        assert [b.value.name for b in diagram.boxes()] == ["fit", "predict"]
        assert Wire.of((INPUT_ID, 1), (2, 1)) in diagram.wires()
        assert Wire.of((2, 0), (OUTPUT_ID, 0)) in diagram.wires()

    def test_type_without_slots(self) -> None:
        resolver = parse_annotations({"annotations": [{"name": "file", "kind": "type", "definition": "file"}]})
        assert resolver.lookup("file") == ObAnnotation("file", Ob("file"))

    def test_empty_document(self) -> None:
        with pytest.raises(OntologyFormatError, match="annotations"):
            parse_annotations(None)

    def test_entry_without_definition(self) -> None:
        with pytest.raises(OntologyFormatError, match="definition"):
            parse_annotations({"annotations": [{"name": "x"}]})

    def test_unknown_kind(self) -> None:
        doc = {"annotations": [{"name": "x", "kind": "module", "definition": "x"}]}
        with pytest.raises(OntologyFormatError, match="unknown kind"):
            parse_annotations(doc)

    def test_function_without_hom(self) -> None:
        doc = {"annotations": [{"name": "x", "definition": {"dom": ["a"]}}]}
        with pytest.raises(OntologyFormatError, match="'hom'"):
            parse_annotations(doc)

    def test_malformed_wire(self) -> None:
        doc = {"annotations": [{
            "name": "x",
            "definition": {"boxes": [{"hom": "f"}], "wires": [[["input", 0]]]},
        }]}
        with pytest.raises(OntologyFormatError, match="wire must be"):
            parse_annotations(doc)

    def test_wire_to_missing_port(self) -> None:
        doc = {"annotations": [{
            "name": "x",
            "definition": {
                "inputs": ["a"],
                "boxes": [{"hom": "f", "dom": ["a"]}],
                "wires": [[["input", 0], [1, 3]]],
            },
        }]}
        with pytest.raises(OntologyFormatError, match="'x'"):
            parse_annotations(doc)

    @pytest.mark.parametrize("key", ["dom", "codom"])
    def test_scalar_type_list_rejected(self, key) -> None:
        doc = {"annotations": [{"name": "x", "definition": {"hom": "f", key: "file"}}]}
        with pytest.raises(OntologyFormatError, match=f"'{key}' must be a list"):
            parse_annotations(doc)

    def test_scalar_diagram_inputs_rejected(self) -> None:
        doc = {"annotations": [{"name": "x", "definition": {"inputs": "file", "boxes": []}}]}
        with pytest.raises(OntologyFormatError, match="'inputs' must be a list"):
            parse_annotations(doc)
