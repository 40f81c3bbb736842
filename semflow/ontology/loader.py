"""Ontology loader.

Reads annotations from a YAML document into an in-memory resolver. The
document looks like::

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
          - {hom: column, dom: [table], codom: [column]}

A function definition is either a generator (``hom``/``dom``/``codom``)
or a composite diagram::

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

Box handles in ``wires`` are the 1-based positions in ``boxes``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from semflow.core.errors import DanglingWireError, OntologyFormatError
from semflow.ontology.annotations import Annotation, HomAnnotation, ObAnnotation
from semflow.ontology.expressions import Hom, Ob
from semflow.ontology.resolver import InMemoryAnnotationResolver
from semflow.wiring.diagram import INPUT_ID, OUTPUT_ID, Box, Port, Wire, WiringDiagram

logger = logging.getLogger(__name__)

_ENDPOINT_NAMES = {"input": INPUT_ID, "output": OUTPUT_ID}


def load_annotations(path: str | Path) -> InMemoryAnnotationResolver:
    """Load an ontology YAML file into a resolver.

    Raises:
        OntologyFormatError: If the file is not valid YAML or not a valid
            ontology document.
    """
    with open(path, encoding="utf-8") as f:
        try:
            document = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise OntologyFormatError(f"Failed to parse ontology {path}: {e}") from e
    resolver = parse_annotations(document)
    logger.info("Loaded %d annotation(s) from %s", len(resolver), path)
    return resolver


def parse_annotations(document: Any) -> InMemoryAnnotationResolver:
    """Build a resolver from an already-parsed ontology document.

    Raises:
        OntologyFormatError: If the document does not follow the format
            described in the module docstring.
    """
    if not isinstance(document, dict) or not isinstance(document.get("annotations"), list):
        raise OntologyFormatError("Ontology document must have an 'annotations' list")
    return InMemoryAnnotationResolver(_parse_annotation(entry) for entry in document["annotations"])


def _parse_annotation(entry: Any) -> Annotation:
    if not isinstance(entry, dict) or "name" not in entry or "definition" not in entry:
        raise OntologyFormatError(f"Annotation entry needs 'name' and 'definition': {entry!r}")
    name = str(entry["name"])
    kind = entry.get("kind", "function")
    if kind == "function":
        return HomAnnotation(name, _parse_hom_definition(entry["definition"], name))
    if kind == "type":
        slots = tuple(_parse_hom(slot, name) for slot in entry.get("slots", []))
        return ObAnnotation(name, Ob(str(entry["definition"])), slots)
    raise OntologyFormatError(f"Annotation {name!r} has unknown kind {kind!r}")


def _parse_hom(data: Any, name: str) -> Hom:
    if not isinstance(data, dict) or "hom" not in data:
        raise OntologyFormatError(f"Annotation {name!r}: expected a morphism with a 'hom' key, got {data!r}")
    return Hom(
        str(data["hom"]),
        _parse_obs(data, "dom", name),
        _parse_obs(data, "codom", name),
    )


def _parse_obs(data: dict[str, Any], key: str, name: str) -> tuple[Ob, ...]:
    obs = data.get(key, [])
    if not isinstance(obs, list):
        raise OntologyFormatError(f"Annotation {name!r}: '{key}' must be a list of type names, got {obs!r}")
    return tuple(Ob(str(x)) for x in obs)


def _parse_hom_definition(data: Any, name: str) -> Hom | WiringDiagram:
    if isinstance(data, dict) and "boxes" in data:
        return _parse_diagram(data, name)
    return _parse_hom(data, name)


def _parse_diagram(data: dict[str, Any], name: str) -> WiringDiagram:
    diagram = WiringDiagram(
        _parse_obs(data, "inputs", name),
        _parse_obs(data, "outputs", name),
    )
    for box_data in data["boxes"]:
        hom = _parse_hom(box_data, name)
        diagram.add_box(Box(hom, hom.dom, hom.codom))
    for wire in data.get("wires", []):
        if not isinstance(wire, list) or len(wire) != 2:
            raise OntologyFormatError(f"Annotation {name!r}: wire must be [source, target], got {wire!r}")
        source, target = (_parse_endpoint(end, name) for end in wire)
        try:
            diagram.add_wire(Wire(source, target))
        except DanglingWireError as err:
            raise OntologyFormatError(f"Annotation {name!r}: {err}") from err
    return diagram


def _parse_endpoint(data: Any, name: str) -> Port:
    if not isinstance(data, list) or len(data) != 2:
        raise OntologyFormatError(f"Annotation {name!r}: wire endpoint must be [box, port], got {data!r}")
    box, port = data
    handle = _ENDPOINT_NAMES.get(box, box) if isinstance(box, str) else box
    if not isinstance(handle, int) or not isinstance(port, int):
        raise OntologyFormatError(f"Annotation {name!r}: wire endpoint must be [box, port], got {data!r}")
    return Port(handle, port)

