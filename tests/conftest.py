"""Shared test fixtures for the semflow test suite.

Provides test settings that ignore the environment, a small in-memory
ontology, and helpers for building raw flow graphs.
"""

from __future__ import annotations

import pytest

from semflow.core.config import Settings
from semflow.ontology.annotations import HomAnnotation, ObAnnotation
from semflow.ontology.expressions import Hom, Ob
from semflow.ontology.resolver import InMemoryAnnotationResolver
from semflow.wiring.diagram import INPUT_ID, OUTPUT_ID, Box, Port, Wire, WiringDiagram

FILE = Ob("file")
TABLE = Ob("table")
NUMBER = Ob("number")
MODEL = Ob("model")
LABELS = Ob("labels")

READ_TABLE = Hom("read-table", (FILE,), (TABLE,))
FOO = Hom("foo", (NUMBER, NUMBER), (NUMBER,))
TABLE_SLOTS = (
    Hom("rows", (TABLE,), (NUMBER,)),
    Hom("columns", (TABLE,), (NUMBER,)),
    Hom("name", (TABLE,), (FILE,)),
)
FIT = Hom("fit", (MODEL, TABLE), (MODEL,))
PREDICT = Hom("predict", (MODEL, TABLE), (LABELS,))


def _fit_predict_diagram() -> WiringDiagram:
    d = WiringDiagram([MODEL, TABLE], [LABELS])
    fit = d.add_box(Box(FIT, FIT.dom, FIT.codom))
    predict = d.add_box(Box(PREDICT, PREDICT.dom, PREDICT.codom))
    d.add_wires([
        Wire(Port(INPUT_ID, 0), Port(fit, 0)),
        Wire(Port(INPUT_ID, 1), Port(fit, 1)),
        Wire(Port(fit, 0), Port(predict, 0)),
        Wire(Port(INPUT_ID, 1), Port(predict, 1)),
        Wire(Port(predict, 0), Port(OUTPUT_ID, 0)),
    ])
    return d


@pytest.fixture
def test_settings() -> Settings:
    """Settings with defaults, unaffected by SEMFLOW_* variables or .env."""
    return Settings(
        _env_file=None,
        log_level="DEBUG",
        index_origin=0,
        dangling_wire_policy="drop",
        elements=True,
        ontology_path=None,
    )


@pytest.fixture
def resolver() -> InMemoryAnnotationResolver:
    """A small ontology covering every annotation kind."""
    return InMemoryAnnotationResolver([
        ObAnnotation("file", FILE),
        ObAnnotation("table", TABLE, TABLE_SLOTS),
        ObAnnotation("number", NUMBER),
        ObAnnotation("model", MODEL),
        HomAnnotation("read-table", READ_TABLE),
        HomAnnotation("foo", FOO),
        HomAnnotation("fit-predict", _fit_predict_diagram()),
    ])
