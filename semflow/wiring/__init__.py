"""Wiring diagram data structure shared by raw and semantic flow graphs."""

from semflow.wiring.diagram import INPUT_ID, OUTPUT_ID, AbstractBox, Box, Port, Wire, WiringDiagram

__all__ = [
    "INPUT_ID",
    "OUTPUT_ID",
    "AbstractBox",
    "Box",
    "Port",
    "Wire",
    "WiringDiagram",
]
