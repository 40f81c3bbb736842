"""Raw flow graph model.

A raw flow graph is a wiring diagram whose boxes carry ``RawNode`` values
and whose ports carry ``RawPort`` values, as recorded by a program
instrumentation tool. The ``metadata`` mappings hold source-language data
(function names, modules, ...) and are opaque to enrichment.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from semflow.core.errors import UnknownAnnotationKindError


class RawNodeAnnotationKind(enum.StrEnum):
    """How an annotated raw box relates to its annotation."""

    FUNCTION = "function"
    CONSTRUCT = "construct"
    SLOT = "slot"

    @classmethod
    def parse(cls, label: str) -> RawNodeAnnotationKind:
        """Parse a serialized kind label.

        Raises:
            UnknownAnnotationKindError: If ``label`` is not a known kind.
        """
        try:
            return cls(label)
        except ValueError:
            raise UnknownAnnotationKindError(label) from None


@dataclass(frozen=True)
class RawNode:
    """Box value of a raw flow graph."""

    metadata: dict[str, Any] = field(default_factory=dict)
    annotation: str | None = None
    annotation_index: int | None = None
    annotation_kind: RawNodeAnnotationKind = RawNodeAnnotationKind.FUNCTION

    @property
    def label(self) -> str:
        # qual_name is what Python recorders emit; fall back to the bare name.
        return str(self.metadata.get("qual_name", self.metadata.get("name", "?")))


@dataclass(frozen=True)
class RawPort:
    """Port value of a raw flow graph."""

    metadata: dict[str, Any] = field(default_factory=dict)
    annotation: str | None = None
    annotation_index: int | None = None
    id: str | None = None
    value: Any = None
