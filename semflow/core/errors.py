"""Exception hierarchy for semantic enrichment.

Every error aborts the enrichment call at the point of detection. The
transform is pure, so none of these are retried.
"""

from __future__ import annotations


class SemflowError(Exception):
    """Base class for all semflow errors."""


class AnnotationNotFoundError(SemflowError, KeyError):
    """Raised when an annotation name cannot be resolved in the ontology."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Annotation not found: {name!r}")
        self.name = name

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0])


class AnnotationKindMismatchError(SemflowError, TypeError):
    """Raised when an annotation resolves to the wrong kind (object vs morphism)."""

    def __init__(self, name: str, expected: str, actual: str) -> None:
        super().__init__(f"Annotation {name!r} is {actual}, expected {expected}")
        self.name = name
        self.expected = expected
        self.actual = actual


class AnnotationIndexError(SemflowError, IndexError):
    """Raised when an annotation index is missing or selects no slot."""


class UnknownAnnotationKindError(SemflowError, ValueError):
    """Raised when a serialized annotation kind label is not recognized."""

    def __init__(self, label: str) -> None:
        super().__init__(f'Unknown annotation kind "{label}"')
        self.label = label


class DanglingWireError(SemflowError, ValueError):
    """Raised when a wire references a box or port that does not exist."""


class GraphMLFormatError(SemflowError, ValueError):
    """Raised when a GraphML document cannot be parsed as a wiring diagram."""


class OntologyFormatError(SemflowError, ValueError):
    """Raised when an ontology document is malformed."""


class InvalidRawGraphError(SemflowError, TypeError):
    """Raised when a raw flow graph holds something other than atomic RawNode boxes."""
