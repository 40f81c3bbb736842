"""Annotation resolver: looks annotations up by name.

The resolver is a capability passed explicitly into every enrichment
operation. It must be read-only for the duration of one enrichment call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from semflow.core.errors import AnnotationKindMismatchError, AnnotationNotFoundError
from semflow.ontology.annotations import Annotation, HomAnnotation, ObAnnotation

logger = logging.getLogger(__name__)


class AnnotationResolver(Protocol):
    """Anything that can resolve an annotation name."""

    def lookup(self, name: str) -> Annotation:
        """Return the annotation called ``name``.

        Raises:
            AnnotationNotFoundError: If no such annotation exists.
        """
        ...


class InMemoryAnnotationResolver:
    """Dict-backed resolver, typically filled by :func:`load_annotations`."""

    def __init__(self, annotations: Iterable[Annotation] = ()) -> None:
        self._annotations: dict[str, Annotation] = {}
        for note in annotations:
            self.add(note)

    def add(self, annotation: Annotation) -> None:
        if annotation.name in self._annotations:
            logger.warning("Annotation %r defined twice; keeping the last definition", annotation.name)
        self._annotations[annotation.name] = annotation

    def lookup(self, name: str) -> Annotation:
        try:
            return self._annotations[name]
        except KeyError:
            raise AnnotationNotFoundError(name) from None

    def names(self) -> list[str]:
        return sorted(self._annotations)

    def __contains__(self, name: object) -> bool:
        return name in self._annotations

    def __len__(self) -> int:
        return len(self._annotations)


def load_hom_annotation(resolver: AnnotationResolver, name: str) -> HomAnnotation:
    """Resolve ``name`` and require a function annotation."""
    note = resolver.lookup(name)
    if not isinstance(note, HomAnnotation):
        raise AnnotationKindMismatchError(name, expected="a function annotation", actual="a type annotation")
    return note


def load_ob_annotation(resolver: AnnotationResolver, name: str) -> ObAnnotation:
    """Resolve ``name`` and require a type annotation."""
    note = resolver.lookup(name)
    if not isinstance(note, ObAnnotation):
        raise AnnotationKindMismatchError(name, expected="a type annotation", actual="a function annotation")
    return note
