"""Turning entity spans into document annotations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from .exceptions import InputContractError
from .models import Annotation, Document, EntitySpan


LOGGER = logging.getLogger(__name__)

DEFAULT_SOURCE_COMPONENT = "spaCy NER Detector"


@dataclass(frozen=True)
class EntityKind:
    """Type-specific behaviour for one entity type.

    Attributes
    ----------
    name:
        Entity type as produced by the classifier.
    code:
        Short code written in the ``type`` attribute of inline ``<E>`` tags.
    """

    name: str
    code: str


ENTITY_KINDS: Dict[str, EntityKind] = {
    "PERSON": EntityKind("PERSON", "PER"),
    "ORGANIZATION": EntityKind("ORGANIZATION", "ORG"),
    "LOCATION": EntityKind("LOCATION", "GPE"),
    "MISC": EntityKind("MISC", "MISC"),
}

_KINDS_BY_CODE: Dict[str, EntityKind] = {
    kind.code: kind for kind in ENTITY_KINDS.values()
}


def kind_for_type(entity_type: str) -> EntityKind:
    """Return the registered kind, or a generic kind that keeps the type as-is."""

    kind = ENTITY_KINDS.get(entity_type)
    if kind is None:
        return EntityKind(entity_type, entity_type)
    return kind


def type_for_code(code: str) -> str:
    """Map an inline tag code back to its entity type."""

    kind = _KINDS_BY_CODE.get(code)
    return kind.name if kind is not None else code


def record(
    document_id: str, text: str, span: EntitySpan, source_component: str
) -> Annotation:
    """Build the annotation for ``span`` without attaching it to a document."""

    if span.end > len(text):
        raise InputContractError(
            f"Span [{span.start}, {span.end}) exceeds text length {len(text)} "
            f"in document {document_id}."
        )
    return Annotation(
        document_id=document_id,
        type=span.type,
        start=span.start,
        end=span.end,
        covered_text=text[span.start : span.end],
        source_component=source_component,
    )


class AnnotationSink:
    """Records spans as annotations of the document they belong to."""

    def __init__(self, source_component: Optional[str] = None) -> None:
        self._source_component = source_component or DEFAULT_SOURCE_COMPONENT

    @property
    def source_component(self) -> str:
        return self._source_component

    def record(self, document: Document, span: EntitySpan) -> Annotation:
        """Create the annotation for ``span`` and append it to ``document``."""

        annotation = record(document.id, document.text, span, self._source_component)
        document.annotations.append(annotation)
        LOGGER.debug(
            "event=record_annotation id=%s type=%s start=%d end=%d",
            document.id,
            annotation.type,
            annotation.start,
            annotation.end,
        )
        return annotation
