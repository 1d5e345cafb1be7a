"""Data models for the NER batch tagger."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Union

from .exceptions import InputContractError


OUTSIDE = "O"


@dataclass(frozen=True)
class TaggedToken:
    """A single classified token.

    Attributes
    ----------
    text:
        Surface form of the token.
    start, end:
        Character offsets of the token in the document text.
    label:
        Entity type assigned by the classifier, or ``"O"`` outside entities.
    """

    text: str
    start: int
    end: int
    label: str = OUTSIDE

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise InputContractError(
                f"Token {self.text!r} has invalid offsets [{self.start}, {self.end})."
            )


@dataclass(frozen=True)
class EntitySpan:
    """A finalized entity: a typed, non-empty character range."""

    type: str
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.start >= self.end:
            raise InputContractError(
                f"Entity span {self.type} has invalid offsets [{self.start}, {self.end})."
            )


@dataclass(frozen=True)
class OpenSpan:
    """Entity span still being extended by the aggregator."""

    type: str
    start: int
    end: int

    def extend(self, end: int) -> "OpenSpan":
        return OpenSpan(self.type, self.start, end)

    def finalize(self) -> EntitySpan:
        return EntitySpan(self.type, self.start, self.end)


class NoOpenSpan:
    """Marker for "no entity currently open"."""

    _instance: "NoOpenSpan | None" = None

    def __new__(cls) -> "NoOpenSpan":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_OPEN_SPAN"


NO_OPEN_SPAN = NoOpenSpan()

SpanState = Union[NoOpenSpan, OpenSpan]


@dataclass(frozen=True)
class Annotation:
    """Entity annotation attached to a document.

    Attributes
    ----------
    document_id:
        Identifier of the owning document.
    type:
        Entity type, e.g. ``PERSON``. Types outside the known vocabulary are
        kept verbatim.
    start, end:
        Character offsets into the document text.
    covered_text:
        ``text[start:end]`` at the time the annotation was recorded.
    source_component:
        Name of the component that produced the annotation.
    """

    document_id: str
    type: str
    start: int
    end: int
    covered_text: str
    source_component: str


@dataclass
class DocumentMetadata:
    """Source information carried in the ``meta-info`` block."""

    host: str = ""
    date: str = ""
    uri: str = ""
    title: str = ""


@dataclass
class Document:
    """A document being processed, with its annotations in emission order."""

    id: str
    text: str
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    annotations: List[Annotation] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise InputContractError("Document id must be a non-empty string.")
