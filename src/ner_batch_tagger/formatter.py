"""Rendering of processed documents into tagged text blocks."""

from __future__ import annotations

import re
from typing import List
from xml.sax.saxutils import escape, quoteattr

from .exceptions import InputContractError
from .models import Document
from .sink import kind_for_type


SOURCE_ENCODING = "UTF-8"

# XML parsers normalise bare carriage returns away.
_TEXT_ENTITIES = {"\r": "&#13;"}

# Characters XML 1.0 forbids even as character references. They are written
# as empty <C code="N"/> elements, which the reader turns back into chr(N).
_FORBIDDEN_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def _char_element(match: re.Match) -> str:
    return f'<C code="{ord(match.group())}"/>'


def _escape_text(value: str) -> str:
    return _FORBIDDEN_CHARS.sub(_char_element, escape(value, _TEXT_ENTITIES))


def _meta_tag(name: str, value: str) -> str:
    return f"<tag name={quoteattr(name)}>{_escape_text(value or '')}</tag>"


def _tagged_text(document: Document) -> str:
    text = document.text
    parts: List[str] = []
    cursor = 0
    for annotation in document.annotations:
        if annotation.start < cursor:
            raise InputContractError(
                f"Annotation [{annotation.start}, {annotation.end}) in document "
                f"{document.id} overlaps or precedes offset {cursor}."
            )
        if annotation.end > len(text):
            raise InputContractError(
                f"Annotation [{annotation.start}, {annotation.end}) exceeds text "
                f"length {len(text)} in document {document.id}."
            )
        code = kind_for_type(annotation.type).code
        parts.append(_escape_text(text[cursor : annotation.start]))
        parts.append(f"<E type={quoteattr(code)}>")
        parts.append(_escape_text(text[annotation.start : annotation.end]))
        parts.append("</E>")
        cursor = annotation.end
    parts.append(_escape_text(text[cursor:]))
    return "".join(parts)


def format_document(document: Document) -> str:
    """Render ``document`` as a self-delimited ``<doc>`` block.

    The block holds the metadata, a fixed source-encoding declaration and the
    document text with each annotation wrapped in an inline ``<E>`` element.
    Annotations must already be in start order and must not overlap.
    """

    if _FORBIDDEN_CHARS.search(document.id):
        raise InputContractError(
            f"Document id {document.id!r} contains characters XML cannot carry."
        )
    meta = document.metadata
    lines = [
        f"<doc id={quoteattr(document.id)}>",
        "<meta-info>",
        _meta_tag("host", meta.host),
        _meta_tag("date", meta.date),
        _meta_tag("url", meta.uri),
        _meta_tag("title", meta.title),
        _meta_tag("source-encoding", SOURCE_ENCODING),
        "</meta-info>",
        f"<text>{_tagged_text(document)}</text></doc>",
    ]
    return "\n".join(lines) + "\n"
