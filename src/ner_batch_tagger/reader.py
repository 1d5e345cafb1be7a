"""Reader for ``<doc>``-block collections.

Collection files hold concatenated, self-delimited blocks without a root
element::

    <doc id="42">
    <meta-info>
    <tag name="host">news.example.com</tag>
    ...
    </meta-info>
    <text>...</text></doc>

The same reader accepts the tagged output of :func:`format_document`: inline
``<E type="...">`` elements inside ``<text>`` become annotations whose offsets
point into the unescaped document text, and empty ``<C code="N"/>`` elements
stand for characters XML cannot carry.
"""

from __future__ import annotations

import logging
import os
import time
import xml.etree.ElementTree as ET
from typing import Dict, Iterator, List, Optional

from .exceptions import InputContractError
from .models import Annotation, Document, DocumentMetadata, EntitySpan
from .sink import DEFAULT_SOURCE_COMPONENT, record, type_for_code


LOGGER = logging.getLogger(__name__)

_ROOT = "collection"


def _char_from_element(element: ET.Element) -> str:
    try:
        return chr(int(element.get("code", "")))
    except (TypeError, ValueError) as exc:
        raise InputContractError(
            f"Invalid character element code {element.get('code')!r}."
        ) from exc


def _collect_text(
    element: ET.Element,
    parts: List[str],
    spans: List[EntitySpan],
    offset: int = 0,
) -> int:
    """Append the text under ``element`` to ``parts`` and return the new offset."""

    if element.text:
        parts.append(element.text)
        offset += len(element.text)
    for child in element:
        if child.tag == "E":
            start = offset
            offset = _collect_text(child, parts, spans, offset)
            if offset > start:
                spans.append(EntitySpan(type_for_code(child.get("type", "")), start, offset))
        elif child.tag == "C":
            parts.append(_char_from_element(child))
            offset += 1
        else:
            offset = _collect_text(child, parts, spans, offset)
        if child.tail:
            parts.append(child.tail)
            offset += len(child.tail)
    return offset


def _element_text(element: ET.Element) -> str:
    parts: List[str] = []
    _collect_text(element, parts, [])
    return "".join(parts)


def _parse_doc(element: ET.Element, source_component: str) -> Document:
    doc_id = element.get("id")
    if not doc_id:
        raise InputContractError("Encountered a <doc> block without an 'id' attribute.")

    meta: Dict[str, str] = {}
    meta_element = element.find("meta-info")
    if meta_element is not None:
        for tag in meta_element.findall("tag"):
            name = tag.get("name")
            if name:
                meta[name] = _element_text(tag)

    parts: List[str] = []
    spans: List[EntitySpan] = []
    text_element = element.find("text")
    if text_element is not None:
        _collect_text(text_element, parts, spans)
    text = "".join(parts)

    document = Document(
        id=doc_id,
        text=text,
        metadata=DocumentMetadata(
            host=meta.get("host", ""),
            date=meta.get("date", ""),
            uri=meta.get("url", ""),
            title=meta.get("title", ""),
        ),
    )
    annotations: List[Annotation] = [
        record(doc_id, text, span, source_component) for span in spans
    ]
    document.annotations.extend(annotations)
    return document


def parse_documents(
    content: str, source_component: Optional[str] = None
) -> List[Document]:
    """Parse every ``<doc>`` block in ``content``."""

    try:
        root = ET.fromstring(f"<{_ROOT}>{content}</{_ROOT}>")
    except ET.ParseError as exc:
        raise InputContractError(f"Malformed document collection: {exc}") from exc

    component = source_component or DEFAULT_SOURCE_COMPONENT
    return [_parse_doc(element, component) for element in root.iter("doc")]


def iter_documents(
    path: str, source_component: Optional[str] = None
) -> Iterator[Document]:
    """Yield the documents stored in one collection file."""

    start = time.perf_counter()
    with open(path, "r", encoding="utf-8") as file:
        content = file.read()
    documents = parse_documents(content, source_component)
    elapsed_ms = (time.perf_counter() - start) * 1000.0
    LOGGER.info(
        "event=read_collection_file file=%s documents=%d latency_ms=%.2f",
        path,
        len(documents),
        elapsed_ms,
    )
    yield from documents


def iter_collection(
    directory: str, source_component: Optional[str] = None
) -> Iterator[Document]:
    """Yield documents from every regular file of ``directory`` in name order.

    Subdirectories are ignored.
    """

    if not os.path.isdir(directory):
        raise NotADirectoryError(f"Input directory not found: {directory}")

    for name in sorted(os.listdir(directory)):
        path = os.path.join(directory, name)
        if not os.path.isfile(path):
            continue
        yield from iter_documents(path, source_component)
