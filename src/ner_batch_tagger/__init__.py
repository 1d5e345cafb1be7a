"""Public API for the NER batch tagger.

This package exposes the stable public API:
- `aggregate`
- `AnnotationSink`
- `format_document`
- `BatchedFileWriter`
- `TaggingPipeline`
- `tag_payload`, `tag_collection`
"""

from __future__ import annotations

from .aggregator import aggregate
from .api import tag_collection, tag_payload, tag_payload_to_json
from .classifier import SpacyTokenClassifier, TokenClassifier, TransformersTokenClassifier
from .config import TaggerConfig
from .exceptions import (
    ConfigurationError,
    InputContractError,
    NerBatchTaggerError,
    WriterStateError,
)
from .formatter import format_document
from .models import (
    OUTSIDE,
    Annotation,
    Document,
    DocumentMetadata,
    EntitySpan,
    TaggedToken,
)
from .pipeline import RunSummary, TaggingPipeline
from .reader import iter_collection, iter_documents, parse_documents
from .reports import export_batch_manifest
from .sink import AnnotationSink, EntityKind
from .writer import BatchedFileWriter, WriterState

__all__ = [
    "aggregate",
    "tag_collection",
    "tag_payload",
    "tag_payload_to_json",
    "SpacyTokenClassifier",
    "TokenClassifier",
    "TransformersTokenClassifier",
    "TaggerConfig",
    "ConfigurationError",
    "InputContractError",
    "NerBatchTaggerError",
    "WriterStateError",
    "format_document",
    "OUTSIDE",
    "Annotation",
    "Document",
    "DocumentMetadata",
    "EntitySpan",
    "TaggedToken",
    "RunSummary",
    "TaggingPipeline",
    "iter_collection",
    "iter_documents",
    "parse_documents",
    "export_batch_manifest",
    "AnnotationSink",
    "EntityKind",
    "BatchedFileWriter",
    "WriterState",
]
