"""Tagging pipeline: classify, aggregate, annotate, format and write."""

from __future__ import annotations

import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .aggregator import aggregate
from .classifier import SpacyTokenClassifier, TokenClassifier
from .config import TaggerConfig
from .formatter import format_document
from .models import Document
from .sink import AnnotationSink
from .writer import BatchedFileWriter, BatchFile


LOGGER = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """Outcome of a tagging run."""

    output_dir: str
    documents: int = 0
    files: List[BatchFile] = field(default_factory=list)
    entity_counts: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "output_dir": self.output_dir,
            "documents": self.documents,
            "files": [
                {"index": f.index, "path": f.path, "documents": f.documents}
                for f in self.files
            ],
            "entity_counts": dict(sorted(self.entity_counts.items())),
        }


class TaggingPipeline:
    """Processes documents one at a time into batched output files.

    Each document is fully classified, annotated, formatted and appended
    before the next one starts. The first error aborts the run; the output
    file open at that point is still closed on the way out.
    """

    def __init__(
        self,
        config: TaggerConfig,
        classifier: Optional[TokenClassifier] = None,
    ) -> None:
        self._config = config
        self._classifier = classifier or SpacyTokenClassifier(
            config.model_name, outside=config.outside_label
        )
        self._sink = AnnotationSink(config.source_component)

    @property
    def config(self) -> TaggerConfig:
        return self._config

    def open_writer(self) -> BatchedFileWriter:
        return BatchedFileWriter(
            self._config.output_dir,
            documents_per_file=self._config.documents_per_file,
            prefix=self._config.file_prefix,
            index_width=self._config.index_width,
        )

    def annotate(self, document: Document) -> Document:
        """Replace the annotations of ``document`` with fresh classifier output."""

        document.annotations.clear()
        tokens = self._classifier.tag(document.text)
        for span in aggregate(tokens, outside=self._config.outside_label):
            self._sink.record(document, span)
        return document

    def process_document(self, document: Document, writer: BatchedFileWriter) -> str:
        """Annotate, format and append one document; return its block."""

        start = time.perf_counter()
        LOGGER.info(
            "event=process_document status=starting id=%s text_len=%d",
            document.id,
            len(document.text),
        )
        try:
            self.annotate(document)
            block = format_document(document)
            writer.append(block)
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception(
                "event=process_document status=error id=%s error=%s",
                document.id,
                exc.__class__.__name__,
            )
            raise
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        LOGGER.info(
            "event=process_document status=finished id=%s entities=%d latency_ms=%.2f",
            document.id,
            len(document.annotations),
            elapsed_ms,
        )
        return block

    def run(self, documents: Iterable[Document]) -> RunSummary:
        """Process ``documents`` in order and complete the output."""

        start = time.perf_counter()
        LOGGER.info(
            "event=run status=starting output_dir=%s documents_per_file=%d",
            self._config.output_dir,
            self._config.documents_per_file,
        )
        counts: Counter[str] = Counter()
        with self.open_writer() as writer:
            for document in documents:
                self.process_document(document, writer)
                counts.update(a.type for a in document.annotations)

        summary = RunSummary(
            output_dir=self._config.output_dir,
            documents=writer.documents_written,
            files=writer.files,
            entity_counts=dict(counts),
        )
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        LOGGER.info(
            "event=run status=finished documents=%d files=%d latency_ms=%.2f",
            summary.documents,
            len(summary.files),
            elapsed_ms,
        )
        return summary
