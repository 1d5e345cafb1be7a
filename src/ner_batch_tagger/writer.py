"""Batched output files with rotation after a fixed number of documents."""

from __future__ import annotations

import contextlib
import enum
import logging
import os
import time
from dataclasses import dataclass
from typing import IO, List, Optional

from .exceptions import ConfigurationError, WriterStateError


LOGGER = logging.getLogger(__name__)

DEFAULT_DOCUMENTS_PER_FILE = 5000
DEFAULT_FILE_PREFIX = "SogouCA_TemTagged"
DEFAULT_INDEX_WIDTH = 8


class WriterState(enum.Enum):
    CLOSED = "closed"
    OPEN = "open"


@dataclass
class BatchFile:
    """One output file and the number of documents written to it."""

    index: int
    path: str
    documents: int = 0


def batch_file_name(prefix: str, index: int, width: int = DEFAULT_INDEX_WIDTH) -> str:
    """Return ``<prefix>_<zero-padded index>.xml``."""

    return f"{prefix}_{index:0{width}d}.xml"


class BatchedFileWriter:
    """Appends document blocks to rotating output files.

    A new file is opened before writing whenever the number of documents
    written so far is a multiple of ``documents_per_file``, so every file
    starts empty and holds exactly ``documents_per_file`` documents except
    possibly the last one. At most one file is open at a time; the handle is
    owned by an ``ExitStack`` and released on rotation, on ``complete()`` and
    when the writer is used as a context manager and the block exits.

    ``complete()`` is terminal: further ``append`` calls raise
    ``WriterStateError``.
    """

    def __init__(
        self,
        output_dir: str,
        documents_per_file: int = DEFAULT_DOCUMENTS_PER_FILE,
        prefix: str = DEFAULT_FILE_PREFIX,
        index_width: int = DEFAULT_INDEX_WIDTH,
        encoding: str = "utf-8",
    ) -> None:
        if documents_per_file < 1:
            raise ConfigurationError("documents_per_file must be at least 1.")
        if index_width < 1:
            raise ConfigurationError("index_width must be at least 1.")
        self._output_dir = output_dir
        self._documents_per_file = documents_per_file
        self._prefix = prefix
        self._index_width = index_width
        self._encoding = encoding

        self._state = WriterState.CLOSED
        self._completed = False
        self._documents_written = 0
        self._stack: Optional[contextlib.ExitStack] = None
        self._handle: Optional[IO[str]] = None
        self._files: List[BatchFile] = []

        os.makedirs(self._output_dir, exist_ok=True)

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def documents_written(self) -> int:
        return self._documents_written

    @property
    def documents_per_file(self) -> int:
        return self._documents_per_file

    @property
    def files(self) -> List[BatchFile]:
        """Output files in creation order."""

        return list(self._files)

    @property
    def completed(self) -> bool:
        return self._completed

    def __enter__(self) -> "BatchedFileWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.complete()

    def append(self, block: str) -> None:
        """Write one formatted document block, rotating files as needed."""

        if self._completed:
            raise WriterStateError("Cannot append to a completed writer.")

        if (
            self._state is WriterState.CLOSED
            or self._documents_written % self._documents_per_file == 0
        ):
            self._rotate()

        handle = self._handle
        if handle is None:
            raise WriterStateError("No batch file is open.")
        try:
            handle.write(block)
        except OSError as exc:
            LOGGER.exception(
                "event=write_block status=error file=%s error=%s",
                self._files[-1].path,
                exc.__class__.__name__,
            )
            raise

        self._documents_written += 1
        self._files[-1].documents += 1

    def complete(self) -> None:
        """Flush and close the open file. Safe to call more than once."""

        if self._completed:
            return
        self._completed = True
        self._close_current()
        LOGGER.info(
            "event=writer_complete documents=%d files=%d",
            self._documents_written,
            len(self._files),
        )

    def _rotate(self) -> None:
        self._close_current()

        index = self._documents_written // self._documents_per_file
        path = os.path.join(
            self._output_dir, batch_file_name(self._prefix, index, self._index_width)
        )
        stack = contextlib.ExitStack()
        try:
            self._handle = stack.enter_context(
                open(path, "w", encoding=self._encoding, newline="")
            )
        except OSError as exc:
            LOGGER.exception(
                "event=open_batch status=error file=%s error=%s",
                path,
                exc.__class__.__name__,
            )
            raise
        self._stack = stack
        self._state = WriterState.OPEN
        self._files.append(BatchFile(index=index, path=path))
        LOGGER.info("event=open_batch status=finished index=%d file=%s", index, path)

    def _close_current(self) -> None:
        if self._stack is None:
            return
        stack = self._stack
        current = self._files[-1]
        self._stack = None
        self._state = WriterState.CLOSED
        start = time.perf_counter()
        try:
            if self._handle is not None:
                self._handle.flush()
        finally:
            self._handle = None
            # closing the stack closes the file even if the flush failed
            stack.close()
            elapsed_ms = (time.perf_counter() - start) * 1000.0
            LOGGER.info(
                "event=close_batch index=%d file=%s documents=%d latency_ms=%.2f",
                current.index,
                current.path,
                current.documents,
                elapsed_ms,
            )
