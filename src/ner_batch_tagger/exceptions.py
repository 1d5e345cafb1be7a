"""Exception hierarchy for the NER batch tagger."""

from __future__ import annotations


class NerBatchTaggerError(Exception):
    """Base class for all errors raised by this package."""


class InputContractError(NerBatchTaggerError, ValueError):
    """Raised when a document, token or payload violates the input contract.

    Examples are an end offset before its start offset, an empty document id
    or annotations that overlap each other.
    """


class ConfigurationError(NerBatchTaggerError, ValueError):
    """Raised for invalid tagger settings."""


class WriterStateError(NerBatchTaggerError, RuntimeError):
    """Raised when a completed writer is asked to write again."""
