"""Adapters turning sequence classifier output into tagged token streams."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Protocol

import spacy
from spacy.language import Language
from spacy.tokens import Doc

from .models import OUTSIDE, TaggedToken


LOGGER = logging.getLogger(__name__)

SPACY_LABEL_MAP: Dict[str, str] = {
    "PERSON": "PERSON",
    "PER": "PERSON",
    "ORG": "ORGANIZATION",
    "GPE": "LOCATION",
    "LOC": "LOCATION",
    "MISC": "MISC",
}

# CoNLL-style labels used by most token-classification checkpoints.
TRANSFORMERS_LABEL_MAP: Dict[str, str] = {
    "PER": "PERSON",
    "ORG": "ORGANIZATION",
    "LOC": "LOCATION",
    "MISC": "MISC",
}


class TokenClassifier(Protocol):
    """Anything that labels the tokens of a text."""

    def tag(self, text: str) -> Iterator[TaggedToken]:
        ...


def strip_bio_prefix(label: str) -> str:
    """Drop a ``B-``/``I-`` prefix, leaving the bare entity type."""

    if len(label) > 2 and label[1] == "-" and label[0] in ("B", "I"):
        return label[2:]
    return label


def tokens_from_doc(
    doc: Doc,
    label_map: Optional[Mapping[str, str]] = None,
    outside: str = OUTSIDE,
) -> Iterator[TaggedToken]:
    """Yield tagged tokens for the non-whitespace tokens of ``doc``."""

    mapping = SPACY_LABEL_MAP if label_map is None else label_map
    for token in doc:
        if token.is_space:
            continue
        ent_type = token.ent_type_
        label = mapping.get(ent_type, ent_type) if ent_type else outside
        yield TaggedToken(
            text=token.orth_,
            start=int(token.idx),
            end=int(token.idx + len(token)),
            label=label,
        )


class SpacyTokenClassifier:
    """spaCy-backed classifier with a lazy-loaded pipeline."""

    def __init__(
        self,
        model_name: str = "en_core_web_sm",
        nlp: Optional[Language] = None,
        label_map: Optional[Mapping[str, str]] = None,
        outside: str = OUTSIDE,
    ) -> None:
        self._model_name = model_name
        self._nlp = nlp
        self._label_map = dict(SPACY_LABEL_MAP if label_map is None else label_map)
        self._outside = outside

    @property
    def nlp(self) -> Language:
        """Return a lazy-loaded spaCy pipeline instance."""

        if self._nlp is None:
            start = time.perf_counter()
            LOGGER.info("event=load_model status=starting model=%s", self._model_name)
            try:
                self._nlp = spacy.load(self._model_name)
            except Exception as exc:  # noqa: BLE001
                LOGGER.exception(
                    "event=load_model status=error model=%s error=%s",
                    self._model_name,
                    exc.__class__.__name__,
                )
                raise
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000.0
                LOGGER.info(
                    "event=load_model status=finished model=%s latency_ms=%.2f",
                    self._model_name,
                    elapsed_ms,
                )
        return self._nlp

    def tag(self, text: str) -> Iterator[TaggedToken]:
        doc = self.nlp(text)
        return tokens_from_doc(doc, self._label_map, self._outside)


class TransformersTokenClassifier:
    """Hugging Face ``token-classification`` pipeline adapter.

    The pipeline must run without aggregation and must keep outside tokens
    (``ignore_labels=[]``); otherwise two entities separated only by dropped
    ``O`` tokens would look adjacent and be merged.
    """

    def __init__(
        self,
        ner_pipeline: Callable[[str], Iterable[Mapping[str, Any]]],
        label_map: Optional[Mapping[str, str]] = None,
        outside: str = OUTSIDE,
    ) -> None:
        self._ner = ner_pipeline
        self._label_map = dict(TRANSFORMERS_LABEL_MAP if label_map is None else label_map)
        self._outside = outside

    @classmethod
    def from_pretrained(cls, model_name: str, **kwargs: Any) -> "TransformersTokenClassifier":
        """Build the classifier from a model on the Hugging Face hub."""

        from transformers import AutoModelForTokenClassification, AutoTokenizer, pipeline

        LOGGER.info("event=load_model status=starting model=%s", model_name)
        tokenizer = AutoTokenizer.from_pretrained(model_name)
        model = AutoModelForTokenClassification.from_pretrained(model_name)
        ner = pipeline(
            "token-classification",
            model=model,
            tokenizer=tokenizer,
            aggregation_strategy="none",
            ignore_labels=[],
        )
        LOGGER.info("event=load_model status=finished model=%s", model_name)
        return cls(ner, **kwargs)

    def tag(self, text: str) -> Iterator[TaggedToken]:
        results: List[Mapping[str, Any]] = list(self._ner(text))
        results.sort(key=lambda r: (r["start"], r["end"]))
        for result in results:
            start, end = int(result["start"]), int(result["end"])
            raw = strip_bio_prefix(str(result["entity"]))
            if raw in ("O", self._outside):
                label = self._outside
            else:
                label = self._label_map.get(raw, raw)
            yield TaggedToken(text=text[start:end], start=start, end=end, label=label)
