"""Shared fixtures and helpers for the tagger tests."""

from __future__ import annotations

from typing import Dict, Iterator, List, Sequence

import pytest

from ner_batch_tagger.models import OUTSIDE, TaggedToken


def tokens_for(text: str, labels: Sequence[str]) -> List[TaggedToken]:
    """Split ``text`` on single spaces and attach ``labels`` in order."""

    words = text.split(" ")
    assert len(words) == len(labels), "one label per word"
    tokens: List[TaggedToken] = []
    offset = 0
    for word, label in zip(words, labels):
        tokens.append(TaggedToken(word, offset, offset + len(word), label))
        offset += len(word) + 1
    return tokens


class DictClassifier:
    """Classifier labelling whitespace-separated words from a lookup table."""

    def __init__(self, labels: Dict[str, str]) -> None:
        self._labels = labels
        self.calls: List[str] = []

    def tag(self, text: str) -> Iterator[TaggedToken]:
        self.calls.append(text)
        offset = 0
        for word in text.split(" "):
            if word:
                label = self._labels.get(word.strip(".,"), OUTSIDE)
                yield TaggedToken(word, offset, offset + len(word), label)
            offset += len(word) + 1


@pytest.fixture
def classifier() -> DictClassifier:
    return DictClassifier(
        {
            "Ada": "PERSON",
            "Lovelace": "PERSON",
            "Babbage": "PERSON",
            "London": "LOCATION",
            "Royal": "ORGANIZATION",
            "Society": "ORGANIZATION",
            "Engine": "ARTIFACT",
        }
    )
