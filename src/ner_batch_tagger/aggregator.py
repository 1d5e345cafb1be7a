"""Aggregation of per-token entity labels into entity spans.

Continuity is decided by label equality only: identical consecutive labels
belong to the same entity, any change of label ends it. There is no
``B-``/``I-`` prefix handling here; classifier adapters strip prefixes before
tokens reach this module.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from .models import NO_OPEN_SPAN, OUTSIDE, EntitySpan, OpenSpan, SpanState, TaggedToken


def aggregate(
    tokens: Iterable[TaggedToken], outside: str = OUTSIDE
) -> Iterator[EntitySpan]:
    """Yield maximal entity spans from a stream of tagged tokens.

    Each call starts from a fresh state, so the function can be reused for
    every document. Spans are yielded lazily in token order.

    Parameters
    ----------
    tokens:
        Tokens of one document in non-decreasing offset order. Zero-width
        tokens are ignored.
    outside:
        Label marking tokens that are not part of any entity.
    """

    previous_label = outside
    state: SpanState = NO_OPEN_SPAN

    for token in tokens:
        if token.end <= token.start:
            # zero-width pieces carry no text to annotate
            continue
        label = token.label
        if label == previous_label:
            if label != outside and isinstance(state, OpenSpan):
                state = state.extend(token.end)
        elif previous_label != outside and label != outside:
            # two different entities touching each other
            if isinstance(state, OpenSpan):
                yield state.finalize()
            state = OpenSpan(label, token.start, token.end)
        elif previous_label != outside:
            if isinstance(state, OpenSpan):
                yield state.finalize()
            state = NO_OPEN_SPAN
        else:
            state = OpenSpan(label, token.start, token.end)
        previous_label = label

    if isinstance(state, OpenSpan):
        yield state.finalize()
