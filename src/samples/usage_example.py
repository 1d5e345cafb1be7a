"""Example usage of the ner_batch_tagger package.

Run with: python src/samples/usage_example.py
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Dict


def build_example_payload() -> Dict[str, Any]:
    """Build a minimal example payload to process.

    Returns
    -------
    Dict[str, Any]
        A payload following the documented input schema.
    """

    return {
        "texts": [
            {
                "id": "news-1",
                "text": "Ada Lovelace met Charles Babbage in London.",
                "host": "news.example.com",
                "date": "1833-06-05",
                "url": "http://news.example.com/1",
                "title": "A meeting",
            },
            "The Analytical Engine was never finished.",
        ]
    }


def main() -> None:
    """Run the example using the public API functions."""

    # Make package importable when running from project root
    sys.path.append("src")

    import spacy  # pylint: disable=C0415

    from ner_batch_tagger import (  # pylint: disable=C0415
        SpacyTokenClassifier,
        TaggerConfig,
        export_batch_manifest,
        tag_payload,
    )

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    logger = logging.getLogger("usage_example")

    # A rule-based pipeline keeps the example free of model downloads.
    nlp = spacy.blank("en")
    ruler = nlp.add_pipe("entity_ruler")
    ruler.add_patterns(
        [
            {"label": "PERSON", "pattern": "Ada Lovelace"},
            {"label": "PERSON", "pattern": "Charles Babbage"},
            {"label": "GPE", "pattern": "London"},
        ]
    )
    classifier = SpacyTokenClassifier(nlp=nlp)

    config = TaggerConfig(output_dir="tagged", documents_per_file=1)
    payload = build_example_payload()
    logger.info("processing payload with %d texts", len(payload.get("texts", [])))

    summary = tag_payload(payload, config, classifier)
    logger.info("summary: %s", json.dumps(summary, ensure_ascii=False))

    report_paths = export_batch_manifest(summary, config.output_dir)
    logger.info("CSV reports written: %s", report_paths)


if __name__ == "__main__":
    main()
