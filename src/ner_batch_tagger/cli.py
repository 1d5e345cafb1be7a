"""Command line entry point for the NER batch tagger."""

from __future__ import annotations

import argparse
import json
import logging
import os
from typing import List, Optional

from .api import tag_collection, tag_payload
from .classifier import SpacyTokenClassifier, TokenClassifier, TransformersTokenClassifier
from .config import TaggerConfig
from .reports import export_batch_manifest
from .sink import DEFAULT_SOURCE_COMPONENT
from .writer import DEFAULT_DOCUMENTS_PER_FILE, DEFAULT_FILE_PREFIX


LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Tag named entities in a document collection and write them to "
            "rotating batch files."
        )
    )
    parser.add_argument(
        "--input",
        required=True,
        help="Collection directory of <doc> files, or a JSON payload file",
    )
    parser.add_argument("--output-dir", required=True, help="Directory for batch files")
    parser.add_argument(
        "--documents-per-file",
        type=int,
        default=DEFAULT_DOCUMENTS_PER_FILE,
        help="Documents written before rotating to a new file",
    )
    parser.add_argument("--prefix", default=DEFAULT_FILE_PREFIX, help="Batch file prefix")
    parser.add_argument(
        "--backend",
        default="spacy",
        choices=["spacy", "transformers"],
        help="Token classifier backend",
    )
    parser.add_argument(
        "--model",
        default="en_core_web_sm",
        help="spaCy model or Hugging Face checkpoint used for classification",
    )
    parser.add_argument(
        "--source-component",
        default=DEFAULT_SOURCE_COMPONENT,
        help="Identifier stamped on every annotation",
    )
    parser.add_argument(
        "--manifest",
        action="store_true",
        help="Write manifest.csv and entity_types.csv next to the batch files",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level",
    )
    return parser


def _build_classifier(backend: str, config: TaggerConfig) -> TokenClassifier:
    if backend == "transformers":
        return TransformersTokenClassifier.from_pretrained(
            config.model_name, outside=config.outside_label
        )
    return SpacyTokenClassifier(config.model_name, outside=config.outside_label)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        format=("%(asctime)s %(levelname)s %(name)s op=%(message)s"),
        level=getattr(logging, args.log_level.upper(), logging.INFO),
    )

    config = TaggerConfig(
        output_dir=args.output_dir,
        documents_per_file=args.documents_per_file,
        file_prefix=args.prefix,
        source_component=args.source_component,
        model_name=args.model,
    )
    classifier = _build_classifier(args.backend, config)

    if os.path.isdir(args.input):
        summary = tag_collection(args.input, config, classifier)
    else:
        with open(args.input, "r", encoding="utf-8") as file:
            payload = json.load(file)
        summary = tag_payload(payload, config, classifier)

    if args.manifest:
        export_batch_manifest(summary, config.output_dir)

    LOGGER.info(
        "tagging_complete documents=%d files=%d output=%s",
        summary["documents"],
        len(summary["files"]),
        config.output_dir,
    )
    return 0
