"""Public API helpers for the NER batch tagger."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional, Union

from .classifier import TokenClassifier
from .config import TaggerConfig
from .exceptions import InputContractError
from .models import Document, DocumentMetadata
from .pipeline import TaggingPipeline
from .reader import iter_collection


LOGGER = logging.getLogger(__name__)

ConfigLike = Union[TaggerConfig, Mapping[str, Any]]


def _as_config(config: ConfigLike) -> TaggerConfig:
    if isinstance(config, TaggerConfig):
        return config
    return TaggerConfig.from_mapping(config)


def _document_from_mapping(item: Mapping[str, Any], idx: int) -> Document:
    if "text" not in item or not isinstance(item["text"], str):
        raise InputContractError(
            "Each object in 'texts' must contain a string 'text' field."
        )
    return Document(
        id=str(item.get("id", idx)),
        text=item["text"],
        metadata=DocumentMetadata(
            host=str(item.get("host", "")),
            date=str(item.get("date", "")),
            uri=str(item.get("url", item.get("uri", ""))),
            title=str(item.get("title", "")),
        ),
    )


def _normalize_input(payload: Mapping[str, Any]) -> list[Document]:
    """Normalize various input payload shapes into a list of `Document`."""

    if not isinstance(payload, Mapping):
        raise InputContractError("Input payload must be a mapping/dict.")

    if "texts" not in payload:
        if "text" in payload and isinstance(payload["text"], str):
            return [_document_from_mapping(payload, 0)]
        raise InputContractError("Missing 'texts' key in payload.")

    texts_obj = payload["texts"]
    if not hasattr(texts_obj, "__iter__") or isinstance(texts_obj, (str, bytes)):
        raise InputContractError("'texts' must be an iterable of strings or objects.")

    normalized: list[Document] = []
    for idx, item in enumerate(texts_obj):
        if isinstance(item, str):
            normalized.append(Document(id=str(idx), text=item))
            continue

        if isinstance(item, Mapping):
            normalized.append(_document_from_mapping(item, idx))
            continue

        raise InputContractError(
            "Elements of 'texts' must be strings or mappings with a 'text' field."
        )

    return normalized


def tag_payload(
    payload: Mapping[str, Any],
    config: ConfigLike,
    classifier: Optional[TokenClassifier] = None,
) -> Dict[str, Any]:
    """Tag the texts of a JSON-like payload and write them as batch files.

    Returns
    -------
    Dict[str, Any]
        Run summary: document count, written files and entity counts per type.
    """

    LOGGER.info("event=tag_payload status=starting")
    documents = _normalize_input(payload)
    pipeline = TaggingPipeline(_as_config(config), classifier)
    result = pipeline.run(documents).to_dict()
    LOGGER.info("event=tag_payload status=finished")
    return result


def tag_payload_to_json(
    payload: Mapping[str, Any],
    config: ConfigLike,
    classifier: Optional[TokenClassifier] = None,
) -> str:
    """Same as `tag_payload`, returning the summary as a JSON string."""

    result_dict = tag_payload(payload, config, classifier)
    return json.dumps(result_dict, ensure_ascii=False, indent=2)


def tag_collection(
    input_dir: str,
    config: ConfigLike,
    classifier: Optional[TokenClassifier] = None,
) -> Dict[str, Any]:
    """Tag every document of a ``<doc>``-block collection directory."""

    LOGGER.info("event=tag_collection status=starting input_dir=%s", input_dir)
    resolved = _as_config(config)
    pipeline = TaggingPipeline(resolved, classifier)
    documents = iter_collection(input_dir, resolved.source_component)
    result = pipeline.run(documents).to_dict()
    LOGGER.info("event=tag_collection status=finished")
    return result
