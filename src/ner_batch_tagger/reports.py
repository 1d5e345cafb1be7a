"""CSV reports describing a finished tagging run.

Two files are written:

- manifest.csv: one row per batch file (index, file name, documents).
- entity_types.csv: entity types ranked by number of annotations.

The manifest lets a caller restart an interrupted collection from the last
complete batch index.

Public entrypoint:
- export_batch_manifest
"""

from __future__ import annotations

import csv
import logging
import os
from typing import Any, Dict, Iterable, Mapping


LOGGER = logging.getLogger(__name__)


def _write_csv(path: str, header: Iterable[str], rows: Iterable[Iterable[Any]]) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(list(header))
        for row in rows:
            writer.writerow(list(row))


def export_batch_manifest(summary: Mapping[str, Any], output_dir: str) -> Dict[str, str]:
    """Export the batch manifest and entity type counts.

    Parameters
    ----------
    summary:
        Run summary as returned by `tag_payload` or `RunSummary.to_dict`.
    output_dir:
        Directory where CSV files will be written. Created if missing.

    Returns
    -------
    Dict[str, str]
        Mapping from a logical report name to the written file path.
    """

    LOGGER.info("event=export_batch_manifest status=starting output_dir=%s", output_dir)

    files = sorted(summary.get("files", []), key=lambda f: int(f.get("index", 0)))
    manifest_rows = [
        (
            int(entry.get("index", 0)),
            os.path.basename(str(entry.get("path", ""))),
            int(entry.get("documents", 0)),
        )
        for entry in files
    ]

    counts = summary.get("entity_counts", {})
    type_rows = sorted(
        ((str(t), int(n)) for t, n in counts.items()),
        key=lambda row: (-row[1], row[0]),
    )

    paths: Dict[str, str] = {}

    manifest_path = os.path.join(output_dir, "manifest.csv")
    _write_csv(manifest_path, ("batch_index", "file", "documents"), manifest_rows)
    paths["manifest"] = manifest_path
    LOGGER.info("event=export_csv file=%s rows=%d", manifest_path, len(manifest_rows))

    types_path = os.path.join(output_dir, "entity_types.csv")
    _write_csv(types_path, ("type", "count"), type_rows)
    paths["entity_types"] = types_path
    LOGGER.info("event=export_csv file=%s rows=%d", types_path, len(type_rows))

    LOGGER.info("event=export_batch_manifest status=finished")
    return paths
