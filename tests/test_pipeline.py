"""Tests for the tagging pipeline, public API and CLI."""

from __future__ import annotations

import csv
import json
import os

import pytest

from ner_batch_tagger import cli
from ner_batch_tagger.api import tag_collection, tag_payload, tag_payload_to_json
from ner_batch_tagger.config import TaggerConfig
from ner_batch_tagger.exceptions import ConfigurationError, InputContractError
from ner_batch_tagger.models import Document
from ner_batch_tagger.pipeline import TaggingPipeline
from ner_batch_tagger.reader import iter_collection, iter_documents
from ner_batch_tagger.reports import export_batch_manifest


TEXTS = [
    "Ada Lovelace lived in London",
    "Babbage addressed the Royal Society",
    "nothing to see here",
    "the Engine in London",
    "Ada",
]


# ── Configuration ───────────────────────────────────────────


class TestTaggerConfig:
    def test_defaults(self, tmp_path):
        config = TaggerConfig(output_dir=str(tmp_path))
        assert config.documents_per_file == 5000
        assert config.index_width == 8
        assert config.outside_label == "O"

    def test_from_mapping(self, tmp_path):
        config = TaggerConfig.from_mapping(
            {"output_dir": str(tmp_path), "documents_per_file": 2}
        )
        assert config.documents_per_file == 2

    @pytest.mark.parametrize(
        "mapping",
        [
            {"documents_per_file": 2},
            {"output_dir": "out", "documents_per_file": 0},
            {"output_dir": "out", "colour": "blue"},
            {"output_dir": ""},
        ],
    )
    def test_invalid_mappings(self, mapping):
        with pytest.raises(ConfigurationError):
            TaggerConfig.from_mapping(mapping)


# ── Pipeline ────────────────────────────────────────────────


class TestTaggingPipeline:
    def test_run_rotates_and_annotates(self, tmp_path, classifier):
        config = TaggerConfig(output_dir=str(tmp_path), documents_per_file=2, file_prefix="out")
        documents = [Document(id=str(i), text=t) for i, t in enumerate(TEXTS)]

        summary = TaggingPipeline(config, classifier).run(documents)

        assert summary.documents == 5
        assert [f.documents for f in summary.files] == [2, 2, 1]
        assert summary.entity_counts == {
            "PERSON": 3,
            "LOCATION": 2,
            "ORGANIZATION": 1,
            "ARTIFACT": 1,
        }
        written = [d for f in summary.files for d in iter_documents(f.path)]
        assert [d.id for d in written] == ["0", "1", "2", "3", "4"]
        assert [
            (a.type, a.covered_text) for a in written[0].annotations
        ] == [("PERSON", "Ada Lovelace"), ("LOCATION", "London")]
        assert written[2].annotations == []

    def test_annotate_replaces_previous_annotations(self, tmp_path, classifier):
        pipeline = TaggingPipeline(TaggerConfig(output_dir=str(tmp_path)), classifier)
        document = Document(id="1", text="Ada in London")
        pipeline.annotate(document)
        pipeline.annotate(document)
        assert [a.covered_text for a in document.annotations] == ["Ada", "London"]
        assert {a.source_component for a in document.annotations} == {"spaCy NER Detector"}

    def test_error_aborts_run_and_closes_output(self, tmp_path, classifier):
        config = TaggerConfig(output_dir=str(tmp_path), file_prefix="out")

        def documents():
            yield Document(id="1", text="Ada in London")
            raise InputContractError("broken input")

        with pytest.raises(InputContractError):
            TaggingPipeline(config, classifier).run(documents())

        written = list(iter_collection(str(tmp_path)))
        assert [d.id for d in written] == ["1"]


# ── Public API ──────────────────────────────────────────────


class TestApi:
    def test_tag_payload(self, tmp_path, classifier):
        payload = {
            "texts": [
                {"id": "a", "text": "Ada in London", "host": "h", "url": "u", "title": "t"},
                "Babbage",
            ]
        }
        result = tag_payload(payload, {"output_dir": str(tmp_path)}, classifier)
        assert result["documents"] == 2
        assert len(result["files"]) == 1
        assert result["entity_counts"] == {"LOCATION": 1, "PERSON": 2}

        written = list(iter_collection(str(tmp_path)))
        assert [d.id for d in written] == ["a", "1"]
        assert written[0].metadata.uri == "u"

    def test_single_text_payload(self, tmp_path, classifier):
        result = tag_payload({"text": "Ada"}, {"output_dir": str(tmp_path)}, classifier)
        assert result["documents"] == 1

    def test_tag_payload_to_json(self, tmp_path, classifier):
        out = tag_payload_to_json({"texts": ["Ada"]}, {"output_dir": str(tmp_path)}, classifier)
        assert json.loads(out)["documents"] == 1

    @pytest.mark.parametrize(
        "payload",
        [[], {}, {"texts": "Ada"}, {"texts": [1]}, {"texts": [{"id": "x"}]}, {"texts": [{"id": "", "text": "a"}]}],
    )
    def test_invalid_payloads(self, tmp_path, classifier, payload):
        with pytest.raises(InputContractError):
            tag_payload(payload, {"output_dir": str(tmp_path)}, classifier)

    def test_tag_collection_retags_input_files(self, tmp_path, classifier):
        input_dir = tmp_path / "in"
        input_dir.mkdir()
        (input_dir / "part1.xml").write_text(
            '<doc id="1"><meta-info><tag name="host">h</tag></meta-info>'
            "<text>Ada in London</text></doc>",
            encoding="utf-8",
        )
        output_dir = tmp_path / "out"
        result = tag_collection(str(input_dir), {"output_dir": str(output_dir)}, classifier)
        assert result["documents"] == 1
        written = list(iter_collection(str(output_dir)))
        assert written[0].metadata.host == "h"
        assert [a.type for a in written[0].annotations] == ["PERSON", "LOCATION"]


# ── Reports ─────────────────────────────────────────────────


class TestReports:
    def test_manifest_and_entity_counts(self, tmp_path):
        summary = {
            "files": [
                {"index": 1, "path": "/x/out_00000001.xml", "documents": 1},
                {"index": 0, "path": "/x/out_00000000.xml", "documents": 2},
            ],
            "entity_counts": {"PERSON": 3, "LOCATION": 3, "MISC": 1},
        }
        paths = export_batch_manifest(summary, str(tmp_path))

        with open(paths["manifest"], newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows == [
            ["batch_index", "file", "documents"],
            ["0", "out_00000000.xml", "2"],
            ["1", "out_00000001.xml", "1"],
        ]
        with open(paths["entity_types"], newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows == [["type", "count"], ["LOCATION", "3"], ["PERSON", "3"], ["MISC", "1"]]


# ── CLI ─────────────────────────────────────────────────────


class TestCli:
    def test_json_payload_with_manifest(self, tmp_path, monkeypatch, classifier):
        monkeypatch.setattr(cli, "_build_classifier", lambda backend, config: classifier)
        payload_path = tmp_path / "payload.json"
        payload_path.write_text(json.dumps({"texts": TEXTS}), encoding="utf-8")
        output_dir = tmp_path / "out"

        code = cli.main(
            [
                "--input", str(payload_path),
                "--output-dir", str(output_dir),
                "--documents-per-file", "3",
                "--prefix", "run",
                "--manifest",
            ]
        )

        assert code == 0
        assert sorted(os.listdir(output_dir)) == [
            "entity_types.csv",
            "manifest.csv",
            "run_00000000.xml",
            "run_00000001.xml",
        ]
