"""Tests for reading <doc>-block collections."""

from __future__ import annotations

import pytest

from ner_batch_tagger.exceptions import InputContractError
from ner_batch_tagger.reader import iter_collection, iter_documents, parse_documents


UNTAGGED = (
    '<doc id="7">\n'
    "<meta-info>\n"
    '<tag name="host">news.example.com</tag>\n'
    '<tag name="date">2008-06-01</tag>\n'
    '<tag name="url">http://news.example.com/7</tag>\n'
    '<tag name="title">Headline</tag>\n'
    '<tag name="source-encoding">UTF-8</tag>\n'
    "</meta-info>\n"
    "<text>Tom &amp; Jerry in Paris</text>\n"
    "</doc>\n"
    '<doc id="8">\n'
    "<meta-info>\n"
    "</meta-info>\n"
    "<text></text>\n"
    "</doc>\n"
)


class TestParseDocuments:
    def test_reads_metadata_and_text(self):
        documents = parse_documents(UNTAGGED)
        assert [d.id for d in documents] == ["7", "8"]
        first = documents[0]
        assert first.text == "Tom & Jerry in Paris"
        assert first.metadata.host == "news.example.com"
        assert first.metadata.date == "2008-06-01"
        assert first.metadata.uri == "http://news.example.com/7"
        assert first.metadata.title == "Headline"
        assert first.annotations == []

    def test_empty_text(self):
        assert parse_documents(UNTAGGED)[1].text == ""

    def test_inline_entities_become_annotations(self):
        content = (
            '<doc id="1"><text><E type="PER">Tom</E> in '
            '<E type="GPE">Paris</E><E type="EVENT">Expo</E></text></doc>'
        )
        document = parse_documents(content, source_component="reader")[0]
        assert document.text == "Tom in ParisExpo"
        assert [(a.type, a.start, a.end, a.covered_text) for a in document.annotations] == [
            ("PERSON", 0, 3, "Tom"),
            ("LOCATION", 7, 12, "Paris"),
            ("EVENT", 12, 16, "Expo"),
        ]
        assert document.annotations[0].source_component == "reader"

    def test_character_elements_and_nested_markup(self):
        content = (
            '<doc id="1"><meta-info><tag name="title">a<C code="12"/>b</tag></meta-info>'
            '<text><SE><E type="PER">Ada<C code="11"/></E> met</SE> '
            '<E type="GPE">Paris</E></text></doc>'
        )
        document = parse_documents(content)[0]
        assert document.metadata.title == "a\x0cb"
        assert document.text == "Ada\x0b met Paris"
        assert [(a.type, a.start, a.end) for a in document.annotations] == [
            ("PERSON", 0, 4),
            ("LOCATION", 9, 14),
        ]

    def test_invalid_character_code_is_rejected(self):
        with pytest.raises(InputContractError):
            parse_documents('<doc id="1"><text><C code="x"/></text></doc>')

    def test_missing_id_is_rejected(self):
        with pytest.raises(InputContractError):
            parse_documents("<doc><text>x</text></doc>")

    def test_malformed_markup_is_rejected(self):
        with pytest.raises(InputContractError):
            parse_documents('<doc id="1"><text>x</doc>')


class TestCollection:
    def test_iter_documents_from_file(self, tmp_path):
        path = tmp_path / "a.xml"
        path.write_text(UNTAGGED, encoding="utf-8")
        assert [d.id for d in iter_documents(str(path))] == ["7", "8"]

    def test_walks_files_in_name_order_and_skips_directories(self, tmp_path):
        (tmp_path / "b.xml").write_text('<doc id="b"><text>2</text></doc>', encoding="utf-8")
        (tmp_path / "a.xml").write_text('<doc id="a"><text>1</text></doc>', encoding="utf-8")
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "c.xml").write_text('<doc id="c"><text>3</text></doc>', encoding="utf-8")
        assert [d.id for d in iter_collection(str(tmp_path))] == ["a", "b"]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(NotADirectoryError):
            list(iter_collection(str(tmp_path / "absent")))
