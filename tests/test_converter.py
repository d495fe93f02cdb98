"""Tests for ibconvert.converter: end-to-end conversion."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from ibconvert.config import ConvertConfig
from ibconvert.converter import (
    convert_file,
    convert_html,
    new_output_document,
    render_document,
)
from ibconvert.errors import FieldDecodeError, JurisdictionSourceError
from ibconvert.item_store import ItemDataStore

FIELD = (
    "<!--[if supportFields]><span style='mso-element:field-begin'>"
    " ADDIN ZOTERO_ITEM CSL_CITATION "
    "{&quot;citationItems&quot;:[{&quot;uri&quot;:[&quot;http://x/items/ABC123&quot;],"
    "&quot;itemData&quot;:{&quot;jurisdiction&quot;:&quot;us:ca&quot;},"
    "&quot;prefix&quot;:&quot;see &quot;,&quot;suppress-author&quot;:false}]}"
    "</span><![endif]-->"
)

GB_FIELD = FIELD.replace("ABC123", "GB1").replace("us:ca", "gb:eng")

BAD_FIELD = (
    "<!--[if supportFields]><span style='mso-element:field-begin'>"
    " ADDIN ZOTERO_ITEM CSL_CITATION {&quot;citationItems&quot;: [</span><![endif]-->"
)

WORD_EXPORT = f"""<html xmlns:o="urn:schemas-microsoft-com:office:office">
<head><meta charset=utf-8><title>Draft</title>
<style><!-- p.MsoNormal {{margin:0in;}} --></style></head>
<body lang=EN-US>
<div class=WordSection1>
<h1>Rule 1</h1>
<p class=MsoNormal>The court held{FIELD} that&nbsp;&nbsp;it applies.</p>
<p class=MsoListParagraphCxSpFirst style='mso-list:l0 level1 lfo1'><span
style='mso-list:Ignore'>1.<span>&nbsp;</span></span>First</p>
<p class=MsoListParagraphCxSpLast style='mso-list:l0 level1 lfo1'><span
style='mso-list:Ignore'>2.<span>&nbsp;</span></span>Second</p>
</div>
</body>
</html>
"""


def _juris_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "juris-maps"
    directory.mkdir()
    rows = [["us", "United States", None], ["ca", "California", 0]]
    (directory / "juris-us-map.json").write_text(
        json.dumps({"jurisdictions": {"default": rows}}), encoding="utf-8",
    )
    return directory


def _config(tmp_path: Path, **kwargs) -> ConvertConfig:
    return ConvertConfig(
        juris_maps_dir=_juris_dir(tmp_path), build_dir=tmp_path / "build", **kwargs,
    )


class TestOutputDocument:
    def test_template(self) -> None:
        assert str(new_output_document("Indigo Book")) == (
            "<html><head><title>Indigo Book</title></head><body></body></html>"
        )

    def test_render_compact_and_pretty(self) -> None:
        document = new_output_document("T")
        assert render_document(document, pretty=False) == str(document)
        assert "\n" in render_document(document)


class TestConvertHtml:
    def test_end_to_end(self, tmp_path: Path) -> None:
        config = _config(tmp_path)
        store = ItemDataStore(config.itemdata_dir)
        result = convert_html(WORD_EXPORT, config, store=store)

        body = result.document.body
        assert body is not None
        assert str(body) == (
            "<body><h1>Rule 1</h1>"
            '<p>The court held<span class="cite" data-info="see-ABC123-0-0">'
            "</span> that it applies.</p>"
            "<ol><li>First</li><li>Second</li></ol></body>"
        )
        assert result.document.title is not None
        assert result.document.title.string == "Indigo Book"

        record = json.loads(
            (config.itemdata_dir / "ABC123.json").read_text(encoding="utf-8"),
        )
        assert record == {
            "jurisdiction": "005us:caUnited States|California",
            "id": "ABC123",
        }
        assert result.stats.citations == 1
        assert result.stats.records_written == 1
        assert result.stats.records_skipped == 0
        assert result.stats.list_runs == 1
        assert result.stats.unresolved_jurisdictions == 0

    def test_without_store_writes_nothing(self, tmp_path: Path) -> None:
        config = _config(tmp_path)
        result = convert_html(WORD_EXPORT, config)
        assert result.stats.records_written == 0
        assert not config.build_dir.exists()

    def test_input_without_body(self, tmp_path: Path) -> None:
        result = convert_html("<p>Loose</p>", _config(tmp_path))
        assert str(result.document.body) == "<body><p>Loose</p></body>"

    def test_top_level_without_definitions_is_unresolved(self, tmp_path: Path) -> None:
        config = _config(tmp_path)
        store = ItemDataStore(config.itemdata_dir)
        html = "<body><p>x" + GB_FIELD + "y" + GB_FIELD + "</p></body>"

        result = convert_html(html, config, store=store)

        assert result.stats.unresolved_jurisdictions == 2
        assert result.stats.citations == 2
        record = json.loads(
            (config.itemdata_dir / "GB1.json").read_text(encoding="utf-8"),
        )
        assert record == {"jurisdiction": None, "id": "GB1"}

    def test_missing_jurisdiction_directory(self, tmp_path: Path) -> None:
        config = ConvertConfig(juris_maps_dir=tmp_path / "absent", build_dir=tmp_path)
        with pytest.raises(JurisdictionSourceError):
            convert_html(WORD_EXPORT, config)

    def test_malformed_field_is_fatal(self, tmp_path: Path) -> None:
        with pytest.raises(FieldDecodeError):
            convert_html(f"<body><p>x{BAD_FIELD}</p></body>", _config(tmp_path))


class TestConvertFile:
    def test_writes_artifacts(self, tmp_path: Path) -> None:
        source = tmp_path / "sample.html"
        source.write_text(WORD_EXPORT, encoding="utf-8")
        config = _config(tmp_path)

        result = convert_file(source, config)

        output = tmp_path / "build" / "sample-output.html"
        assert config.output_path == output
        assert output.exists()
        html = output.read_text(encoding="utf-8")
        assert 'data-info="see-ABC123-0-0"' in html
        assert "<title>" in html
        assert (tmp_path / "build" / "static" / "itemdata" / "ABC123.json").exists()
        assert result.stats.records_written == 1

    def test_second_run_keeps_existing_records(self, tmp_path: Path) -> None:
        source = tmp_path / "sample.html"
        source.write_text(WORD_EXPORT, encoding="utf-8")
        config = _config(tmp_path)
        convert_file(source, config)
        result = convert_file(source, config)
        assert result.stats.records_written == 0
        assert result.stats.records_skipped == 1

    def test_failure_leaves_no_output_document(self, tmp_path: Path) -> None:
        source = tmp_path / "bad.html"
        source.write_text(f"<body><p>{BAD_FIELD}</p></body>", encoding="utf-8")
        config = _config(tmp_path)
        with pytest.raises(FieldDecodeError):
            convert_file(source, config)
        assert not config.output_path.exists()

    def test_unreadable_input_is_not_converted(self, tmp_path: Path) -> None:
        missing = tmp_path / "absent.html"
        config = _config(tmp_path)
        with pytest.raises(FileNotFoundError):
            convert_file(missing, config)
        assert not config.output_path.exists()
