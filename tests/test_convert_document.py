"""Tests for scripts/convert_document.py."""
from __future__ import annotations

import importlib.util
import json
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "convert_document.py"

FIELD = (
    "<!--[if supportFields]><span style='mso-element:field-begin'>"
    " ADDIN ZOTERO_ITEM CSL_CITATION "
    "{&quot;citationItems&quot;:[{&quot;uri&quot;:[&quot;http://x/items/ABC123&quot;],"
    "&quot;itemData&quot;:{&quot;jurisdiction&quot;:&quot;us:ca&quot;},"
    "&quot;prefix&quot;:&quot;see &quot;}]}</span><![endif]-->"
)


def _load_script_module():
    spec = importlib.util.spec_from_file_location("convert_document", SCRIPT)
    assert spec is not None
    module = importlib.util.module_from_spec(spec)
    assert spec.loader is not None
    spec.loader.exec_module(module)
    return module


@pytest.fixture()
def workspace(tmp_path: Path) -> Path:
    maps = tmp_path / "maps"
    maps.mkdir()
    (maps / "juris-us-map.json").write_text(
        json.dumps({"jurisdictions": {"default": [
            ["us", "United States", None], ["ca", "California", 0],
        ]}}),
        encoding="utf-8",
    )
    return tmp_path


def test_convert_writes_outputs(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    mod = _load_script_module()
    source = workspace / "sample.html"
    source.write_text(f"<html><body><p>Held{FIELD}.</p></body></html>", encoding="utf-8")

    rc = mod.main([
        str(source),
        "--juris-maps", str(workspace / "maps"),
        "--build-dir", str(workspace / "build"),
        "--print",
    ])

    assert rc == 0
    assert (workspace / "build" / "sample-output.html").exists()
    record = json.loads(
        (workspace / "build" / "static" / "itemdata" / "ABC123.json").read_text(
            encoding="utf-8",
        ),
    )
    assert record["jurisdiction"] == "005us:caUnited States|California"
    captured = capsys.readouterr()
    assert 'data-info="see-ABC123-0-0"' in captured.out
    assert "Generated files are at" in captured.err


def test_environment_defaults(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("IB_JURIS_MAPS_DIR", str(workspace / "maps"))
    monkeypatch.setenv("IB_BUILD_DIR", str(workspace / "out"))
    mod = _load_script_module()
    args = mod.build_parser().parse_args(["in.html", "--compact"])
    config = mod.config_from_args(args)
    assert config.juris_maps_dir == workspace / "maps"
    assert config.output_path == workspace / "out" / "sample-output.html"
    assert config.pretty is False


def test_missing_input(workspace: Path) -> None:
    mod = _load_script_module()
    assert mod.main([str(workspace / "absent.html")]) == 1


def test_conversion_error_exit_code(workspace: Path) -> None:
    mod = _load_script_module()
    source = workspace / "bad.html"
    source.write_text(
        "<body><p><!--[if supportFields]><span style='mso-element:field-begin'>"
        " ADDIN ZOTERO_ITEM CSL_CITATION {&quot;citationItems&quot;: [</span>"
        "<![endif]--></p></body>",
        encoding="utf-8",
    )
    rc = mod.main([
        str(source),
        "--juris-maps", str(workspace / "maps"),
        "--build-dir", str(workspace / "build"),
    ])
    assert rc == 1
    assert not (workspace / "build" / "sample-output.html").exists()


def test_unreadable_input_exit_code(workspace: Path) -> None:
    mod = _load_script_module()
    source = workspace / "export.html"
    source.mkdir()
    rc = mod.main([
        str(source),
        "--juris-maps", str(workspace / "maps"),
        "--build-dir", str(workspace / "build"),
    ])
    assert rc == 1
    assert not (workspace / "build" / "sample-output.html").exists()
