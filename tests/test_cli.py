import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from flowmap import __version__
from flowmap.cli import cli


@pytest.fixture
def wide_csv(tmp_path: Path, wide_rows: list[dict], write_csv) -> Path:
    return write_csv(tmp_path / "wide.csv", wide_rows)


def test_version() -> None:
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_tree_markdown(wide_csv: Path) -> None:
    result = CliRunner().invoke(cli, ["tree", str(wide_csv)])
    assert result.exit_code == 0, result.output
    assert "## Transaction flow: wide.csv" in result.output
    assert "- Accounts: 7" in result.output
    assert "- Roots (orphans): 1" in result.output
    assert "| Layer 2 | 6 |" in result.output


def test_tree_json_to_file(wide_csv: Path, tmp_path: Path) -> None:
    out = tmp_path / "tree.json"
    result = CliRunner().invoke(cli, ["tree", str(wide_csv), "--format", "json", "--out", str(out)])
    assert result.exit_code == 0, result.output

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["total_layers"] == 2
    assert payload["relationships"] == 6
    assert payload["roots"] == ["R"]
    assert payload["tree"]["name"] == "Transaction Flow"
    assert [c["id"] for c in payload["tree"]["children"][0]["children"]] == [f"C{i}" for i in range(6)]


def test_tree_rich(wide_csv: Path) -> None:
    result = CliRunner().invoke(cli, ["tree", str(wide_csv), "--format", "rich"])
    assert result.exit_code == 0, result.output
    assert "Transaction Flow" in result.output
    assert "C5" in result.output


def test_render_svg_with_expanded_layer(wide_csv: Path, tmp_path: Path) -> None:
    out = tmp_path / "canvas.svg"
    result = CliRunner().invoke(
        cli, ["render", str(wide_csv), "--format", "svg", "--expand", "2", "--expand", "9", "--out", str(out)]
    )
    assert result.exit_code == 0, result.output
    assert "Layer 9 not present" in result.output

    svg = out.read_text(encoding="utf-8")
    assert svg.startswith("<svg")
    assert 'data-key="node-2-0" transform="translate(450.0 130.0)"' in svg


def test_render_html_default(wide_csv: Path, tmp_path: Path) -> None:
    out = tmp_path / "canvas.html"
    result = CliRunner().invoke(cli, ["render", str(wide_csv), "--expand-all", "--zoom", "5", "--out", str(out)])
    assert result.exit_code == 0, result.output

    page = out.read_text(encoding="utf-8")
    assert 'id="flowmap-model"' in page
    assert "scale(2.000)" in page


def test_config_option_changes_layout(wide_csv: Path, tmp_path: Path) -> None:
    cfg = tmp_path / "custom.yml"
    cfg.write_text("layout:\n  leaf_columns: 2\n", encoding="utf-8")
    out = tmp_path / "canvas.svg"

    result = CliRunner().invoke(
        cli, ["--config", str(cfg), "render", str(wide_csv), "--format", "svg", "--expand", "2", "--out", str(out)]
    )
    assert result.exit_code == 0, result.output
    assert 'data-key="node-2-1" transform="translate(800.0 30.0)"' in out.read_text(encoding="utf-8")


def test_invalid_config_is_reported(wide_csv: Path, tmp_path: Path) -> None:
    cfg = tmp_path / "bad.yml"
    cfg.write_text("layout:\n  leaf_columns: 0\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["--config", str(cfg), "tree", str(wide_csv)])
    assert result.exit_code == 1
    assert "Invalid config" in result.output


def test_details_json(wide_csv: Path) -> None:
    result = CliRunner().invoke(cli, ["details", str(wide_csv), "C3", "--format", "json"])
    assert result.exit_code == 0, result.output

    fields = json.loads(result.output)
    assert fields[0] == {"label": "Account Number", "value": "C3", "icon": "credit-card"}
    assert {"label": "IFSC Code", "value": "SBIN0003", "icon": "building"} in fields


def test_details_unknown_account(wide_csv: Path) -> None:
    result = CliRunner().invoke(cli, ["details", str(wide_csv), "ZZZ"])
    assert result.exit_code == 1
    assert "Account ZZZ not found" in result.output


def test_unsupported_file_type(tmp_path: Path) -> None:
    path = tmp_path / "notes.txt"
    path.write_text("AccountNo\nA1\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["tree", str(path)])
    assert result.exit_code == 2
    assert "valid spreadsheet" in result.output


def test_unreadable_file(tmp_path: Path) -> None:
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")
    result = CliRunner().invoke(cli, ["tree", str(path)])
    assert result.exit_code == 1
    assert "Failed to read the file" in result.output


def test_corrupt_xls_is_reported(tmp_path: Path) -> None:
    path = tmp_path / "legacy.xls"
    path.write_bytes(b"not a workbook")
    result = CliRunner().invoke(cli, ["tree", str(path)])
    assert result.exit_code == 1
    assert "Failed to read the file" in result.output


def test_missing_reader_engine_is_reported(wide_csv: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import flowmap.commands.tree_cmd as tree_cmd

    def _no_engine(*args, **kwargs):
        raise ImportError("Missing optional dependency 'xlrd'")

    monkeypatch.setattr(tree_cmd, "run_tree", _no_engine)
    result = CliRunner().invoke(cli, ["tree", str(wide_csv)])
    assert result.exit_code == 1
    assert "Failed to read the file: Missing optional dependency 'xlrd'" in result.output


def test_tree_collapsed_layer_hides_members(wide_csv: Path, tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["tree", str(wide_csv), "--collapse", "2"])
    assert result.exit_code == 0, result.output
    assert "| Layer 2 | 6 | (collapsed) |" in result.output
    assert "| Layer 1 | 1 | `R` |" in result.output

    out = tmp_path / "tree.json"
    CliRunner().invoke(cli, ["tree", str(wide_csv), "--format", "json", "--collapse", "2", "--out", str(out)])
    layers = json.loads(out.read_text(encoding="utf-8"))["layers"]
    assert [(row["layer"], row["expanded"]) for row in layers] == [(1, True), (2, False)]
    assert len(layers[1]["accounts"]) == 6


def test_tree_rich_collapsed_layer(wide_csv: Path) -> None:
    result = CliRunner().invoke(cli, ["tree", str(wide_csv), "--format", "rich", "--collapse", "1"])
    assert result.exit_code == 0, result.output
    assert "(collapsed)" in result.output
