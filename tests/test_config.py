from pathlib import Path

import pytest

from flowmap.config import FlowmapConfig, LayoutConfig, find_config, load_config, parse_config
from flowmap.ingest.builder import build_tree


def test_defaults_match_canvas_constants() -> None:
    cfg = FlowmapConfig()
    assert cfg.layout.hub_pitch == 170
    assert cfg.layout.leaf_columns == 4
    assert cfg.viewport.min_zoom == 0.2
    assert cfg.viewport.max_zoom == 2.0
    assert cfg.viewport.reset_zoom == 0.5
    assert cfg.aliases_for("account") == ()


def test_parse_overrides_sections() -> None:
    cfg = parse_config(
        {
            "layout": {"leaf_columns": 3, "row_height": 180},
            "viewport": {"reset_zoom": 1},
            "columns": {"account": "Beneficiary Account", "parent": ["Source Account", " "]},
        }
    )
    assert cfg.layout.leaf_columns == 3
    assert isinstance(cfg.layout.leaf_columns, int)
    assert cfg.layout.row_height == 180.0
    assert cfg.layout.column_width == LayoutConfig().column_width
    assert cfg.viewport.reset_zoom == 1.0
    assert cfg.aliases_for("account") == ("Beneficiary Account",)
    assert cfg.aliases_for("parent") == ("Source Account",)


@pytest.mark.parametrize(
    "data, message",
    [
        ({"layout": {"leaf_columns": 0}}, "positive integer"),
        ({"layout": {"leaf_columns": 2.5}}, "positive integer"),
        ({"layout": {"hub_x": "wide"}}, "must be a number"),
        ({"viewport": {"zoom_step": True}}, "must be a number"),
        ({"viewport": {"min_zoom": 3}}, "min_zoom"),
        ({"viewport": {"reset_zoom": 5}}, "reset_zoom"),
        ({"columns": {"account": [1, 2]}}, "columns.account"),
    ],
)
def test_parse_rejects_bad_values(data: dict, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        parse_config(data)


def test_non_mapping_sections_are_ignored() -> None:
    cfg = parse_config({"layout": None, "viewport": [], "columns": "x"})
    assert cfg == FlowmapConfig()


def test_load_config_from_file(tmp_path: Path) -> None:
    p = tmp_path / "flowmap.yml"
    p.write_text("layout:\n  leaf_columns: 2\ncolumns:\n  account: [Beneficiary Account]\n", encoding="utf-8")

    assert find_config(tmp_path) == p
    cfg = load_config(p)
    assert cfg.layout.leaf_columns == 2
    assert cfg.aliases_for("account") == ("Beneficiary Account",)


def test_load_config_empty_file_gives_defaults(tmp_path: Path) -> None:
    p = tmp_path / "flowmap.yaml"
    p.write_text("", encoding="utf-8")
    assert load_config(p) == FlowmapConfig()


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    p = tmp_path / "flowmap.yml"
    p.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError, match="top level must be a mapping"):
        load_config(p)


def test_load_config_without_file_uses_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert find_config(tmp_path) is None
    assert load_config() == FlowmapConfig()


def test_column_aliases_reach_the_builder() -> None:
    cfg = parse_config({"columns": {"account": ["Beneficiary Account"], "parent": ["Source Account"]}})
    rows = [
        {"Beneficiary Account": "X1", "Layer": 1},
        {"Beneficiary Account": "X2", "Layer": 2, "Source Account": "X1"},
    ]
    tree = build_tree(rows, cfg)
    assert [n.id for n in tree.children] == ["X1"]
    assert [c.id for c in tree.children[0].children] == ["X2"]
