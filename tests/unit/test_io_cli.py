import json
import xml.etree.ElementTree as ET

import pytest
import yaml

from board_drawio import cli
from board_drawio.io import load_board, load_options
from board_drawio.writer import write_drawio


def test_load_board_json_and_yaml(tmp_path, account_contact_board):
    json_path = tmp_path / "board.json"
    json_path.write_text(json.dumps(account_contact_board), encoding="utf-8")
    yaml_path = tmp_path / "board.yaml"
    yaml_path.write_text(yaml.safe_dump(account_contact_board), encoding="utf-8")

    assert load_board(json_path) == account_contact_board
    assert load_board(yaml_path) == account_contact_board


def test_load_board_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_board(tmp_path / "missing.json")

    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="Failed to parse"):
        load_board(bad)

    listing = tmp_path / "list.yaml"
    listing.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(TypeError, match="mapping"):
        load_board(listing)


def test_load_options(tmp_path):
    path = tmp_path / "options.yaml"
    path.write_text("diagramStyle: uml\numlOptions:\n  groupByVisibility: true\n", encoding="utf-8")
    opts = load_options(path)
    assert opts.diagram_style == "uml"
    assert opts.uml_options.group_by_visibility


def test_write_drawio_creates_parent_dirs(tmp_path):
    out = tmp_path / "a" / "b" / "x.drawio"
    write_drawio(out, "<mxfile/>")
    assert out.read_text(encoding="utf-8") == "<mxfile/>"


@pytest.mark.integration
def test_cli_writes_document_and_viewer_url(tmp_path, capsys, account_contact_board):
    board_path = tmp_path / "sales.json"
    board_path.write_text(json.dumps(account_contact_board), encoding="utf-8")

    cli.main([str(board_path), "--style", "uml", "--title", "Sales", "--expanded", "--viewer-url"])

    out_path = tmp_path / "sales.drawio"
    doc = ET.fromstring(out_path.read_text(encoding="utf-8"))
    assert doc.find("diagram").get("name") == "Sales"
    stdout = capsys.readouterr().out
    assert f"wrote {out_path}" in stdout
    assert "https://viewer.diagrams.net/" in stdout


@pytest.mark.integration
def test_cli_strict_mode_fails_on_warnings(tmp_path, capsys, account_contact_board):
    account_contact_board["edges"].append({"id": "x", "source": "Ghost", "target": "Account"})
    board_path = tmp_path / "sales.json"
    board_path.write_text(json.dumps(account_contact_board), encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        cli.main([str(board_path), "--strict"])
    assert exc.value.code == 2
    assert "warning: edge 'x' source references unknown node 'Ghost'" in capsys.readouterr().err
    assert not (tmp_path / "sales.drawio").exists()


@pytest.mark.integration
def test_cli_reports_bad_board(tmp_path, capsys):
    board_path = tmp_path / "broken.json"
    board_path.write_text(json.dumps({"nodes": []}), encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        cli.main([str(board_path), "-o", str(tmp_path / "out.drawio")])
    assert exc.value.code == 2
    assert "error: board.edges must be a list" in capsys.readouterr().err


@pytest.mark.integration
def test_cli_rejects_non_mapping_nested_option(tmp_path, capsys, account_contact_board):
    board_path = tmp_path / "sales.json"
    board_path.write_text(json.dumps(account_contact_board), encoding="utf-8")
    options_path = tmp_path / "options.yaml"
    options_path.write_text("titleDisplay: true\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        cli.main([str(board_path), "--options", str(options_path)])
    assert exc.value.code == 2
    assert "error: expected mapping at titleDisplay" in capsys.readouterr().err
