from datetime import datetime, timezone
from urllib.parse import unquote

import pytest

from board_drawio import (
    ConversionOptions,
    build_cells,
    generate_viewer_url,
    transform_board_to_drawio,
    transform_board_with_viewer_url,
)
from board_drawio.builders.registry import STYLE_SPECS, get_style
from board_drawio.constants import VIEWER_URL_BASE
from board_drawio.options import DIAGRAM_STYLES

MODIFIED = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def table_node(node_id, properties, *, x=0, y=0, **extra):
    node = {
        "id": node_id,
        "type": "table",
        "position": {"x": x, "y": y},
        "data": {"label": node_id, "schema": {"properties": properties}},
    }
    node.update(extra)
    return node


def rows_of(cells, table_id):
    return [c for c in cells.values() if c.get("parent") == table_id]


def edges_of(cells):
    return [c for c in cells.values() if c.get("edge") == "1"]


def test_account_contact_scenario(account_contact_board, parse_cells):
    cells = parse_cells(transform_board_to_drawio(account_contact_board))

    tables = [c for c in cells.values() if c.get("style", "").startswith("swimlane;")]
    assert [t["id"] for t in tables] == ["table_Account", "table_Contact"]
    assert len(rows_of(cells, "table_Account")) == 2
    assert len(rows_of(cells, "table_Contact")) == 2

    (edge,) = edges_of(cells)
    assert (edge["source"], edge["target"]) == ("Contact_AccountId", "Account_Id")
    assert edge["value"] == "belongs to"
    assert edge["tooltip"] == "belongs to\nContact.AccountId → Account.Id"

    account = cells["table_Account"]
    assert account["geometry"]["x"] == "100"
    assert account["collapsed"] == "1"
    assert account["tooltip"] == "2 fields\nBusiness accounts"
    assert "fillColor=#10b981;" in cells["table_Contact"]["style"]


def test_max_fields_scenario(account_contact_board, parse_cells):
    cells = parse_cells(transform_board_to_drawio(account_contact_board, {"maxFields": 1}))
    rows = rows_of(cells, "table_Contact")
    assert [r["value"] for r in rows] == ["PK: Id : Text", "... 1 more field"]


def test_group_zone_defaults_to_800_by_400(parse_cells):
    board = {
        "nodes": [{"id": "g", "type": "groupZone", "position": {"x": 0, "y": 0}, "data": {"label": "Sales"}}],
        "edges": [],
    }
    cells = parse_cells(transform_board_to_drawio(board))
    group = cells["group_Sales"]
    assert (group["geometry"]["width"], group["geometry"]["height"]) == ("800", "400")
    assert "swimlane=0;" in group["style"]


def test_unresolvable_edges_are_dropped(account_contact_board, parse_cells):
    account_contact_board["edges"] += [
        {"id": "ghost1", "source": "Nope", "target": "Account"},
        {"id": "ghost2", "source": "Contact", "target": "Missing"},
        {"id": "plain", "source": "Account", "target": "Contact"},
    ]
    cells = parse_cells(transform_board_to_drawio(account_contact_board))
    edges = edges_of(cells)
    assert len(edges) == len(account_contact_board["edges"]) - 2
    assert ("table_Account", "table_Contact") in {(e["source"], e["target"]) for e in edges}


@pytest.mark.parametrize(
    "board",
    [None, [], {"nodes": []}, {"edges": []}, {"nodes": {}, "edges": []}, {"nodes": [], "edges": "x"}],
)
def test_malformed_board_is_rejected(board):
    with pytest.raises(TypeError, match="nodes"):
        transform_board_to_drawio(board)


def _rich_board():
    return {
        "nodes": [
            {"id": "zone", "type": "groupZone", "position": {"x": 0, "y": 0}, "width": 900, "height": 500, "data": {"label": "Core", "color": "rgba(200,220,240,0.3)"}},
            table_node("Account", {"Id": {"type": "string"}, "Name": {"type": "string"}}, x=40, y=60, parentId="zone"),
            table_node("Account", {"Id": {"type": "string"}}, x=40, y=400),
            table_node("Case", {"Id": {"type": "string"}, "AccountId": {"type": "string"}}, x=300, y=60, parentId="missing"),
            {"id": "md", "type": "markdown", "position": {"x": 0, "y": -80}, "style": {"fontSize": "18px"}, "data": {"label": "Header"}},
            {"id": "call", "type": "callout", "position": {"x": 600, "y": 0}, "data": {"label": "Accounts", "method": "GET", "url": "/api/accounts"}},
            {"id": "n", "type": "note", "position": {"x": 600, "y": 200}, "data": {"label": "Remember"}},
            {"id": "w", "type": "whiteboard", "position": {"x": 600, "y": 300}, "data": {"label": "Misc"}},
            {"id": "in", "type": "input", "position": {"x": 0, "y": 0}, "data": {"label": "Search"}},
            {"id": "lg", "type": "legend", "position": {"x": 0, "y": 0}, "data": {"label": "Legend"}},
        ],
        "edges": [
            {"id": "e1", "source": "Case", "target": "Account", "sourceHandle": "AccountId-source", "targetHandle": "Id-target", "type": "betweenTables"},
            {"id": "e2", "source": "call", "target": "n", "label": "see"},
            {"id": "e3", "source": "in", "target": "n"},
            {"id": "e4", "source": "lg", "target": "zone", "label": "see"},
        ],
    }


def test_ids_are_unique_and_references_resolve(parse_cells):
    xml = transform_board_to_drawio(
        _rich_board(),
        {"titleDisplay": {"show": True}, "metadata": {"repository": "https://example.com"}},
    )
    cells = parse_cells(xml)  # asserts id uniqueness
    known = set(cells)
    for cell in cells.values():
        for ref in ("parent", "source", "target"):
            if cell.get(ref) is not None:
                assert cell[ref] in known, (cell["id"], ref, cell[ref])


def test_parent_resolution_and_shapes(parse_cells):
    cells = parse_cells(transform_board_to_drawio(_rich_board()))

    assert cells["table_Account"]["parent"] == "group_Core"
    assert cells["table_Account_1"]["parent"] == "1"
    assert cells["table_Case"]["parent"] == "1"
    assert "fillColor=#c8dcf0;" in cells["group_Core"]["style"]

    assert "fontSize=18;" in cells["markdown_Header"]["style"]
    assert cells["callout_Accounts"]["value"] == "GET /api/accounts\n\nAccounts"
    assert "fillColor=#ffffcc;" in cells["note_Remember"]["style"]
    assert "whiteboard_Misc" in cells
    assert not any(cid.startswith(("input_", "legend_")) for cid in cells)

    edges = edges_of(cells)
    assert {(e["source"], e["target"]) for e in edges} == {
        ("Case_AccountId", "Account_Id_1"),
        ("callout_Accounts", "note_Remember"),
    }


def test_duplicate_node_ids_resolve_to_last_table(parse_cells):
    cells = parse_cells(transform_board_to_drawio(_rich_board()))
    (edge,) = [e for e in edges_of(cells) if e["source"] == "Case_AccountId"]
    assert cells[edge["target"]]["parent"] == "table_Account_1"


def test_group_zones_can_be_excluded(parse_cells):
    cells = parse_cells(transform_board_to_drawio(_rich_board(), {"includeGroupZones": False}))
    assert "group_Core" not in cells
    assert cells["table_Account"]["parent"] == "1"


def test_tables_are_emitted_top_to_bottom():
    board = {
        "nodes": [
            table_node("Low", {"Id": {"type": "string"}}, y=500),
            table_node("High", {"Id": {"type": "string"}}, y=10),
        ],
        "edges": [],
    }
    ids = [c.id for c in build_cells(board)]
    assert ids.index("table_High") < ids.index("table_Low")


def test_read_only_suppression_and_ordering(parse_cells):
    board = {
        "nodes": [
            table_node(
                "Opportunity",
                {
                    "Amount": {"type": "number"},
                    "CreatedDate": {"type": "string", "format": "date-time", "readOnly": True},
                    "AccountId": {"type": "string", "readOnly": True},
                    "Id": {"type": "string", "readOnly": True},
                    "OwnerId": {"type": "string", "x-target": "User"},
                },
            )
        ],
        "edges": [],
    }
    cells = parse_cells(transform_board_to_drawio(board, ConversionOptions(include_read_only_fields=False)))
    values = [r["value"] for r in rows_of(cells, "table_Opportunity")]
    assert values == [
        "PK: Id : Text",
        "FK: AccountId : FK",
        "FK: OwnerId : User",
        "Amount : Number",
    ]


def test_uml_style_uses_composition_for_lookup_edges(account_contact_board, parse_cells):
    cells = parse_cells(transform_board_to_drawio(account_contact_board, {"diagramStyle": "uml"}))
    (edge,) = edges_of(cells)
    assert "endArrow=diamondThin;endFill=1;" in edge["style"]
    assert [r["value"] for r in rows_of(cells, "table_Contact")] == [
        "+ Id : Text",
        "+ AccountId : Account",
    ]


def test_annotated_table_edges_attach_to_table_not_wrapper(account_contact_board, parse_cells):
    account_contact_board["nodes"][0]["data"]["annotation"] = "20k"
    account_contact_board["edges"][0].pop("targetHandle")
    cells = parse_cells(transform_board_to_drawio(account_contact_board))
    (edge,) = edges_of(cells)
    assert edge["target"] == "table_Account"
    assert cells["table_Account"]["parent"] == "annotated_Account"
    assert cells["Account_annotation"]["value"] == "20k"


def test_output_is_deterministic_apart_from_timestamp(account_contact_board):
    first = transform_board_to_drawio(account_contact_board, modified=MODIFIED)
    second = transform_board_to_drawio(account_contact_board, modified=MODIFIED)
    assert first == second


def test_visible_title_block(account_contact_board, parse_cells):
    xml = transform_board_to_drawio(
        account_contact_board,
        {"title": "Sales Model", "titleDisplay": {"show": True}},
    )
    cells = parse_cells(xml)
    title = cells["title_Sales_Model"]
    assert title["value"] == "Sales Model"
    assert int(title["geometry"]["y"]) < 100


def test_viewer_url_round_trips_xml(account_contact_board):
    xml, url = transform_board_with_viewer_url(account_contact_board)
    assert url.startswith(VIEWER_URL_BASE + "#R%3C%3Fxml")
    assert unquote(url.split("#R", 1)[1]) == xml
    assert generate_viewer_url(xml) == url


def _described_board():
    return {
        "nodes": [
            {
                "id": "g",
                "type": "groupZone",
                "position": {"x": 0.5, "y": 10.5},
                "width": 300.5,
                "height": 200,
                "data": {"label": "Sales", "content": "Pipeline tables"},
            },
            {
                "id": "m",
                "type": "markdown",
                "position": {"x": 40, "y": 500},
                "data": {"label": "Intro", "content": "Read me first"},
            },
        ],
        "edges": [],
    }


def test_descriptions_are_off_by_default(parse_cells):
    cells = parse_cells(transform_board_to_drawio(_described_board()))
    assert cells["group_Sales"]["value"] == "Sales"
    assert cells["markdown_Intro"]["value"] == "Intro"


def test_show_descriptions_adds_group_and_shape_content(parse_cells):
    cells = parse_cells(
        transform_board_to_drawio(_described_board(), {"showDescriptions": True})
    )
    assert cells["group_Sales"]["value"] == "Sales\nPipeline tables"
    assert cells["markdown_Intro"]["value"] == "Intro\n\nRead me first"


def test_half_pixel_geometry_rounds_up(parse_cells):
    cells = parse_cells(transform_board_to_drawio(_described_board()))
    geometry = cells["group_Sales"]["geometry"]
    assert (geometry["x"], geometry["y"], geometry["width"]) == ("1", "11", "301")


def test_style_registry_covers_every_diagram_style():
    assert [spec.style_id for spec in STYLE_SPECS] == list(DIAGRAM_STYLES)
    assert get_style("uml").title == "UML class diagram"
    with pytest.raises(ValueError, match="unknown diagram style"):
        get_style("bpmn")
