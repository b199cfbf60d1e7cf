from __future__ import annotations

import copy
import xml.etree.ElementTree as ET
from typing import Any, Callable

import pytest

ACCOUNT_CONTACT_BOARD: dict[str, Any] = {
    "nodes": [
        {
            "id": "Account",
            "type": "table",
            "position": {"x": 100.4, "y": 100},
            "data": {
                "label": "Account",
                "color": "#3b82f6",
                "schema": {
                    "description": "Business accounts",
                    "properties": {
                        "Id": {"type": "string", "title": "Account ID"},
                        "Name": {"type": "string", "title": "Account Name"},
                    },
                },
            },
        },
        {
            "id": "Contact",
            "type": "table",
            "position": {"x": 400, "y": 100},
            "data": {
                "label": "Contact",
                "color": "rgba(16,185,129,0.5)",
                "schema": {
                    "properties": {
                        "Id": {"type": "string", "title": "Contact ID"},
                        "AccountId": {
                            "type": "string",
                            "title": "Account ID",
                            "x-target": "Account",
                        },
                    },
                },
            },
        },
    ],
    "edges": [
        {
            "id": "edge1",
            "source": "Contact",
            "target": "Account",
            "sourceHandle": "AccountId-source",
            "targetHandle": "Id-target",
            "type": "betweenTables",
            "label": "belongs to",
        }
    ],
}


@pytest.fixture
def account_contact_board() -> dict[str, Any]:
    return copy.deepcopy(ACCOUNT_CONTACT_BOARD)


def _parse_cells(xml: str) -> dict[str, dict[str, Any]]:
    """Index every cell of a draw.io document by id.

    Each entry holds the `mxCell` attributes plus `value`, `tooltip`, the
    wrapper attributes (`wrapper`) and `geometry`/`alternateBounds` dicts.
    """
    doc = ET.fromstring(xml)
    root = doc.find("./diagram/mxGraphModel/root")
    assert root is not None

    out: dict[str, dict[str, Any]] = {}
    for el in root:
        if el.tag in ("UserObject", "object"):
            cell_el = el.find("mxCell")
            assert cell_el is not None
            entry: dict[str, Any] = dict(cell_el.attrib)
            entry["id"] = el.get("id")
            entry["value"] = el.get("label")
            entry["tooltip"] = el.get("tooltip")
            entry["wrapper"] = dict(el.attrib)
        else:
            cell_el = el
            entry = dict(el.attrib)
            entry.setdefault("value", None)
            entry["tooltip"] = None
            entry["wrapper"] = None

        geometry = cell_el.find("mxGeometry")
        entry["geometry"] = dict(geometry.attrib) if geometry is not None else None
        alt = geometry.find("mxRectangle") if geometry is not None else None
        entry["alternateBounds"] = dict(alt.attrib) if alt is not None else None

        assert entry["id"] not in out, f"duplicate cell id {entry['id']!r}"
        out[entry["id"]] = entry
    return out


@pytest.fixture
def parse_cells() -> Callable[[str], dict[str, dict[str, Any]]]:
    return _parse_cells
