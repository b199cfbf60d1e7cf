from __future__ import annotations

from typing import Any

from ..cells import Cell
from ..colors import darken, normalize_color
from ..constants import (
    DEFAULT_SHAPE_COLOR,
    LAYER_CELL_ID,
    NOTE_FILL_COLOR,
    NOTE_STROKE_COLOR,
    SHAPE_DEFAULT_SIZE,
)
from ..drawio_fmt import compose_style, round_half_up, xml_escape
from ..model import BoardNode, NodeKind


def _font_size(value: Any, default: int) -> int:
    try:
        return int(float(str(value).rstrip("px")))
    except (TypeError, ValueError):
        return default


def build_shape_cell(
    node: BoardNode,
    cell_id: str,
    *,
    show_descriptions: bool = False,
) -> Cell:
    """Render markdown, callout, note and unknown nodes as a single shape."""
    color = normalize_color(node.data.color or DEFAULT_SHAPE_COLOR)
    label = xml_escape(node.data.label)
    if show_descriptions and node.data.content:
        label += "\n\n" + xml_escape(node.data.content)

    style: dict[str, Any] = {
        "rounded": 1,
        "whiteSpace": "wrap",
        "html": 1,
        "fillColor": color,
        "strokeColor": darken(color, 20),
        "fontSize": 12,
    }

    if node.kind is NodeKind.MARKDOWN:
        font_size = node.style.get("fontSize")
        style.update(
            text=1,
            align="center",
            verticalAlign="middle",
            fontSize=_font_size(font_size, 14) if font_size else 14,
            fontStyle=1,
        )
    elif node.kind is NodeKind.CALLOUT:
        style.update(shape="note", fontSize=11, align="left", verticalAlign="top")
        if node.data.method and node.data.url:
            request = xml_escape(f"{node.data.method} {node.data.url}")
            label = f"{request}\n\n{label}"
    elif node.kind in (NodeKind.ANNOTATION, NodeKind.NOTE):
        style.update(
            shape="note",
            fontSize=12,
            align="left",
            verticalAlign="top",
            fillColor=NOTE_FILL_COLOR,
            strokeColor=NOTE_STROKE_COLOR,
        )

    width, height = SHAPE_DEFAULT_SIZE
    return Cell(
        id=cell_id,
        value=label,
        style=compose_style(style),
        vertex=True,
        parent=LAYER_CELL_ID,
        x=round_half_up(node.x),
        y=round_half_up(node.y),
        width=round_half_up(node.width) if node.width else width,
        height=round_half_up(node.height) if node.height else height,
    )
