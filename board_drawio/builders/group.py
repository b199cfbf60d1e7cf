from __future__ import annotations

from ..cells import Cell
from ..colors import darken, normalize_color
from ..constants import DEFAULT_GROUP_COLOR, GROUP_DEFAULT_SIZE, LAYER_CELL_ID
from ..drawio_fmt import compose_style, round_half_up, xml_escape
from ..model import BoardNode


def build_group_cell(node: BoardNode, cell_id: str, *, show_descriptions: bool) -> Cell:
    """Render a group zone as a rounded, labelled background rectangle."""
    color = normalize_color(node.data.color or DEFAULT_GROUP_COLOR)
    label = xml_escape(node.data.label or "Group")
    if show_descriptions and node.data.content:
        label += "\n" + xml_escape(node.data.content)

    style = compose_style(
        {
            "swimlane": 0,
            "fillColor": color,
            "strokeColor": darken(color, 20),
            "strokeWidth": 2,
            "rounded": 1,
            "fontSize": 14,
            "fontStyle": 1,
            "align": "left",
            "verticalAlign": "top",
            "spacingLeft": 10,
            "spacingTop": 10,
        }
    )

    width, height = GROUP_DEFAULT_SIZE
    return Cell(
        id=cell_id,
        value=label,
        style=style,
        vertex=True,
        parent=LAYER_CELL_ID,
        x=round_half_up(node.x),
        y=round_half_up(node.y),
        width=round_half_up(node.width) if node.width else width,
        height=round_half_up(node.height) if node.height else height,
    )
