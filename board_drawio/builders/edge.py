from __future__ import annotations

from typing import Any, Optional

from ..cells import Cell
from ..constants import DEFAULT_EDGE_COLOR, LAYER_CELL_ID
from ..drawio_fmt import compose_style, dash_pattern, round_half_up, xml_escape
from ..model import BoardEdge
from ..options import ConversionOptions

EDGE_STYLE_ALIASES: dict[str, str] = {
    "orthogonal": "orthogonalEdgeStyle",
    "curved": "curvedEdgeStyle",
    "elbow": "elbowEdgeStyle",
    "entityRelation": "entityRelationEdgeStyle",
    "straight": "none",
}


def resolve_endpoint(
    node_id: str,
    handle_field: Optional[str],
    node_cells: dict[str, str],
    field_cells: dict[str, str],
) -> Optional[str]:
    """Cell id an edge end attaches to: the field row if known, else the node."""
    if handle_field:
        field_cell = field_cells.get(f"{node_id}.{handle_field}")
        if field_cell:
            return field_cell
    return node_cells.get(node_id)


def edge_tooltip(edge: BoardEdge, source_name: str, target_name: str) -> str:
    source = f"{source_name}.{edge.source_field}" if edge.source_field else source_name
    target = f"{target_name}.{edge.target_field}" if edge.target_field else target_name
    route = f"{source} → {target}"
    return f"{edge.label}\n{route}" if edge.label else route


def _color(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not value.strip():
        return None
    value = value.strip()
    # CSS custom properties cannot be resolved outside the browser.
    if value.startswith("var("):
        return DEFAULT_EDGE_COLOR
    return value


def _is_truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def wants_curve(edge: BoardEdge) -> bool:
    return _is_truthy(edge.style.get("curved"))


def apply_style_overrides(style: dict[str, Any], edge: BoardEdge) -> dict[str, Any]:
    """Layer `edge.style` (stroke, color, dash, opacity, routing) over defaults."""
    overrides = edge.style

    width = overrides.get("strokeWidth")
    if isinstance(width, (int, float)) and not isinstance(width, bool):
        style["strokeWidth"] = width
    elif isinstance(width, str):
        try:
            style["strokeWidth"] = float(width.rstrip("px"))
        except ValueError:
            pass

    color = _color(overrides.get("strokeColor", overrides.get("stroke")))
    if color:
        style["strokeColor"] = color

    dashes = overrides.get("strokeDasharray", overrides.get("dashPattern"))
    pattern = dash_pattern(dashes) if dashes is not None else None
    if pattern:
        style["dashed"] = 1
        style["dashPattern"] = pattern

    opacity = overrides.get("opacity")
    try:
        opacity_value = float(opacity) if opacity is not None else None
    except (TypeError, ValueError):
        opacity_value = None
    if opacity_value is not None:
        if opacity_value <= 1:
            opacity_value *= 100
        style["opacity"] = round_half_up(max(0.0, min(100.0, opacity_value)))

    font_size = overrides.get("fontSize")
    if isinstance(font_size, (int, float)) and not isinstance(font_size, bool):
        style["fontSize"] = font_size

    if wants_curve(edge):
        style.update(edgeStyle="curvedEdgeStyle", curved=1, rounded=1)

    routing = overrides.get("edgeStyle")
    if isinstance(routing, str) and routing:
        style["edgeStyle"] = EDGE_STYLE_ALIASES.get(routing, routing)

    return style


def _edge_cell(
    edge: BoardEdge,
    cell_id: str,
    source_id: str,
    target_id: str,
    style: dict[str, Any],
    tooltip: str,
) -> Cell:
    return Cell(
        id=cell_id,
        value=xml_escape(edge.label) if edge.label else "",
        style=compose_style(apply_style_overrides(style, edge)),
        edge=True,
        parent=LAYER_CELL_ID,
        source=source_id,
        target=target_id,
        tooltip=xml_escape(tooltip),
    )


def build_erd_edge_cell(
    edge: BoardEdge,
    cell_id: str,
    source_id: str,
    target_id: str,
    options: ConversionOptions,
    *,
    tooltip: str,
) -> Cell:
    """Crow's-foot relationship: many at the source end, one at the target.

    `betweenTables` and `betweenTablesInverted` both point the lookup holder
    (source) at the referenced table (target), so they share one arrow pair.
    """
    style: dict[str, Any] = {
        "edgeStyle": "orthogonalEdgeStyle",
        "rounded": 0,
        "orthogonalLoop": 1,
        "jettySize": "auto",
        "fontSize": 12,
        "html": 1,
        "endArrow": "ERone",
        "startArrow": "ERmany",
        "endFill": 0,
        "startFill": 0,
        "strokeWidth": 2,
        "strokeColor": DEFAULT_EDGE_COLOR,
        "curved": 0,
    }
    return _edge_cell(edge, cell_id, source_id, target_id, style, tooltip)


def build_uml_edge_cell(
    edge: BoardEdge,
    cell_id: str,
    source_id: str,
    target_id: str,
    options: ConversionOptions,
    *,
    tooltip: str,
) -> Cell:
    """Association arrow, or composition when the edge is a lookup relationship."""
    style: dict[str, Any] = {
        "edgeStyle": "orthogonalEdgeStyle",
        "rounded": 0,
        "orthogonalLoop": 1,
        "jettySize": "auto",
        "fontSize": 11,
        "html": 1,
        "endArrow": "open",
        "endFill": 0,
        "startArrow": "none",
        "startFill": 0,
        "endSize": 12,
        "strokeWidth": 1,
        "strokeColor": DEFAULT_EDGE_COLOR,
        "curved": 0,
    }
    smart = options.uml_options.relationship_style == "smart"
    if smart and edge.kind.is_foreign_key:
        style.update(endArrow="diamondThin", endFill=1, endSize=14)
    return _edge_cell(edge, cell_id, source_id, target_id, style, tooltip)


def edge_seed(edge: BoardEdge) -> str:
    """Preferred id seed for an edge cell."""
    if edge.label:
        return f"edge_{edge.label}"
    return "edge_" + "_to_".join(edge.id.split(".")[-2:])
