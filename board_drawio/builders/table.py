# board_drawio/builders/table.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..cells import Cell
from ..colors import darken, lighten, normalize_color
from ..constants import (
    BADGE_CHAR_WIDTH,
    BADGE_FILL_COLOR,
    BADGE_FONT_COLOR,
    BADGE_HEIGHT,
    BADGE_MIN_WIDTH,
    CUSTOM_FIELD_FILL,
    CUSTOM_FIELD_STROKE,
    DEFAULT_TABLE_COLOR,
    HEADER_HEIGHT,
    HEADER_HEIGHT_WITH_ICON,
)
from ..drawio_fmt import compose_style, icon_url, round_half_up, xml_escape
from ..fields import FieldSelection, TableField, extract_fields, select_fields
from ..ids import IdAllocator
from ..model import BoardNode
from ..options import ConversionOptions

# Row label + style for one visible field.
RowRenderer = Callable[[TableField, str, ConversionOptions], tuple[str, dict[str, Any]]]

ROW_PORTS = "[[0,0.5],[1,0.5]]"
DESCRIPTION_MAX_LEN = 80


@dataclass(frozen=True)
class TableLayout:
    width: int
    header_height: int
    row_height: int
    row_count: int
    collapsed: bool

    @property
    def expanded_height(self) -> int:
        return self.header_height + self.row_height * self.row_count

    @property
    def display_height(self) -> int:
        return self.header_height if self.collapsed else self.expanded_height

    @property
    def alternate_height(self) -> int:
        return self.expanded_height if self.collapsed else self.header_height


@dataclass(frozen=True)
class TableCells:
    """Cells for one table; `table_id` is the container edges attach to."""

    table_id: str
    cells: list[Cell]


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def _table_tooltip(node: BoardNode, selection: FieldSelection) -> str:
    tooltip = _plural(selection.total, "field")
    if selection.hidden_count > 0:
        tooltip += f" (showing {len(selection.visible)})"
    if node.data.schema is not None and node.data.schema.description:
        tooltip += "\n" + node.data.schema.description
    return tooltip


def _row_tooltip(field: TableField, index: int, total: int) -> str:
    tooltip = f"{field.name} ({field.type_annotation}), field {index} of {total}"
    if field.description:
        tooltip += "\n" + field.description
    return tooltip


def _base_row_style(color: str) -> dict[str, Any]:
    return {
        "text": 1,
        "align": "left",
        "verticalAlign": "middle",
        "spacingLeft": 4,
        "spacingRight": 4,
        "overflow": "hidden",
        "rotatable": 0,
        "movable": 0,
        "points": ROW_PORTS,
        "portConstraint": "eastwest",
        "fillColor": lighten(color, 40),
        "strokeColor": darken(color, 10),
        "fontSize": 12,
    }


def _with_description(label: str, field: TableField, options: ConversionOptions) -> str:
    if options.show_descriptions and field.description:
        label += "\n" + xml_escape(field.description[:DESCRIPTION_MAX_LEN])
    return label


def render_erd_row(
    field: TableField, color: str, options: ConversionOptions
) -> tuple[str, dict[str, Any]]:
    """Entity-relation row: `PK: Id : Text`, `FK: AccountId : Account`, ..."""
    label = xml_escape(field.name)
    if options.show_field_types:
        label += " : " + xml_escape(field.type_annotation)
    label = _with_description(label, field, options)

    style = _base_row_style(color)
    style.update(shape="partialRectangle", top=0, left=0, right=0, bottom=1)

    if field.is_primary:
        style.update(fontStyle=1, fillColor=lighten(color, 30))
        style.update(options.primary_key_style)
        label = "PK: " + label
    elif field.is_foreign:
        style.update(fontStyle=0, fillColor=lighten(color, 35))
        style.update(options.foreign_key_style)
        label = "FK: " + label
    return label, style


def visibility_marker(field: TableField) -> str:
    return "-" if field.read_only and not field.is_primary else "+"


def render_uml_row(
    field: TableField, color: str, options: ConversionOptions
) -> tuple[str, dict[str, Any]]:
    """Class-diagram row: `+ Name : Text`, `- CreatedDate : DateTime`, ..."""
    label = xml_escape(field.name)
    if options.uml_options.show_visibility_markers:
        label = f"{visibility_marker(field)} {label}"
    if options.show_field_types:
        label += " : " + xml_escape(field.type_annotation)
    label = _with_description(label, field, options)

    style = _base_row_style(color)
    style.update(fillColor="none", strokeColor="none", verticalAlign="top")
    if field.is_primary:
        style.update(fontStyle=4)
    return label, style


def _highlight_custom(style: dict[str, Any]) -> None:
    style.update(
        fillColor=CUSTOM_FIELD_FILL,
        strokeColor=CUSTOM_FIELD_STROKE,
        strokeWidth=2,
    )


def _erd_container_style(color: str, header_height: int, image: Optional[str]) -> dict[str, Any]:
    style: dict[str, Any] = {
        "swimlane": 1,
        "fontStyle": 1,
        "childLayout": "stackLayout",
        "horizontal": 1,
        "startSize": header_height,
        "horizontalStack": 0,
        "resizeParent": 1,
        "resizeParentMax": 0,
        "resizeLast": 0,
        "collapsible": 1,
        "marginBottom": 0,
        "fillColor": color,
        "strokeColor": darken(color, 20),
        "strokeWidth": 2,
        "rounded": 0,
        "align": "center",
        "verticalAlign": "middle",
        "html": 1,
    }
    if image:
        style["image"] = image
    return style


def _uml_container_style(color: str, header_height: int, image: Optional[str]) -> dict[str, Any]:
    style = _erd_container_style(color, header_height, image)
    style.update(
        verticalAlign="top",
        strokeWidth=1,
        swimlaneFillColor=lighten(color, 45),
    )
    return style


def _more_row_style(color: str) -> dict[str, Any]:
    style = _base_row_style(color)
    style.update(
        align="center",
        fillColor=lighten(color, 45),
        fontSize=11,
        fontStyle=2,
        editable=0,
        deletable=0,
        connectable=0,
    )
    return style


def _badge_width(text: str) -> int:
    return max(BADGE_MIN_WIDTH, len(text) * BADGE_CHAR_WIDTH + 16)


def _build_table_cells(
    node: BoardNode,
    table_name: str,
    parent_id: str,
    options: ConversionOptions,
    ids: IdAllocator,
    field_cells: dict[str, str],
    *,
    render_row: RowRenderer,
    container_style: Callable[[str, int, Optional[str]], dict[str, Any]],
    order_fields: Optional[Callable[[list[TableField]], list[TableField]]] = None,
) -> TableCells:
    color = normalize_color(node.data.color or DEFAULT_TABLE_COLOR)

    fields = extract_fields(
        node.data.schema,
        include_read_only=options.include_read_only_fields,
        custom_only=options.custom_fields_only,
    )
    if order_fields is not None:
        fields = order_fields(fields)
    selection = select_fields(fields, options.max_fields)

    has_icon = bool(node.data.icon)
    layout = TableLayout(
        width=options.table_width,
        header_height=HEADER_HEIGHT_WITH_ICON if has_icon else HEADER_HEIGHT,
        row_height=options.field_height,
        row_count=selection.row_count,
        collapsed=options.collapse_tables,
    )

    annotation = node.data.annotation
    wrapper: Optional[Cell] = None
    table_parent = parent_id
    table_x, table_y = round_half_up(node.x), round_half_up(node.y)
    if annotation:
        wrapper_id = ids.allocate(f"annotated_{table_name}")
        wrapper = Cell(
            id=wrapper_id,
            value="",
            style=compose_style(
                {
                    "fillColor": "none",
                    "strokeColor": "none",
                    "connectable": 0,
                    "container": 1,
                    "pointerEvents": 0,
                }
            ),
            vertex=True,
            parent=parent_id,
            x=table_x,
            y=table_y,
            width=layout.width,
            height=BADGE_HEIGHT + layout.display_height,
            connectable=False,
        )
        table_parent, table_x, table_y = wrapper_id, 0, BADGE_HEIGHT // 2

    table_id = ids.allocate(f"table_{table_name}")
    image = icon_url(node.data.icon) if node.data.icon else None
    table_cell = Cell(
        id=table_id,
        value=xml_escape(table_name),
        style=compose_style(container_style(color, layout.header_height, image)),
        vertex=True,
        parent=table_parent,
        x=table_x,
        y=table_y,
        width=layout.width,
        height=layout.display_height,
        collapsed=layout.collapsed,
        alternate_bounds=(layout.width, layout.alternate_height),
        tooltip=xml_escape(_table_tooltip(node, selection)),
    )

    cells: list[Cell] = [wrapper] if wrapper is not None else []
    cells.append(table_cell)

    y = layout.header_height
    for index, field in enumerate(selection.visible, start=1):
        row_id = ids.allocate(f"{table_name}_{field.name}")
        field_cells[f"{node.id}.{field.name}"] = row_id

        label, style = render_row(field, color, options)
        if options.highlight_custom_fields and field.is_custom:
            _highlight_custom(style)

        cells.append(
            Cell(
                id=row_id,
                value=label,
                style=compose_style(style),
                vertex=True,
                parent=table_id,
                x=0,
                y=y,
                width=layout.width,
                height=layout.row_height,
                tooltip=xml_escape(_row_tooltip(field, index, selection.total)),
            )
        )
        y += layout.row_height

    hidden = selection.hidden_count
    if hidden > 0:
        cells.append(
            Cell(
                id=ids.allocate(f"{table_name}_more"),
                value=xml_escape(f"... {_plural(hidden, 'more field')}"),
                style=compose_style(_more_row_style(color)),
                vertex=True,
                parent=table_id,
                x=0,
                y=y,
                width=layout.width,
                height=layout.row_height,
                tooltip=xml_escape(
                    f"{_plural(hidden, 'field')} of {selection.total} not shown"
                ),
                connectable=False,
            )
        )

    if wrapper is not None and annotation:
        badge_width = _badge_width(annotation)
        cells.append(
            Cell(
                id=ids.allocate(f"{table_name}_annotation"),
                value=xml_escape(annotation),
                style=compose_style(
                    {
                        "rounded": 1,
                        "arcSize": 50,
                        "whiteSpace": "wrap",
                        "html": 1,
                        "fillColor": BADGE_FILL_COLOR,
                        "strokeColor": darken(BADGE_FILL_COLOR, 20),
                        "fontColor": BADGE_FONT_COLOR,
                        "fontSize": 10,
                        "fontStyle": 1,
                        "align": "center",
                        "verticalAlign": "middle",
                        "movable": 0,
                    }
                ),
                vertex=True,
                parent=wrapper.id,
                x=layout.width - badge_width,
                y=0,
                width=badge_width,
                height=BADGE_HEIGHT,
                connectable=False,
            )
        )

    return TableCells(table_id=table_id, cells=cells)


def build_erd_table_cells(
    node: BoardNode,
    table_name: str,
    parent_id: str,
    options: ConversionOptions,
    ids: IdAllocator,
    field_cells: dict[str, str],
) -> TableCells:
    """Entity-relation table: swimlane header plus PK/FK-styled field rows."""
    return _build_table_cells(
        node,
        table_name,
        parent_id,
        options,
        ids,
        field_cells,
        render_row=render_erd_row,
        container_style=_erd_container_style,
    )


def _group_by_visibility(fields: list[TableField]) -> list[TableField]:
    return sorted(
        fields,
        key=lambda f: (not f.is_primary, not f.is_foreign, visibility_marker(f) == "-"),
    )


def build_uml_table_cells(
    node: BoardNode,
    table_name: str,
    parent_id: str,
    options: ConversionOptions,
    ids: IdAllocator,
    field_cells: dict[str, str],
) -> TableCells:
    """Class-diagram table: same container, rows carry visibility markers."""
    return _build_table_cells(
        node,
        table_name,
        parent_id,
        options,
        ids,
        field_cells,
        render_row=render_uml_row,
        container_style=_uml_container_style,
        order_fields=(
            _group_by_visibility if options.uml_options.group_by_visibility else None
        ),
    )
