from __future__ import annotations

import html
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from .cells import Cell
from .constants import (
    DIAGRAM_PAGE_ID,
    DOCUMENT_AGENT,
    DOCUMENT_HOST,
    DOCUMENT_VERSION,
    LAYER_CELL_ID,
    ROOT_CELL_ID,
    TITLE_MARGIN,
    VIEWPORT_DX_DEFAULT,
    VIEWPORT_DY_DEFAULT,
    ZOOM_MAX,
    ZOOM_MIN,
)
from .drawio_fmt import compose_style, fmt_number, round_half_up, xml_attr, xml_escape
from .ids import IdAllocator
from .options import TITLE_FONT_STYLES, ConversionOptions, Metadata, TitleDisplay

TITLE_MIN_WIDTH = 400
FIT_MARGIN = 40

_ATTR_NAME_RE = re.compile(r"[^A-Za-z0-9_.-]")
# Attribute names the `<object>` wrapper already uses.
_RESERVED_ATTRS = frozenset({"id", "label", "placeholders", "tooltip"})


@dataclass(frozen=True)
class Bounds:
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y


@dataclass(frozen=True)
class PageView:
    dx: int
    dy: int
    page_width: int
    page_height: int
    page_scale: float


def content_bounds(cells: Iterable[Cell]) -> Optional[Bounds]:
    """Bounding box of the vertices placed directly on the default layer."""
    boxes = [
        (c.x, c.y, c.x + (c.width or 0), c.y + (c.height or 0))
        for c in cells
        if c.vertex and c.parent == LAYER_CELL_ID and c.x is not None and c.y is not None
    ]
    if not boxes:
        return None
    return Bounds(
        min_x=min(b[0] for b in boxes),
        min_y=min(b[1] for b in boxes),
        max_x=max(b[2] for b in boxes),
        max_y=max(b[3] for b in boxes),
    )


def clamp_zoom(zoom: float) -> float:
    return max(ZOOM_MIN, min(ZOOM_MAX, zoom))


def page_view(options: ConversionOptions, bounds: Optional[Bounds]) -> PageView:
    """Resolve page size, scale and scroll offsets for `<mxGraphModel>`."""
    page_width, page_height = options.page_settings.dimensions()
    viewport = options.viewport

    if viewport.initial_zoom is not None:
        zoom = clamp_zoom(float(viewport.initial_zoom))
    elif viewport.auto_fit and bounds is not None and bounds.width and bounds.height:
        zoom = clamp_zoom(
            min(
                page_width / (bounds.width + 2 * FIT_MARGIN),
                page_height / (bounds.height + 2 * FIT_MARGIN),
            )
        )
        zoom = round_half_up(zoom * 100) / 100
    else:
        zoom = 1.0

    dx, dy = VIEWPORT_DX_DEFAULT, VIEWPORT_DY_DEFAULT
    if viewport.center_content and bounds is not None:
        dx = round_half_up((page_width - bounds.width * zoom) / 2 - bounds.min_x * zoom)
        dy = round_half_up((page_height - bounds.height * zoom) / 2 - bounds.min_y * zoom)

    return PageView(
        dx=dx,
        dy=dy,
        page_width=page_width,
        page_height=page_height,
        page_scale=zoom,
    )


def _title_html(title: str, repository: Optional[str]) -> str:
    out = html.escape(title, quote=True)
    if repository:
        link = html.escape(repository, quote=True)
        out += f'<br><font style="font-size: 11px;"><a href="{link}">{link}</a></font>'
    return out


def build_title_cell(
    title: str,
    display: TitleDisplay,
    bounds: Optional[Bounds],
    ids: IdAllocator,
    *,
    repository: Optional[str] = None,
) -> Optional[Cell]:
    """Visible title text block, placed above or below the content."""
    if not display.show:
        return None

    bounds = bounds or Bounds(0, 0, TITLE_MIN_WIDTH, 0)
    width = max(bounds.width, TITLE_MIN_WIDTH)
    height = display.font_size * 2 + (display.font_size if repository else 0)

    vertical, _, horizontal = display.position.partition("-")
    if horizontal == "left":
        x = bounds.min_x
        align = "left"
    elif horizontal == "right":
        x = bounds.max_x - width
        align = "right"
    else:
        x = bounds.min_x + (bounds.width - width) // 2
        align = "center"
    if vertical == "bottom":
        y = bounds.max_y + TITLE_MARGIN
    else:
        y = bounds.min_y - height - TITLE_MARGIN

    style = compose_style(
        {
            "text": 1,
            "html": 1,
            "strokeColor": "none",
            "fillColor": "none",
            "align": align,
            "verticalAlign": "middle",
            "whiteSpace": "wrap",
            "fontSize": display.font_size,
            "fontStyle": TITLE_FONT_STYLES[display.font_style],
            "fontColor": display.color,
            "movable": 1,
        }
    )
    return Cell(
        id=ids.allocate(f"title_{title}"),
        value=xml_escape(_title_html(title, repository)),
        style=style,
        vertex=True,
        parent=LAYER_CELL_ID,
        x=x,
        y=y,
        width=width,
        height=height,
    )


def _attr_name(key: str) -> str:
    name = _ATTR_NAME_RE.sub("_", key)
    if not name or not (name[0].isalpha() or name[0] == "_"):
        name = "_" + name
    if name in _RESERVED_ATTRS:
        name = f"meta_{name}"
    return name


def _metadata_attrs(metadata: Optional[Metadata]) -> str:
    if metadata is None:
        return ""
    return "".join(
        f' {_attr_name(name)}="{xml_attr(xml_escape(value))}"'
        for name, value in metadata.attributes()
    )


def _cell_attrs(cell: Cell, *, with_identity: bool) -> str:
    out = ""
    if with_identity:
        out += f' id="{xml_escape(cell.id)}"'
        if cell.value is not None:
            out += f' value="{xml_attr(cell.value)}"'
    if cell.style is not None:
        out += f' style="{xml_escape(cell.style)}"'
    if cell.vertex:
        out += ' vertex="1"'
    if cell.edge:
        out += ' edge="1"'
    if cell.connectable is False:
        out += ' connectable="0"'
    if cell.parent is not None:
        out += f' parent="{xml_escape(cell.parent)}"'
    if cell.source is not None:
        out += f' source="{xml_escape(cell.source)}"'
    if cell.target is not None:
        out += f' target="{xml_escape(cell.target)}"'
    if cell.collapsed is not None:
        out += f' collapsed="{1 if cell.collapsed else 0}"'
    return out


def _geometry_lines(cell: Cell, indent: str) -> list[str]:
    if cell.edge:
        return [
            f'{indent}<mxGeometry relative="1" as="geometry">',
            f'{indent}  <mxPoint as="sourcePoint"/>',
            f'{indent}  <mxPoint as="targetPoint"/>',
            f"{indent}</mxGeometry>",
        ]

    geometry = f"{indent}<mxGeometry"
    for name in ("x", "y", "width", "height"):
        value = getattr(cell, name)
        if value is not None:
            geometry += f' {name}="{fmt_number(value)}"'
    geometry += ' as="geometry"'

    if cell.alternate_bounds is None:
        return [geometry + "/>"]
    alt_width, alt_height = cell.alternate_bounds
    return [
        geometry + ">",
        f'{indent}  <mxRectangle width="{alt_width}" height="{alt_height}" as="alternateBounds"/>',
        f"{indent}</mxGeometry>",
    ]


def render_cell(cell: Cell, *, metadata: Optional[Metadata] = None, indent: str = "        ") -> list[str]:
    """Render one cell as `<mxCell>` (wrapped in `<UserObject>` when it has a tooltip)."""
    meta = _metadata_attrs(metadata) if cell.id == ROOT_CELL_ID else ""
    if meta:
        return [
            f'{indent}<object label=""{meta} id="{ROOT_CELL_ID}">',
            f"{indent}  <mxCell/>",
            f"{indent}</object>",
        ]

    if cell.tooltip is not None:
        label = xml_attr(cell.value or "")
        lines = [
            f'{indent}<UserObject label="{label}" tooltip="{xml_attr(cell.tooltip)}" '
            f'id="{xml_escape(cell.id)}">'
        ]
        inner = indent + "  "
        attrs = _cell_attrs(cell, with_identity=False)
        if cell.has_geometry:
            lines.append(f"{inner}<mxCell{attrs}>")
            lines.extend(_geometry_lines(cell, inner + "  "))
            lines.append(f"{inner}</mxCell>")
        else:
            lines.append(f"{inner}<mxCell{attrs}/>")
        lines.append(f"{indent}</UserObject>")
        return lines

    attrs = _cell_attrs(cell, with_identity=True)
    if not cell.has_geometry:
        return [f"{indent}<mxCell{attrs}/>"]
    return [
        f"{indent}<mxCell{attrs}>",
        *_geometry_lines(cell, indent + "  "),
        f"{indent}</mxCell>",
    ]


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    stamp = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def build_document(
    cells: Sequence[Cell],
    options: ConversionOptions,
    *,
    modified: Optional[datetime] = None,
) -> str:
    """Wrap cells in `<mxfile>/<diagram>/<mxGraphModel>/<root>`."""
    view = page_view(options, content_bounds(cells))

    lines: list[str] = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<mxfile host="{DOCUMENT_HOST}" modified="{iso_timestamp(modified)}" '
        f'agent="{DOCUMENT_AGENT}" version="{DOCUMENT_VERSION}" type="device">',
        f'  <diagram id="{DIAGRAM_PAGE_ID}" name="{xml_escape(options.title)}">',
        f'    <mxGraphModel dx="{view.dx}" dy="{view.dy}" grid="1" gridSize="10" '
        'guides="1" tooltips="1" connect="1" arrows="1" fold="1" page="1" '
        f'pageScale="{fmt_number(view.page_scale)}" pageWidth="{view.page_width}" '
        f'pageHeight="{view.page_height}" math="0" shadow="1">',
        "      <root>",
    ]
    for cell in cells:
        lines.extend(render_cell(cell, metadata=options.metadata))
    lines += [
        "      </root>",
        "    </mxGraphModel>",
        "  </diagram>",
        "</mxfile>",
    ]
    return "\n".join(lines)
