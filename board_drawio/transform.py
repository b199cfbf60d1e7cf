from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Union
from urllib.parse import quote

from .builders.edge import edge_seed, edge_tooltip, resolve_endpoint
from .builders.group import build_group_cell
from .builders.registry import get_style
from .builders.shape import build_shape_cell
from .cells import Cell, sentinel_cells
from .constants import LAYER_CELL_ID, SKIPPED_NODE_TYPES, VIEWER_URL_BASE
from .document import build_document, build_title_cell, content_bounds
from .ids import IdAllocator
from .model import Board, BoardNode, NodeKind
from .options import ConversionOptions, options_from_mapping

BoardInput = Union[Board, Mapping[str, Any]]
OptionsInput = Union[ConversionOptions, Mapping[str, Any], None]


def _by_y(nodes: list[BoardNode]) -> list[BoardNode]:
    # Lower nodes are emitted later so they draw on top when overlapping.
    return sorted(nodes, key=lambda n: n.y)


def _as_board(board: BoardInput) -> Board:
    return board if isinstance(board, Board) else Board.from_mapping(board)


def _as_options(options: OptionsInput) -> ConversionOptions:
    if isinstance(options, ConversionOptions):
        return options
    return options_from_mapping(options)


def build_cells(board: BoardInput, options: OptionsInput = None) -> list[Cell]:
    """Run the node/edge passes and return every cell in document order."""
    board = _as_board(board)
    options = _as_options(options)
    style = get_style(options.diagram_style)

    ids = IdAllocator()
    cells: list[Cell] = sentinel_cells()
    node_cells: dict[str, str] = {}
    field_cells: dict[str, str] = {}
    display_names: dict[str, str] = {}

    # Pass 1: group zones.
    if options.include_group_zones:
        for node in _by_y([n for n in board.nodes if n.kind is NodeKind.GROUP_ZONE]):
            cell_id = ids.allocate(f"group_{node.data.label or node.id}")
            node_cells[node.id] = cell_id
            display_names[node.id] = node.display_name
            cells.append(
                build_group_cell(node, cell_id, show_descriptions=options.show_descriptions)
            )

    # Pass 2: tables.
    for node in _by_y([n for n in board.nodes if n.kind is NodeKind.TABLE]):
        parent_id = LAYER_CELL_ID
        if node.parent_id:
            parent_id = node_cells.get(node.parent_id, LAYER_CELL_ID)
        table = style.build_table(
            node, node.table_name, parent_id, options, ids, field_cells
        )
        node_cells[node.id] = table.table_id
        display_names[node.id] = node.display_name
        cells.extend(table.cells)

    # Pass 3: everything else that renders.
    handled = {NodeKind.TABLE, NodeKind.GROUP_ZONE}
    others = [
        n
        for n in board.nodes
        if n.kind not in handled and n.type not in SKIPPED_NODE_TYPES
    ]
    for node in _by_y(others):
        cell_id = ids.allocate(f"{node.type}_{node.data.label or node.id}")
        node_cells[node.id] = cell_id
        display_names[node.id] = node.display_name
        cells.append(
            build_shape_cell(node, cell_id, show_descriptions=options.show_descriptions)
        )

    # Pass 4: edges, in input order; unresolvable endpoints are dropped.
    for edge in board.edges:
        source_id = resolve_endpoint(edge.source, edge.source_field, node_cells, field_cells)
        target_id = resolve_endpoint(edge.target, edge.target_field, node_cells, field_cells)
        if not source_id or not target_id:
            continue

        cells.append(
            style.build_edge(
                edge,
                ids.allocate(edge_seed(edge)),
                source_id,
                target_id,
                options,
                tooltip=edge_tooltip(
                    edge,
                    display_names.get(edge.source, edge.source),
                    display_names.get(edge.target, edge.target),
                ),
            )
        )

    title_cell = build_title_cell(
        options.title,
        options.title_display,
        content_bounds(cells),
        ids,
        repository=options.metadata.repository if options.metadata else None,
    )
    if title_cell is not None:
        cells.append(title_cell)

    return cells


def transform_board_to_drawio(
    board: BoardInput,
    options: OptionsInput = None,
    *,
    modified: Optional[datetime] = None,
) -> str:
    """Convert a board (nodes + edges) into a draw.io XML document.

    Raises TypeError when the board lacks `nodes`/`edges` lists.
    """
    options = _as_options(options)
    cells = build_cells(board, options)
    return build_document(cells, options, modified=modified)


def generate_viewer_url(xml: str) -> str:
    """URL that opens `xml` directly in the diagrams.net viewer."""
    # Same character set as JavaScript encodeURIComponent.
    encoded = quote(xml, safe="-_.!~*'()")
    return f"{VIEWER_URL_BASE}#R{encoded}"


def transform_board_with_viewer_url(
    board: BoardInput,
    options: OptionsInput = None,
    *,
    modified: Optional[datetime] = None,
) -> tuple[str, str]:
    xml = transform_board_to_drawio(board, options, modified=modified)
    return xml, generate_viewer_url(xml)
