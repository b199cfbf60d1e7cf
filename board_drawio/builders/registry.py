from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..cells import Cell
from ..ids import IdAllocator
from ..model import BoardEdge, BoardNode
from ..options import ConversionOptions
from .edge import build_erd_edge_cell, build_uml_edge_cell
from .table import TableCells, build_erd_table_cells, build_uml_table_cells

TableBuilder = Callable[
    [BoardNode, str, str, ConversionOptions, IdAllocator, dict[str, str]], TableCells
]
EdgeBuilder = Callable[..., Cell]


@dataclass(frozen=True)
class DiagramStyleSpec:
    style_id: str
    title: str
    build_table: TableBuilder
    build_edge: EdgeBuilder


STYLE_SPECS: list[DiagramStyleSpec] = [
    DiagramStyleSpec(
        style_id="erd",
        title="Entity-relationship diagram",
        build_table=build_erd_table_cells,
        build_edge=build_erd_edge_cell,
    ),
    DiagramStyleSpec(
        style_id="uml",
        title="UML class diagram",
        build_table=build_uml_table_cells,
        build_edge=build_uml_edge_cell,
    ),
]


def get_style(style_id: str) -> DiagramStyleSpec:
    for spec in STYLE_SPECS:
        if spec.style_id == style_id:
            return spec
    raise ValueError(f"unknown diagram style {style_id!r}")
