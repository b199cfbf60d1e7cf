from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .constants import LAYER_CELL_ID, ROOT_CELL_ID


@dataclass(frozen=True)
class Cell:
    """One draw.io `mxCell` (vertex or edge).

    `value` and `tooltip` hold already-escaped text. Geometry is relative to
    `parent`.
    """

    id: str
    value: Optional[str] = None
    style: Optional[str] = None
    vertex: bool = False
    edge: bool = False
    parent: Optional[str] = None
    source: Optional[str] = None
    target: Optional[str] = None
    x: Optional[int] = None
    y: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    collapsed: Optional[bool] = None
    alternate_bounds: Optional[tuple[int, int]] = None
    tooltip: Optional[str] = None
    connectable: Optional[bool] = None

    @property
    def has_geometry(self) -> bool:
        return self.vertex or self.edge


def sentinel_cells() -> list[Cell]:
    """The absolute root and default layer every document starts with."""
    return [Cell(id=ROOT_CELL_ID), Cell(id=LAYER_CELL_ID, parent=ROOT_CELL_ID)]
