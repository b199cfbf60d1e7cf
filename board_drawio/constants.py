# board_drawio/constants.py
from __future__ import annotations

# Sentinel cells present in every document.
ROOT_CELL_ID = "0"
LAYER_CELL_ID = "1"

DEFAULT_TITLE = "SF Explorer Board"
DEFAULT_TABLE_WIDTH = 200
DEFAULT_FIELD_HEIGHT = 26
DEFAULT_MAX_FIELDS = 20

HEADER_HEIGHT = 30
HEADER_HEIGHT_WITH_ICON = 60

GROUP_DEFAULT_SIZE: tuple[int, int] = (800, 400)
SHAPE_DEFAULT_SIZE: tuple[int, int] = (180, 80)

DEFAULT_TABLE_COLOR = "#3b82f6"
DEFAULT_GROUP_COLOR = "#e0e0e0"
DEFAULT_SHAPE_COLOR = "#f0f0f0"
DEFAULT_EDGE_COLOR = "#6c757d"

NOTE_FILL_COLOR = "#ffffcc"
NOTE_STROKE_COLOR = "#cccc00"

CUSTOM_FIELD_SUFFIX = "__c"
CUSTOM_FIELD_FILL = "#fff4e5"
CUSTOM_FIELD_STROKE = "#ff9800"

# Annotation badge drawn over a table header.
BADGE_HEIGHT = 20
BADGE_MIN_WIDTH = 40
BADGE_CHAR_WIDTH = 7
BADGE_FILL_COLOR = "#f59e0b"
BADGE_FONT_COLOR = "#ffffff"

# Node types that never render.
SKIPPED_NODE_TYPES: tuple[str, ...] = ("input", "legend")

# Pixel dimensions (portrait) of named page sizes.
PAGE_SIZES: dict[str, tuple[int, int]] = {
    "A4": (827, 1169),
    "A3": (1169, 1654),
    "Letter": (816, 1056),
    "Legal": (816, 1344),
    "Tabloid": (1056, 1632),
}
PAGE_SIZE_DEFAULT = "A4"

VIEWPORT_DX_DEFAULT = 1422
VIEWPORT_DY_DEFAULT = 794
ZOOM_MIN = 0.1
ZOOM_MAX = 4.0

TITLE_MARGIN = 20

DOCUMENT_HOST = "app.diagrams.net"
DOCUMENT_AGENT = "SF Explorer Board Converter"
DOCUMENT_VERSION = "1.0.0"
DIAGRAM_PAGE_ID = "diagram1"

VIEWER_URL_BASE = (
    "https://viewer.diagrams.net/?lightbox=1&highlight=0000ff&layers=1&nav=1"
    f"&page-id={DIAGRAM_PAGE_ID}"
)

SLDS_ICON_BASE_URL = "https://unpkg.com/@salesforce-ux/design-system@2.24.5/assets/icons"
SLDS_ICON_CATEGORIES: tuple[str, ...] = (
    "standard",
    "utility",
    "custom",
    "action",
    "doctype",
)
