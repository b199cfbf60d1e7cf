"""Convert board templates into draw.io (mxGraph) XML diagrams."""

from .options import (
    ConversionOptions,
    Metadata,
    PageSettings,
    TitleDisplay,
    UmlOptions,
    ViewportSettings,
    options_from_mapping,
)
from .transform import (
    build_cells,
    generate_viewer_url,
    transform_board_to_drawio,
    transform_board_with_viewer_url,
)

__version__ = "1.0.0"
