"""Cell builders: one board node or edge in, draw.io cells out."""
