from __future__ import annotations

from pathlib import Path


def write_drawio(path: Path, xml: str) -> None:
    """Write a draw.io document, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(xml, encoding="utf-8")
