from __future__ import annotations

import re
from typing import Iterable

from .constants import LAYER_CELL_ID, ROOT_CELL_ID

_UNSAFE_ID_CHARS_RE = re.compile(r"[^A-Za-z0-9_-]")
MAX_ID_LENGTH = 50


def safe_id(text: str) -> str:
    """Make `text` usable as a draw.io cell id (and as a file-name stem)."""
    out = _UNSAFE_ID_CHARS_RE.sub("_", str(text))
    if out[:1].isdigit():
        out = "id_" + out
    return out[:MAX_ID_LENGTH]


class IdAllocator:
    """Hands out collision-free cell ids for a single document."""

    def __init__(self, reserved: Iterable[str] = (ROOT_CELL_ID, LAYER_CELL_ID)) -> None:
        self.used: set[str] = set(reserved)

    def allocate(self, preferred: str) -> str:
        candidate = safe_id(preferred)
        n = 1
        while candidate in self.used:
            candidate = f"{safe_id(preferred)}_{n}"
            n += 1
        self.used.add(candidate)
        return candidate

    def __contains__(self, cell_id: object) -> bool:
        return cell_id in self.used
