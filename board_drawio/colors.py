from __future__ import annotations

import re

from .drawio_fmt import round_half_up

_RGBA_RE = re.compile(
    r"rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*([\d.]+)\s*)?\)"
)


def normalize_color(color: str) -> str:
    """Return `color` as `#rrggbb`.

    Hex input passes through untouched. `rgb(...)`/`rgba(...)` is converted and
    the alpha channel dropped. Anything else is returned unchanged.
    """
    if color.startswith("#"):
        return color

    match = _RGBA_RE.search(color)
    if not match:
        return color

    r, g, b = (min(int(match.group(i)), 255) for i in (1, 2, 3))
    return f"#{r:02x}{g:02x}{b:02x}"


def _split_hex(hex_color: str) -> tuple[int, int, int]:
    raw = hex_color.lstrip("#")
    if len(raw) == 3:
        raw = "".join(ch * 2 for ch in raw)
    try:
        num = int(raw[:6], 16)
    except ValueError:
        num = 0
    return (num >> 16) & 0xFF, (num >> 8) & 0xFF, num & 0xFF


def _amount(percent: float) -> int:
    return round_half_up(2.55 * percent)


def _shift(hex_color: str, amount: int) -> str:
    r, g, b = _split_hex(hex_color)
    r, g, b = (max(0, min(255, ch + amount)) for ch in (r, g, b))
    return f"#{r:02x}{g:02x}{b:02x}"


def darken(hex_color: str, percent: float) -> str:
    """Move each channel toward 0 by 2.55 * percent (rounded)."""
    return _shift(hex_color, -_amount(percent))


def lighten(hex_color: str, percent: float) -> str:
    """Move each channel toward 255 by 2.55 * percent (rounded)."""
    return _shift(hex_color, _amount(percent))
