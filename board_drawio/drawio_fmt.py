from __future__ import annotations

import math
import re
from typing import Any, Mapping, Sequence, Union

from .constants import SLDS_ICON_BASE_URL, SLDS_ICON_CATEGORIES

StyleValue = Union[str, int, float]
StyleMap = Mapping[str, StyleValue]

# Style keys that draw.io treats as bare flags when enabled.
FLAG_STYLE_KEYS = frozenset({"swimlane"})

_DASH_SPLIT_RE = re.compile(r"[\s,]+")


def xml_escape(text: object) -> str:
    """Escape the five XML special characters."""
    return (
        str(text)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def xml_attr(text: str) -> str:
    """Prepare already-escaped text for an attribute (newlines become char refs)."""
    return text.replace("\r\n", "\n").replace("\n", "&#xa;")


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)


def fmt_number(value: float) -> str:
    """Format a number without a trailing `.0` (1.0 -> "1", 0.75 -> "0.75")."""
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def compose_style(style: StyleMap) -> str:
    """Serialize a style mapping as `key=value;...;` preserving key order.

    `swimlane=1` is emitted as the bare `swimlane` keyword.
    """
    parts: list[str] = []
    for key, value in style.items():
        if key in FLAG_STYLE_KEYS and value not in (0, "0", False, None, ""):
            parts.append(key)
            continue
        if isinstance(value, (int, float)):
            parts.append(f"{key}={fmt_number(value)}")
        else:
            parts.append(f"{key}={value}")
    return ";".join(parts) + ";"


def dash_pattern(value: Any) -> str | None:
    """Normalize a CSS-like dash array (list or "5, 5" string) to `5,5`."""
    if isinstance(value, (list, tuple)):
        items: Sequence[Any] = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        items = [value]
    elif isinstance(value, str):
        items = [p for p in _DASH_SPLIT_RE.split(value.strip()) if p]
    else:
        return None

    out: list[str] = []
    for item in items:
        try:
            out.append(fmt_number(float(item)))
        except (TypeError, ValueError):
            return None
    return ",".join(out) if out else None


def icon_url(icon_ref: str) -> str | None:
    """Resolve a `category:name` icon reference to a public SLDS icon URL."""
    if not icon_ref:
        return None
    parts = icon_ref.split(":")
    if len(parts) != 2:
        return None
    category, name = parts
    if category not in SLDS_ICON_CATEGORIES or not name:
        return None
    return f"{SLDS_ICON_BASE_URL}/{category}/{name}.svg"
