from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Literal, Mapping, Optional, Union

from .constants import (
    DEFAULT_FIELD_HEIGHT,
    DEFAULT_MAX_FIELDS,
    DEFAULT_TABLE_WIDTH,
    DEFAULT_TITLE,
    PAGE_SIZE_DEFAULT,
    PAGE_SIZES,
)

DiagramStyle = Literal["erd", "uml"]
RelationshipStyle = Literal["association", "smart"]
Orientation = Literal["portrait", "landscape"]
TitlePosition = Literal[
    "top-left", "top-center", "top-right", "bottom-left", "bottom-center", "bottom-right"
]
TitleFontStyle = Literal["normal", "bold", "italic", "bold-italic"]

DIAGRAM_STYLES: tuple[str, ...] = ("erd", "uml")
RELATIONSHIP_STYLES: tuple[str, ...] = ("association", "smart")
ORIENTATIONS: tuple[str, ...] = ("portrait", "landscape")
TITLE_POSITIONS: tuple[str, ...] = (
    "top-left",
    "top-center",
    "top-right",
    "bottom-left",
    "bottom-center",
    "bottom-right",
)
TITLE_FONT_STYLES: dict[str, int] = {
    "normal": 0,
    "bold": 1,
    "italic": 2,
    "bold-italic": 3,
}


def _require_choice(value: str, choices: tuple[str, ...], *, name: str) -> None:
    if value not in choices:
        raise ValueError(f"{name} must be one of {', '.join(choices)}; got {value!r}")


@dataclass(frozen=True)
class UmlOptions:
    show_visibility_markers: bool = True
    group_by_visibility: bool = False
    relationship_style: RelationshipStyle = "smart"

    def __post_init__(self) -> None:
        _require_choice(
            self.relationship_style, RELATIONSHIP_STYLES, name="relationship_style"
        )


@dataclass(frozen=True)
class Metadata:
    author: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None
    created: Union[datetime, str, None] = None
    repository: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    def attributes(self) -> list[tuple[str, str]]:
        """Ordered (name, value) pairs for the non-empty metadata fields."""
        out: list[tuple[str, str]] = []
        for name in ("author", "description", "version"):
            value = getattr(self, name)
            if value not in (None, ""):
                out.append((name, str(value)))
        if self.created is not None:
            created = (
                self.created.isoformat()
                if isinstance(self.created, datetime)
                else str(self.created)
            )
            out.append(("created", created))
        if self.repository:
            out.append(("repository", self.repository))
        for key, value in self.extra.items():
            if value is None:
                continue
            out.append((str(key), value.isoformat() if isinstance(value, datetime) else str(value)))
        return out


@dataclass(frozen=True)
class PageSettings:
    size: str = PAGE_SIZE_DEFAULT
    orientation: Orientation = "portrait"
    width: Optional[int] = None
    height: Optional[int] = None

    def __post_init__(self) -> None:
        _require_choice(self.orientation, ORIENTATIONS, name="orientation")
        if self.size == "custom":
            if not self.width or not self.height:
                raise ValueError("custom page size requires width and height")
        elif self.size not in PAGE_SIZES:
            raise ValueError(
                f"unknown page size {self.size!r} (expected one of "
                f"{', '.join(PAGE_SIZES)} or 'custom')"
            )

    def dimensions(self) -> tuple[int, int]:
        if self.size == "custom":
            width, height = int(self.width or 0), int(self.height or 0)
        else:
            width, height = PAGE_SIZES[self.size]
        if self.orientation == "landscape":
            width, height = max(width, height), min(width, height)
        return width, height


@dataclass(frozen=True)
class ViewportSettings:
    auto_fit: bool = False
    initial_zoom: Optional[float] = None
    center_content: bool = False


@dataclass(frozen=True)
class TitleDisplay:
    show: bool = False
    position: TitlePosition = "top-center"
    font_size: int = 24
    font_style: TitleFontStyle = "bold"
    color: str = "#000000"

    def __post_init__(self) -> None:
        _require_choice(self.position, TITLE_POSITIONS, name="title position")
        _require_choice(self.font_style, tuple(TITLE_FONT_STYLES), name="title font_style")


@dataclass(frozen=True)
class ConversionOptions:
    """Options controlling the board -> draw.io conversion."""

    include_read_only_fields: bool = True
    include_group_zones: bool = True
    title: str = DEFAULT_TITLE
    show_field_types: bool = True
    show_descriptions: bool = False
    table_width: int = DEFAULT_TABLE_WIDTH
    field_height: int = DEFAULT_FIELD_HEIGHT
    max_fields: Optional[int] = DEFAULT_MAX_FIELDS
    collapse_tables: bool = True
    highlight_custom_fields: bool = False
    custom_fields_only: bool = False
    primary_key_style: dict[str, Any] = field(default_factory=dict)
    foreign_key_style: dict[str, Any] = field(default_factory=dict)

    diagram_style: DiagramStyle = "erd"
    uml_options: UmlOptions = field(default_factory=UmlOptions)

    metadata: Optional[Metadata] = None
    page_settings: PageSettings = field(default_factory=PageSettings)
    viewport: ViewportSettings = field(default_factory=ViewportSettings)
    title_display: TitleDisplay = field(default_factory=TitleDisplay)

    def __post_init__(self) -> None:
        _require_choice(self.diagram_style, DIAGRAM_STYLES, name="diagram_style")
        if self.table_width <= 0 or self.field_height <= 0:
            raise ValueError("table_width and field_height must be positive")
        if self.max_fields is not None and self.max_fields < 0:
            raise ValueError("max_fields must be >= 0")


_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

# Option keys whose values are nested option objects.
_NESTED: dict[str, type] = {
    "uml_options": UmlOptions,
    "metadata": Metadata,
    "page_settings": PageSettings,
    "viewport": ViewportSettings,
    "title_display": TitleDisplay,
}


def _snake(key: str) -> str:
    return _CAMEL_RE.sub("_", key).lower()


def _build(cls: type, raw: Mapping[str, Any], *, path: str) -> Any:
    known = {f.name for f in fields(cls)}
    kwargs: dict[str, Any] = {}
    extra: dict[str, Any] = {}

    for key, value in raw.items():
        name = _snake(str(key))
        if name not in known:
            if cls is Metadata:
                # Metadata accepts arbitrary extra key/values.
                extra[str(key)] = value
                continue
            raise ValueError(f"unknown option {path}{key!r}")

        nested = _NESTED.get(name) if cls is ConversionOptions else None
        if nested is not None and value is None:
            continue
        if nested is not None:
            if not isinstance(value, Mapping):
                raise TypeError(
                    f"expected mapping at {path}{key}, got: {type(value).__name__}"
                )
            value = _build(nested, value, path=f"{path}{key}.")
        kwargs[name] = value

    if extra:
        kwargs["extra"] = {**kwargs.get("extra", {}), **extra}
    return cls(**kwargs)


def options_from_mapping(raw: Optional[Mapping[str, Any]]) -> ConversionOptions:
    """Build options from a camelCase (or snake_case) mapping."""
    if raw is None:
        return ConversionOptions()
    if not isinstance(raw, Mapping):
        raise TypeError(f"options must be a mapping, got: {type(raw).__name__}")
    return _build(ConversionOptions, raw, path="")
