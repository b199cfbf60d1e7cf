from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .constants import CUSTOM_FIELD_SUFFIX
from .model import SchemaProperty, TableSchema

PRIMARY_KEY_FIELD = "Id"

FORMAT_DISPLAY_TYPES: dict[str, str] = {
    "date": "Date",
    "date-time": "DateTime",
    "email": "Email",
    "uri": "URL",
    "url": "URL",
}

BASE_DISPLAY_TYPES: dict[str, str] = {
    "string": "Text",
    "number": "Number",
    "integer": "Integer",
    "boolean": "Boolean",
    "array": "Array",
    "object": "Object",
}


def is_primary_key(name: str) -> bool:
    return name == PRIMARY_KEY_FIELD


def is_foreign_key(name: str, prop: SchemaProperty) -> bool:
    return prop.target is not None or (
        name.endswith(PRIMARY_KEY_FIELD) and name != PRIMARY_KEY_FIELD
    )


def is_custom_field(name: str) -> bool:
    return name.endswith(CUSTOM_FIELD_SUFFIX)


def display_type(prop: SchemaProperty, *, foreign: bool = False) -> str:
    """Map a JSON-schema property to the short type shown on a row."""
    if foreign:
        return "FK"
    if prop.enum is not None:
        return "Enum"
    if prop.format and prop.format in FORMAT_DISPLAY_TYPES:
        return FORMAT_DISPLAY_TYPES[prop.format]
    return BASE_DISPLAY_TYPES.get(prop.type, "Text")


@dataclass(frozen=True)
class TableField:
    name: str
    display_type: str
    is_primary: bool
    is_foreign: bool
    is_custom: bool
    read_only: bool
    referenced_table: Optional[str]
    description: str

    @property
    def type_annotation(self) -> str:
        """Referenced table for lookups, otherwise the display type."""
        if self.is_foreign and self.referenced_table:
            return self.referenced_table
        return self.display_type


@dataclass(frozen=True)
class FieldSelection:
    """Rows to draw for one table."""

    visible: tuple[TableField, ...]
    total: int

    @property
    def hidden_count(self) -> int:
        return self.total - len(self.visible)

    @property
    def row_count(self) -> int:
        return len(self.visible) + (1 if self.hidden_count > 0 else 0)


def extract_fields(
    schema: Optional[TableSchema],
    *,
    include_read_only: bool = True,
    custom_only: bool = False,
) -> list[TableField]:
    """Filter a schema's properties into ordered table fields.

    Primary key first, then lookups, then the rest; declaration order is kept
    within each group.
    """
    if schema is None:
        return []

    out: list[TableField] = []
    for name, prop in schema.properties.items():
        primary = is_primary_key(name)
        foreign = is_foreign_key(name, prop)

        if not include_read_only and prop.read_only and not primary and not foreign:
            continue
        if custom_only and not is_custom_field(name):
            continue

        out.append(
            TableField(
                name=name,
                display_type=display_type(prop, foreign=foreign),
                is_primary=primary,
                is_foreign=foreign,
                is_custom=is_custom_field(name),
                read_only=prop.read_only,
                referenced_table=prop.target,
                description=prop.description or prop.title,
            )
        )

    out.sort(key=lambda f: (not f.is_primary, not f.is_foreign))
    return out


def select_fields(fields: list[TableField], max_fields: Optional[int]) -> FieldSelection:
    if max_fields is not None and len(fields) > max_fields:
        return FieldSelection(visible=tuple(fields[:max_fields]), total=len(fields))
    return FieldSelection(visible=tuple(fields), total=len(fields))
