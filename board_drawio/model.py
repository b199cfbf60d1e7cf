from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

# Handle ids look like `<fieldName>-source`, `<fieldName>-target-inv`, ...
HANDLE_SUFFIXES: tuple[str, ...] = ("-source-inv", "-target-inv", "-source", "-target")


class NodeKind(str, Enum):
    TABLE = "table"
    GROUP_ZONE = "groupZone"
    MARKDOWN = "markdown"
    CALLOUT = "callout"
    ANNOTATION = "annotation"
    NOTE = "note"
    INPUT = "input"
    LEGEND = "legend"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "NodeKind":
        for kind in cls:
            if kind.value == value and kind is not cls.OTHER:
                return kind
        return cls.OTHER


class EdgeKind(str, Enum):
    BETWEEN_TABLES = "betweenTables"
    BETWEEN_TABLES_INVERTED = "betweenTablesInverted"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "EdgeKind":
        if value == cls.BETWEEN_TABLES.value:
            return cls.BETWEEN_TABLES
        if value == cls.BETWEEN_TABLES_INVERTED.value:
            return cls.BETWEEN_TABLES_INVERTED
        return cls.OTHER

    @property
    def is_foreign_key(self) -> bool:
        return self is not EdgeKind.OTHER


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _opt_num(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    return None


def _mapping(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def strip_handle_suffix(handle: str) -> str:
    """Recover the field name from a connection handle id."""
    for suffix in HANDLE_SUFFIXES:
        if handle.endswith(suffix):
            return handle[: -len(suffix)]
    return handle


@dataclass(frozen=True)
class SchemaProperty:
    type: str = "string"
    format: Optional[str] = None
    title: str = ""
    description: str = ""
    read_only: bool = False
    enum: Optional[tuple[Any, ...]] = None
    target: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Any) -> "SchemaProperty":
        data = _mapping(raw)
        enum = data.pop("enum", None)
        return cls(
            type=_opt_str(data.pop("type", None)) or "string",
            format=_opt_str(data.pop("format", None)),
            title=_opt_str(data.pop("title", None)) or "",
            description=_opt_str(data.pop("description", None)) or "",
            read_only=bool(data.pop("readOnly", False)),
            enum=tuple(enum) if isinstance(enum, (list, tuple)) else None,
            target=_opt_str(data.pop("x-target", None)),
            extra=data,
        )


@dataclass(frozen=True)
class TableSchema:
    description: str = ""
    properties: dict[str, SchemaProperty] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Any) -> Optional["TableSchema"]:
        if not isinstance(raw, Mapping):
            return None
        props = raw.get("properties")
        properties: dict[str, SchemaProperty] = {}
        if isinstance(props, Mapping):
            for name, prop in props.items():
                properties[str(name)] = SchemaProperty.from_mapping(prop)
        return cls(
            description=_opt_str(raw.get("description")) or "",
            properties=properties,
        )


@dataclass(frozen=True)
class NodeData:
    label: str = ""
    content: str = ""
    color: Optional[str] = None
    icon: Optional[str] = None
    annotation: Optional[str] = None
    table_name: Optional[str] = None
    schema: Optional[TableSchema] = None
    method: Optional[str] = None
    url: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Any) -> "NodeData":
        data = _mapping(raw)
        table = data.pop("table", None)
        table_name = _opt_str(table.get("name")) if isinstance(table, Mapping) else None
        annotation = data.pop("annotation", None)
        return cls(
            label=str(data.pop("label", "") or ""),
            content=str(data.pop("content", "") or ""),
            color=_opt_str(data.pop("color", None)),
            icon=_opt_str(data.pop("icon", None)),
            annotation=str(annotation).strip() or None if annotation is not None else None,
            table_name=table_name,
            schema=TableSchema.from_mapping(data.pop("schema", None)),
            method=_opt_str(data.pop("method", None)),
            url=_opt_str(data.pop("url", None)),
            extra=data,
        )


@dataclass(frozen=True)
class BoardNode:
    id: str
    type: str
    kind: NodeKind
    x: float = 0
    y: float = 0
    width: Optional[float] = None
    height: Optional[float] = None
    parent_id: Optional[str] = None
    data: NodeData = field(default_factory=NodeData)
    style: dict[str, Any] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Any, *, path: str = "node") -> "BoardNode":
        if not isinstance(raw, Mapping):
            raise TypeError(f"Expected mapping at {path}, got: {type(raw).__name__}")
        data = dict(raw)
        node_type = str(data.pop("type", "") or "")
        position = _mapping(data.pop("position", None))
        return cls(
            id=str(data.pop("id", "") or ""),
            type=node_type,
            kind=NodeKind.parse(node_type),
            x=_opt_num(position.get("x")) or 0,
            y=_opt_num(position.get("y")) or 0,
            width=_opt_num(data.pop("width", None)),
            height=_opt_num(data.pop("height", None)),
            parent_id=_opt_str(data.pop("parentId", None)),
            data=NodeData.from_mapping(data.pop("data", None)),
            style=_mapping(data.pop("style", None)),
            extra=data,
        )

    @property
    def table_name(self) -> str:
        """Best-effort display name for a table node."""
        if self.data.table_name:
            return self.data.table_name
        if self.data.label:
            return self.data.label
        tail = self.id.split("/")[-1]
        if tail:
            return tail[4:] if tail.startswith("erd.") else tail
        return self.id

    @property
    def display_name(self) -> str:
        if self.kind is NodeKind.TABLE:
            return self.table_name
        return self.data.label or self.id


@dataclass(frozen=True)
class BoardEdge:
    id: str
    source: str
    target: str
    type: str = ""
    kind: EdgeKind = EdgeKind.OTHER
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None
    label: str = ""
    style: dict[str, Any] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Any, *, path: str = "edge") -> "BoardEdge":
        if not isinstance(raw, Mapping):
            raise TypeError(f"Expected mapping at {path}, got: {type(raw).__name__}")
        data = dict(raw)
        edge_type = str(data.pop("type", "") or "")
        label = data.pop("label", None)
        return cls(
            id=str(data.pop("id", "") or ""),
            source=str(data.pop("source", "") or ""),
            target=str(data.pop("target", "") or ""),
            type=edge_type,
            kind=EdgeKind.parse(edge_type),
            source_handle=_opt_str(data.pop("sourceHandle", None)),
            target_handle=_opt_str(data.pop("targetHandle", None)),
            label=str(label) if label is not None else "",
            style=_mapping(data.pop("style", None)),
            extra=data,
        )

    @property
    def source_field(self) -> Optional[str]:
        return strip_handle_suffix(self.source_handle) if self.source_handle else None

    @property
    def target_field(self) -> Optional[str]:
        return strip_handle_suffix(self.target_handle) if self.target_handle else None


@dataclass(frozen=True)
class Board:
    nodes: tuple[BoardNode, ...]
    edges: tuple[BoardEdge, ...]

    @classmethod
    def from_mapping(cls, raw: Any) -> "Board":
        """Build a typed board, rejecting a malformed top-level shape."""
        if not isinstance(raw, Mapping):
            raise TypeError(
                'Invalid board template: expected object with "nodes" and "edges" arrays'
            )
        nodes, edges = raw.get("nodes"), raw.get("edges")
        if not isinstance(nodes, (list, tuple)) or not isinstance(edges, (list, tuple)):
            raise TypeError(
                'Invalid board template: expected object with "nodes" and "edges" arrays'
            )
        return cls(
            nodes=tuple(
                BoardNode.from_mapping(n, path=f"/nodes/{i}") for i, n in enumerate(nodes)
            ),
            edges=tuple(
                BoardEdge.from_mapping(e, path=f"/edges/{i}") for i, e in enumerate(edges)
            ),
        )
