# board_drawio/validate.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Optional, Tuple

from .constants import SKIPPED_NODE_TYPES
from .model import NodeKind, strip_handle_suffix

Severity = Literal["error", "warning"]


@dataclass(frozen=True)
class ValidationIssue:
    """Structured validation issue for callers that want more than strings."""

    severity: Severity
    code: str
    message: str
    path: str = ""
    hint: Optional[str] = None


@dataclass(frozen=True)
class ValidateConfig:
    # Rule controls
    ignore: set[str] = field(default_factory=set)
    escalate: set[str] = field(default_factory=set)


def validate_board_issues(
    board: Any, cfg: Optional[ValidateConfig] = None
) -> list[ValidationIssue]:
    """Lint a raw board mapping.

    Only a missing `nodes`/`edges` list stops the conversion; everything else
    reported here is rendered best-effort (or skipped) by the transform.
    """

    cfg = cfg or ValidateConfig()
    issues: list[ValidationIssue] = []

    def emit(
        severity: Severity,
        code: str,
        message: str,
        path: str = "",
        hint: Optional[str] = None,
    ) -> None:
        if code in cfg.ignore:
            return
        final_severity: Severity = (
            "error" if (severity == "warning" and code in cfg.escalate) else severity
        )
        issues.append(
            ValidationIssue(
                severity=final_severity,
                code=code,
                message=message,
                path=path,
                hint=hint,
            )
        )

    if not isinstance(board, Mapping):
        emit("error", "E_BOARD_NOT_MAPPING", "board must be a mapping")
        return issues

    nodes = board.get("nodes")
    edges = board.get("edges")
    if not isinstance(nodes, (list, tuple)):
        emit("error", "E_NODES_NOT_LIST", "board.nodes must be a list", path="/nodes")
        nodes = []
    if not isinstance(edges, (list, tuple)):
        emit("error", "E_EDGES_NOT_LIST", "board.edges must be a list", path="/edges")
        edges = []

    node_types: dict[str, str] = {}
    node_fields: dict[str, set[str]] = {}
    for i, node in enumerate(nodes):
        if not isinstance(node, Mapping):
            emit(
                "error",
                "E_NODE_NOT_MAPPING",
                "board.nodes contains a non-mapping item",
                path=f"/nodes/{i}",
            )
            continue

        node_id = node.get("id")
        if not isinstance(node_id, str) or not node_id:
            emit(
                "warning",
                "W_NODE_MISSING_ID",
                "node is missing string `id`; edges cannot reference it",
                path=f"/nodes/{i}/id",
            )
            continue

        if node_id in node_types:
            emit(
                "warning",
                "W_NODE_DUPLICATE_ID",
                f"duplicate node id {node_id!r}; edges resolve to the last one",
                path=f"/nodes/{i}/id",
            )

        node_type = node.get("type")
        node_types[node_id] = node_type if isinstance(node_type, str) else ""
        if NodeKind.parse(node_type) is NodeKind.OTHER and node_type not in SKIPPED_NODE_TYPES:
            emit(
                "warning",
                "W_NODE_UNKNOWN_TYPE",
                f"node {node_id!r} has unknown type {node_type!r}; rendered as a plain shape",
                path=f"/nodes/{i}/type",
            )

        data = node.get("data")
        schema = data.get("schema") if isinstance(data, Mapping) else None
        props = schema.get("properties") if isinstance(schema, Mapping) else None
        if isinstance(props, Mapping):
            node_fields[node_id] = {str(k) for k in props}

    for i, node in enumerate(nodes):
        if not isinstance(node, Mapping):
            continue
        parent_id = node.get("parentId")
        if isinstance(parent_id, str) and parent_id:
            parent_type = node_types.get(parent_id)
            if parent_type is None:
                emit(
                    "warning",
                    "W_NODE_PARENT_UNKNOWN",
                    f"node {node.get('id')!r} references unknown parentId {parent_id!r}",
                    path=f"/nodes/{i}/parentId",
                    hint="the node is placed on the root layer instead",
                )
            elif parent_type != NodeKind.GROUP_ZONE.value:
                emit(
                    "warning",
                    "W_NODE_PARENT_NOT_GROUP",
                    f"node {node.get('id')!r} parentId {parent_id!r} is not a groupZone",
                    path=f"/nodes/{i}/parentId",
                )

    for i, edge in enumerate(edges):
        if not isinstance(edge, Mapping):
            emit(
                "error",
                "E_EDGE_NOT_MAPPING",
                "board.edges contains a non-mapping item",
                path=f"/edges/{i}",
            )
            continue

        for end, handle_key in (("source", "sourceHandle"), ("target", "targetHandle")):
            node_id = edge.get(end)
            if not isinstance(node_id, str) or node_id not in node_types:
                emit(
                    "warning",
                    f"W_EDGE_{end.upper()}_UNKNOWN_NODE",
                    f"edge {edge.get('id')!r} {end} references unknown node {node_id!r}; "
                    "the edge is skipped",
                    path=f"/edges/{i}/{end}",
                )
                continue
            if node_types[node_id] in SKIPPED_NODE_TYPES:
                emit(
                    "warning",
                    f"W_EDGE_{end.upper()}_NOT_RENDERED",
                    f"edge {edge.get('id')!r} {end} node {node_id!r} is not rendered; "
                    "the edge is skipped",
                    path=f"/edges/{i}/{end}",
                )
                continue

            handle = edge.get(handle_key)
            if isinstance(handle, str) and handle and node_id in node_fields:
                field_name = strip_handle_suffix(handle)
                if field_name not in node_fields[node_id]:
                    emit(
                        "warning",
                        f"W_EDGE_{end.upper()}_HANDLE_UNKNOWN_FIELD",
                        f"edge {edge.get('id')!r} {handle_key} {handle!r} does not match "
                        f"a field of {node_id!r}; attached to the table instead",
                        path=f"/edges/{i}/{handle_key}",
                    )

    return issues


def validate_board(board: Any) -> Tuple[list[str], list[str]]:
    """Lightweight structural validation; returns (errors, warnings)."""
    issues = validate_board_issues(board)
    errors = [iss.message for iss in issues if iss.severity == "error"]
    warnings = [iss.message for iss in issues if iss.severity == "warning"]
    return errors, warnings
