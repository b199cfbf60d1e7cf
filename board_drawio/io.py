# board_drawio/io.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .options import ConversionOptions, options_from_mapping


def _load_mapping(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(str(path))

    raw = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(raw)
        else:
            data = yaml.safe_load(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValueError(f"Failed to parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise TypeError(
            f"Top-level document must be a mapping in {path}, got {type(data).__name__}"
        )
    return data


def load_board(path: Path) -> dict[str, Any]:
    """Load a board template from JSON (or YAML)."""
    return _load_mapping(path)


def load_options(path: Path) -> ConversionOptions:
    """Load conversion options (camelCase or snake_case keys) from YAML/JSON."""
    return options_from_mapping(_load_mapping(path))
