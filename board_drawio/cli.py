# board_drawio/cli.py
from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import Optional, Sequence

from .builders.registry import STYLE_SPECS
from .io import load_board, load_options
from .options import ConversionOptions
from .transform import generate_viewer_url, transform_board_to_drawio
from .validate import validate_board
from .writer import write_drawio


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="board-drawio",
        description="Convert a board template (tables, groups, edges) into a draw.io diagram.",
    )
    parser.add_argument("board", type=Path, help="Board template (.json or .yaml)")
    parser.add_argument(
        "-o",
        "--out",
        type=Path,
        default=None,
        help="Output .drawio path (default: the board path with a .drawio suffix)",
    )
    parser.add_argument(
        "--options",
        type=Path,
        default=None,
        help="YAML/JSON file with conversion options (camelCase or snake_case keys)",
    )
    parser.add_argument(
        "--style",
        type=str,
        choices=[spec.style_id for spec in STYLE_SPECS],
        default=None,
        help="Diagram style: "
        + ", ".join(f"{spec.style_id} ({spec.title})" for spec in STYLE_SPECS),
    )
    parser.add_argument("--title", type=str, default=None, help="Diagram title")
    parser.add_argument(
        "--expanded",
        action="store_true",
        help="Render tables expanded instead of collapsed to their header",
    )
    parser.add_argument(
        "--max-fields",
        type=int,
        default=None,
        help="Maximum number of field rows per table",
    )
    parser.add_argument(
        "--viewer-url",
        action="store_true",
        help="Also print a diagrams.net viewer URL for the generated document",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on validation warnings (e.g., edges to unknown nodes). Errors always fail.",
    )
    return parser


def _apply_overrides(options: ConversionOptions, args: argparse.Namespace) -> ConversionOptions:
    changes: dict[str, object] = {}
    if args.style:
        changes["diagram_style"] = args.style
    if args.title:
        changes["title"] = args.title
    if args.expanded:
        changes["collapse_tables"] = False
    if args.max_fields is not None:
        changes["max_fields"] = args.max_fields
    return dataclasses.replace(options, **changes) if changes else options


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entrypoint."""
    args = _build_parser().parse_args(argv)

    try:
        board = load_board(args.board)
        options = load_options(args.options) if args.options else ConversionOptions()
        options = _apply_overrides(options, args)
    except (FileNotFoundError, TypeError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        raise SystemExit(2) from e

    errors, warnings = validate_board(board)
    for warning in warnings:
        print(f"warning: {warning}", file=sys.stderr)

    if errors or (args.strict and warnings):
        for error in errors:
            print(f"error: {error}", file=sys.stderr)
        raise SystemExit(2)

    xml = transform_board_to_drawio(board, options)
    out_path: Path = args.out or args.board.with_suffix(".drawio")
    write_drawio(out_path, xml)
    print(f"wrote {out_path}")

    if args.viewer_url:
        print(generate_viewer_url(xml))


if __name__ == "__main__":
    main()
