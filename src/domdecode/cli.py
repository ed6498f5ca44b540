"""
CLI interface for domdecode.

Runs one decoder against an element in a JSON snapshot and prints the result
as JSON. Handy for checking what a handler would see for a given layout.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from .config import get_config
from .decode import Decoder, Err
from .decoders import (
    Rectangle,
    bounding_client_rect,
    child_nodes,
    class_list,
    find_ancestor,
    tag_name,
    text_content,
)
from .dom import Element, link, select
from .predicates import and_, has_class, is_tag

QUERIES = ("rect", "tag", "classes", "text", "children", "closest")


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="domdecode",
        description="Decode values from a DOM snapshot",
    )

    parser.add_argument(
        "file",
        nargs="?",
        help="Snapshot JSON file (reads from stdin if not provided)",
    )

    parser.add_argument(
        "--select",
        "-s",
        type=str,
        default="",
        help="Child-index path to the subject element, e.g. 0.2.1 (default: root)",
    )

    parser.add_argument(
        "--query",
        "-q",
        choices=QUERIES,
        default="rect",
        help="What to decode (default: rect)",
    )

    parser.add_argument(
        "--class",
        dest="class_name",
        type=str,
        help="For --query closest: ancestor must have this class",
    )

    parser.add_argument(
        "--tag",
        type=str,
        help="For --query closest: ancestor must have this tag (matched upper-case)",
    )

    parser.add_argument(
        "--max-depth",
        type=int,
        help="Step limit for walks (overrides config)",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log walk progress to stderr",
    )

    return parser.parse_args(args)


def read_snapshot(filepath: str | None) -> Element:
    """Read and parse a snapshot from file or stdin."""
    if filepath is None or filepath == "-":
        data = json.load(sys.stdin)
    else:
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
    return Element.from_dict(data)


def build_decoder(parsed: argparse.Namespace) -> Decoder[Any]:
    """Map CLI flags to a decoder."""
    max_depth = parsed.max_depth
    if parsed.query == "rect":
        return bounding_client_rect(max_depth)
    if parsed.query == "tag":
        return tag_name
    if parsed.query == "classes":
        return class_list
    if parsed.query == "text":
        return text_content
    if parsed.query == "children":
        return child_nodes(tag_name, max_depth)

    # closest
    predicates = []
    if parsed.class_name:
        predicates.append(has_class(parsed.class_name))
    if parsed.tag:
        predicates.append(is_tag(parsed.tag.upper()))
    if not predicates:
        raise ValueError("--query closest needs --class and/or --tag")
    predicate = predicates[0] if len(predicates) == 1 else and_(*predicates)
    return find_ancestor(predicate, tag_name, max_depth)


def to_json(value: Any) -> Any:
    if isinstance(value, Rectangle):
        return value.as_dict()
    return value


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parsed = parse_args(args)
    cfg = get_config()

    if parsed.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        root = read_snapshot(parsed.file)
    except FileNotFoundError:
        print(f"Error: File not found: {parsed.file}", file=sys.stderr)
        return 1
    except (OSError, json.JSONDecodeError, ValueError, TypeError) as e:
        print(f"Error reading snapshot: {e}", file=sys.stderr)
        return 1

    try:
        subject = select(link(root), parsed.select)
        decoder = build_decoder(parsed)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = decoder.decode(subject)
    if isinstance(result, Err):
        print(f"Error: {result.error}", file=sys.stderr)
        return 1

    print(json.dumps(to_json(result.value), indent=cfg.cli.indent))
    return 0


if __name__ == "__main__":
    sys.exit(main())
