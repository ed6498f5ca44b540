"""
DOM decoders.

Read accessors over a host element tree, in four layers:
- Terminal fields: tag_name, class_list, offset_width, ...
- Single-step traversal: target, parent_element, child_node, offset_parent, ...
- Recursive walks: find_ancestor, child_nodes, position
- Rectangle assembly: bounding_client_rect

The walks are loops with an explicit accumulator rather than recursion, so tree
depth never reaches Python's recursion limit. Each walk takes at most
`max_depth` steps (default: config walk.max_depth) and fails with
DepthExceeded beyond that, which also catches cyclic host graphs.

The tree must not change while one decode runs. During event handling this
holds; in general it does not.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, TypeVar

from .config import get_config
from .decode import (
    Decoder,
    Err,
    FieldType,
    Ok,
    Result,
    at,
    field,
    index,
    is_indexed,
    is_missing,
    lookup,
    lookup_index,
    map3,
    map4,
)
from .errors import depth_exceeded, field_missing, type_mismatch

logger = logging.getLogger(__name__)

T = TypeVar("T")


# --- Terminal fields ---

tag_name = field("tagName", FieldType.STRING)
class_name = field("className", FieldType.STRING)
text_content = field("textContent", FieldType.STRING)
# classList is a map of class name -> class name; keys are dropped
class_list = field("classList", FieldType.STRING_VALUES)
offset_width = field("offsetWidth", FieldType.FLOAT)
offset_height = field("offsetHeight", FieldType.FLOAT)
offset_left = field("offsetLeft", FieldType.FLOAT)
offset_top = field("offsetTop", FieldType.FLOAT)
scroll_left = field("scrollLeft", FieldType.FLOAT)
scroll_top = field("scrollTop", FieldType.FLOAT)


# --- Single-step traversal ---

def target(decoder: Decoder[T]) -> Decoder[T]:
    """Run `decoder` on the element an event was dispatched to."""
    return at("target", decoder)


def current_target(decoder: Decoder[T]) -> Decoder[T]:
    """Run `decoder` on the element whose handler is running."""
    return at("currentTarget", decoder)


def parent_element(decoder: Decoder[T]) -> Decoder[T]:
    return at("parentElement", decoder)


def next_sibling(decoder: Decoder[T]) -> Decoder[T]:
    return at("nextSibling", decoder)


def previous_sibling(decoder: Decoder[T]) -> Decoder[T]:
    return at("previousSibling", decoder)


def child_node(i: int, decoder: Decoder[T]) -> Decoder[T]:
    """Run `decoder` on the i-th child; fails when there is no such child."""
    return at("childNodes", index(i, decoder))


def _offset_parent_of(node: Any) -> Any:
    """The node's offset parent, or None at the end of the chain."""
    parent = lookup(node, "offsetParent")
    if is_missing(parent):
        return None
    return parent


def offset_parent(fallback: T, decoder: Decoder[T]) -> Decoder[T]:
    """
    Run `decoder` on the offset parent, or succeed with `fallback` when the
    node has none. A missing or null offsetParent both end the chain.
    """
    def run(node: Any) -> Result:
        parent = _offset_parent_of(node)
        if parent is None:
            return Ok(fallback)
        result = decoder.decode(parent)
        if isinstance(result, Err):
            return Err(result.error.at("offsetParent"))
        return result
    return Decoder(run, f"offset_parent({decoder.name})")


# --- Recursive walks ---

def _limit(max_depth: int | None) -> int:
    return get_config().walk.max_depth if max_depth is None else max_depth


def find_ancestor(
    predicate: Decoder[bool],
    decoder: Decoder[T],
    max_depth: int | None = None,
) -> Decoder[T | None]:
    """
    Run `decoder` on the closest ancestor for which `predicate` holds.

    The search starts at the parent, never the node itself, and climbs one
    level at a time. Reaching the root without a match succeeds with None.
    Predicate or decoder failures propagate: "no match" and "malformed tree"
    stay distinguishable.
    """
    def run(node: Any) -> Result:
        limit = _limit(max_depth)
        path: list[str] = []
        current = node
        for _ in range(limit):
            parent = lookup(current, "parentElement")
            if is_missing(parent) or parent is None:
                logger.debug("Ancestor search reached the root after %d levels", len(path))
                return Ok(None)
            current = parent
            path.append("parentElement")

            matched = predicate.decode(current)
            if isinstance(matched, Err):
                return Err(matched.error.at(*path))
            if matched.value:
                result = decoder.decode(current)
                if isinstance(result, Err):
                    return Err(result.error.at(*path))
                return result
        # the root may sit exactly at the limit
        parent = lookup(current, "parentElement")
        if is_missing(parent) or parent is None:
            return Ok(None)
        logger.warning("Ancestor search gave up after %d levels", limit)
        return Err(depth_exceeded(limit, *path))
    return Decoder(run, f"find_ancestor({predicate.name}, {decoder.name})")


def child_nodes(decoder: Decoder[T], max_depth: int | None = None) -> Decoder[list[T]]:
    """
    Decode every child in document order.

    Children are read at index 0, 1, 2, ... until an index is absent; the host
    does not expose a length. Any child that fails to decode fails the whole
    list. A node without children yields [].
    """
    def run(node: Any) -> Result:
        children = lookup(node, "childNodes")
        if is_missing(children) or children is None:
            return Err(field_missing("childNodes"))
        if not is_indexed(children):
            return Err(type_mismatch("indexed collection", children, "childNodes"))

        limit = _limit(max_depth)
        decoded: list[T] = []
        for i in range(limit):
            child = lookup_index(children, i)
            if is_missing(child):
                return Ok(decoded)
            result = decoder.decode(child)
            if isinstance(result, Err):
                return Err(result.error.at("childNodes", str(i)))
            decoded.append(result.value)
        if is_missing(lookup_index(children, limit)):
            return Ok(decoded)
        logger.warning("Child enumeration gave up after %d children", limit)
        return Err(depth_exceeded(limit, "childNodes"))
    return Decoder(run, f"child_nodes({decoder.name})")


_offsets = map4(
    lambda left, top, sleft, stop: (left - sleft, top - stop),
    offset_left,
    offset_top,
    scroll_left,
    scroll_top,
)


def position(x: float = 0.0, y: float = 0.0, max_depth: int | None = None) -> Decoder[tuple[float, float]]:
    """
    Sum offsetLeft/offsetTop minus scrollLeft/scrollTop up the offsetParent
    chain, starting from (x, y).

    Known limitation: an ancestor that is scrolled but is not itself an offset
    parent (it has no explicit positioning) never enters the chain, so its
    scroll is not subtracted and the result is off by that amount.
    """
    def run(node: Any) -> Result:
        limit = _limit(max_depth)
        path: list[str] = []
        cx, cy = x, y
        current = node
        for _ in range(limit):
            step = _offsets.decode(current)
            if isinstance(step, Err):
                return Err(step.error.at(*path))
            dx, dy = step.value
            cx += dx
            cy += dy

            parent = _offset_parent_of(current)
            if parent is None:
                return Ok((cx, cy))
            current = parent
            path.append("offsetParent")
        logger.warning("Offset walk gave up after %d offset parents", limit)
        return Err(depth_exceeded(limit, *path))
    return Decoder(run, f"position({x}, {y})")


# --- Rectangle assembly ---

@dataclass(frozen=True, slots=True)
class Rectangle:
    """Element box in pixels, relative to the root of the offsetParent chain."""
    top: float
    left: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def as_dict(self) -> dict[str, float]:
        return {"top": self.top, "left": self.left, "width": self.width, "height": self.height}


def _rectangle(pos: tuple[float, float], width: float, height: float) -> Rectangle:
    left, top = pos
    return Rectangle(top=top, left=left, width=width, height=height)


def bounding_client_rect(max_depth: int | None = None) -> Decoder[Rectangle]:
    """
    Approximate the element's bounding rectangle from offsets alone.

    Width and height are read from the element itself. Position carries the
    limitation documented on `position`; callers depend on these numbers, so
    this does not defer to native layout measurement.
    """
    return map3(_rectangle, position(0.0, 0.0, max_depth), offset_width, offset_height)
