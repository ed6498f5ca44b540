"""
DOM - host element snapshots for domdecode

The decoders read whatever node-shaped value the host supplies. This module is
one such host: a small element tree that can be linked into the mapping shape
a browser exposes (parentElement, offsetParent, sibling links, an indexed
childNodes map). The CLI and the tests use it; the decoders never import it.

Key invariant: an element's offsetParent is its nearest positioned ancestor,
falling back to the root. The root itself has no offsetParent.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

Node = dict[str, Any]


@dataclass
class Element:
    """An element in a snapshot tree."""
    tag: str
    classes: list[str] = field(default_factory=list)
    text: str = ""
    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0
    scroll_left: float = 0.0
    scroll_top: float = 0.0
    positioned: bool = False  # position other than static: becomes an offset parent
    children: list[Element] = field(default_factory=list)

    def depth_first(self) -> Iterator[Element]:
        """Traverse tree depth-first, yielding self then children."""
        stack: list[Element] = [self]
        while stack:
            element = stack.pop()
            yield element
            stack.extend(reversed(element.children))

    def add_child(self, child: Element) -> Element:
        """Add a child element and return it for chaining."""
        self.children.append(child)
        return child

    @property
    def text_content(self) -> str:
        """Own text followed by all descendants' text, in document order."""
        return "".join(e.text for e in self.depth_first())

    @classmethod
    def from_dict(cls, data: Any) -> Element:
        """Build an element tree from a JSON snapshot description."""
        if not isinstance(data, dict):
            raise ValueError(f"Element must be an object, got {type(data).__name__}")
        if not isinstance(data.get("tag"), str):
            raise ValueError(f"Element needs a string 'tag', got keys: {sorted(data)!r}")

        classes = data.get("classes", [])
        if isinstance(classes, str):
            classes = classes.split()

        return cls(
            tag=data["tag"],
            classes=list(classes),
            text=data.get("text", ""),
            left=float(data.get("left", 0)),
            top=float(data.get("top", 0)),
            width=float(data.get("width", 0)),
            height=float(data.get("height", 0)),
            scroll_left=float(data.get("scroll_left", 0)),
            scroll_top=float(data.get("scroll_top", 0)),
            positioned=bool(data.get("positioned", False)),
            children=[cls.from_dict(child) for child in data.get("children", [])],
        )


def _node_fields(element: Element) -> Node:
    return {
        "tagName": element.tag.upper(),
        "className": " ".join(element.classes),
        "classList": {c: c for c in element.classes},
        "textContent": element.text_content,
        "offsetLeft": element.left,
        "offsetTop": element.top,
        "offsetWidth": element.width,
        "offsetHeight": element.height,
        "scrollLeft": element.scroll_left,
        "scrollTop": element.scroll_top,
    }


def link(root: Element) -> Node:
    """
    Produce linked host nodes for the tree under `root` and return the root's.

    The result is cyclic (children point at parents), so it is meant to be
    decoded, not serialized.
    """
    nodes: dict[int, Node] = {id(e): _node_fields(e) for e in root.depth_first()}

    root_node = nodes[id(root)]
    root_node["parentElement"] = None
    root_node["offsetParent"] = None
    root_node["nextSibling"] = None
    root_node["previousSibling"] = None

    # (element, nearest positioned ancestor or root)
    stack: list[tuple[Element, Node]] = [(root, root_node)]
    while stack:
        element, offset_parent = stack.pop()
        node = nodes[id(element)]
        children = [nodes[id(c)] for c in element.children]
        node["childNodes"] = {str(i): child for i, child in enumerate(children)}

        below = node if element.positioned else offset_parent
        for i, (child_element, child) in enumerate(zip(element.children, children, strict=True)):
            child["parentElement"] = node
            child["offsetParent"] = below
            child["previousSibling"] = children[i - 1] if i > 0 else None
            child["nextSibling"] = children[i + 1] if i + 1 < len(children) else None
            stack.append((child_element, below))

    return root_node


def event(target: Node, current_target: Node | None = None, event_type: str = "click") -> Node:
    """Wrap a node in an event-shaped value, as handlers receive it."""
    return {
        "type": event_type,
        "target": target,
        "currentTarget": current_target if current_target is not None else target,
    }


def select(node: Node, path: str) -> Node:
    """Follow a dotted child-index path ("0.2.1") down from `node`."""
    current = node
    for part in filter(None, path.split(".")):
        try:
            current = current["childNodes"][str(int(part))]
        except (KeyError, ValueError) as e:
            raise ValueError(f"No element at path {path!r} (stuck at {part!r})") from e
    return current
