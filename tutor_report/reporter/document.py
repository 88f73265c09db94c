"""
Document Tree

Minimal immutable HTML node model used by the report builder. Building and
serialization are separate steps so the structure can be inspected without
depending on markup formatting.
"""

import html
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union

VOID_TAGS = frozenset({"meta", "img", "hr", "br", "link"})


@dataclass(frozen=True)
class Text:
    """Text content. Escaped on serialization unless raw (scripts, styles)."""
    value: str
    raw: bool = False


@dataclass(frozen=True)
class Node:
    tag: str
    attrs: Tuple[Tuple[str, str], ...] = ()
    children: Tuple[Union["Node", Text], ...] = ()

    def attr(self, name: str) -> Optional[str]:
        for key, value in self.attrs:
            if key == name:
                return value
        return None

    @property
    def classes(self) -> Tuple[str, ...]:
        return tuple((self.attr("class") or "").split())

    def iter(self) -> Iterator["Node"]:
        """Depth-first walk over this node and all descendant elements."""
        yield self
        for child in self.children:
            if isinstance(child, Node):
                yield from child.iter()

    def find_all(self, tag: Optional[str] = None, class_: Optional[str] = None) -> List["Node"]:
        return [
            node for node in self.iter()
            if (tag is None or node.tag == tag) and (class_ is None or class_ in node.classes)
        ]

    def text(self) -> str:
        """Concatenated text content."""
        parts = []
        for child in self.children:
            parts.append(child.value if isinstance(child, Text) else child.text())
        return "".join(parts)


def el(tag: str, *children: Union[Node, Text, str, None], **attrs: Optional[str]) -> Node:
    """
    Build a node. Strings become escaped text, None children are dropped.

    Attribute names: trailing underscores are stripped (class_ -> class),
    inner underscores become dashes (http_equiv -> http-equiv).
    """
    items = []
    for child in children:
        if child is None:
            continue
        items.append(Text(child) if isinstance(child, str) else child)
    attributes = tuple(
        (name.rstrip("_").replace("_", "-"), value)
        for name, value in attrs.items()
        if value is not None
    )
    return Node(tag=tag, attrs=attributes, children=tuple(items))


def raw(value: str) -> Text:
    return Text(value, raw=True)


def render_html(node: Union[Node, Text]) -> str:
    """Serialize a node tree to HTML."""
    if isinstance(node, Text):
        return node.value if node.raw else html.escape(node.value, quote=False)

    attrs = "".join(f' {key}="{html.escape(value, quote=True)}"' for key, value in node.attrs)
    if node.tag in VOID_TAGS:
        return f"<{node.tag}{attrs}>"
    inner = "".join(render_html(child) for child in node.children)
    return f"<{node.tag}{attrs}>{inner}</{node.tag}>"


@dataclass(frozen=True)
class RenderedDocument:
    """A built report: the node tree and its serialized markup."""
    root: Node
    html: str = field(repr=False)
    title: str = ""

    @classmethod
    def from_tree(cls, root: Node, title: str = "") -> "RenderedDocument":
        return cls(root=root, html="<!DOCTYPE html>\n" + render_html(root), title=title)

    @property
    def body(self) -> Node:
        bodies = self.root.find_all("body")
        return bodies[0] if bodies else self.root
