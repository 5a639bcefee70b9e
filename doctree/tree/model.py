from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Union


class NodeType(str, Enum):
    CONTAINER = "container"
    LEAF = "leaf"


class NodeKind(str, Enum):
    CONTAINER = "container"
    TEXT = "text"
    FILE = "file"


@dataclass
class ContainerNode:
    key: str
    title: str = ""
    children: List[str] = field(default_factory=list)
    kind: NodeKind = field(default=NodeKind.CONTAINER, init=False)

    @property
    def type(self) -> NodeType:
        return NodeType.CONTAINER

    @property
    def is_textual(self) -> bool:
        return False


@dataclass
class TextNode:
    key: str
    title: str = ""
    content: str = ""
    kind: NodeKind = field(default=NodeKind.TEXT, init=False)

    @property
    def type(self) -> NodeType:
        return NodeType.LEAF

    @property
    def is_textual(self) -> bool:
        return True


@dataclass
class FileNode:
    """Leaf backed by a documentation file.

    ``content`` holds the raw file text as read from disk until a decorator
    replaces it with rendered markup.
    """

    key: str
    filename: str
    title: str = ""
    content: str = ""
    kind: NodeKind = field(default=NodeKind.FILE, init=False)

    @property
    def type(self) -> NodeType:
        return NodeType.LEAF

    @property
    def is_textual(self) -> bool:
        return True


Node = Union[ContainerNode, TextNode, FileNode]


class DocTree:
    """Flat key → node index over a single root container.

    Keys are ``/``-joined paths; the root container has the empty key.
    """

    def __init__(self, root_title: str = "") -> None:
        self.root = ContainerNode(key="", title=root_title)
        self._nodes: Dict[str, Node] = {"": self.root}

    def add(self, node: Node, parent_key: str = "") -> Node:
        parent = self._nodes.get(parent_key)
        if parent is None or parent.kind != NodeKind.CONTAINER:
            raise KeyError(f"Parent container not found: {parent_key!r}")
        if node.key in self._nodes:
            raise ValueError(f"Duplicate node key: {node.key!r}")
        self._nodes[node.key] = node
        parent.children.append(node.key)
        return node

    def get_node(self, key: Optional[str]) -> Optional[Node]:
        if key is None:
            return None
        return self._nodes.get(str(key).strip("/"))

    def iter_nodes(self, key: str = "") -> Iterator[Node]:
        """Depth-first walk starting at ``key``, parents before children."""
        start = self.get_node(key)
        if start is None:
            return
        stack: List[Node] = [start]
        while stack:
            node = stack.pop()
            yield node
            if node.kind == NodeKind.CONTAINER:
                stack.extend(self._nodes[k] for k in reversed(node.children))

    def leaves(self, key: str = "") -> List[Node]:
        return [n for n in self.iter_nodes(key) if n.type == NodeType.LEAF]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.strip("/") in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)
