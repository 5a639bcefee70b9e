"""Document tree: containers, text leaves and file-backed leaves.

Exposes:
- Data model: DocTree, ContainerNode, TextNode, FileNode, NodeType, NodeKind
- Loader: load_tree (builds a tree from a documentation directory)
"""

from .model import ContainerNode, DocTree, FileNode, Node, NodeKind, NodeType, TextNode
from .loader import load_tree, title_from_name

__all__ = [
    "ContainerNode",
    "DocTree",
    "FileNode",
    "Node",
    "NodeKind",
    "NodeType",
    "TextNode",
    "load_tree",
    "title_from_name",
]
