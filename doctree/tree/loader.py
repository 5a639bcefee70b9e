from __future__ import annotations

import os
import re
from typing import Iterable, Optional, Tuple

from .model import ContainerNode, DocTree, FileNode

_ORDER_PREFIX = re.compile(r"^\d+[_\-. ]+")


def title_from_name(name: str) -> str:
    """Human title from a file or directory name (``04_Access_Control`` -> ``Access Control``)."""
    base = os.path.splitext(name)[0] if not name.startswith(".") else name
    stripped = _ORDER_PREFIX.sub("", base) or base
    return stripped.replace("_", " ").strip()


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read()


def _has_documents(path: str, extensions: Tuple[str, ...]) -> bool:
    for _dirpath, dirnames, filenames in os.walk(path):
        dirnames[:] = [d for d in dirnames if not d.startswith(".")]
        for fname in filenames:
            if not fname.startswith(".") and os.path.splitext(fname)[1].lower() in extensions:
                return True
    return False


def load_tree(
    root_dir: str,
    extensions: Iterable[str] = (".md",),
    root_title: Optional[str] = None,
) -> DocTree:
    """Build a DocTree from a documentation directory.

    Doxygen:
    - @param root_dir: Documentation root directory.
    - @param extensions: File extensions treated as documents.
    - @param root_title: Title of the root container (defaults to the directory name).
    - @return: DocTree with containers for directories and FileNodes for documents.
    """
    if not os.path.isdir(root_dir):
        raise FileNotFoundError(f"Documentation root not found: {root_dir}")

    exts = tuple(e.lower() for e in extensions)
    root_abs = os.path.realpath(root_dir)
    tree = DocTree(root_title=root_title if root_title is not None else title_from_name(os.path.basename(root_abs)))

    def _walk(dir_path: str, parent_key: str) -> None:
        for name in sorted(os.listdir(dir_path)):
            if name.startswith("."):
                continue
            full = os.path.join(dir_path, name)
            stem = os.path.splitext(name)[0]
            if os.path.isdir(full):
                if not _has_documents(full, exts):
                    continue
                key = f"{parent_key}/{name}" if parent_key else name
                tree.add(ContainerNode(key=key, title=title_from_name(name)), parent_key)
                _walk(full, key)
            elif os.path.splitext(name)[1].lower() in exts:
                key = f"{parent_key}/{stem}" if parent_key else stem
                node = FileNode(
                    key=key,
                    filename=full,
                    title=title_from_name(name),
                    content=_read_text(full),
                )
                tree.add(node, parent_key)

    _walk(root_abs, "")
    return tree
