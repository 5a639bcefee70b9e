"""Markdown → HTML conversion for documentation leaves.

Built on markdown-it-py. Relative image sources and links to sibling
Markdown documents are rewritten into control links so that images are
served through the image signal and pages link to each other.
"""

from __future__ import annotations

import posixpath
from typing import Any, Optional
from urllib.parse import unquote, urlsplit

from markdown_it import MarkdownIt

SIGNAL_IMAGE = "parsedown2image"

_DOCUMENT_EXTENSIONS = (".md", ".markdown")


def _is_relative(url: str) -> bool:
    parts = urlsplit(url)
    if parts.scheme or parts.netloc:
        return False
    return bool(parts.path) and not parts.path.startswith("/")


def resolve_page_key(base_key: str, href_path: str) -> Optional[str]:
    """Tree key of a Markdown document linked from the page ``base_key``."""
    joined = posixpath.normpath(posixpath.join(posixpath.dirname(base_key), href_path))
    if joined == ".." or joined.startswith("../"):
        return None
    return posixpath.splitext(joined)[0]


class MarkdownConverter:
    """Markdown renderer parameterized per call by the current control."""

    def __init__(self) -> None:
        self._md = MarkdownIt(
            "commonmark",
            {"html": True, "typographer": True},
        ).enable("table").enable("strikethrough")
        self._md.core.ruler.push("doctree_links", self._rewrite_links)

    @staticmethod
    def _rewrite_links(state) -> None:
        control = state.env.get("control") if isinstance(state.env, dict) else None
        if control is None:
            return
        base_key = state.env.get("base_key") or ""
        for block in state.tokens:
            if block.type != "inline" or not block.children:
                continue
            for token in block.children:
                if token.type == "image":
                    src = str(token.attrGet("src") or "")
                    if src and _is_relative(src):
                        token.attrSet("src", control.link(SIGNAL_IMAGE, page=base_key, imageLink=src))
                elif token.type == "link_open":
                    href = str(token.attrGet("href") or "")
                    if not href or not _is_relative(href):
                        continue
                    parts = urlsplit(href)
                    path = unquote(parts.path)
                    if not path.lower().endswith(_DOCUMENT_EXTENSIONS):
                        continue
                    key = resolve_page_key(base_key, path)
                    if key is None:
                        continue
                    link = control.link(page=key)
                    if parts.fragment:
                        link = f"{link}#{parts.fragment}"
                    token.attrSet("href", link)

    def render(self, text: str, control: Any = None, base_key: Optional[str] = None) -> str:
        """Render Markdown text to HTML.

        Doxygen:
        - @param text: Raw Markdown.
        - @param control: Control used to build image/page links (optional).
        - @param base_key: Tree key of the document being rendered; defaults to ``control.page``.
        - @return: HTML fragment.
        """
        env = {}
        if control is not None:
            env["control"] = control
            env["base_key"] = base_key if base_key is not None else getattr(control, "page", "")
        return self._md.render(text or "", env)
