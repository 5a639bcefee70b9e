from __future__ import annotations

import html
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote, urlencode

from doctree.events import Listener, NodeEvent, SignalEvent
from doctree.tree import DocTree, NodeType

from .response import CallbackResponse, Presenter

DEFAULT_COMPONENT_NAME = "doctree"


class DocControl:
    """Per-request control: carries request parameters and dispatches events.

    A control renders one page (a subtree of the document tree) by emitting a
    node event for every node under it, and forwards out-of-band signals to
    the same listeners. Listeners answer signals through ``presenter``.
    """

    def __init__(
        self,
        doc_tree: DocTree,
        page: str = "",
        params: Optional[Dict[str, Any]] = None,
        presenter: Optional[Presenter] = None,
        name: str = DEFAULT_COMPONENT_NAME,
        listeners: Iterable[Listener] = (),
    ) -> None:
        self.doc_tree = doc_tree
        self.page = (page or "").strip("/")
        self.params: Dict[str, Any] = dict(params or {})
        self.presenter = presenter or Presenter()
        self.name = name
        self.listeners: List[Listener] = list(listeners)

    def add_listener(self, listener: Listener) -> None:
        self.listeners.append(listener)

    def get_parameter(self, name: str, default: Any = None) -> Any:
        return self.params.get(name, default)

    def link(self, signal: Optional[str] = None, page: Optional[str] = None, **params: Any) -> str:
        """Query-string link back to this control, optionally targeting a signal."""
        query: Dict[str, Any] = {}
        if signal:
            query["do"] = f"{self.name}-{signal}"
        query["page"] = self.page if page is None else page
        query.update({k: v for k, v in params.items() if v is not None})
        return "?" + urlencode(query, quote_via=quote, safe="/")

    def parse_signal(self, do: Optional[str]) -> Optional[str]:
        """Signal name from a ``<component>-<signal>`` value addressed to this control."""
        if not do or "-" not in do:
            return None
        component, signal = do.split("-", 1)
        if component != self.name or not signal:
            return None
        return signal

    def render(self) -> str:
        """Decorate every node of the current page and compose its HTML."""
        if self.page not in self.doc_tree:
            raise KeyError(f"Page not found: {self.page!r}")

        nodes = list(self.doc_tree.iter_nodes(self.page))
        for node in nodes:
            event = NodeEvent(node=node, control=self)
            for listener in self.listeners:
                listener.listen(event)

        sections: List[str] = []
        for node in nodes:
            if node.type != NodeType.LEAF:
                continue
            sections.append(
                f'<section class="doctree-node" id="{html.escape(node.key, quote=True)}">\n'
                f"<h1>{html.escape(node.title)}</h1>\n"
                f"{node.content}\n"
                "</section>"
            )
        return (
            f'<article class="doctree-page" data-page="{html.escape(self.page, quote=True)}">\n'
            + "\n".join(sections)
            + "\n</article>\n"
        )

    def signal(self, name: str) -> Optional[CallbackResponse]:
        """Forward a signal to every listener; return the response one of them sent."""
        event = SignalEvent(signal=name, control=self, doc_tree=self.doc_tree)
        for listener in self.listeners:
            listener.listen(event)
        return self.presenter.response
