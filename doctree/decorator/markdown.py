"""Markdown decorator: renders documentation leaves and serves their images.

The decorator listens to two kinds of events:

- node events: textual leaves have their Markdown content replaced by HTML;
- signal events: the image signal resolves an image referenced by a
  documentation file and sends it back as a JPEG response.

An image is only served when its link appears in the raw document text
document text and the resolved file stays under the document's directory.
Every failure yields the same placeholder image, so a broken reference and
a traversal attempt look identical to the client.
"""

from __future__ import annotations

import os
from typing import Any, Optional
from urllib.parse import unquote

import numpy as np

from doctree.component import CallbackResponse, HttpResponse
from doctree.events import Event, EventType, NodeEvent, SignalEvent
from doctree.image import JPEG_QUALITY, encode_jpeg, error_image, load_image
from doctree.markup import SIGNAL_IMAGE, MarkdownConverter
from doctree.tree import FileNode, NodeKind, NodeType


class ImageResolutionError(ValueError):
    """Requested image is not referenced by, or not confined to, its document."""


class MarkdownDecorator:

    SIGNAL_IMAGE = SIGNAL_IMAGE

    def __init__(self, converter: Optional[MarkdownConverter] = None) -> None:
        self.converter = converter or MarkdownConverter()

    def listen(self, event: Event) -> None:
        if event.type == EventType.NODE:
            self._decorate_node(event)
        elif event.type == EventType.SIGNAL:
            self._decorate_signal(event)

    def _decorate_node(self, event: NodeEvent) -> None:
        node = event.node
        if node.type != NodeType.LEAF:
            return
        if not node.is_textual:
            return
        node.content = self.converter.render(node.content, event.control, base_key=node.key)

    def _decorate_signal(self, event: SignalEvent) -> None:
        if event.signal == self.SIGNAL_IMAGE:
            self._process_image(event)

    def _process_image(self, event: SignalEvent) -> None:
        control = event.control
        image_node = event.doc_tree.get_node(control.page)
        image_link = control.get_parameter("imageLink", False)

        if (
            image_node is not None
            and image_node.kind == NodeKind.FILE
            and image_node.type == NodeType.LEAF
            and image_link
        ):
            image = self._get_image(image_node, str(image_link))
        else:
            image = error_image()

        control.presenter.send_response(jpeg_response(image))

    def _get_image(self, node: FileNode, image_link: str) -> np.ndarray:
        try:
            # links arrive as written or as percent-encoded by the Markdown parser
            candidates = [image_link]
            decoded = unquote(image_link)
            if decoded != image_link:
                candidates.append(decoded)

            if not any(candidate in node.content for candidate in candidates):
                raise ImageResolutionError(
                    f"Image path {image_link} is not a part of doc file '{node.filename}' content"
                )

            # a bare or relative filename has to be anchored before it can bound anything
            dirname = os.path.realpath(os.path.dirname(node.filename))
            image_path = None
            for candidate in candidates:
                path = dirname + os.sep + candidate
                if os.path.isfile(path):
                    image_path = path
                    break
            if image_path is None:
                raise ImageResolutionError(f"Image file not found {dirname + os.sep + image_link}")

            # canonicalize before the prefix check, otherwise ../ segments slip through
            image_path = os.path.realpath(image_path)
            if not image_path.startswith(dirname.rstrip(os.sep) + os.sep):
                raise ImageResolutionError(f"Image path {image_path} is not a part of doc file path {dirname}")

            return load_image(image_path)
        except Exception as e:
            print(f"Warning: serving placeholder for image '{image_link}' of '{node.key}': {e}")
            return error_image()


def jpeg_response(image: np.ndarray, quality: int = JPEG_QUALITY) -> CallbackResponse:
    """Deferred JPEG response; the image is encoded only when the response is sent."""

    def _send(http_request: Any, http_response: HttpResponse) -> None:
        try:
            body = encode_jpeg(image, quality)
        except Exception as e:
            print(f"Warning: JPEG encoding failed, serving placeholder: {e}")
            body = encode_jpeg(error_image(), quality)
        http_response.add_header("Content-Type", "image/jpeg")
        http_response.write(body)

    return CallbackResponse(_send)
