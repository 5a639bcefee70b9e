from .converter import SIGNAL_IMAGE, MarkdownConverter, resolve_page_key

__all__ = [
    "SIGNAL_IMAGE",
    "MarkdownConverter",
    "resolve_page_key",
]
