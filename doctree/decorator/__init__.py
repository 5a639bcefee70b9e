"""Event listeners that decorate documentation trees."""

from .markdown import ImageResolutionError, MarkdownDecorator, jpeg_response

__all__ = [
    "ImageResolutionError",
    "MarkdownDecorator",
    "jpeg_response",
]
