"""Hosting layer: per-request control, presenter and deferred responses."""

from .control import DEFAULT_COMPONENT_NAME, DocControl
from .response import CallbackResponse, HttpResponse, Presenter, flush

__all__ = [
    "DEFAULT_COMPONENT_NAME",
    "DocControl",
    "CallbackResponse",
    "HttpResponse",
    "Presenter",
    "flush",
]
