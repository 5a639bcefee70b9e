"""HTTP surface (FastAPI)."""

from .app import build_control, create_app
from .responses import DeferredResponse

__all__ = [
    "DeferredResponse",
    "build_control",
    "create_app",
]
