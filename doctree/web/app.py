"""FastAPI application factory serving rendered pages and image signals."""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse

from doctree.component import DocControl
from doctree.config import Settings, load_settings
from doctree.decorator import MarkdownDecorator
from doctree.tree import load_tree

from .responses import DeferredResponse


def build_control(settings: Settings, page: str, params: dict) -> DocControl:
    # Loaded per request: image checks need the raw, undecorated document text.
    tree = load_tree(settings.docs_root)
    return DocControl(
        tree,
        page=page,
        params=params,
        name=settings.component,
        listeners=[MarkdownDecorator()],
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or load_settings()

    app = FastAPI(
        title="doctree",
        description="Documentation tree renderer",
        version="0.1.0",
    )

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    @app.get("/")
    def index(request: Request, page: str = "", do: Optional[str] = None):
        params = {k: v for k, v in request.query_params.items() if k not in ("page", "do")}
        try:
            control = build_control(settings, page, params)
        except FileNotFoundError:
            raise HTTPException(status_code=503, detail="Documentation root is not available")

        if do is None:
            try:
                body = control.render()
            except KeyError:
                raise HTTPException(status_code=404, detail="Page not found")
            return HTMLResponse(body)

        signal = control.parse_signal(do)
        response = control.signal(signal) if signal else None
        if response is None:
            raise HTTPException(status_code=404, detail="Unknown signal")

        return DeferredResponse(response, request)

    return app
