"""
Entry point and facade for the documentation tree renderer.

Packages:
- doctree.tree: Document tree model and filesystem loader
- doctree.events: Node and signal events
- doctree.markup: Markdown → HTML conversion with control-aware links
- doctree.decorator: Markdown decorator (page rendering, image signal)
- doctree.image: Image loading, JPEG encoding and placeholder image
- doctree.component: Per-request control, presenter and deferred responses
- doctree.web: FastAPI application
"""

from __future__ import annotations

import sys

from doctree.component import DocControl, flush
from doctree.config import load_settings
from doctree.decorator import MarkdownDecorator
from doctree.markup import MarkdownConverter
from doctree.tree import DocTree, load_tree
from doctree.web import create_app

__all__ = [
    "DocControl",
    "DocTree",
    "MarkdownConverter",
    "MarkdownDecorator",
    "create_app",
    "load_settings",
    "load_tree",
]


def _cli() -> None:
    """CLI for page rendering, image resolution and serving.

    --docs / -d: Documentation root (default: docs_root from config/settings.json)
    --page / -p: Page key to render, e.g. 01_Getting_Started/index (default: whole tree)
    --out / -o: Output file (default: stdout for HTML, image.jpg for --image)
    --image: Image link referenced by the page; writes the resolved JPEG instead of HTML
    --serve: Start the HTTP server
    --host / --port: Server bind address (default: from config/settings.json)
    """
    import argparse

    parser = argparse.ArgumentParser(description="Render a Markdown documentation tree to HTML.")
    parser.add_argument("--docs", "-d", type=str, help="Documentation root directory")
    parser.add_argument("--page", "-p", type=str, default="", help="Page key to render (default: whole tree)")
    parser.add_argument("--out", "-o", type=str, help="Output file (default: stdout, or image.jpg with --image)")
    parser.add_argument("--image", type=str, help="Image link referenced by --page; write it as JPEG")
    parser.add_argument("--serve", action="store_true", help="Start the HTTP server")
    parser.add_argument("--host", type=str, help="Host to bind to")
    parser.add_argument("--port", type=int, help="Port to bind to")

    args = parser.parse_args()

    settings = load_settings()
    if args.docs:
        settings.docs_root = args.docs

    if args.serve:
        import uvicorn

        host = args.host or settings.host
        port = args.port or settings.port
        print(f"Starting server on {host}:{port} for {settings.docs_root}")
        uvicorn.run(create_app(settings), host=host, port=port)
        return

    try:
        tree = load_tree(settings.docs_root)
    except FileNotFoundError as e:
        print(str(e))
        raise SystemExit(2)

    params = {"imageLink": args.image} if args.image else {}
    control = DocControl(tree, page=args.page, params=params, name=settings.component, listeners=[MarkdownDecorator()])

    if args.image:
        if not args.page:
            print("Please provide --page for the document that references the image.")
            raise SystemExit(2)
        response = control.signal(MarkdownDecorator.SIGNAL_IMAGE)
        http_response = flush(response)
        out_path = args.out or "image.jpg"
        with open(out_path, "wb") as f:
            f.write(http_response.body)
        print(f"Saved image to: {out_path}")
        return

    try:
        body = control.render()
    except KeyError as e:
        print(f"Page not found: {args.page!r} ({e})")
        raise SystemExit(2)

    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(body)
        print(f"Saved page to: {args.out}")
    else:
        sys.stdout.write(body)


if __name__ == "__main__":
    _cli()
