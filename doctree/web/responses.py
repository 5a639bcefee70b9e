from __future__ import annotations

from typing import Any

from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from doctree.component import CallbackResponse, flush


class DeferredResponse(Response):
    """Starlette response that runs a CallbackResponse when it is written out.

    Status, headers and body all come from the callback, so nothing is
    produced until the server starts sending.
    """

    def __init__(self, response: CallbackResponse, http_request: Any = None) -> None:
        super().__init__()
        self.deferred = response
        self.http_request = http_request

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        http_response = flush(self.deferred, self.http_request)
        body = http_response.body
        headers = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in http_response.headers.items()
            if name.lower() != "content-length"
        ]
        headers.append((b"content-length", str(len(body)).encode("latin-1")))
        await send({"type": "http.response.start", "status": http_response.status, "headers": headers})
        await send({"type": "http.response.body", "body": body})

        if self.background is not None:
            await self.background()
