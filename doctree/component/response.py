from __future__ import annotations

from io import BytesIO
from typing import Any, Callable, Dict, Optional


class HttpResponse:
    """Minimal response sink written to by deferred responses."""

    def __init__(self) -> None:
        self.status = 200
        self.headers: Dict[str, str] = {}
        self._buffer = BytesIO()

    def add_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    def write(self, data: bytes) -> None:
        self._buffer.write(data)

    @property
    def body(self) -> bytes:
        return self._buffer.getvalue()


class CallbackResponse:
    """Response whose body is produced by a callback at flush time."""

    def __init__(self, callback: Callable[[Any, HttpResponse], None]) -> None:
        self._callback = callback
        self._sent = False

    def send(self, http_request: Any, http_response: HttpResponse) -> None:
        if self._sent:
            raise RuntimeError("Response has already been sent")
        self._sent = True
        self._callback(http_request, http_response)


class Presenter:
    """Holds the single response prepared while handling a request."""

    def __init__(self) -> None:
        self.response: Optional[CallbackResponse] = None

    def send_response(self, response: CallbackResponse) -> None:
        if self.response is not None:
            raise RuntimeError("A response was already sent for this request")
        self.response = response


def flush(response: CallbackResponse, http_request: Any = None) -> HttpResponse:
    """Run a prepared response into a fresh HttpResponse."""
    http_response = HttpResponse()
    response.send(http_request, http_response)
    return http_response
