"""
Bind an app to any ASGI server.

The server (uvicorn, hypercorn, ...) owns the socket and the HTTP wire
format; this module only turns each ASGI ``http`` scope into a Request,
dispatches it with :meth:`Request.call`, and streams the Response back.

    from appstack import basic_auth, to_asgi

    application = to_asgi(basic_auth(app, validate))
    # uvicorn module:application
"""

from __future__ import annotations

import logging
import traceback
from collections.abc import Awaitable, Callable
from typing import Any

from ..config import AppConfig
from ..type_utils import App
from .request import Request
from .response import Response, internal_server_error


logger = logging.getLogger(__name__)

Scope = dict[str, Any]
Receive = Callable[[], Awaitable[dict[str, Any]]]
Send = Callable[[dict[str, Any]], Awaitable[None]]


async def write_response(send: Send, response: Response, *, include_body: bool = True) -> None:
    """Stream ``response`` through an ASGI send channel."""
    await send({
        "type": "http.response.start",
        "status": response.status,
        "headers": [(name.lower(), value) for name, value in response.headers.raw()],
    })

    if include_body:
        async for chunk in response.iter_content():
            await send({"type": "http.response.body", "body": chunk, "more_body": True})

    await send({"type": "http.response.body", "body": b"", "more_body": False})


async def _handle_lifespan(receive: Receive, send: Send) -> None:
    while True:
        message = await receive()
        if message["type"] == "lifespan.startup":
            await send({"type": "lifespan.startup.complete"})
        elif message["type"] == "lifespan.shutdown":
            await send({"type": "lifespan.shutdown.complete"})
            return


def to_asgi(app: App, config: AppConfig | None = None) -> Callable[[Scope, Receive, Send], Awaitable[None]]:
    """
    Wrap ``app`` as an ASGI application.

    Exceptions escaping the app are logged, reported through the request's
    ``on_error`` hook and answered with a 500.
    """

    async def asgi_app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await _handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            raise ValueError(f"Unsupported ASGI scope type: {scope['type']!r}")

        request = Request.from_asgi(scope, receive, config)
        try:
            try:
                response = await request.call(app)
            except Exception:
                logger.exception("Unhandled error while handling %r", request)
                request.on_error("There was an unhandled error!\n" + traceback.format_exc())
                response = internal_server_error()

            logger.debug("%s %s -> %d", request.method, request.path, response.status)
            await write_response(send, response, include_body=request.method != "HEAD")
        finally:
            request.on_close()

    return asgi_app
