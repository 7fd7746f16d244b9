"""
Request - one inbound HTTP request and the entry point for dispatching it.

A new Request is created by the listener for every client request and lives
exactly as long as that request/response exchange. Derived views (cookies,
query, host, url, ...) are computed on first access and cached; nothing on a
request is recomputed once read.

Apps are dispatched with :meth:`Request.call`:

    async def app(request):
        return {"status": 200, "headers": {}, "content": "hello"}

    response = await request.call(app)
"""

from __future__ import annotations

import inspect
import logging
import re
import sys
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from functools import cached_property
from typing import Any

import anyio

from ..config import DEFAULT_CONFIG, AppConfig
from ..errors import ClientDisconnected, ConfigurationError, ContentConsumedError, NoResponseError
from ..type_utils import App, CloseHandler, ErrorHandler
from .headers import Headers, HeaderSource
from .message import ContentSource, Message
from .parsers import ParamValue, parse_cookie, parse_query
from .response import Response


logger = logging.getLogger(__name__)

_PORT_RE = re.compile(r":(\d+)$")
_FORWARDED_HOST_SPLIT_RE = re.compile(r",\s?")


def _default_error_handler(message: str) -> None:
    sys.stderr.write(message + "\n")


def _default_close_handler() -> None:
    pass


class Request(Message):
    """
    An HTTP request.

    Keyword arguments:

      - headers            Mapping of HTTP headers
      - content            The request body (bytes, str or a stream of chunks)
      - on_error           Handler for error messages
      - on_close           Handler called when the connection closes
      - protocol           "http:" or "https:"
      - protocol_version   e.g. "1.1"
      - method             e.g. "GET" or "POST"
      - remote_host        IP address of the client
      - remote_port        Port used on the client machine
      - server_name        Host name of the server
      - server_port        Port the server is listening on
      - query_string       The query string, without the leading "?"
      - script_name        Virtual location of the application on the server
      - path_info / path   The path of the request below script_name
      - config             AppConfig supplying default handlers and limits
    """

    def __init__(
        self,
        *,
        headers: HeaderSource = None,
        content: ContentSource = None,
        on_error: ErrorHandler | None = None,
        on_close: CloseHandler | None = None,
        protocol: str | None = None,
        protocol_version: str | None = None,
        method: str | None = None,
        remote_host: str | None = None,
        remote_port: int | str | None = None,
        server_name: str | None = None,
        server_port: int | str | None = None,
        query_string: str | None = None,
        script_name: str | None = None,
        path_info: str | None = None,
        path: str | None = None,
        config: AppConfig | None = None,
    ):
        super().__init__(content, headers)

        self.config = config or DEFAULT_CONFIG

        error_handler = on_error or self.config.on_error or _default_error_handler
        if not callable(error_handler):
            raise ConfigurationError("Request needs an error handler")

        close_handler = on_close or self.config.on_close or _default_close_handler
        if not callable(close_handler):
            raise ConfigurationError("Request needs a close handler")

        self.on_error = error_handler
        self.on_close = close_handler
        self._protocol = protocol or "http:"
        self.protocol_version = protocol_version or "1.0"
        self.method = (method or "GET").upper()
        self._remote_host = remote_host or ""
        self.remote_port = str(remote_port or 0)
        self.server_name = server_name or ""
        self.server_port = str(server_port or 0)
        self.query_string = query_string or ""
        self.script_name = script_name or ""
        self.path_info = path_info or path or ""

        if self.script_name == "" and self.path_info == "":
            self.path_info = "/"

        # Set by authentication middleware.
        self.remote_user: Any = None

        self._params: dict[str, Any] | None = None
        self._params_lock: anyio.Lock | None = None
        self._params_error: Exception | None = None

    def __repr__(self) -> str:
        return f"<Request {self.method} {self.path}>"

    @classmethod
    def from_asgi(
        cls,
        scope: Mapping[str, Any],
        receive: Callable[[], Awaitable[dict[str, Any]]],
        config: AppConfig | None = None,
        **options: Any,
    ) -> "Request":
        """Build a request from an ASGI ``http`` scope and its receive channel."""
        headers = Headers()
        for raw_name, raw_value in scope.get("headers", ()):
            name = raw_name.decode("latin-1")
            value = raw_value.decode("latin-1")
            if name in headers:
                separator = "; " if name.lower() == "cookie" else ", "
                headers[name] = headers[name] + separator + value
            else:
                headers[name] = value

        root_path = scope.get("root_path", "")
        path = scope.get("path", "")
        if root_path and path.startswith(root_path):
            path = path[len(root_path):]

        client = scope.get("client") or ("", 0)
        server = scope.get("server") or ("", 0)

        return cls(
            headers=headers,
            content=_receive_body(receive),
            protocol=scope.get("scheme", "http") + ":",
            protocol_version=scope.get("http_version"),
            method=scope.get("method"),
            remote_host=client[0],
            remote_port=client[1],
            server_name=server[0],
            server_port=server[1],
            query_string=scope.get("query_string", b"").decode("latin-1"),
            script_name=root_path,
            path_info=path,
            config=config,
            **options,
        )

    async def call(self, app: App) -> Response:
        """
        Call ``app`` with this request and return its Response.

        Errors raised by the app, synchronously or while awaiting it, propagate
        to whoever awaits this call.
        """
        response = app(self)
        if inspect.isawaitable(response):
            response = await response

        if response is None:
            raise NoResponseError(f"No response returned from app: {app!r}")

        if not isinstance(response, Response):
            response = Response.create_from_object(response)

        return response

    @cached_property
    def cookies(self) -> dict[str, str]:
        """Cookies sent with the request, keyed by name."""
        header = self.headers.get("Cookie")
        return parse_cookie(header) if header else {}

    @cached_property
    def protocol(self) -> str:
        """The protocol used in the request, "http:" or "https:"."""
        if self.headers.get("X-Forwarded-Ssl") == "on":
            return "https:"

        forwarded_proto = self.headers.get("X-Forwarded-Proto")
        if forwarded_proto:
            return forwarded_proto.split(",")[0].strip() + ":"

        return self._protocol

    @cached_property
    def is_ssl(self) -> bool:
        return self.protocol == "https:"

    @cached_property
    def host(self) -> str:
        """The host:port used in the request."""
        forwarded_host = self.headers.get("X-Forwarded-Host")
        if forwarded_host:
            # Proxies append, so the last entry is the one closest to us.
            return _FORWARDED_HOST_SPLIT_RE.split(forwarded_host)[-1]

        if self.headers.get("Host"):
            return self.headers["Host"]

        if self.server_port:
            return f"{self.server_name}:{self.server_port}"

        return self.server_name

    @cached_property
    def hostname(self) -> str:
        return _PORT_RE.sub("", self.host)

    @cached_property
    def port(self) -> str:
        match = _PORT_RE.search(self.host)
        port = match.group(1) if match else self.headers.get("X-Forwarded-Port")
        if port:
            return port

        if self.is_ssl:
            return "443"

        if self.headers.get("X-Forwarded-Host"):
            return "80"

        return self.server_port

    @cached_property
    def path(self) -> str:
        """The full path of the request, including the query string."""
        return self.pathname + self.search

    @cached_property
    def pathname(self) -> str:
        return self.script_name + self.path_info

    @cached_property
    def search(self) -> str:
        return "?" + self.query_string if self.query_string else ""

    @cached_property
    def query(self) -> dict[str, ParamValue]:
        """Parameters URL-encoded in the query string."""
        return parse_query(self.query_string)

    @cached_property
    def url(self) -> str:
        return self.protocol + "//" + self.host + self.path

    @cached_property
    def is_xhr(self) -> bool:
        return self.headers.get("X-Requested-With") == "XMLHttpRequest"

    @cached_property
    def remote_host(self) -> str:
        """The IP address of the client."""
        return self.headers.get("X-Forwarded-For") or self._remote_host

    async def get_params(
        self,
        max_length: int | None = None,
        upload_prefix: str | None = None,
    ) -> dict[str, Any]:
        """
        Return the union of the query and content parameters.

        Content parameters take precedence over query parameters of the same
        name. The result is computed once per request; later calls return the
        same dict without reading the content again.

            async def app(request):
                params = await request.get_params(2 ** 20)
                ...
        """
        if self._params is None:
            if self._params_lock is None:
                self._params_lock = anyio.Lock()

            async with self._params_lock:
                if self._params_error is not None:
                    raise self._params_error
                if self._params is None:
                    if max_length is None:
                        max_length = self.config.max_content_length
                    if upload_prefix is None:
                        upload_prefix = self.config.upload_prefix

                    params: dict[str, Any] = dict(self.query)
                    try:
                        params.update(await self.parse_content(max_length, upload_prefix))
                    except Exception as e:
                        # The content is gone; every later caller gets the same failure.
                        self._params_error = e
                        raise
                    except BaseException:
                        # Cancelled. A half-read stream cannot be parsed again.
                        if self._consumed and self._buffered is None:
                            self._params_error = ContentConsumedError(
                                "Message content was only partly read before cancellation"
                            )
                        raise
                    self._params = params
                    logger.debug("Parsed %d parameter(s) for %r", len(params), self)

        return self._params

    async def filter_params(
        self,
        filter_map: Mapping[str, Callable[[Any], Any]],
        max_length: int | None = None,
        upload_prefix: str | None = None,
    ) -> dict[str, Any]:
        """
        Return a whitelist of request parameters.

        Keys in ``filter_map`` name the parameters to keep; each value is a
        function that coerces the raw value. Parameters not named in the map,
        not present in the request, or whose filter returns ``None`` are left
        out.

            params = await request.filter_params({
                "name": str,
                "age": int,
                "hobbies": lambda value: value.split(","),
            })
        """
        params = await self.get_params(max_length, upload_prefix)
        filtered: dict[str, Any] = {}

        for name, filter_ in filter_map.items():
            if callable(filter_) and name in params:
                value = filter_(params[name])
                if value is not None:
                    filtered[name] = value

        return filtered


async def _receive_body(receive: Callable[[], Awaitable[dict[str, Any]]]) -> AsyncIterator[bytes]:
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            raise ClientDisconnected("Client disconnected while sending content")
        if message["type"] != "http.request":
            continue
        body = message.get("body", b"")
        if body:
            yield bytes(body)
        if not message.get("more_body", False):
            break
