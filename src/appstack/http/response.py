"""HTTP responses and the rules for turning app return values into one."""

from __future__ import annotations

import json as _json
from collections.abc import Mapping
from typing import Any

from .headers import HeaderSource
from .message import ContentSource, Message


STATUS_TEXT: dict[int, str] = {
    200: "OK",
    201: "Created",
    204: "No Content",
    301: "Moved Permanently",
    302: "Found",
    304: "Not Modified",
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    413: "Payload Too Large",
    500: "Internal Server Error",
}


class Response(Message):
    """An HTTP response: a status code, headers and content."""

    def __init__(
        self,
        status: int = 200,
        headers: HeaderSource = None,
        content: ContentSource = None,
    ):
        super().__init__(content, headers)
        self.status = int(status)

    def __repr__(self) -> str:
        return f"<Response {self.status} {self.reason}>"

    @property
    def reason(self) -> str:
        return STATUS_TEXT.get(self.status, "Unknown")

    @classmethod
    def create_from_object(cls, value: Any) -> "Response":
        """
        Normalize an app's return value.

        Accepts a Response (returned unchanged), a mapping with ``status``,
        ``headers`` and ``content`` keys, or a ``(status, headers, content)``
        tuple.
        """
        if isinstance(value, Response):
            return value
        if isinstance(value, Mapping):
            return cls(
                status=value.get("status", 200),
                headers=value.get("headers"),
                content=value.get("content"),
            )
        if isinstance(value, tuple) and len(value) == 3:
            status, headers, content = value
            return cls(status=status, headers=headers, content=content)
        raise TypeError(f"Cannot create a Response from {type(value).__name__}: {value!r}")

    @staticmethod
    def text(
        text: str,
        *,
        status: int = 200,
        headers: Mapping[str, str] | None = None,
        encoding: str = "utf-8",
    ) -> "Response":
        response = Response(status, {"Content-Type": f"text/plain; charset={encoding}"}, text.encode(encoding))
        if headers:
            response.headers.update(headers)
        return response

    @staticmethod
    def json(
        obj: Any,
        *,
        status: int = 200,
        headers: Mapping[str, str] | None = None,
    ) -> "Response":
        body = _json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        response = Response(status, {"Content-Type": "application/json; charset=utf-8"}, body)
        if headers:
            response.headers.update(headers)
        return response


def bad_request() -> Response:
    return Response(400, {"Content-Type": "text/plain"}, "Bad Request")


def unauthorized(realm: str) -> Response:
    return Response(401, {
        "Content-Type": "text/plain",
        "WWW-Authenticate": f'Basic realm="{realm}"',
    }, "Not Authorized")


def internal_server_error() -> Response:
    return Response(500, {"Content-Type": "text/plain"}, "Internal Server Error")
