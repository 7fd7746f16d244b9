"""Request, Response and the pieces they are built from."""

from .asgi import to_asgi, write_response
from .headers import Headers
from .message import Message
from .parsers import UploadedFile, parse_cookie, parse_query
from .request import Request
from .response import Response, bad_request, internal_server_error, unauthorized

__all__ = [
    "Headers",
    "Message",
    "Request",
    "Response",
    "UploadedFile",
    "bad_request",
    "internal_server_error",
    "parse_cookie",
    "parse_query",
    "to_asgi",
    "unauthorized",
    "write_response",
]
