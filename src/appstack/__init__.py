"""A minimal HTTP request/response stack built on awaitable apps."""

from .config import DEFAULT_CONFIG, AppConfig, configure_logging
from .errors import (
    AppStackError,
    ClientDisconnected,
    ConfigurationError,
    ContentConsumedError,
    ContentError,
    ContentParseError,
    ContentTooLarge,
    NoResponseError,
)
from .http import (
    Headers,
    Message,
    Request,
    Response,
    UploadedFile,
    bad_request,
    internal_server_error,
    to_asgi,
    unauthorized,
)
from .middleware import Stack, basic_auth

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "AppConfig",
    "DEFAULT_CONFIG",
    "configure_logging",
    # Errors
    "AppStackError",
    "ClientDisconnected",
    "ConfigurationError",
    "ContentConsumedError",
    "ContentError",
    "ContentParseError",
    "ContentTooLarge",
    "NoResponseError",
    # HTTP
    "Headers",
    "Message",
    "Request",
    "Response",
    "UploadedFile",
    "bad_request",
    "internal_server_error",
    "unauthorized",
    "to_asgi",
    # Middleware
    "Stack",
    "basic_auth",
]
