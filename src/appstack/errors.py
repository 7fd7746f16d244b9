"""Exceptions raised by appstack."""


class AppStackError(Exception):
    """Base class for all appstack errors."""
    pass


class ConfigurationError(AppStackError, ValueError):
    """Raised at setup time when a constructor receives missing or invalid arguments."""
    pass


class NoResponseError(AppStackError, TypeError):
    """Raised when an app resolves to ``None`` instead of a response."""
    pass


class ContentError(AppStackError):
    """Base class for problems reading or parsing message content."""
    pass


class ContentTooLarge(ContentError):
    """Raised when message content exceeds the allowed maximum length."""

    def __init__(self, max_length: int):
        super().__init__(f"Content exceeds the maximum length of {max_length} bytes")
        self.max_length = max_length


class ContentConsumedError(ContentError):
    """Raised when a message content stream is read a second time."""
    pass


class ContentParseError(ContentError):
    """Raised when message content cannot be parsed for its media type."""
    pass


class ClientDisconnected(ContentError):
    """Raised when the client goes away while its content is being read."""
    pass
