"""
Process-wide defaults for requests.

An :class:`AppConfig` is built once at startup (directly or with
:meth:`AppConfig.from_env`) and handed to the listener, which passes it to
every :class:`~appstack.http.request.Request` it creates. Requests fall back
to the config's handlers and limits when they are not given their own.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field

from .errors import ConfigurationError
from .type_utils import CloseHandler, ErrorHandler


DEFAULT_MAX_CONTENT_LENGTH = 10 * 1024 * 1024

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _default_upload_prefix() -> str:
    return os.path.join(tempfile.gettempdir(), "appstack-upload-")


@dataclass(frozen=True)
class AppConfig:
    """
    Defaults applied to each request.

    Attributes:
        max_content_length: Largest request body (in bytes) that
            ``get_params`` will buffer. ``None`` disables the limit.
        upload_prefix: Path prefix for files written from multipart uploads.
        log_level: Level for the ``appstack`` logger.
        on_error: Error-reporting hook used when a request has none.
        on_close: Connection-closed hook used when a request has none.
    """
    max_content_length: int | None = DEFAULT_MAX_CONTENT_LENGTH
    upload_prefix: str = field(default_factory=_default_upload_prefix)
    log_level: str = "INFO"
    on_error: ErrorHandler | None = None
    on_close: CloseHandler | None = None

    def __post_init__(self):
        if self.max_content_length is not None and self.max_content_length < 0:
            raise ConfigurationError("max_content_length cannot be negative")
        if self.on_error is not None and not callable(self.on_error):
            raise ConfigurationError("on_error must be callable")
        if self.on_close is not None and not callable(self.on_close):
            raise ConfigurationError("on_close must be callable")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigurationError(f"Unknown log level: {self.log_level!r}")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "AppConfig":
        """
        Build a config from environment variables.

            APPSTACK_MAX_CONTENT_LENGTH  Body limit in bytes ("none" for unlimited)
            APPSTACK_UPLOAD_PREFIX       Path prefix for uploaded files
            APPSTACK_LOG_LEVEL           DEBUG, INFO, WARNING, ...
        """
        env = os.environ if environ is None else environ
        kwargs = {}

        raw_length = env.get("APPSTACK_MAX_CONTENT_LENGTH")
        if raw_length is not None:
            if raw_length.strip().lower() == "none":
                kwargs["max_content_length"] = None
            else:
                try:
                    kwargs["max_content_length"] = int(raw_length)
                except ValueError:
                    raise ConfigurationError(
                        f"APPSTACK_MAX_CONTENT_LENGTH must be an integer, got {raw_length!r}"
                    ) from None

        if env.get("APPSTACK_UPLOAD_PREFIX"):
            kwargs["upload_prefix"] = env["APPSTACK_UPLOAD_PREFIX"]

        if env.get("APPSTACK_LOG_LEVEL"):
            kwargs["log_level"] = env["APPSTACK_LOG_LEVEL"]

        return cls(**kwargs)


DEFAULT_CONFIG = AppConfig()


def configure_logging(config: AppConfig = DEFAULT_CONFIG) -> None:
    """Configure root logging and set the ``appstack`` logger level."""
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("appstack").setLevel(level)
