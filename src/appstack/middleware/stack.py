"""
Stack - build an app out of layered middleware.

    app = (
        Stack()
        .use(basic_auth, validate)
        .use(add_server_header)
        .run(router)
    )

Each middleware is a factory ``middleware(downstream_app, *args, **kwargs)``
returning an app. The first middleware added is the outermost one, so
requests pass through the layers in the order they were added and responses
come back in reverse.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from ..errors import ConfigurationError
from ..http.request import Request
from ..http.response import Response
from ..type_utils import App


logger = logging.getLogger(__name__)

MiddlewareFactory = Callable[..., App]


class Stack:
    """An app composed of middleware layers around a final app."""

    def __init__(self, app: App | None = None):
        self._layers: list[tuple[MiddlewareFactory, tuple[Any, ...], dict[str, Any]]] = []
        self._app = app
        self._compiled: App | None = None

    def use(self, middleware: MiddlewareFactory, *args: Any, **kwargs: Any) -> "Stack":
        """Add a middleware layer inside the ones already added."""
        if not callable(middleware):
            raise ConfigurationError(f"Middleware must be callable, got {middleware!r}")
        self._layers.append((middleware, args, kwargs))
        self._compiled = None
        logger.debug("Added middleware: %s", getattr(middleware, "__name__", middleware))
        return self

    def run(self, app: App) -> "Stack":
        """Set the app at the bottom of the stack."""
        self._app = app
        self._compiled = None
        return self

    def compile(self) -> App:
        if self._app is None:
            raise ConfigurationError("Stack has no app to run")

        if self._compiled is None:
            app = self._app
            # Wrap in reverse so the first layer added is the outermost.
            for middleware, args, kwargs in reversed(self._layers):
                app = middleware(app, *args, **kwargs)
            self._compiled = app

        return self._compiled

    def __len__(self) -> int:
        return len(self._layers)

    async def __call__(self, request: Request) -> Response:
        return await request.call(self.compile())
