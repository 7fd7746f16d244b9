"""HTTP Basic authentication middleware."""

from __future__ import annotations

import base64
import inspect
import logging
from typing import Any, Callable

from ..errors import ConfigurationError
from ..http.request import Request
from ..http.response import Response, bad_request, unauthorized
from ..type_utils import App, MaybeAwaitable


logger = logging.getLogger(__name__)

DEFAULT_REALM = "Authorization Required"

Validator = Callable[[str, str], MaybeAwaitable[Any]]


def _decode_credentials(token: str) -> tuple[str, str] | None:
    if not token:
        return None
    try:
        # Clients often leave off the padding.
        raw = base64.b64decode(token + "=" * (-len(token) % 4))
    except ValueError:
        return None
    try:
        decoded = raw.decode("utf-8")
    except UnicodeDecodeError:
        # Browsers send non-ASCII credentials as latin-1.
        decoded = raw.decode("latin-1")
    username, _, password = decoded.partition(":")
    return username, password


def basic_auth(app: App, validate: Validator, realm: str | None = None) -> App:
    """
    Authenticate requests with HTTP Basic auth before passing them to ``app``.

    ``validate(username, password)`` returns, or returns an awaitable for,
    either ``True`` to accept the given username, another truthy value to use
    as the username instead, or a falsy value to reject the credentials. The
    accepted username is stored in ``request.remote_user``.

    Requests without credentials, or with rejected ones, get a 401 carrying
    the ``WWW-Authenticate`` challenge. An Authorization header using another
    scheme, or a Basic header whose token is empty or not base64, gets a 400.

        def check(user, password):
            return user == "admin" and password == "secret"

        app = basic_auth(app, check)

        async def lookup(user, password):
            return await db.fetch_username(user, password)

        app = basic_auth(app, lookup, realm="Admin area")
    """
    realm = realm or DEFAULT_REALM

    if not callable(validate):
        raise ConfigurationError("Missing validation function for basic auth")

    async def basic_auth_app(request: Request) -> Response:
        authorization = request.headers.get("Authorization")
        if not authorization:
            return unauthorized(realm)

        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "basic":
            logger.debug("Rejecting %r: unsupported auth scheme %r", request, scheme)
            return bad_request()

        credentials = _decode_credentials(token.strip())
        if credentials is None:
            logger.debug("Rejecting %r: malformed basic credentials", request)
            return bad_request()

        username, password = credentials
        user = validate(username, password)
        if inspect.isawaitable(user):
            user = await user

        if not user:
            logger.debug("Rejecting %r: invalid credentials for %r", request, username)
            return unauthorized(realm)

        request.remote_user = username if user is True else user
        return await request.call(app)

    return basic_auth_app
