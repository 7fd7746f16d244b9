"""
Basic auth example

Serves a small app behind HTTP Basic auth through any ASGI server.

Run:
  uvicorn examples.basic_auth_server:application --port 8080

Then try:
  curl -i http://127.0.0.1:8080/
  curl -i -u admin:secret 'http://127.0.0.1:8080/?name=world'
  curl -i -u admin:secret -X POST http://127.0.0.1:8080/ -d 'name=there&age=42'
"""

from __future__ import annotations

import anyio

from appstack import AppConfig, Request, Response, Stack, basic_auth, configure_logging, to_asgi


USERS = {"admin": "secret"}


async def validate(username: str, password: str) -> bool:
    # Stand-in for a database lookup.
    await anyio.sleep(0)
    return USERS.get(username) == password


async def greet(request: Request) -> Response:
    params = await request.filter_params({"name": str, "age": int})
    name = params.get("name", request.remote_user)
    return Response.json({"hello": name, "age": params.get("age"), "url": request.url})


def server_header(app, value):
    async def middleware(request: Request) -> Response:
        response = await request.call(app)
        response.headers["Server"] = value
        return response
    return middleware


config = AppConfig.from_env()
configure_logging(config)

application = to_asgi(
    Stack()
    .use(server_header, "appstack")
    .use(basic_auth, validate, "Example")
    .run(greet),
    config,
)
