"""
Wire-format parsers for query strings, cookies and request bodies.

Everything here is a pure function of its input except
:func:`parse_multipart`, which writes uploaded files to disk.
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from email.parser import BytesParser
from email.policy import HTTP
from typing import Any
from urllib.parse import parse_qsl, unquote

import anyio

from ..errors import ContentParseError


ParamValue = str | list[str]


@dataclass(frozen=True, slots=True)
class UploadedFile:
    """A file part of a ``multipart/form-data`` body, saved to ``path``."""
    name: str
    filename: str
    content_type: str
    path: str
    size: int


def parse_query(query_string: str) -> dict[str, ParamValue]:
    """
    Decode a URL-encoded query string.

    A name given once maps to a string; a repeated name maps to the list of
    its values in order. Blank values are kept.
    """
    params: dict[str, ParamValue] = {}
    for name, value in parse_qsl(query_string, keep_blank_values=True):
        if name not in params:
            params[name] = value
        else:
            existing = params[name]
            if isinstance(existing, list):
                existing.append(value)
            else:
                params[name] = [existing, value]
    return params


def parse_cookie(header: str) -> dict[str, str]:
    """
    Parse a ``Cookie`` header into a name -> value mapping.

    Clients order cookies with more specific paths first (RFC 2109), so the
    first occurrence of a repeated name wins.
    """
    cookies: dict[str, str] = {}
    for pair in header.split(";"):
        name, sep, value = pair.partition("=")
        name = name.strip()
        if not sep or not name or name in cookies:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        cookies[name] = unquote(value)
    return cookies


def parse_json(data: bytes, charset: str = "utf-8") -> dict[str, Any]:
    try:
        document = json.loads(data.decode(charset)) if data else {}
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ContentParseError(f"Invalid JSON content: {e}") from e
    if not isinstance(document, dict):
        raise ContentParseError("JSON content must be an object")
    return document


def _add_param(params: dict[str, Any], name: str, value: Any) -> None:
    if name not in params:
        params[name] = value
    elif isinstance(params[name], list):
        params[name].append(value)
    else:
        params[name] = [params[name], value]


async def parse_multipart(
    data: bytes,
    content_type: str,
    upload_prefix: str | None = None,
) -> dict[str, Any]:
    """
    Parse a ``multipart/form-data`` body.

    Text fields become strings. File fields are written to a new file whose
    path starts with ``upload_prefix`` and are returned as
    :class:`UploadedFile` values.
    """
    head = f"Content-Type: {content_type}\r\nMIME-Version: 1.0\r\n\r\n".encode("latin-1")
    message = BytesParser(policy=HTTP).parsebytes(head + data)
    if not message.is_multipart():
        raise ContentParseError("Multipart content is missing a boundary")

    directory, prefix = os.path.split(upload_prefix or "")
    params: dict[str, Any] = {}

    for part in message.iter_parts():
        disposition = part["Content-Disposition"]
        name = disposition.params.get("name") if disposition is not None else None
        if not name:
            continue

        payload = part.get_payload(decode=True) or b""
        filename = part.get_filename()

        if filename is None:
            charset = part.get_content_charset("utf-8")
            try:
                _add_param(params, name, payload.decode(charset))
            except (LookupError, UnicodeDecodeError) as e:
                raise ContentParseError(f"Cannot decode field {name!r}: {e}") from e
            continue

        fd, path = tempfile.mkstemp(prefix=prefix, dir=directory or None)
        os.close(fd)
        await anyio.Path(path).write_bytes(payload)
        _add_param(params, name, UploadedFile(
            name=name,
            filename=filename,
            content_type=part.get_content_type(),
            path=path,
            size=len(payload),
        ))

    return params
