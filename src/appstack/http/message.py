"""
Message - the common base of requests and responses.

A message is a set of headers plus a content source that can be read once.
The content may be given as ``bytes``, ``str``, an iterable of chunks, or an
async iterable of chunks (for example an AnyIO ``ByteReceiveStream``).
"""

from __future__ import annotations

import re
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from typing import Any

from ..errors import ContentConsumedError, ContentTooLarge
from .headers import Headers, HeaderSource
from .parsers import parse_json, parse_multipart, parse_query


Chunk = bytes | bytearray | str
ContentSource = Chunk | Iterable[Chunk] | AsyncIterable[Chunk] | None

_CHARSET_RE = re.compile(r";\s*charset\s*=\s*\"?([^\";\s]+)", re.IGNORECASE)


def _to_bytes(chunk: Chunk) -> bytes:
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    return bytes(chunk)


class Message:
    """
    Headers plus a single-use content stream.

    ``iter_content()`` hands out the raw chunks exactly once. Everything that
    needs the whole body goes through ``buffer_content()``, which reads the
    stream on first use and keeps the bytes for later callers, including
    later calls to ``iter_content()``.
    """

    def __init__(self, content: ContentSource = None, headers: HeaderSource = None):
        self.headers = headers if isinstance(headers, Headers) else Headers(headers)
        self._content: ContentSource = content
        self._consumed = False
        self._buffered: bytes | None = None

    @property
    def content(self) -> ContentSource:
        return self._content

    @content.setter
    def content(self, value: ContentSource) -> None:
        self._content = value
        self._consumed = False
        self._buffered = None

    @property
    def content_type(self) -> str:
        return self.headers.get("Content-Type", "")

    @property
    def media_type(self) -> str:
        """The content type without parameters, lower-cased."""
        return self.content_type.split(";", 1)[0].strip().lower()

    @property
    def charset(self) -> str | None:
        match = _CHARSET_RE.search(self.content_type)
        return match.group(1) if match else None

    @property
    def content_length(self) -> int | None:
        value = self.headers.get("Content-Length")
        try:
            return int(value) if value is not None else None
        except ValueError:
            return None

    async def iter_content(self) -> AsyncIterator[bytes]:
        """
        Yield the content as byte chunks.

        The raw source may only be iterated once. Content already read by
        ``buffer_content()`` is served from memory instead.
        """
        if self._buffered is not None:
            if self._buffered:
                yield self._buffered
            return

        if self._consumed:
            raise ContentConsumedError("Message content has already been consumed")
        self._consumed = True

        source = self._content
        if source is None:
            return
        if isinstance(source, (bytes, bytearray, str)):
            if source:
                yield _to_bytes(source)
        elif isinstance(source, AsyncIterable):
            async for chunk in source:
                if chunk:
                    yield _to_bytes(chunk)
        else:
            for chunk in source:
                if chunk:
                    yield _to_bytes(chunk)

    async def buffer_content(self, max_length: int | None = None) -> bytes:
        """
        Read the whole content into memory.

        Raises ContentTooLarge as soon as more than ``max_length`` bytes have
        been received. The result is kept, so repeated calls do not touch the
        stream again.
        """
        if self._buffered is not None:
            if max_length is not None and len(self._buffered) > max_length:
                raise ContentTooLarge(max_length)
            return self._buffered

        declared = self.content_length
        if max_length is not None and declared is not None and declared > max_length:
            raise ContentTooLarge(max_length)

        chunks: list[bytes] = []
        size = 0
        async for chunk in self.iter_content():
            size += len(chunk)
            if max_length is not None and size > max_length:
                raise ContentTooLarge(max_length)
            chunks.append(chunk)

        self._buffered = b"".join(chunks)
        return self._buffered

    async def read_text(self, max_length: int | None = None, encoding: str | None = None) -> str:
        data = await self.buffer_content(max_length)
        return data.decode(encoding or self.charset or "utf-8")

    async def parse_content(
        self,
        max_length: int | None = None,
        upload_prefix: str | None = None,
    ) -> dict[str, Any]:
        """
        Parse the content according to its media type.

        Handles URL-encoded forms, JSON objects and multipart forms. Any other
        media type yields an empty mapping and leaves the content unread.
        """
        media_type = self.media_type

        if media_type == "application/x-www-form-urlencoded":
            return parse_query(await self.read_text(max_length))

        if media_type == "application/json" or media_type.endswith("+json"):
            return parse_json(await self.buffer_content(max_length), self.charset or "utf-8")

        if media_type == "multipart/form-data":
            data = await self.buffer_content(max_length)
            return await parse_multipart(data, self.content_type, upload_prefix)

        return {}
