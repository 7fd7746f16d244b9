"""Tests for Headers and Message."""

import anyio
import pytest

from appstack import ContentConsumedError, ContentParseError, ContentTooLarge, Headers, Message


class TestHeaders:
    """Test case-insensitive header storage."""

    def test_lookup_ignores_case(self):
        headers = Headers({"Content-Type": "text/html"})

        assert headers["content-type"] == "text/html"
        assert headers["CONTENT-TYPE"] == "text/html"
        assert "content-TYPE" in headers
        assert headers.get("X-Missing") is None

    def test_original_case_is_kept(self):
        headers = Headers([("X-Custom-Header", "1")])
        headers["x-custom-header"] = "2"

        assert list(headers) == ["X-Custom-Header"]
        assert headers["X-Custom-Header"] == "2"
        assert len(headers) == 1

    def test_delete_and_equality(self):
        headers = Headers({"A": "1", "B": "2"})
        del headers["a"]

        assert headers == {"b": "2"}
        assert "A" not in headers

    def test_raw_encodes_latin1(self):
        headers = Headers({"Content-Type": "text/plain"})
        assert headers.raw() == [(b"Content-Type", b"text/plain")]


class TestMessageContent:
    """Test reading message content."""

    @pytest.mark.anyio
    async def test_buffer_bytes_and_str(self):
        assert await Message(b"abc").buffer_content() == b"abc"
        assert await Message("hé").buffer_content() == "hé".encode("utf-8")
        assert await Message().buffer_content() == b""

    @pytest.mark.anyio
    async def test_buffer_async_stream(self, counting_content):
        source = counting_content(b"hello ", b"world")
        message = Message(source)

        assert await message.buffer_content() == b"hello world"
        assert await message.buffer_content() == b"hello world"
        assert source.iterations == 1

    @pytest.mark.anyio
    async def test_buffer_anyio_stream(self):
        send, receive = anyio.create_memory_object_stream(4)
        async with send:
            await send.send(b"chunk-1;")
            await send.send(b"chunk-2")

        async with receive:
            message = Message(receive)
            assert await message.buffer_content() == b"chunk-1;chunk-2"

    @pytest.mark.anyio
    async def test_buffer_sync_iterable(self):
        message = Message([b"a", "b", b""])
        assert await message.buffer_content() == b"ab"

    @pytest.mark.anyio
    async def test_iter_content_only_once(self):
        message = Message(b"data")
        chunks = [chunk async for chunk in message.iter_content()]
        assert chunks == [b"data"]

        with pytest.raises(ContentConsumedError):
            async for _ in message.iter_content():
                pass

    @pytest.mark.anyio
    async def test_iter_content_after_buffering(self, counting_content):
        source = counting_content(b"ab", b"cd")
        message = Message(source)
        await message.buffer_content()

        first = [chunk async for chunk in message.iter_content()]
        second = [chunk async for chunk in message.iter_content()]

        assert first == second == [b"abcd"]
        assert source.iterations == 1

    @pytest.mark.anyio
    async def test_max_length_enforced_while_reading(self, counting_content):
        message = Message(counting_content(b"12345", b"67890"))

        with pytest.raises(ContentTooLarge) as exc_info:
            await message.buffer_content(max_length=8)

        assert exc_info.value.max_length == 8

    @pytest.mark.anyio
    async def test_max_length_checks_declared_length(self):
        message = Message(b"tiny", {"Content-Length": "1000"})

        with pytest.raises(ContentTooLarge):
            await message.buffer_content(max_length=10)

    def test_content_type_helpers(self):
        message = Message(headers={"Content-Type": "Text/HTML; charset=ISO-8859-1", "Content-Length": "12"})

        assert message.media_type == "text/html"
        assert message.charset == "ISO-8859-1"
        assert message.content_length == 12

    @pytest.mark.anyio
    async def test_text_uses_charset(self):
        message = Message("café".encode("latin-1"), {"Content-Type": "text/plain; charset=latin-1"})
        assert await message.read_text() == "café"


class TestParseContent:
    """Test media-type based content parsing."""

    @pytest.mark.anyio
    async def test_urlencoded(self):
        message = Message(
            b"a=1&b=two+words&b=3",
            {"Content-Type": "application/x-www-form-urlencoded"},
        )
        assert await message.parse_content() == {"a": "1", "b": ["two words", "3"]}

    @pytest.mark.anyio
    async def test_json_object(self):
        message = Message(b'{"a": 2, "b": [1, 2]}', {"Content-Type": "application/json; charset=utf-8"})
        assert await message.parse_content() == {"a": 2, "b": [1, 2]}

    @pytest.mark.anyio
    async def test_json_must_be_object(self):
        message = Message(b"[1, 2]", {"Content-Type": "application/json"})

        with pytest.raises(ContentParseError):
            await message.parse_content()

    @pytest.mark.anyio
    async def test_invalid_json(self):
        message = Message(b"{nope", {"Content-Type": "application/vnd.api+json"})

        with pytest.raises(ContentParseError):
            await message.parse_content()

    @pytest.mark.anyio
    async def test_unknown_media_type_leaves_content_unread(self, counting_content):
        source = counting_content(b"binary")
        message = Message(source, {"Content-Type": "application/octet-stream"})

        assert await message.parse_content() == {}
        assert source.iterations == 0

    @pytest.mark.anyio
    async def test_multipart_fields_and_files(self, tmp_path):
        body = (
            b"--XyZ\r\n"
            b'Content-Disposition: form-data; name="title"\r\n'
            b"\r\n"
            b"Holiday\r\n"
            b"--XyZ\r\n"
            b'Content-Disposition: form-data; name="photo"; filename="beach.txt"\r\n'
            b"Content-Type: text/plain\r\n"
            b"\r\n"
            b"sand and sea\r\n"
            b"--XyZ--\r\n"
        )
        message = Message(body, {"Content-Type": "multipart/form-data; boundary=XyZ"})
        prefix = str(tmp_path / "up-")

        params = await message.parse_content(upload_prefix=prefix)

        assert params["title"] == "Holiday"
        photo = params["photo"]
        assert photo.filename == "beach.txt"
        assert photo.content_type == "text/plain"
        assert photo.path.startswith(prefix)
        assert photo.size == len(b"sand and sea")
        assert await anyio.Path(photo.path).read_bytes() == b"sand and sea"
