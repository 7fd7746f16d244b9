"""Shared fixtures."""

import pytest

from appstack import AppConfig


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def config(tmp_path):
    return AppConfig(upload_prefix=str(tmp_path / "upload-"))


class CountingContent:
    """Async chunk source that records how many times it was iterated."""

    def __init__(self, *chunks: bytes):
        self.chunks = chunks
        self.iterations = 0

    def __aiter__(self):
        self.iterations += 1
        return self._iterate()

    async def _iterate(self):
        for chunk in self.chunks:
            yield chunk


@pytest.fixture
def counting_content():
    return CountingContent
