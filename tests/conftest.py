"""Shared fixtures: httpx responses backed by a chunked byte stream."""

from __future__ import annotations

from typing import Callable

import httpx
import pytest


class ChunkStream(httpx.AsyncByteStream):
    """Async byte stream that hands out pre-defined chunks one at a time.

    When *error* is given it is raised after the last chunk, as a dropped
    connection would be.
    """

    def __init__(self, chunks: list[bytes], error: Exception | None = None) -> None:
        self._chunks = chunks
        self._error = error
        self.pulled = 0
        self.closed = False

    async def __aiter__(self):
        for chunk in self._chunks:
            self.pulled += 1
            yield chunk
        if self._error is not None:
            raise self._error

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def stream_response() -> Callable[..., tuple[httpx.Response, ChunkStream]]:
    """Factory: ``stream_response([b"...", ...]) -> (response, stream)``."""

    def _make(
        chunks: list[bytes | str],
        status_code: int = 200,
        error: Exception | None = None,
    ) -> tuple[httpx.Response, ChunkStream]:
        raw = [c.encode("utf-8") if isinstance(c, str) else c for c in chunks]
        stream = ChunkStream(raw, error)
        resp = httpx.Response(
            status_code=status_code,
            headers={"content-type": "text/event-stream"},
            stream=stream,
            request=httpx.Request("POST", "https://api.sambanova.ai/v1/chat/completions"),
        )
        return resp, stream

    return _make
