"""Decoding of ``data:``-framed streaming chat responses.

Frames are newline-terminated lines.  A frame may arrive split over any
number of raw chunks (including inside a multi-byte UTF-8 character), so
bytes are decoded incrementally and the trailing partial line is carried
over to the next chunk.
"""

from __future__ import annotations

import codecs
import json
import logging
from typing import (
    Any,
    AsyncGenerator,
    AsyncIterable,
    AsyncIterator,
    Callable,
    Generic,
    TypeVar,
)

import httpx

from .errors import HTTPX_TRANSPORT_ERRORS, FrameDecodeError, TransportError

_logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"

DecodeErrorHook = Callable[[FrameDecodeError], None]

T = TypeVar("T")


class FrameDecoder:
    """Turns raw byte chunks into decoded response units.

    Call :meth:`feed` with each chunk and :meth:`finish` once the transport
    reports end-of-data.  After the ``[DONE]`` sentinel :attr:`done` is set
    and all further input is ignored.
    """

    def __init__(self, on_decode_error: DecodeErrorHook | None = None) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._on_decode_error = on_decode_error
        self.done = False

    def feed(self, chunk: bytes) -> list[dict[str, Any]]:
        """Consume one chunk; return the units completed by it, in order."""
        if self.done:
            return []
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")
        return self._process(lines)

    def finish(self) -> list[dict[str, Any]]:
        """Flush the carry-over buffer at end-of-data."""
        if self.done:
            return []
        self._buffer += self._decoder.decode(b"", final=True)
        tail, self._buffer = self._buffer, ""
        units = self._process([tail])
        self.done = True
        return units

    def _process(self, lines: list[str]) -> list[dict[str, Any]]:
        units: list[dict[str, Any]] = []
        for raw_line in lines:
            line = raw_line.strip()
            if not line.startswith(DATA_PREFIX):
                continue  # keep-alive, comment, blank
            data = line[len(DATA_PREFIX):].strip()
            if data == DONE_SENTINEL:
                self.done = True
                self._buffer = ""
                break
            unit = self._decode(data)
            if unit is not None:
                units.append(unit)
        return units

    def _decode(self, data: str) -> Any:
        try:
            return json.loads(data)
        except json.JSONDecodeError as e:
            error = FrameDecodeError(f"Skipping malformed stream frame: {e}", data)
            _logger.warning("%s: %.200s", error.message, data)
            if self._on_decode_error is not None:
                self._on_decode_error(error)
            return None


async def decode_stream(
    response: httpx.Response,
    on_decode_error: DecodeErrorHook | None = None,
) -> AsyncGenerator[dict[str, Any], None]:
    """Yield decoded units from an open streaming *response*.

    Stops on the ``[DONE]`` sentinel without reading further chunks.  The
    response is closed on every exit path, including when the consumer
    stops iterating early and closes the generator.
    """
    decoder = FrameDecoder(on_decode_error)
    try:
        try:
            async for chunk in response.aiter_bytes():
                for unit in decoder.feed(chunk):
                    yield unit
                if decoder.done:
                    return
        except HTTPX_TRANSPORT_ERRORS as e:
            raise TransportError(f"Stream interrupted: {e}") from e
        for unit in decoder.finish():
            yield unit
    finally:
        await response.aclose()


async def iter_content(
    units: AsyncIterable[dict[str, Any]],
) -> AsyncGenerator[str, None]:
    """Yield only the non-empty ``choices[0].delta.content`` fragments."""
    try:
        async for unit in units:
            choices = unit.get("choices") if isinstance(unit, dict) else None
            if not isinstance(choices, list) or not choices:
                continue
            choice = choices[0]
            if not isinstance(choice, dict):
                continue
            delta = choice.get("delta")
            if not isinstance(delta, dict):
                continue
            content = delta.get("content")
            if content and isinstance(content, str):
                yield content
    finally:
        aclose = getattr(units, "aclose", None)
        if aclose is not None:
            await aclose()


class ResponseStream(Generic[T]):
    """Async iterator over a streaming response that owns the connection.

    Closing it (explicitly, or by leaving ``async with``) releases the
    response even if iteration never started.
    """

    def __init__(
        self,
        response: httpx.Response,
        iterator: AsyncGenerator[T, None],
    ) -> None:
        self.response = response
        self._iterator = iterator

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        return await self._iterator.__anext__()

    async def aclose(self) -> None:
        try:
            await self._iterator.aclose()
        finally:
            await self.response.aclose()

    async def __aenter__(self) -> ResponseStream[T]:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
