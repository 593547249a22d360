"""Async client for the SambaNova chat-completion API.

Usage::

    async with SambanovaClient(api_key) as client:
        reply = await client.chat([{"role": "user", "content": "Hi!"}])
        async with await client.stream_chat(messages) as stream:
            async for text in stream:
                print(text, end="")

Leaving the inner ``async with`` releases the connection even when the
loop stops early.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

import httpx

from .config import ClientConfig
from .executor import CHAT_COMPLETIONS, RequestExecutor
from .errors import ProtocolViolationError
from .images import prepare_messages
from .streaming import (
    DecodeErrorHook,
    ResponseStream,
    decode_stream,
    iter_content,
)
from .types import (
    DEFAULT_BASE_URL,
    DEFAULT_MODEL,
    ChatMessage,
    ChatOptions,
    build_payload,
)
from .validation import validate_messages

_logger = logging.getLogger(__name__)


class SambanovaClient:
    """Client for the ``/chat/completions`` endpoint."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        default_model: str = DEFAULT_MODEL,
        default_retry_count: int = 3,
        default_retry_delay: float = 1.0,
        timeout: float | None = None,
        on_decode_error: DecodeErrorHook | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("api_key is required")
        self.base_url = base_url
        self.default_model = default_model
        self.default_retry_count = default_retry_count
        self.default_retry_delay = default_retry_delay
        self._on_decode_error = on_decode_error

        self._executor = RequestExecutor(
            api_key,
            base_url,
            retry_count=default_retry_count,
            retry_delay=default_retry_delay,
            timeout=timeout,
        )
        # Separate client so image hosts never see the API credential
        self._image_client = httpx.AsyncClient(follow_redirects=True)

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs: Any) -> SambanovaClient:
        return cls(
            config.api_key,
            base_url=config.base_url,
            default_model=config.default_model,
            default_retry_count=config.default_retry_count,
            default_retry_delay=config.default_retry_delay,
            timeout=config.timeout,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Non-streaming chat
    # ------------------------------------------------------------------

    async def chat(
        self,
        messages: list[ChatMessage],
        options: ChatOptions | None = None,
        **overrides: Any,
    ) -> dict[str, Any]:
        """Send a chat completion request and return the decoded JSON."""
        opts = self._options(options, overrides, stream=False)
        result = await self._send(messages, opts)
        if isinstance(result, httpx.Response):
            await result.aclose()
            raise ProtocolViolationError(
                "Received a stream for a non-streaming request",
            )
        return result

    # ------------------------------------------------------------------
    # Streaming chat
    # ------------------------------------------------------------------

    async def stream_chat(
        self,
        messages: list[ChatMessage],
        options: ChatOptions | None = None,
        **overrides: Any,
    ) -> ResponseStream[str]:
        """Start a streaming completion and return its text fragments.

        Request errors are raised here; the returned stream yields the
        non-empty ``delta.content`` of each frame.
        """
        response = await self._open_stream(messages, options, overrides)
        units = decode_stream(response, self._on_decode_error)
        return ResponseStream(response, iter_content(units))

    async def stream_chat_chunks(
        self,
        messages: list[ChatMessage],
        options: ChatOptions | None = None,
        **overrides: Any,
    ) -> ResponseStream[dict[str, Any]]:
        """Like :meth:`stream_chat` but yields each decoded chunk record."""
        response = await self._open_stream(messages, options, overrides)
        return ResponseStream(
            response, decode_stream(response, self._on_decode_error),
        )

    async def _open_stream(
        self,
        messages: list[ChatMessage],
        options: ChatOptions | None,
        overrides: dict[str, Any],
    ) -> httpx.Response:
        opts = self._options(options, overrides, stream=True)
        result = await self._send(messages, opts)
        if not isinstance(result, httpx.Response):
            raise ProtocolViolationError(
                "Expected a stream for a streaming request",
                details=result,
            )
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _options(
        self,
        options: ChatOptions | None,
        overrides: dict[str, Any],
        stream: bool,
    ) -> ChatOptions:
        opts = dataclasses.replace(options or ChatOptions(), **overrides)
        return dataclasses.replace(
            opts, model=opts.model or self.default_model, stream=stream,
        )

    async def _send(self, messages: list[ChatMessage], opts: ChatOptions) -> Any:
        await prepare_messages(messages, self._image_client)
        validate_messages(messages, opts.model)

        payload = build_payload(messages, opts.model, opts)
        _logger.debug(
            "chat request: model=%s messages=%d stream=%s",
            opts.model, len(messages), opts.stream,
        )
        return await self._executor.execute(
            CHAT_COMPLETIONS,
            payload,
            retry_count=opts.retry_count,
            retry_delay=opts.retry_delay,
            stream=opts.stream,
        )

    async def close(self) -> None:
        """Close underlying HTTP clients."""
        await self._executor.close()
        await self._image_client.aclose()

    async def __aenter__(self) -> SambanovaClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
